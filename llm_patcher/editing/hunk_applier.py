"""
Hunk applier — applies parsed hunks to an in-memory line buffer.

The applier trusts the live file over the diff: context lines copy the
current line at the cursor instead of the hunk's text.  Nothing here touches
the filesystem; :mod:`llm_patcher.workflow` owns backup and write.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from ..errors import ApplyError
from .diff_parser import Hunk, LineKind, Patch

logger = logging.getLogger(__name__)


def apply_hunk(lines: list[str], hunk: Hunk) -> list[str]:
    """Apply a single hunk and return the new line list.

    Parameters
    ----------
    lines:
        The current file content, one entry per line, without newlines.
    hunk:
        The hunk to apply.  ``old_start`` is 1-indexed.

    Returns
    -------
    list[str]
        A new list; *lines* is not modified.

    Raises
    ------
    ApplyError
        If ``old_start`` does not point inside the file.
    """
    cursor = hunk.old_start - 1
    if cursor < 0 or cursor >= len(lines):
        raise ApplyError(hunk.old_start, len(lines))

    old_end = min(cursor + hunk.old_count, len(lines))

    result = list(lines[:cursor])
    for line in hunk.lines:
        if line.kind is LineKind.CONTEXT:
            if cursor < len(lines):
                result.append(lines[cursor])
                cursor += 1
        elif line.kind is LineKind.ADDITION:
            result.append(line.text)
        else:
            cursor += 1

    result.extend(lines[old_end:])
    return result


def apply_patch(lines: list[str], patch: Patch) -> list[str]:
    """Apply every hunk of *patch*, last hunk first.

    Hunk line numbers refer to the original file, so applying bottom-up
    keeps the earlier hunks' offsets valid.
    """
    for hunk in reversed(patch.hunks):
        logger.debug(
            "[Patch] Applying hunk -%d,%d +%d,%d (%d+ / %d-)",
            hunk.old_start, hunk.old_count, hunk.new_start, hunk.new_count,
            hunk.additions, hunk.deletions,
        )
        lines = apply_hunk(lines, hunk)
    return lines


def _with_crlf_additions(patch: Patch) -> Patch:
    """Copy *patch* with ``\\r`` appended to every added line."""
    hunks = [
        replace(hunk, lines=[
            replace(line, text=line.text + "\r")
            if line.kind is LineKind.ADDITION else line
            for line in hunk.lines
        ])
        for hunk in patch.hunks
    ]
    return replace(patch, hunks=hunks)


def apply_patch_to_text(content: str, patch: Patch) -> str:
    """Apply *patch* to a whole file's text.

    The text is split on ``"\\n"`` so a trailing newline survives as an
    empty last element and is restored by the join.  Untouched lines keep
    their own endings; in a CRLF file the added lines get CRLF too.
    """
    if "\r\n" in content:
        patch = _with_crlf_additions(patch)
    return "\n".join(apply_patch(content.split("\n"), patch))
