"""
Fallback extractor — salvages something usable from model output that is
not a valid diff.

Three attempts, from most to least reliable:

1. the first fenced code block, if it is a complete source file;
2. the raw text from the first declaration line up to the first sentence
   of trailing explanation;
3. ``-``/``+`` line pairs applied as literal substitutions to the live file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ..errors import ExtractionFailure
from .phrases import DEFAULT_PHRASES, LanguageProfile, PhraseBook, get_language_profile

logger = logging.getLogger(__name__)

_CODE_BLOCK = re.compile(r"```[\w+#.-]*[ \t]*\r?\n(.*?)```", re.DOTALL)
_FENCE = re.compile(r"```[\w+#.-]*[ \t]*\n?")


@dataclass(frozen=True)
class Substitution:
    """Replace *old* with *new* on the first live line that matches *old*."""
    old: str
    new: str


# ---------------------------------------------------------------------------
# Code blocks and cleaning
# ---------------------------------------------------------------------------

def extract_code_blocks(raw: str) -> list[str]:
    """Return the bodies of all fenced code blocks in *raw*, stripped."""
    return [m.group(1).strip() for m in _CODE_BLOCK.finditer(raw)]


def _is_trailing_sentence(line: str, phrases: PhraseBook) -> bool:
    stripped = line.strip()
    return any(stripped.startswith(p) for p in phrases.trailing_phrases)


def _strip_response_prefix(code: str, phrases: PhraseBook) -> str:
    for prefix in phrases.response_prefixes:
        if code.startswith(prefix):
            return code[len(prefix):].strip()
    return code


def _trim_blank_edges(lines: list[str]) -> list[str]:
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def _collect_until_trailer(
    lines: list[str], start: int, phrases: PhraseBook,
) -> list[str]:
    collected = [lines[start].strip()]
    for line in lines[start + 1:]:
        if _is_trailing_sentence(line, phrases):
            break
        collected.append(line.rstrip())
    return _trim_blank_edges(collected)


def clean_code(
    code: str,
    profile: LanguageProfile | None = None,
    phrases: PhraseBook = DEFAULT_PHRASES,
) -> str:
    """Strip markdown and chatter around generated source code.

    Keeps the lines from the first declaration line (``package main``) up
    to, but not including, the first trailing explanatory sentence.  When
    there is no declaration the lines from the first code-looking keyword
    onward are kept instead.
    """
    profile = profile or get_language_profile(None)
    code = _FENCE.sub("", code).strip()
    code = _strip_response_prefix(code, phrases)

    lines = code.split("\n")
    for i, line in enumerate(lines):
        if profile.is_declaration(line):
            return "\n".join(_collect_until_trailer(lines, i, phrases))

    for i, line in enumerate(lines):
        if profile.is_code_start(line):
            return "\n".join(_collect_until_trailer(lines, i, phrases))

    return code.strip()


# ---------------------------------------------------------------------------
# Complete-file extraction
# ---------------------------------------------------------------------------

def _starts_with_declaration(code: str, profile: LanguageProfile) -> bool:
    return any(code.startswith(k) for k in profile.declaration_keywords)


def _scan_for_file(
    raw: str, profile: LanguageProfile, phrases: PhraseBook,
) -> str | None:
    """Collect raw lines from the first column-0 declaration line.

    Stops at a trailing explanatory sentence or at a code fence.
    """
    lines = raw.split("\n")
    start = None
    for i, line in enumerate(lines):
        if _starts_with_declaration(line, profile):
            start = i
            break
    if start is None:
        return None

    collected: list[str] = []
    for line in lines[start:]:
        if _is_trailing_sentence(line, phrases) or line.strip().startswith("```"):
            break
        collected.append(line.rstrip())

    collected = _trim_blank_edges(collected)
    return "\n".join(collected) if collected else None


def extract_complete_file(
    raw: str,
    profile: LanguageProfile | None = None,
    phrases: PhraseBook = DEFAULT_PHRASES,
) -> str | None:
    """Try to pull a complete replacement file out of *raw*.

    Returns
    -------
    str | None
        The file content, or None when neither the first fenced block nor
        the raw text holds a declaration-led file.
    """
    profile = profile or get_language_profile(None)

    blocks = extract_code_blocks(raw)
    if blocks:
        # The block itself must open with the declaration; a fenced diff
        # opens with "---" and only carries it as " package main" context.
        block = _strip_response_prefix(_FENCE.sub("", blocks[0]).strip(), phrases)
        if _starts_with_declaration(block, profile):
            logger.debug("[Patch] Complete file found in fenced block")
            return clean_code(block, profile, phrases)

    candidate = _scan_for_file(raw, profile, phrases)
    if candidate:
        logger.debug("[Patch] Complete file found in raw text")
    return candidate


def parse_generated_content(
    raw: str,
    profile: LanguageProfile | None = None,
    phrases: PhraseBook = DEFAULT_PHRASES,
) -> str:
    """Extract a new source file from a generation response.

    Raises
    ------
    ExtractionFailure
        If no code is found or it does not start with a declaration.
    """
    profile = profile or get_language_profile(None)

    blocks = extract_code_blocks(raw)
    if not blocks and any(k in raw for k in profile.declaration_keywords):
        blocks = [raw]
    if not blocks:
        raise ExtractionFailure("no code blocks found in content", raw)

    code = clean_code(blocks[0], profile, phrases)
    if not _starts_with_declaration(code, profile):
        keyword = profile.declaration_keywords[0].strip()
        raise ExtractionFailure(
            f"extracted content doesn't appear to be valid {profile.label} "
            f"code (missing {keyword} declaration)",
            code[:50],
        )
    return code


# ---------------------------------------------------------------------------
# Line substitutions
# ---------------------------------------------------------------------------

def _is_change_line(line: str, sign: str) -> bool:
    return line.startswith(sign) and not line.startswith(sign * 3)


def extract_substitutions(raw: str) -> list[Substitution]:
    """Pair ``-`` lines with ``+`` lines positionally.

    Each ``-`` line is paired with the first ``+`` line after it that has
    not been paired yet.  ``-`` lines without a later ``+`` line, and
    blank ``-`` lines, are dropped.
    """
    lines = [l.strip() for l in raw.split("\n")]
    used: set[int] = set()
    changes: list[Substitution] = []

    for i, line in enumerate(lines):
        if not _is_change_line(line, "-") or not line[1:].strip():
            continue
        for j in range(i + 1, len(lines)):
            if j in used or not _is_change_line(lines[j], "+"):
                continue
            used.add(j)
            changes.append(Substitution(old=line[1:], new=lines[j][1:]))
            break

    return changes


def apply_substitutions(
    lines: list[str], changes: list[Substitution],
) -> tuple[list[str], list[Substitution]]:
    """Apply *changes* to *lines* as in-place text replacements.

    A change applies to the first line whose stripped text equals the
    stripped old text; the old text is replaced within that line so its
    indentation is kept.  Unmatched changes are dropped.

    Returns
    -------
    tuple[list[str], list[Substitution]]
        The new lines and the changes that were applied.
    """
    result = list(lines)
    applied: list[Substitution] = []

    for change in changes:
        old = change.old.strip()
        new = change.new.strip()
        for i, line in enumerate(result):
            if line.strip() == old:
                result[i] = line.replace(old, new, 1)
                applied.append(change)
                break
        else:
            logger.debug("[Patch] Substitution unmatched: %r", old)

    return result, applied
