"""
Diff parser — turns the unified-diff-like text returned by the LLM into a
structured :class:`Patch`.

Only a single-file, best-effort subset of unified diff is understood.  The
parser is deliberately lenient: text before the first hunk is ignored, blank
lines are skipped and a hunk header holding placeholder words instead of
numbers becomes a 1,1 → 1,1 hunk rather than an error.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from ..errors import ParseError

logger = logging.getLogger(__name__)

_HUNK_MARKER = "@@"
_OLD_FILE_PREFIX = "--- "
_NEW_FILE_PREFIX = "+++ "

# Words a model writes when it copies the header template literally,
# e.g. "@@ -line,count +line,count @@".
_PLACEHOLDER_WORDS = ("line", "count")


class LineKind(enum.Enum):
    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"


@dataclass
class DiffLine:
    """One body line of a hunk."""
    kind: LineKind
    text: str
    number: int                # 1-indexed line in the raw diff text


@dataclass
class HunkRange:
    start: int
    count: int


@dataclass
class Hunk:
    """A contiguous block of changes with its old/new ranges (1-indexed)."""
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: list[DiffLine] = field(default_factory=list)
    header: str = ""
    is_placeholder: bool = False

    @property
    def additions(self) -> int:
        return sum(1 for l in self.lines if l.kind is LineKind.ADDITION)

    @property
    def deletions(self) -> int:
        return sum(1 for l in self.lines if l.kind is LineKind.DELETION)


@dataclass
class Patch:
    """A single-file patch.  Hunks keep the order they appeared in."""
    file_path: str = ""
    hunks: list[Hunk] = field(default_factory=list)


def parse_range(text: str) -> HunkRange:
    """Parse one side of a hunk header.

    ``"5,6"`` → (5, 6), ``"+5"`` → (5, 1), ``"-3,1"`` → (3, 1).

    Raises
    ------
    ValueError
        If the start or count is not an integer.
    """
    if text.startswith(("+", "-")):
        text = text[1:]
    parts = text.split(",")
    if len(parts) == 1:
        return HunkRange(start=int(parts[0]), count=1)
    return HunkRange(start=int(parts[0]), count=int(parts[1]))


def _range_section(header: str) -> str:
    """Return the text between the opening ``@@`` and the closing one."""
    body = header.strip()[len(_HUNK_MARKER):]
    closing = body.find(_HUNK_MARKER)
    if closing != -1:
        body = body[:closing]
    return body.strip()


def parse_hunk_header(header: str, line_number: int = 0) -> Hunk:
    """Parse ``@@ -oldStart[,oldCount] +newStart[,newCount] @@``.

    Parameters
    ----------
    header:
        The full header line, starting with ``@@``.
    line_number:
        Position of the header in the raw text, for error messages.

    Returns
    -------
    Hunk
        An empty hunk carrying the parsed ranges.

    Raises
    ------
    ParseError
        If the header does not have exactly two ranges or a range is not
        numeric.
    """
    section = _range_section(header)

    # Only the ranges are checked; a trailing heading such as
    # "func countItems()" must not turn a real header into a placeholder.
    if any(word in section for word in _PLACEHOLDER_WORDS):
        logger.debug(
            "[Patch] Placeholder hunk header at line %d: %r", line_number, header,
        )
        return Hunk(1, 1, 1, 1, header=header.strip(), is_placeholder=True)

    parts = section.split()
    if len(parts) != 2:
        raise ParseError(line_number, f"invalid hunk header format: {section}")

    try:
        old = parse_range(parts[0])
    except ValueError as exc:
        raise ParseError(line_number, f"error parsing old range: {exc}") from exc
    try:
        new = parse_range(parts[1])
    except ValueError as exc:
        raise ParseError(line_number, f"error parsing new range: {exc}") from exc

    return Hunk(
        old_start=old.start,
        old_count=old.count,
        new_start=new.start,
        new_count=new.count,
        header=header.strip(),
    )


class DiffParser:
    """Parse unified diffs from LLM responses."""

    def parse(self, raw: str) -> Patch:
        """Parse *raw* into a :class:`Patch`.

        ``---``/``+++`` lines set the target path (``+++`` wins when it is
        non-empty).  Every ``@@`` line closes the current hunk and opens a
        new one.  Body lines are only recorded once a hunk is open.
        A body line without a ``+``, ``-`` or space prefix is kept verbatim as
        context; the applier copies context from the live file, so only the
        preview shows it.

        Raises
        ------
        ParseError
            On a malformed hunk header.
        """
        patch = Patch()
        current: Hunk | None = None

        for index, line in enumerate(raw.split("\n")):
            number = index + 1
            line = line.rstrip("\r")

            if not line.strip():
                continue

            if line.startswith(_OLD_FILE_PREFIX):
                patch.file_path = line[len(_OLD_FILE_PREFIX):].strip()
                continue
            if line.startswith(_NEW_FILE_PREFIX):
                path = line[len(_NEW_FILE_PREFIX):].strip()
                if path:
                    patch.file_path = path
                continue

            if line.startswith(_HUNK_MARKER):
                if current is not None:
                    patch.hunks.append(current)
                current = parse_hunk_header(line, number)
                continue

            # "\ No newline at end of file"
            if current is None or line.startswith("\\"):
                continue

            current.lines.append(self._classify_line(line, number))

        if current is not None:
            patch.hunks.append(current)

        logger.debug(
            "[Patch] Parsed %d hunk(s) for %r", len(patch.hunks), patch.file_path,
        )
        return patch

    @staticmethod
    def _classify_line(line: str, number: int) -> DiffLine:
        if line.startswith("+"):
            return DiffLine(LineKind.ADDITION, line[1:], number)
        if line.startswith("-"):
            return DiffLine(LineKind.DELETION, line[1:], number)
        if line.startswith(" "):
            return DiffLine(LineKind.CONTEXT, line[1:], number)
        return DiffLine(LineKind.CONTEXT, line, number)
