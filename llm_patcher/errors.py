"""
Error taxonomy for the patch engine.

Every failure the engine reports to a caller derives from
:class:`PatchEngineError` so the workflow can turn it into a failed
:class:`~llm_patcher.workflow.ApplyOutcome` without catching unrelated
exceptions.
"""

from __future__ import annotations


class PatchEngineError(Exception):
    """Base class for all patch engine failures."""


class ParseError(PatchEngineError):
    """Raised when diff text is structurally invalid."""

    def __init__(self, line_number: int, message: str) -> None:
        super().__init__(f"line {line_number}: {message}")
        self.line_number = line_number
        self.message = message


class ApplyError(PatchEngineError):
    """Raised when a hunk's declared range does not fit the live file."""

    def __init__(self, old_start: int, file_length: int) -> None:
        super().__init__(
            f"hunk start line {old_start} is out of range "
            f"(file has {file_length} lines)"
        )
        self.old_start = old_start
        self.file_length = file_length


class ExtractionFailure(PatchEngineError):
    """Raised when no heuristic could salvage usable content."""

    SNIPPET_LIMIT = 200

    def __init__(self, message: str, snippet: str = "") -> None:
        super().__init__(message)
        self.snippet = snippet[: self.SNIPPET_LIMIT]


class PatchIOError(PatchEngineError):
    """An OSError raised while backing up, writing or restoring a file.

    ``restore_error`` holds the outcome of the backup restore that was
    attempted after the failure: ``None`` if it succeeded (or was not
    needed), otherwise the exception the restore raised.
    """

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        restore_error: BaseException | None = None,
    ) -> None:
        text = message
        if cause is not None:
            text = f"{message}: {cause}"
        if restore_error is not None:
            text = f"{text}, restore error: {restore_error}"
        super().__init__(text)
        self.cause = cause
        self.restore_error = restore_error
