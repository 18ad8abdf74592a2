"""
Apply workflow — the safety wrapper around the patch engine.

Every request follows the same sequence::

    RECEIVED → CLASSIFIED → PARSED | EXTRACTED → PREVIEW_SHOWN
             → CONFIRMED → BACKED_UP → APPLIED | ROLLED_BACK

Declining at the confirmation step is not an error and leaves the target
untouched (no backup is written).  Once a backup exists any failure
restores it before the failure is reported.
"""

from __future__ import annotations

import enum
import logging
import sys
from dataclasses import dataclass, field
from typing import Callable, TextIO

from . import file_ops
from .config import Config
from .diff_display import (
    APPLY_PROMPT, CREATE_PROMPT, REPLACE_PROMPT, format_colored_diff,
    prompt_confirmation, render_new_file_preview, render_patch_preview,
    render_replacement_preview, render_substitution_preview,
)
from .editing.extractor import apply_substitutions, parse_generated_content
from .editing.hunk_applier import apply_patch_to_text
from .editing.metrics import log_apply_metric
from .editing.resolution import (
    Failure, Replacement, Substitutions, ValidDiff, resolve,
)
from .errors import ApplyError, ExtractionFailure, PatchEngineError, PatchIOError

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[str, str], bool]


class ApplyStatus(enum.Enum):
    APPLIED = "applied"
    DECLINED = "declined"
    FAILED = "failed"


class ApplyState(enum.Enum):
    RECEIVED = "received"
    CLASSIFIED = "classified"
    PARSED = "parsed"
    EXTRACTED = "extracted"
    PREVIEW_SHOWN = "preview_shown"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    BACKED_UP = "backed_up"
    APPLIED = "applied"
    ROLLED_BACK = "rolled_back"
    FAILED = "failed"


@dataclass
class ApplyOutcome:
    """Result of one apply or create request."""
    path: str
    status: ApplyStatus = ApplyStatus.FAILED
    route: str = "none"
    states: list[ApplyState] = field(default_factory=list)
    error: PatchEngineError | None = None

    @property
    def success(self) -> bool:
        return self.status is ApplyStatus.APPLIED

    @property
    def declined(self) -> bool:
        return self.status is ApplyStatus.DECLINED


@dataclass
class _Plan:
    """What the user is asked to approve and how to produce it."""
    route: str
    preview: str
    prompt: str
    produce: Callable[[], str]
    done_message: str


class ApplyWorkflow:
    """Preview, confirm, back up, apply, and roll back on failure.

    Parameters
    ----------
    config:
        Settings for this workflow.  Two workflows never share state.
    confirm:
        ``confirm(prompt, preview) -> bool``.  Defaults to the console (or
        Textual) prompt, honouring ``AUTO_APPROVE`` and ``USE_TUI``.
    out:
        Stream for previews and status lines.  Defaults to ``sys.stdout``
        at call time.
    project_root:
        Where the metrics log lives when metrics are enabled.
    """

    def __init__(
        self,
        config: Config | None = None,
        confirm: ConfirmFn | None = None,
        out: TextIO | None = None,
        project_root: str | None = None,
    ) -> None:
        self.config = config or Config()
        self._confirm = confirm or self._default_confirm
        self._out = out
        self._project_root = project_root
        self._profile = self.config.language_profile()
        self._phrases = self.config.phrase_book()

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def apply(self, path: str, raw: str) -> ApplyOutcome:
        """Apply a raw model response to the existing file at *path*."""
        outcome = ApplyOutcome(path=path)
        self._enter(outcome, ApplyState.RECEIVED)

        try:
            original = file_ops.read_file(path)
        except (OSError, ValueError) as exc:
            return self._fail(outcome, PatchIOError("failed to read file", exc))

        resolution = resolve(raw, self._profile, self._phrases)
        self._enter(outcome, ApplyState.CLASSIFIED)
        candidate = resolution.candidate

        if isinstance(candidate, Failure):
            return self._fail(
                outcome, ExtractionFailure(candidate.reason, candidate.snippet),
            )

        if isinstance(candidate, ValidDiff):
            self._enter(outcome, ApplyState.PARSED)
        else:
            self._enter(outcome, ApplyState.EXTRACTED)
            if resolution.parse_error is not None:
                self._write("⚠️  Warning: Could not parse diff format, "
                            "attempting to extract changes manually...\n")
            else:
                self._write("⚠️  Warning: AI returned unexpected content, "
                            "attempting to extract changes manually...\n")

        try:
            plan = self._plan(path, original, candidate)
        except ExtractionFailure as exc:
            return self._fail(outcome, exc)
        outcome.route = plan.route

        if not self._review(outcome, plan.preview, plan.prompt):
            self._write("❌ Changes not applied\n")
            return self._finish(outcome, ApplyStatus.DECLINED)

        suffix = self.config.BACKUP_SUFFIX
        try:
            file_ops.backup_file(path, suffix)
        except OSError as exc:
            return self._fail(outcome, PatchIOError("failed to create backup", exc))
        self._enter(outcome, ApplyState.BACKED_UP)

        try:
            file_ops.write_file(path, plan.produce())
        except ApplyError as exc:
            restore_error = self._restore(outcome, path)
            if restore_error is not None:
                return self._fail(outcome, PatchIOError(
                    "failed to apply diff and restore backup", exc, restore_error,
                ))
            return self._fail(outcome, exc)
        except OSError as exc:
            restore_error = self._restore(outcome, path)
            return self._fail(outcome, PatchIOError(
                "failed to apply changes", exc, restore_error,
            ))

        self._enter(outcome, ApplyState.APPLIED)
        self._write(plan.done_message)
        return self._finish(outcome, ApplyStatus.APPLIED)

    def create(self, path: str, raw: str) -> ApplyOutcome:
        """Create a new file at *path* from a generation response."""
        outcome = ApplyOutcome(path=path, route="create")
        self._enter(outcome, ApplyState.RECEIVED)

        try:
            content = parse_generated_content(raw, self._profile, self._phrases)
        except ExtractionFailure as exc:
            return self._fail(outcome, exc)
        self._enter(outcome, ApplyState.EXTRACTED)

        if file_ops.file_exists(path):
            return self._fail(outcome, PatchIOError(
                "failed to create file", FileExistsError(f"file {path} already exists"),
            ))

        if not self._review(outcome, render_new_file_preview(path, content),
                            CREATE_PROMPT):
            self._write("❌ File not created\n")
            return self._finish(outcome, ApplyStatus.DECLINED)

        try:
            file_ops.create_file_with_content(path, content)
        except OSError as exc:
            return self._fail(outcome, PatchIOError("failed to create file", exc))

        self._enter(outcome, ApplyState.APPLIED)
        self._write(f"✅ File created successfully: {path}\n")
        return self._finish(outcome, ApplyStatus.APPLIED)

    # ------------------------------------------------------------------
    # Candidate handling
    # ------------------------------------------------------------------

    def _plan(self, path: str, original: str, candidate) -> _Plan:
        if isinstance(candidate, ValidDiff):
            patch = candidate.patch
            return _Plan(
                route="diff",
                preview=render_patch_preview(path, patch),
                prompt=APPLY_PROMPT,
                produce=lambda: apply_patch_to_text(original, patch),
                done_message=f"✅ Changes applied successfully to {path}\n",
            )

        if isinstance(candidate, Replacement):
            content = candidate.content
            return _Plan(
                route="replacement",
                preview=render_replacement_preview(content),
                prompt=REPLACE_PROMPT,
                produce=lambda: content,
                done_message=f"✅ File updated successfully: {path}\n",
            )

        if isinstance(candidate, Substitutions):
            new_lines, applied = apply_substitutions(
                original.split("\n"), candidate.changes,
            )
            if not applied:
                raise ExtractionFailure(
                    "extraction failed: no substitution matched the file",
                    "\n".join(f"-{c.old}\n+{c.new}" for c in candidate.changes),
                )
            new_content = "\n".join(new_lines)
            return _Plan(
                route="substitutions",
                preview=render_substitution_preview(path, applied),
                prompt=APPLY_PROMPT,
                produce=lambda: new_content,
                done_message=f"✅ Changes applied successfully to {path}\n",
            )

        raise TypeError(f"unknown candidate: {candidate!r}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _default_confirm(self, prompt: str, preview: str) -> bool:
        return prompt_confirmation(
            prompt, preview,
            auto=self.config.AUTO_APPROVE,
            use_tui=self.config.USE_TUI,
        )

    def _review(self, outcome: ApplyOutcome, preview: str, prompt: str) -> bool:
        self._write_preview(preview)
        self._enter(outcome, ApplyState.PREVIEW_SHOWN)
        if self._confirm(prompt, preview):
            self._enter(outcome, ApplyState.CONFIRMED)
            return True
        self._enter(outcome, ApplyState.DECLINED)
        return False

    def _restore(self, outcome: ApplyOutcome, path: str) -> OSError | None:
        try:
            file_ops.restore_backup(path, self.config.BACKUP_SUFFIX)
        except OSError as exc:
            logger.error("[Patch] Restore of %s failed: %s", path, exc)
            return exc
        self._enter(outcome, ApplyState.ROLLED_BACK)
        logger.info("[Patch] Restored %s from backup", path)
        return None

    def _write(self, text: str) -> None:
        stream = self._out or sys.stdout
        stream.write(text)
        stream.flush()

    def _write_preview(self, preview: str) -> None:
        stream = self._out or sys.stdout
        if stream.isatty():
            self._write(format_colored_diff(preview) + "\n")
        else:
            self._write(preview)

    @staticmethod
    def _enter(outcome: ApplyOutcome, state: ApplyState) -> None:
        outcome.states.append(state)
        logger.debug("[Patch] %s: %s", outcome.path, state.value)

    def _fail(self, outcome: ApplyOutcome, error: PatchEngineError) -> ApplyOutcome:
        outcome.error = error
        self._enter(outcome, ApplyState.FAILED)
        logger.warning("[Patch] %s failed: %s", outcome.path, error)
        return self._finish(outcome, ApplyStatus.FAILED)

    def _finish(self, outcome: ApplyOutcome, status: ApplyStatus) -> ApplyOutcome:
        outcome.status = status
        if self.config.METRICS_ENABLED:
            log_apply_metric({
                "file": outcome.path,
                "status": status.value,
                "route": outcome.route,
                "error": str(outcome.error) if outcome.error else "",
            }, self._project_root)
        return outcome
