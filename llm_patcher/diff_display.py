"""
Diff display — render change previews and ask the user to approve them
before anything is written to disk.

The console preview formats are stable byte-for-byte so other tools can
reproduce them.  A Textual-based viewer is available as an alternative to
the console prompt.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .editing.diff_parser import LineKind, Patch
from .editing.extractor import Substitution

logger = logging.getLogger(__name__)

BANNER = "━" * 51

HUNK_GLYPH = "📍"
ADD_GLYPH = "➕"
DEL_GLYPH = "➖"
CONTEXT_INDENT = "   "

APPLY_PROMPT = "\n❓ Do you want to apply these changes? (y/N): "
REPLACE_PROMPT = "\n❓ Do you want to replace the entire file with this content? (y/N): "
CREATE_PROMPT = "\n❓ Do you want to create this file? (y/N): "


def _framed(title: str, body: Iterable[str]) -> str:
    lines = [title, BANNER, *body, BANNER]
    return "\n".join(lines) + "\n"


def _numbered(content: str) -> list[str]:
    return [f"{i:3d}│ {line}" for i, line in enumerate(content.split("\n"), start=1)]


# ══════════════════════════════════════════════════════════════════
#  Console previews
# ══════════════════════════════════════════════════════════════════

def render_patch_preview(file_path: str, patch: Patch) -> str:
    """Render a parsed patch: one marker line per hunk, then its lines."""
    body: list[str] = []
    for hunk in patch.hunks:
        body.append(f"{HUNK_GLYPH} {hunk.header}")
        for line in hunk.lines:
            if line.kind is LineKind.ADDITION:
                body.append(f"{ADD_GLYPH} {line.text}")
            elif line.kind is LineKind.DELETION:
                body.append(f"{DEL_GLYPH} {line.text}")
            else:
                body.append(f"{CONTEXT_INDENT}{line.text}")
    return _framed(f"\n📋 Changes to be applied to {file_path}:", body)


def render_replacement_preview(content: str) -> str:
    return _framed("\n📋 Complete file content from AI:", _numbered(content))


def render_substitution_preview(file_path: str, changes: list[Substitution]) -> str:
    body: list[str] = []
    for change in changes:
        body.append(f"{DEL_GLYPH} {change.old}")
        body.append(f"{ADD_GLYPH} {change.new}")
    return _framed(f"\n📋 Manual changes to be applied to {file_path}:", body)


def render_new_file_preview(file_path: str, content: str) -> str:
    return _framed(f"\n📄 New file: {file_path}", _numbered(content))


def format_colored_diff(preview: str) -> str:
    """Add ANSI colors to a rendered preview.

    Green for additions, red for deletions, cyan for hunk markers.
    """
    colored: list[str] = []
    for line in preview.splitlines():
        if line.startswith(HUNK_GLYPH):
            colored.append(f"\033[36m{line}\033[0m")  # cyan
        elif line.startswith(ADD_GLYPH):
            colored.append(f"\033[32m{line}\033[0m")  # green
        elif line.startswith(DEL_GLYPH):
            colored.append(f"\033[31m{line}\033[0m")  # red
        else:
            colored.append(line)
    return "\n".join(colored)


# ══════════════════════════════════════════════════════════════════
#  Confirmation
# ══════════════════════════════════════════════════════════════════

def console_confirm(prompt: str) -> bool:
    """Ask a yes/no question on stdin.  Only ``y``/``yes`` approves."""
    try:
        answer = input(prompt).strip().lower()
    except (EOFError, KeyboardInterrupt):
        return False
    return answer in ("y", "yes")


def prompt_confirmation(prompt: str, preview: str, auto: bool = False,
                        use_tui: bool = False) -> bool:
    """Ask the user to approve a previewed change.

    Returns ``True`` straight away in auto mode.  With *use_tui* the
    preview is shown in a Textual viewer; if the viewer cannot run the
    console prompt is used instead.
    """
    if auto:
        logger.info("[auto] Approved change:\n%s", preview)
        return True

    if use_tui:
        try:
            return _textual_approval(prompt.strip(), preview)
        except Exception as e:
            logger.warning("Textual approval viewer failed: %s", e)

    return console_confirm(prompt)


def _format_rich_preview(preview: str) -> str:
    """Convert a rendered preview to Rich markup for Textual display."""
    markup_lines: list[str] = []
    for line in preview.splitlines():
        escaped = line.replace("[", "\\[")
        if line.startswith(HUNK_GLYPH):
            markup_lines.append(f"[cyan]{escaped}[/cyan]")
        elif line.startswith(ADD_GLYPH):
            markup_lines.append(f"[green]{escaped}[/green]")
        elif line.startswith(DEL_GLYPH):
            markup_lines.append(f"[red]{escaped}[/red]")
        elif line.startswith(BANNER):
            markup_lines.append(f"[bold yellow]{escaped}[/bold yellow]")
        else:
            markup_lines.append(escaped)
    return "\n".join(markup_lines)


def _textual_approval(question: str, preview: str) -> bool:
    """Launch a Textual app to display a preview and get approval."""
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.containers import Horizontal, VerticalScroll
    from textual.widgets import Button, Footer, Static

    class ChangeApprovalApp(App):
        """Interactive change viewer with approve/reject."""

        CSS = """
        #title-bar {
            dock: top;
            height: 3;
            background: #1a1a2e;
            color: #e94560;
            text-align: center;
            padding: 1;
            text-style: bold;
        }
        #preview-scroll {
            height: 1fr;
            margin: 1 2;
            border: round #444;
            padding: 1;
        }
        #action-buttons {
            dock: bottom;
            height: 3;
            align: center middle;
        }
        #action-buttons Button {
            margin: 0 2;
            min-width: 20;
        }
        """

        BINDINGS = [
            Binding("y", "approve", "Approve"),
            Binding("a", "approve", "Approve"),
            Binding("n", "reject", "Reject"),
            Binding("escape", "reject", "Reject"),
        ]

        def __init__(self) -> None:
            super().__init__()
            self.approved = False

        def compose(self) -> ComposeResult:
            yield Static(f" {question} ", id="title-bar")
            with VerticalScroll(id="preview-scroll"):
                yield Static(_format_rich_preview(preview))
            with Horizontal(id="action-buttons"):
                yield Button("✔ Apply", id="approve-btn", variant="success")
                yield Button("✕ Reject", id="reject-btn", variant="error")
            yield Footer()

        def on_button_pressed(self, event: Button.Pressed) -> None:
            self.approved = event.button.id == "approve-btn"
            self.exit()

        def action_approve(self) -> None:
            self.approved = True
            self.exit()

        def action_reject(self) -> None:
            self.approved = False
            self.exit()

    app = ChangeApprovalApp()
    app.run()
    return app.approved
