"""
Content classifier — cheap textual triage of raw model output before any
structured parsing is attempted.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from .phrases import DEFAULT_PHRASES, PhraseBook

_DIFF_MARKERS = ("---", "+++", "@@")


class ClassificationKind(enum.Enum):
    VALID_DIFF = "valid_diff"
    UNWANTED_CONTENT = "unwanted_content"
    UNPARSEABLE = "unparseable"


class UnwantedReason(enum.Enum):
    FOREIGN_LANGUAGE = "foreign_language"
    PROSE = "prose"
    NO_DIFF_MARKERS = "no_diff_markers"


@dataclass(frozen=True)
class Classification:
    kind: ClassificationKind
    reason: UnwantedReason | None = None
    detail: str = ""

    @property
    def is_valid_diff(self) -> bool:
        return self.kind is ClassificationKind.VALID_DIFF

    def describe(self) -> str:
        if self.kind is ClassificationKind.VALID_DIFF:
            return "valid diff"
        if self.kind is ClassificationKind.UNPARSEABLE:
            return "empty response"
        if self.reason is UnwantedReason.FOREIGN_LANGUAGE:
            return f"looks like another language ({self.detail!r})"
        if self.reason is UnwantedReason.PROSE:
            return f"explanation instead of a diff ({self.detail!r})"
        return "no diff markers"


def _first_match(text: str, phrases: tuple[str, ...]) -> str | None:
    for phrase in phrases:
        if phrase.lower() in text:
            return phrase
    return None


def classify(raw: str, phrases: PhraseBook = DEFAULT_PHRASES) -> Classification:
    """Label *raw* as a usable diff, unwanted content or unparseable.

    Matching is case-insensitive.  The checks run in order (foreign
    language, prose, missing diff markers) and the first hit decides.
    """
    if not raw or not raw.strip():
        return Classification(ClassificationKind.UNPARSEABLE)

    text = raw.lower()

    marker = _first_match(text, phrases.foreign_markers)
    if marker is not None:
        return Classification(
            ClassificationKind.UNWANTED_CONTENT,
            UnwantedReason.FOREIGN_LANGUAGE,
            marker,
        )

    phrase = _first_match(text, phrases.prose_phrases)
    if phrase is not None:
        return Classification(
            ClassificationKind.UNWANTED_CONTENT, UnwantedReason.PROSE, phrase,
        )

    if not any(m in text for m in _DIFF_MARKERS):
        return Classification(
            ClassificationKind.UNWANTED_CONTENT, UnwantedReason.NO_DIFF_MARKERS,
        )

    return Classification(ClassificationKind.VALID_DIFF)
