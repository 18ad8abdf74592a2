"""
Resolution — decides what a raw model response can be turned into.

The result is one of four candidate types so callers dispatch on the type
instead of re-running boolean checks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Union

from ..errors import ParseError
from .classifier import Classification, ClassificationKind, classify
from .diff_parser import DiffParser, Patch
from .extractor import Substitution, extract_complete_file, extract_substitutions
from .phrases import DEFAULT_PHRASES, LanguageProfile, PhraseBook, get_language_profile

logger = logging.getLogger(__name__)


@dataclass
class ValidDiff:
    patch: Patch


@dataclass
class Replacement:
    """A complete file to write in place of the current one."""
    content: str


@dataclass
class Substitutions:
    changes: list[Substitution] = field(default_factory=list)


@dataclass
class Failure:
    reason: str
    snippet: str = ""


Candidate = Union[ValidDiff, Replacement, Substitutions, Failure]


@dataclass
class Resolution:
    """A candidate plus how it was reached."""
    candidate: Candidate
    classification: Classification
    parse_error: ParseError | None = None

    @property
    def used_fallback(self) -> bool:
        return not isinstance(self.candidate, ValidDiff)


def extract_fallback(
    raw: str,
    profile: LanguageProfile | None = None,
    phrases: PhraseBook = DEFAULT_PHRASES,
) -> Candidate:
    """Run the extractor's attempts in order and wrap the first success."""
    content = extract_complete_file(raw, profile, phrases)
    if content:
        return Replacement(content)

    changes = extract_substitutions(raw)
    if changes:
        return Substitutions(changes)

    return Failure("extraction failed", raw.strip())


def resolve(
    raw: str,
    profile: LanguageProfile | None = None,
    phrases: PhraseBook = DEFAULT_PHRASES,
    parser: DiffParser | None = None,
) -> Resolution:
    """Classify *raw* and turn it into a candidate.

    A valid diff that fails to parse, or parses to no hunks, falls back to
    the extractor just like content the classifier rejected.
    """
    profile = profile or get_language_profile(None)
    parser = parser or DiffParser()

    classification = classify(raw, phrases)

    if classification.kind is ClassificationKind.UNPARSEABLE:
        return Resolution(Failure("empty response"), classification)

    if classification.is_valid_diff:
        try:
            patch = parser.parse(raw)
        except ParseError as exc:
            logger.warning("[Patch] Could not parse diff (%s), extracting manually", exc)
            return Resolution(
                extract_fallback(raw, profile, phrases), classification, exc,
            )
        if patch.hunks:
            return Resolution(ValidDiff(patch), classification)
        logger.warning("[Patch] Diff has no hunks, extracting manually")
    else:
        logger.warning(
            "[Patch] Unexpected content (%s), extracting manually",
            classification.describe(),
        )

    return Resolution(extract_fallback(raw, profile, phrases), classification)
