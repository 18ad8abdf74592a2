"""Patch engine — parse, classify, extract and apply model output."""

from .diff_parser import DiffParser, Patch, Hunk, DiffLine, LineKind, parse_range
from .hunk_applier import apply_hunk, apply_patch, apply_patch_to_text
from .classifier import classify, Classification, ClassificationKind, UnwantedReason
from .extractor import (
    Substitution, extract_complete_file, extract_substitutions, apply_substitutions,
)
from .phrases import PhraseBook, LanguageProfile, get_language_profile
from .resolution import (
    resolve, Resolution, ValidDiff, Replacement, Substitutions, Failure,
)
from .metrics import log_apply_metric, read_apply_stats

__all__ = [
    "DiffParser", "Patch", "Hunk", "DiffLine", "LineKind", "parse_range",
    "apply_hunk", "apply_patch", "apply_patch_to_text",
    "classify", "Classification", "ClassificationKind", "UnwantedReason",
    "Substitution", "extract_complete_file", "extract_substitutions",
    "apply_substitutions",
    "PhraseBook", "LanguageProfile", "get_language_profile",
    "resolve", "Resolution", "ValidDiff", "Replacement", "Substitutions", "Failure",
    "log_apply_metric", "read_apply_stats",
]
