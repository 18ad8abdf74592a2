"""
Phrase lists and language profiles used by the classifier and extractor.

The heuristics that decide whether model output is a diff, a whole file or
noise are plain data so they can be extended from configuration without
touching the algorithms that consume them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace


# ── Built-in phrase lists ──

# Markers of a language the tool does not target.  Their presence means the
# model ignored the formatting instructions.
FOREIGN_MARKERS: tuple[str, ...] = (
    "def ",
    "import ",
    "python",
    "with open(",
)

# Conversational filler emitted instead of a diff.
PROSE_PHRASES: tuple[str, ...] = (
    "here's how",
    "you can use",
    "here are a few",
    "you could generate",
)

# Sentences that mark the switch from code back to explanation.
TRAILING_PHRASES: tuple[str, ...] = (
    "In this example",
    "I hope this helps",
    "This example",
    "The code above",
    "This code",
    "The function",
    "We've defined",
    "Finally",
    "In this case",
)

# Boilerplate a model puts in front of generated code.
RESPONSE_PREFIXES: tuple[str, ...] = (
    "Here's the Go code:",
    "Here is the Go code:",
    "Here's the complete Go file:",
    "Here is the complete Go file:",
    "The Go code is:",
    "Here's your Go file:",
    "Here is your Go file:",
    "Sure! Here is the complete, runnable Go file you requested:",
    "Here is the complete, runnable Go file you requested:",
)


@dataclass(frozen=True)
class PhraseBook:
    """The swappable heuristic vocabulary."""
    foreign_markers: tuple[str, ...] = FOREIGN_MARKERS
    prose_phrases: tuple[str, ...] = PROSE_PHRASES
    trailing_phrases: tuple[str, ...] = TRAILING_PHRASES
    response_prefixes: tuple[str, ...] = RESPONSE_PREFIXES

    def extended(self, **extra: list[str] | tuple[str, ...]) -> "PhraseBook":
        """Return a copy with each named list extended by *extra* entries.

        Duplicates are ignored and the original order is kept.
        """
        updates = {}
        for name, values in extra.items():
            current = getattr(self, name)
            merged = list(current)
            for value in values:
                if value not in merged:
                    merged.append(value)
            updates[name] = tuple(merged)
        return replace(self, **updates)

    def replaced(self, **lists: list[str] | tuple[str, ...]) -> "PhraseBook":
        """Return a copy with each named list replaced outright."""
        return replace(self, **{k: tuple(v) for k, v in lists.items()})


DEFAULT_PHRASES = PhraseBook()


@dataclass(frozen=True)
class LanguageProfile:
    """What a complete source file looks like in the target language."""
    name: str
    declaration_keywords: tuple[str, ...]
    fence_tags: tuple[str, ...] = ()
    code_start_keywords: tuple[str, ...] = field(default_factory=tuple)
    display_name: str = ""

    def is_declaration(self, line: str) -> bool:
        """True if *line* opens a file (``package main`` for Go)."""
        stripped = line.strip()
        return any(stripped.startswith(k) for k in self.declaration_keywords)

    def is_code_start(self, line: str) -> bool:
        stripped = line.strip()
        return self.is_declaration(stripped) or any(
            stripped.startswith(k) for k in self.code_start_keywords
        )

    @property
    def label(self) -> str:
        return self.display_name or self.name.capitalize()


LANGUAGE_PROFILES: dict[str, LanguageProfile] = {
    "go": LanguageProfile(
        name="go",
        declaration_keywords=("package ",),
        fence_tags=("go", "golang"),
        code_start_keywords=("import ", "func ", "type ", "var ", "const "),
        display_name="Go",
    ),
    "java": LanguageProfile(
        name="java",
        declaration_keywords=("package ",),
        fence_tags=("java",),
        code_start_keywords=("import ", "public ", "class ", "interface "),
        display_name="Java",
    ),
    "kotlin": LanguageProfile(
        name="kotlin",
        declaration_keywords=("package ",),
        fence_tags=("kotlin", "kt"),
        code_start_keywords=("import ", "fun ", "class ", "object ", "val "),
        display_name="Kotlin",
    ),
    "scala": LanguageProfile(
        name="scala",
        declaration_keywords=("package ",),
        fence_tags=("scala",),
        code_start_keywords=("import ", "object ", "class ", "trait ", "def "),
        display_name="Scala",
    ),
}

DEFAULT_LANGUAGE = "go"


def get_language_profile(name: str | None) -> LanguageProfile:
    """Return the profile for *name*, falling back to Go for unknown names."""
    if not name:
        return LANGUAGE_PROFILES[DEFAULT_LANGUAGE]
    return LANGUAGE_PROFILES.get(name.lower(), LANGUAGE_PROFILES[DEFAULT_LANGUAGE])
