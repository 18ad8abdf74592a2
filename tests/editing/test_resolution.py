"""Tests for classify-then-parse-or-extract resolution."""

from llm_patcher.editing.classifier import ClassificationKind, UnwantedReason
from llm_patcher.editing.extractor import Substitution
from llm_patcher.editing.resolution import (
    Failure, Replacement, Substitutions, ValidDiff, resolve,
)


VALID = "--- main.go\n+++ main.go\n@@ -1,1 +1,1 @@\n-package foo\n+package bar\n"


class TestResolve:
    def test_valid_diff(self):
        res = resolve(VALID)
        assert isinstance(res.candidate, ValidDiff)
        assert res.candidate.patch.file_path == "main.go"
        assert res.used_fallback is False
        assert res.parse_error is None

    def test_empty_response_fails(self):
        res = resolve("   ")
        assert isinstance(res.candidate, Failure)
        assert res.classification.kind is ClassificationKind.UNPARSEABLE

    def test_parse_error_falls_back_to_substitutions(self):
        raw = "--- main.go\n+++ main.go\n@@ broken @@\n-x := 1\n+x := 2\n"
        res = resolve(raw)
        assert res.parse_error is not None
        assert res.parse_error.line_number == 3
        assert isinstance(res.candidate, Substitutions)
        assert res.candidate.changes == [Substitution("x := 1", "x := 2")]

    def test_diff_without_hunks_falls_back(self):
        raw = "--- main.go\n+++ main.go\n-x := 1\n+x := 2\n"
        res = resolve(raw)
        assert isinstance(res.candidate, Substitutions)

    def test_prose_with_full_file_becomes_replacement(self):
        raw = "Here's how you could write it:\n```go\npackage main\n\nfunc main() {}\n```\n"
        res = resolve(raw)
        assert res.classification.reason is UnwantedReason.PROSE
        assert isinstance(res.candidate, Replacement)
        assert res.candidate.content == "package main\n\nfunc main() {}"
        assert res.used_fallback is True

    def test_foreign_language_with_nothing_salvageable(self):
        raw = "def main():\n    print('hi')\n"
        res = resolve(raw)
        assert isinstance(res.candidate, Failure)
        assert res.candidate.reason == "extraction failed"
        assert "def main()" in res.candidate.snippet

    def test_no_markers_but_complete_file(self):
        raw = "package main\n\nfunc main() {}\n"
        res = resolve(raw)
        assert res.classification.reason is UnwantedReason.NO_DIFF_MARKERS
        assert isinstance(res.candidate, Replacement)

    def test_fenced_diff_with_import_is_never_a_replacement(self):
        raw = (
            "```diff\n--- a/main.go\n+++ b/main.go\n@@ -1,3 +1,4 @@\n"
            " package main\n \n import \"fmt\"\n+import \"os\"\n```\n"
        )
        res = resolve(raw)
        assert res.classification.reason is UnwantedReason.FOREIGN_LANGUAGE
        assert not isinstance(res.candidate, Replacement)
        assert isinstance(res.candidate, Failure)
