"""Tests for the hunk applier."""

import difflib

import pytest

from llm_patcher.editing.diff_parser import DiffLine, DiffParser, Hunk, LineKind, Patch
from llm_patcher.editing.hunk_applier import apply_hunk, apply_patch, apply_patch_to_text
from llm_patcher.errors import ApplyError


def _ctx(text):
    return DiffLine(LineKind.CONTEXT, text, 0)


def _add(text):
    return DiffLine(LineKind.ADDITION, text, 0)


def _del(text):
    return DiffLine(LineKind.DELETION, text, 0)


class TestApplyHunk:
    def test_context_deletion_addition(self):
        hunk = Hunk(2, 2, 2, 2, lines=[_ctx("b"), _del("c"), _add("x")])
        assert apply_hunk(["a", "b", "c", "d"], hunk) == ["a", "b", "x", "d"]

    def test_input_is_not_modified(self):
        lines = ["a", "b"]
        apply_hunk(lines, Hunk(1, 1, 1, 1, lines=[_del("a"), _add("z")]))
        assert lines == ["a", "b"]

    def test_context_uses_live_line_not_hunk_text(self):
        hunk = Hunk(1, 2, 1, 3, lines=[_ctx("WRONG"), _add("new"), _ctx("b")])
        assert apply_hunk(["a", "b", "c"], hunk) == ["a", "new", "b", "c"]

    def test_pure_insertion(self):
        hunk = Hunk(2, 0, 2, 1, lines=[_add("inserted")])
        assert apply_hunk(["a", "b", "c"], hunk) == ["a", "inserted", "b", "c"]

    def test_deletion_at_end_of_file(self):
        hunk = Hunk(3, 1, 3, 0, lines=[_del("c")])
        assert apply_hunk(["a", "b", "c"], hunk) == ["a", "b"]

    def test_old_count_past_end_is_clamped(self):
        hunk = Hunk(2, 10, 2, 1, lines=[_ctx("b"), _add("x")])
        assert apply_hunk(["a", "b"], hunk) == ["a", "b", "x"]

    def test_start_zero_is_out_of_range(self):
        with pytest.raises(ApplyError) as exc_info:
            apply_hunk(["a"], Hunk(0, 1, 0, 1))
        assert exc_info.value.old_start == 0

    def test_start_past_end_is_out_of_range(self):
        with pytest.raises(ApplyError) as exc_info:
            apply_hunk(["a", "b"], Hunk(3, 1, 3, 1, lines=[_add("x")]))
        assert exc_info.value.file_length == 2
        assert "out of range" in str(exc_info.value)


class TestApplyPatch:
    def test_hunks_applied_bottom_up(self):
        lines = ["l1", "l2", "l3", "l4", "l5"]
        patch = Patch(hunks=[
            Hunk(2, 1, 2, 2, lines=[_ctx("l2"), _add("after-2")]),
            Hunk(4, 1, 5, 1, lines=[_del("l4"), _add("L4")]),
        ])
        assert apply_patch(lines, patch) == ["l1", "l2", "after-2", "l3", "L4", "l5"]

    def test_matches_manual_bottom_up_application(self):
        lines = [f"line{i}" for i in range(1, 11)]
        low = Hunk(2, 1, 2, 0, lines=[_del("line2")])
        high = Hunk(8, 1, 7, 2, lines=[_ctx("line8"), _add("extra")])

        manual = apply_hunk(apply_hunk(lines, high), low)
        assert apply_patch(lines, Patch(hunks=[low, high])) == manual

    def test_out_of_range_hunk_aborts_patch(self):
        patch = Patch(hunks=[
            Hunk(1, 1, 1, 1, lines=[_del("a"), _add("b")]),
            Hunk(50, 1, 50, 1, lines=[_del("x")]),
        ])
        with pytest.raises(ApplyError):
            apply_patch(["a"], patch)


class TestApplyPatchToText:
    def test_trailing_newline_preserved(self):
        patch = DiffParser().parse("@@ -1,1 +1,1 @@\n-a\n+b\n")
        assert apply_patch_to_text("a\nc\n", patch) == "b\nc\n"

    def test_round_trip_reproduces_stated_changes(self):
        original = "package main\n\nfunc main() {\n\tprintln(1)\n}\n"
        raw = (
            "--- main.go\n+++ main.go\n"
            "@@ -3,3 +3,4 @@\n"
            " func main() {\n"
            "-\tprintln(1)\n"
            "+\tprintln(2)\n"
            "+\tprintln(3)\n"
            " }\n"
        )
        result = apply_patch_to_text(original, DiffParser().parse(raw))

        diff = list(difflib.unified_diff(
            original.split("\n"), result.split("\n"), lineterm="", n=0,
        ))
        removed = [l[1:] for l in diff if l.startswith("-") and not l.startswith("---")]
        added = [l[1:] for l in diff if l.startswith("+") and not l.startswith("+++")]
        assert removed == ["\tprintln(1)"]
        assert added == ["\tprintln(2)", "\tprintln(3)"]

    def test_crlf_file_keeps_its_line_endings(self):
        original = "package main\r\n\r\nfunc a() {}\r\nfunc b() {}\r\n"
        patch = DiffParser().parse("@@ -3,1 +3,1 @@\n-func a() {}\n+func c() {}\n")
        assert apply_patch_to_text(original, patch) == (
            "package main\r\n\r\nfunc c() {}\r\nfunc b() {}\r\n"
        )

    def test_lf_file_additions_stay_lf(self):
        patch = DiffParser().parse("@@ -1,1 +1,2 @@\n a\n+b\n")
        assert apply_patch_to_text("a\nz\n", patch) == "a\nb\nz\n"
