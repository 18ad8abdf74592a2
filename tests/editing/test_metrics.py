"""Tests for apply metrics logging and stats."""

import json
import os

import pytest

from llm_patcher.editing.metrics import log_apply_metric, read_apply_stats


@pytest.fixture
def tmp_project(tmp_path):
    return str(tmp_path)


def _metrics_file(root):
    return os.path.join(root, ".llm_patcher", "apply_metrics.jsonl")


class TestLogApplyMetric:
    def test_creates_file_and_writes_entry(self, tmp_project):
        log_apply_metric(
            {"file": "main.go", "status": "applied", "route": "diff"},
            project_root=tmp_project,
        )

        path = _metrics_file(tmp_project)
        assert os.path.isfile(path)

        with open(path) as f:
            lines = f.readlines()
        assert len(lines) == 1

        entry = json.loads(lines[0])
        assert entry["file"] == "main.go"
        assert entry["route"] == "diff"
        assert "timestamp" in entry

    def test_appends_multiple_entries(self, tmp_project):
        for name in ("a.go", "b.go", "c.go"):
            log_apply_metric({"file": name}, project_root=tmp_project)

        with open(_metrics_file(tmp_project)) as f:
            assert len(f.readlines()) == 3


class TestReadApplyStats:
    def test_empty_stats(self, tmp_project):
        stats = read_apply_stats(project_root=tmp_project)

        assert stats["total"] == 0
        assert stats["success_rate"] == 0.0
        assert stats["decline_rate"] == 0.0
        assert stats["routes"] == {}

    def test_stats_from_entries(self, tmp_project):
        entries = [
            {"status": "applied", "route": "diff"},
            {"status": "applied", "route": "diff"},
            {"status": "declined", "route": "replacement"},
            {"status": "failed", "route": "none"},
        ]
        for e in entries:
            log_apply_metric(e, project_root=tmp_project)

        stats = read_apply_stats(project_root=tmp_project)

        assert stats["total"] == 4
        assert stats["success_rate"] == pytest.approx(50.0)
        assert stats["decline_rate"] == pytest.approx(25.0)
        assert stats["routes"]["diff"] == pytest.approx(50.0)
        assert stats["routes"]["none"] == pytest.approx(25.0)

    def test_last_n_window(self, tmp_project):
        log_apply_metric({"status": "failed"}, project_root=tmp_project)
        log_apply_metric({"status": "applied"}, project_root=tmp_project)

        stats = read_apply_stats(last_n=1, project_root=tmp_project)
        assert stats["total"] == 1
        assert stats["success_rate"] == pytest.approx(100.0)

    def test_corrupt_lines_skipped(self, tmp_project):
        log_apply_metric({"status": "applied"}, project_root=tmp_project)
        with open(_metrics_file(tmp_project), "a") as f:
            f.write("not json\n")

        assert read_apply_stats(project_root=tmp_project)["total"] == 1
