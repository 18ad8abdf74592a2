"""Tests for the command-line entry point."""

import pytest

from llm_patcher import cli


ORIGINAL = "package main\n\nfunc main() {\n\tprintln(1)\n}\n"

DIFF = (
    "--- main.go\n+++ main.go\n@@ -4,1 +4,1 @@\n"
    "-\tprintln(1)\n+\tprintln(2)\n"
)


class _FakeClient:
    def __init__(self, reply):
        self.reply = reply
        self.prompts = []

    def generate_response(self, prompt, system=""):
        self.prompts.append(prompt)
        return self.reply


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LLM_PATCHER_AUTO_APPROVE", raising=False)
    target = tmp_path / "main.go"
    target.write_text(ORIGINAL, encoding="utf-8")
    return tmp_path


class TestApplyCommand:
    def test_apply_from_file(self, workspace, capsys):
        (workspace / "resp.txt").write_text(DIFF, encoding="utf-8")

        code = cli.main(["--auto", "apply", "main.go", "--response", "resp.txt"])

        assert code == 0
        assert "println(2)" in (workspace / "main.go").read_text(encoding="utf-8")
        assert (workspace / "main.go.backup").read_text(encoding="utf-8") == ORIGINAL
        assert "✅ Changes applied successfully to main.go" in capsys.readouterr().out

    def test_log_file_written(self, workspace):
        (workspace / "resp.txt").write_text(DIFF, encoding="utf-8")
        cli.main(["--auto", "apply", "main.go", "--response", "resp.txt"])
        assert list((workspace / ".llm_patcher" / "logs").glob("patcher_*.log"))

    def test_declined_returns_zero(self, workspace, monkeypatch):
        (workspace / "resp.txt").write_text(DIFF, encoding="utf-8")
        monkeypatch.setattr("builtins.input", lambda _p: "n")

        assert cli.main(["apply", "main.go", "--response", "resp.txt"]) == 0
        assert (workspace / "main.go").read_text(encoding="utf-8") == ORIGINAL

    def test_unusable_response_fails(self, workspace, capsys):
        (workspace / "resp.txt").write_text("def f(): pass\n", encoding="utf-8")

        assert cli.main(["--auto", "apply", "main.go", "--response", "resp.txt"]) == 1
        out = capsys.readouterr().out
        assert "❌ Error: extraction failed" in out
        assert "Rejected content" in out

    def test_missing_response_file(self, workspace, capsys):
        assert cli.main(["--auto", "apply", "main.go", "--response", "nope.txt"]) == 1
        assert "❌ Error:" in capsys.readouterr().out


class TestModelCommands:
    def test_edit_sends_file_and_applies(self, workspace, monkeypatch):
        client = _FakeClient(DIFF)
        monkeypatch.setattr(cli, "_make_client", lambda cfg: client)

        code = cli.main(["--auto", "edit", "main.go", "print", "two"])

        assert code == 0
        assert "print two" in client.prompts[0]
        assert "println(1)" in client.prompts[0]
        assert "println(2)" in (workspace / "main.go").read_text(encoding="utf-8")

    def test_create(self, workspace, monkeypatch):
        client = _FakeClient("```go\npackage util\n\nfunc Two() int { return 2 }\n```")
        monkeypatch.setattr(cli, "_make_client", lambda cfg: client)

        code = cli.main(["--auto", "create", "util/two.go", "return", "two"])

        assert code == 0
        assert (workspace / "util" / "two.go").read_text(encoding="utf-8").startswith(
            "package util")

    def test_llm_error(self, workspace, monkeypatch, capsys):
        class _Broken:
            def generate_response(self, prompt, system=""):
                raise cli.LLMError("connection refused")

        monkeypatch.setattr(cli, "_make_client", lambda cfg: _Broken())

        assert cli.main(["--auto", "edit", "main.go", "anything"]) == 1
        assert "connection refused" in capsys.readouterr().out


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestStatsCommand:
    def test_no_metrics(self, workspace, capsys):
        assert cli.main(["stats"]) == 0
        assert "No apply metrics recorded yet" in capsys.readouterr().out

    def test_reports_recorded_applies(self, workspace, capsys):
        (workspace / ".llm_patcher.yaml").write_text("metrics: true\n", encoding="utf-8")
        (workspace / "resp.txt").write_text(DIFF, encoding="utf-8")
        cli.main(["--auto", "apply", "main.go", "--response", "resp.txt"])
        capsys.readouterr()

        assert cli.main(["stats"]) == 0
        out = capsys.readouterr().out
        assert "Last 1 attempts: 100% applied, 0% declined" in out
        assert "diff: 100%" in out
