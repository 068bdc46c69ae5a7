"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work against a
throwaway SQLite database.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json

import pytest
from typer.testing import CliRunner

from config import get_settings
from mentalsum.cli.main import app

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the CLI at a temporary database with no feedback delay."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("FEEDBACK_PAUSE_SECONDS", "0")
    monkeypatch.setenv("RANDOM_SEED", "1")
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    monkeypatch.delenv("LOG_FILE", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def invoke(*args: str, input: str | None = None):
    return runner.invoke(app, list(args), input=input)


@pytest.fixture
def learner():
    result = invoke("users", "create", "Ada")
    assert result.exit_code == 0, result.output


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        result = invoke("--help")
        assert result.exit_code == 0
        assert "practice" in result.output
        assert "strategies" in result.output

    def test_practice_help(self):
        result = invoke("practice", "--help")
        assert result.exit_code == 0
        assert "--strategy" in result.output


class TestUsersCommands:
    def test_create_and_list(self, learner):
        result = invoke("users", "list")
        assert result.exit_code == 0
        assert "Ada" in result.output

    def test_select_and_delete(self, learner):
        assert invoke("users", "create", "Grace").exit_code == 0

        result = invoke("users", "select", "grace")
        assert result.exit_code == 0
        assert "Grace" in result.output

        result = invoke("users", "delete", "Grace", "--yes")
        assert result.exit_code == 0
        assert "Grace" not in invoke("users", "list").output

    def test_select_unknown(self, learner):
        result = invoke("users", "select", "nobody")
        assert result.exit_code == 1


class TestPracticeCommands:
    def test_practice_requires_learner(self):
        result = invoke("practice")
        assert result.exit_code == 1
        assert "No learner selected" in result.output

    def test_full_session(self, learner):
        result = invoke("practice", "-n", "3", input="0\n0\n0\n")
        assert result.exit_code == 0, result.output
        assert "Session complete" in result.output

        stats = invoke("stats")
        assert stats.exit_code == 0
        assert "Sessions" in stats.output

    def test_pause_then_answer(self, learner):
        result = invoke("practice", "-n", "2", input="p\n\n1\n1\n")
        assert result.exit_code == 0, result.output
        assert "Paused" in result.output
        assert "Session complete" in result.output

    def test_end_of_input_ends_session_early(self, learner):
        result = invoke("practice", "-n", "5", input="0\n")
        assert result.exit_code == 0, result.output
        assert "Ending session early" in result.output

    def test_focused_practice(self, learner):
        result = invoke("practice", "-s", "MultiplicationTimes5", "-n", "1", input="0\n")
        assert result.exit_code == 0, result.output
        assert "Times 5" in result.output

    def test_unknown_strategy(self, learner):
        result = invoke("practice", "-s", "NotAStrategy")
        assert result.exit_code == 1

    def test_practice_with_everything_disabled(self, learner):
        for op in ("addition", "subtraction", "multiplication", "division"):
            invoke("settings", "ops", op, "off")
        result = invoke("practice")
        assert result.exit_code == 1

    def test_problem_without_learner(self):
        result = invoke("problem", "-n", "3")
        assert result.exit_code == 0
        assert "Generated Problems" in result.output

    def test_review_after_session(self, learner):
        invoke("practice", "-n", "2", input="-1\n-1\n")
        result = invoke("review")
        assert result.exit_code == 0
        assert "Recently missed" in result.output


class TestStrategiesCommands:
    def test_catalog(self):
        result = invoke("strategies")
        assert result.exit_code == 0
        assert "Strategies" in result.output

    def test_detail(self):
        result = invoke("strategies", "AdditionDoubles")
        assert result.exit_code == 0
        assert "Near Doubles" in result.output


class TestSettingsCommands:
    def test_show(self, learner):
        result = invoke("settings", "show")
        assert result.exit_code == 0
        assert "time_limit" in result.output

    def test_set_value(self, learner):
        result = invoke("settings", "set", "time_limit", "15")
        assert result.exit_code == 0
        assert "15s" in result.output

    def test_set_invalid_value(self, learner):
        result = invoke("settings", "set", "session_length", "0")
        assert result.exit_code == 1

    def test_set_unknown_key(self, learner):
        result = invoke("settings", "set", "colour", "blue")
        assert result.exit_code == 1

    def test_range(self, learner):
        result = invoke("settings", "range", "addition", "50", "10")
        assert result.exit_code == 0
        assert "10-50" in result.output


class TestBackupCommands:
    def test_export_then_import(self, learner, tmp_path):
        backup = tmp_path / "backup.json"

        result = invoke("export", str(backup))
        assert result.exit_code == 0
        data = json.loads(backup.read_text(encoding="utf-8"))
        assert [u["name"] for u in data["users"]] == ["Ada"]

        invoke("users", "delete", "Ada", "--yes")
        result = invoke("import", str(backup), "--yes")
        assert result.exit_code == 0
        assert "Ada" in invoke("users", "list").output

    def test_import_invalid_file(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"users": "nope"}', encoding="utf-8")
        result = invoke("import", str(bad), "--yes")
        assert result.exit_code == 1
