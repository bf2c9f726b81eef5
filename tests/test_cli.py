"""Tests for the repowiki CLI."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from repowiki import __version__
from repowiki.cli import app
from repowiki.config import load_config
from repowiki.hooks import get_hook_path, is_hook_installed
from repowiki.models import Lock
from repowiki.services.git import GitError, GitRepository

from .conftest import FakeEngine, commit_file, git


@pytest.mark.cli
class TestMain:
    """Top-level options."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"repowiki {__version__}" in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("enable", "disable", "status", "generate", "update", "logs"):
            assert command in result.output

    @pytest.mark.parametrize("command", ["status", "generate", "update", "enable", "logs"])
    def test_not_a_git_repo(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, command: str
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
        result = runner.invoke(app, [command])
        assert result.exit_code == 3


@pytest.mark.cli
@pytest.mark.slow
class TestEnableDisable:
    """enable and disable commands."""

    def test_enable_writes_config_and_hook(
        self, runner: CliRunner, temp_git_repo: Path
    ) -> None:
        result = runner.invoke(app, ["enable", "--engine", "claude-code", "--model", "sonnet"])

        assert result.exit_code == 0
        config = load_config(temp_git_repo / ".repowiki")
        assert config.enabled is True
        assert config.engine.name == "claude-code"
        assert config.engine.model == "sonnet"
        assert is_hook_installed(temp_git_repo)
        assert "update --from-hook" in get_hook_path(temp_git_repo).read_text()
        assert (temp_git_repo / ".qoder" / "commands" / "update-wiki.md").exists()

    def test_enable_unknown_engine(self, runner: CliRunner, temp_git_repo: Path) -> None:
        result = runner.invoke(app, ["enable", "--engine", "gpt"])
        assert result.exit_code == 1
        assert not (temp_git_repo / ".repowiki" / "config.toml").exists()

    def test_enable_no_auto_commit(self, runner: CliRunner, temp_git_repo: Path) -> None:
        runner.invoke(app, ["enable", "--engine", "codex", "--no-auto-commit"])
        assert load_config(temp_git_repo / ".repowiki").commit.auto_commit is False

    def test_disable(self, runner: CliRunner, temp_git_repo: Path) -> None:
        runner.invoke(app, ["enable", "--engine", "codex"])
        result = runner.invoke(app, ["disable"])

        assert result.exit_code == 0
        assert load_config(temp_git_repo / ".repowiki").enabled is False
        assert not is_hook_installed(temp_git_repo)


@pytest.mark.cli
@pytest.mark.slow
class TestStatus:
    """status command."""

    def test_not_configured(self, runner: CliRunner, temp_git_repo: Path) -> None:
        result = runner.invoke(app, ["--json", "status"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"configured": False}

    def test_json(self, runner: CliRunner, enabled_repo: Path) -> None:
        result = runner.invoke(app, ["--json", "status"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["configured"] is True
        assert data["enabled"] is True
        assert data["engine"] == "fake"
        assert data["binary"] == "/usr/bin/fake-engine"
        assert data["hook_installed"] is False
        assert data["pages"] == 0
        assert data["lock_pid"] is None

    def test_text(self, runner: CliRunner, enabled_repo: Path) -> None:
        result = runner.invoke(app, ["--no-color", "status"])
        assert result.exit_code == 0
        assert "not generated yet" in result.output


@pytest.mark.cli
@pytest.mark.slow
class TestRunCommands:
    """generate and update commands."""

    def test_generate_commits_wiki(
        self, runner: CliRunner, enabled_repo: Path, fake_engine: type[FakeEngine]
    ) -> None:
        result = runner.invoke(app, ["generate"])

        assert result.exit_code == 0
        assert (enabled_repo / ".qoder/repowiki/en/content/overview.md").exists()
        assert git(enabled_repo, "log", "-1", "--format=%s").startswith("[repowiki]")

    def test_update_after_wiki_commit_is_skipped(
        self, runner: CliRunner, enabled_repo: Path, fake_engine: type[FakeEngine]
    ) -> None:
        runner.invoke(app, ["generate"])
        head = git(enabled_repo, "rev-parse", "HEAD")

        result = runner.invoke(app, ["update", "--from-hook"])

        assert result.exit_code == 0
        assert len(fake_engine.requests) == 1
        assert git(enabled_repo, "rev-parse", "HEAD") == head

    def test_update_json_reports_sections(
        self, runner: CliRunner, enabled_repo: Path, fake_engine: type[FakeEngine]
    ) -> None:
        commit_file(enabled_repo, ".qoder/repowiki/en/content/overview.md", "# Overview\n", "wiki")
        commit_file(enabled_repo, "src/app.py", "print('hi')\n", "Add app")

        result = runner.invoke(app, ["--json", "update"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["decision"] == "incremental"
        assert data["sections"] == ["src"]

    def test_engine_failure_exits_1(
        self, runner: CliRunner, enabled_repo: Path, fake_engine: type[FakeEngine]
    ) -> None:
        fake_engine.fail_with = "boom"
        result = runner.invoke(app, ["generate"])
        assert result.exit_code == 1
        assert not (enabled_repo / ".repowiki" / "repowiki.lock").exists()

    def test_commit_failure_exits_2(
        self, runner: CliRunner, enabled_repo: Path, fake_engine: type[FakeEngine]
    ) -> None:
        with patch.object(
            GitRepository, "commit_path", side_effect=GitError("index.lock exists")
        ):
            result = runner.invoke(app, ["--json", "generate"])

        assert result.exit_code == 2
        data = json.loads(result.stdout)
        assert data["kind"] == "commit_failed"
        assert data["content_generated"] is True
        assert data["error"].startswith("Content generated, not committed")
        assert (enabled_repo / ".qoder/repowiki/en/content/overview.md").exists()

    def test_lock_held_exits_1(
        self, runner: CliRunner, enabled_repo: Path, fake_engine: type[FakeEngine]
    ) -> None:
        marker = Lock(pid=os.getpid(), command="update --from-hook")
        (enabled_repo / ".repowiki" / "repowiki.lock").write_text(marker.model_dump_json())

        result = runner.invoke(app, ["--json", "generate"])

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["kind"] == "lock_held"
        assert f"PID {os.getpid()}" in data["error"]
        assert fake_engine.requests == []

    def test_engine_failure_reports_exit_code(
        self, runner: CliRunner, enabled_repo: Path, fake_engine: type[FakeEngine]
    ) -> None:
        fake_engine.fail_with = "boom"
        result = runner.invoke(app, ["--json", "generate"])

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["kind"] == "engine_failed"
        assert data["exit_code"] == 1

    def test_missing_config_exits_1(self, runner: CliRunner, temp_git_repo: Path) -> None:
        result = runner.invoke(app, ["generate"])
        assert result.exit_code == 1


@pytest.mark.cli
@pytest.mark.slow
class TestLogs:
    """logs command."""

    def test_no_logs(self, runner: CliRunner, temp_git_repo: Path) -> None:
        result = runner.invoke(app, ["--json", "logs"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"log": None}

    def test_shows_latest_run(
        self, runner: CliRunner, enabled_repo: Path, fake_engine: type[FakeEngine]
    ) -> None:
        runner.invoke(app, ["generate"])
        result = runner.invoke(app, ["--json", "logs"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["log"].endswith(".log")
        assert "starting full run" in data["content"]
