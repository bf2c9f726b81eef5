"""Shared test fixtures for repowiki tests."""

import os
import subprocess
from collections.abc import Callable, Generator
from pathlib import Path
from typing import ClassVar

import pytest
from typer.testing import CliRunner

from repowiki.config import RepowikiConfig, save_config
from repowiki.engines import Engine, registry
from repowiki.errors import EngineInvocationFailed
from repowiki.models import EngineRequest, EngineResult


def git(repo: Path, *args: str) -> str:
    """Run git in a test repository and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def commit_file(repo: Path, path: str, content: str, message: str) -> str:
    """Write a file, commit it, and return the new HEAD SHA."""
    target = repo / path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content)
    git(repo, "add", path)
    git(repo, "commit", "-m", message)
    return git(repo, "rev-parse", "HEAD")


class FakeEngine(Engine):
    """Engine that writes wiki pages instead of spawning a process."""

    name = "fake"
    binary = "fake-engine"

    requests: ClassVar[list[EngineRequest]] = []
    pages: ClassVar[dict[str, str]] = {}
    fail_with: ClassVar[str | None] = None

    def locate(self) -> Path:
        return Path("/usr/bin/fake-engine")

    def build_args(self, request: EngineRequest) -> list[str]:
        return ["--prompt", request.prompt]

    def invoke(
        self,
        request: EngineRequest,
        executable: Path,
        on_wait: Callable[[], None] | None = None,
    ) -> EngineResult:
        type(self).requests.append(request)
        if on_wait is not None:
            on_wait()
        if self.fail_with is not None:
            raise EngineInvocationFailed(self.name, self.fail_with, 1)
        for rel, content in self.pages.items():
            page = request.cwd / rel
            page.parent.mkdir(parents=True, exist_ok=True)
            page.write_text(content)
        return EngineResult(engine=self.name, output="generated wiki")


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository.

    Initializes a git repo with user config and an initial commit.
    Changes cwd to the repo directory for the duration of the test.
    """
    repo = tmp_path.resolve()
    git(repo, "init")
    git(repo, "config", "user.email", "test@test.com")
    git(repo, "config", "user.name", "Test User")
    git(repo, "config", "commit.gpgsign", "false")

    (repo / "README.md").write_text("# Test\n")
    git(repo, "add", ".")
    git(repo, "commit", "-m", "Initial commit")

    original_cwd = os.getcwd()
    os.chdir(repo)
    try:
        yield repo
    finally:
        os.chdir(original_cwd)


@pytest.fixture
def fake_engine() -> Generator[type[FakeEngine], None, None]:
    """Register FakeEngine as "fake" for the duration of a test."""
    FakeEngine.requests = []
    FakeEngine.pages = {".qoder/repowiki/en/content/overview.md": "# Overview\n"}
    FakeEngine.fail_with = None
    registry.register(FakeEngine)
    try:
        yield FakeEngine
    finally:
        registry.unregister(FakeEngine.name)


@pytest.fixture
def config(fake_engine: type[FakeEngine]) -> RepowikiConfig:
    """Config using the fake engine."""
    return RepowikiConfig.model_validate({"engine": {"name": "fake"}})


@pytest.fixture
def enabled_repo(temp_git_repo: Path, config: RepowikiConfig) -> Path:
    """Git repo with .repowiki/config.toml written."""
    save_config(temp_git_repo / ".repowiki", config)
    return temp_git_repo
