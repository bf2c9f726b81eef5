"""Git operations for repowiki."""

import subprocess
from pathlib import Path
from typing import Protocol

from ..constants import GIT_TIMEOUT
from ..errors import RepowikiError
from ..models import ChangedPath, ChangeKind, ChangeSet


class GitError(RepowikiError):
    """Git command failed."""


def run_git(*args: str, cwd: Path | None = None, check: bool = True) -> str:
    """Run git command and return stripped stdout.

    Args:
        *args: Git arguments
        cwd: Working directory
        check: Raise GitError on non-zero exit

    Returns:
        Stripped stdout

    Raises:
        GitError: If the command fails (with check=True) or times out
    """
    cmd = ["git", "-c", "core.quotePath=false", *args]
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT,
        )
    except subprocess.TimeoutExpired as e:
        raise GitError(f"git {' '.join(args)} timed out after {GIT_TIMEOUT} seconds") from e
    except FileNotFoundError:
        raise GitError("git executable not found") from None

    if check and result.returncode != 0:
        raise GitError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
    return result.stdout.strip()


def get_repo_root(cwd: Path | None = None) -> Path:
    """Get the repository root directory.

    Raises:
        GitError: If cwd is not inside a git repository
    """
    try:
        return Path(run_git("rev-parse", "--show-toplevel", cwd=cwd))
    except GitError:
        raise GitError("Not a git repository") from None


def get_hooks_dir(cwd: Path) -> Path:
    """Get the hooks directory, honouring core.hooksPath."""
    hooks = Path(run_git("rev-parse", "--git-path", "hooks", cwd=cwd))
    return hooks if hooks.is_absolute() else cwd / hooks


def get_head_sha(cwd: Path) -> str:
    """Get full SHA of HEAD."""
    return run_git("rev-parse", "HEAD", cwd=cwd)


def get_latest_commit_message(cwd: Path) -> str:
    """Get the full message of the most recent commit ("" on an unborn branch)."""
    return run_git("log", "-1", "--format=%B", cwd=cwd, check=False)


def _parse_name_status(output: str) -> list[ChangedPath]:
    """Parse ``--name-status -z`` output.

    Fields are NUL-separated: a status, then one path, or two paths
    (old, new) for renames and copies. Paths are taken verbatim.
    """
    fields = output.split("\0")
    changes = []
    i = 0
    while i < len(fields):
        status = fields[i]
        if not status:
            i += 1
            continue
        kind = ChangeKind.from_status(status)
        width = 2 if kind in (ChangeKind.RENAMED, ChangeKind.COPIED) else 1
        # For renames and copies the new path is what changed
        changes.append(ChangedPath(path=fields[i + width], kind=kind))
        i += width + 1
    return changes


def get_changed_paths(cwd: Path, revision: str = "HEAD") -> ChangeSet:
    """Get paths changed by a commit or a range.

    Args:
        cwd: Repository root
        revision: Commit-ish, ``A..B``, or ``A...B`` (changes on B since
            the merge base); an omitted end means HEAD

    Returns:
        ChangeSet in git's output order
    """
    if ".." in revision:
        output = run_git("diff", "--name-status", "-z", "-M", revision, cwd=cwd)
    else:
        output = run_git(
            "diff-tree",
            "--no-commit-id",
            "--name-status",
            "-z",
            "-r",
            "-M",
            "--root",
            revision,
            cwd=cwd,
        )
    return ChangeSet(revision=revision, changes=tuple(_parse_name_status(output)))


def stage_path(path: str, cwd: Path) -> None:
    """Stage every change (including deletions) under a path."""
    run_git("add", "-A", "--", path, cwd=cwd)


def has_staged_changes(cwd: Path, path: str | None = None) -> bool:
    """Check whether the index differs from HEAD, optionally under a path."""
    args = ["diff", "--cached", "--quiet"]
    if path:
        args.extend(["--", path])
    try:
        run_git(*args, cwd=cwd)
        return False
    except GitError:
        return True


def commit_path(message: str, path: str, cwd: Path) -> str:
    """Commit only the staged changes under ``path`` and return the new SHA.

    Other staged files are left staged and out of the commit.
    """
    run_git("commit", "--no-verify", "-m", message, "--", path, cwd=cwd)
    return get_head_sha(cwd)


class GitProvider(Protocol):
    """Git capabilities the orchestrator depends on."""

    root: Path

    def head_sha(self) -> str | None: ...

    def changed_paths(self, revision: str = "HEAD") -> ChangeSet: ...

    def latest_commit_message(self) -> str: ...

    def commit_path(self, path: str, message: str) -> str | None: ...


class GitRepository:
    """GitProvider backed by the git CLI."""

    def __init__(self, root: Path):
        self.root = root

    @classmethod
    def discover(cls, cwd: Path | None = None) -> "GitRepository":
        return cls(get_repo_root(cwd))

    def head_sha(self) -> str | None:
        sha = run_git("rev-parse", "--verify", "-q", "HEAD", cwd=self.root, check=False)
        return sha or None

    def changed_paths(self, revision: str = "HEAD") -> ChangeSet:
        return get_changed_paths(self.root, revision)

    def latest_commit_message(self) -> str:
        return get_latest_commit_message(self.root)

    def commit_path(self, path: str, message: str) -> str | None:
        """Stage and commit a single path.

        Returns:
            New commit SHA, or None when nothing under path changed
        """
        if not (self.root / path).exists() and not run_git("ls-files", "--", path, cwd=self.root):
            return None
        stage_path(path, self.root)
        if not has_staged_changes(self.root, path):
            return None
        return commit_path(message, path, self.root)
