"""External service integrations for repowiki.

- git: Git operations and the GitProvider used by the orchestrator
"""

from .git import (
    GitError,
    GitProvider,
    GitRepository,
    commit_path,
    get_changed_paths,
    get_head_sha,
    get_hooks_dir,
    get_latest_commit_message,
    get_repo_root,
    has_staged_changes,
    run_git,
    stage_path,
)

__all__ = [
    "GitError",
    "GitProvider",
    "GitRepository",
    "commit_path",
    "get_changed_paths",
    "get_head_sha",
    "get_hooks_dir",
    "get_latest_commit_message",
    "get_repo_root",
    "has_staged_changes",
    "run_git",
    "stage_path",
]
