"""Commit guard: hook-loop prevention and wiki auto-commit.

repowiki commits the wiki it just generated, and that commit fires the
post-commit hook again. Every automated commit message starts with the
configured prefix; a run whose triggering commit carries the prefix is
skipped before anything else happens.
"""

import logging

from ..errors import CommitFailed
from ..models import CommitRecord
from ..services.git import GitError, GitProvider

logger = logging.getLogger(__name__)


def is_automated_message(message: str, prefix: str) -> bool:
    """Check whether a commit message was produced by repowiki."""
    return bool(prefix) and message.lstrip().startswith(prefix)


def build_commit_message(prefix: str, description: str) -> str:
    """Build the auto-commit message."""
    return f"{prefix} {description}".strip()


class CommitGuard:
    """Guards against self-triggered runs and commits generated wiki content."""

    def __init__(self, git: GitProvider, prefix: str, wiki_path: str):
        self.git = git
        self.prefix = prefix
        self.wiki_path = wiki_path

    def should_skip(self) -> bool:
        """True when the latest commit was made by repowiki itself."""
        return is_automated_message(self.git.latest_commit_message(), self.prefix)

    def commit(self, description: str) -> CommitRecord | None:
        """Stage and commit only the wiki path.

        Args:
            description: Short description appended to the prefix

        Returns:
            CommitRecord, or None when the wiki is unchanged

        Raises:
            CommitFailed: If staging or committing fails
        """
        message = build_commit_message(self.prefix, description)
        try:
            sha = self.git.commit_path(self.wiki_path, message)
        except GitError as e:
            raise CommitFailed(str(e)) from e

        if sha is None:
            logger.debug("No wiki changes under %s to commit", self.wiki_path)
            return None
        return CommitRecord(sha=sha, message=message)
