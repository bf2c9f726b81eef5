"""Core orchestration logic for repowiki.

- lock_manager: Repository lock with stale-lock reclaim
- classifier: Changed paths -> skip / full / incremental decision
- commit_guard: Hook-loop prevention and wiki auto-commit
- prompts: Full and incremental engine prompts
- orchestrator: The run state machine tying the above together
"""

from .classifier import affected_sections, classify, filter_excluded, section_for_path
from .commit_guard import CommitGuard, build_commit_message, is_automated_message
from .lock_manager import (
    FileLockProvider,
    LockProvider,
    get_current_lock,
    is_pid_running,
    is_stale_lock,
)
from .orchestrator import Orchestrator, wiki_exists
from .prompts import build_full_prompt, build_incremental_prompt, build_slash_command

__all__ = [
    "CommitGuard",
    "FileLockProvider",
    "LockProvider",
    "Orchestrator",
    "affected_sections",
    "build_commit_message",
    "build_full_prompt",
    "build_incremental_prompt",
    "build_slash_command",
    "classify",
    "filter_excluded",
    "get_current_lock",
    "is_automated_message",
    "is_pid_running",
    "is_stale_lock",
    "section_for_path",
    "wiki_exists",
]
