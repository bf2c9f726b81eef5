"""Run models: one end-to-end orchestration attempt."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .changes import Decision, DecisionKind


class RunState(str, Enum):
    """Orchestrator states. DONE and FAILED are terminal."""

    IDLE = "idle"
    LOCKING = "locking"
    CLASSIFYING = "classifying"
    GENERATING = "generating"
    COMMITTING = "committing"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.DONE, RunState.FAILED)


class RunMode(str, Enum):
    """How the run was requested."""

    FULL = "full"
    INCREMENTAL = "incremental"


class CommitRecord(BaseModel):
    """Commit produced by auto-commit."""

    sha: str
    message: str


class Run(BaseModel):
    """State of a single repowiki run.

    Attributes:
        mode: Requested mode (full or incremental).
        from_hook: True when triggered by the post-commit hook.
        state: Current orchestrator state.
        history: Every state entered, in order.
        decision: Classification outcome, once known.
        source_commit: HEAD at the start of the run.
        output_length: Length of engine output, once generated.
        commit: Auto-commit record, if a commit was created.
        error: Message of the error that failed the run.
    """

    mode: RunMode
    from_hook: bool = False
    state: RunState = RunState.IDLE
    history: list[RunState] = Field(default_factory=lambda: [RunState.IDLE])
    decision: Decision | None = None
    source_commit: str | None = None
    output_length: int | None = None
    commit: CommitRecord | None = None
    error: str | None = None
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: datetime | None = None

    def advance(self, state: RunState) -> None:
        """Move to a new state, refusing to leave a terminal one."""
        if self.state.is_terminal:
            raise ValueError(f"Run already finished in state {self.state.value}")
        self.state = state
        self.history.append(state)
        if state.is_terminal:
            self.finished_at = datetime.now()

    @property
    def skipped(self) -> bool:
        return self.decision is not None and self.decision.kind == DecisionKind.SKIP
