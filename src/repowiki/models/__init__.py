"""Pydantic data models for repowiki.

This package defines the data structures used throughout repowiki for:
- Lock markers (Lock)
- Changed paths and classification results (ChangeSet, Decision)
- Engine invocations (EngineRequest, EngineResult)
- Run state tracking (Run, RunState, CommitRecord)
"""

from .changes import ChangedPath, ChangeKind, ChangeSet, Decision, DecisionKind
from .engine import EngineRequest, EngineResult
from .lock import Lock
from .run import CommitRecord, Run, RunMode, RunState

__all__ = [
    "ChangeKind",
    "ChangeSet",
    "ChangedPath",
    "CommitRecord",
    "Decision",
    "DecisionKind",
    "EngineRequest",
    "EngineResult",
    "Lock",
    "Run",
    "RunMode",
    "RunState",
]
