"""Change set and regeneration decision models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ChangeKind(str, Enum):
    """Kind of change git reported for a path."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"
    TYPE_CHANGED = "type_changed"
    UNKNOWN = "unknown"

    @classmethod
    def from_status(cls, status: str) -> "ChangeKind":
        """Map a git --name-status letter (e.g. ``M``, ``R100``) to a kind."""
        return _STATUS_KINDS.get(status[:1].upper(), cls.UNKNOWN)


_STATUS_KINDS = {
    "A": ChangeKind.ADDED,
    "M": ChangeKind.MODIFIED,
    "D": ChangeKind.DELETED,
    "R": ChangeKind.RENAMED,
    "C": ChangeKind.COPIED,
    "T": ChangeKind.TYPE_CHANGED,
}


class ChangedPath(BaseModel):
    """A single changed path, relative to the repository root."""

    model_config = ConfigDict(frozen=True)

    path: str
    kind: ChangeKind = ChangeKind.MODIFIED


class ChangeSet(BaseModel):
    """Ordered, immutable set of changed paths for a commit or range."""

    model_config = ConfigDict(frozen=True)

    revision: str | None = Field(default=None, description="Commit or range described")
    changes: tuple[ChangedPath, ...] = ()

    @classmethod
    def from_paths(cls, paths: list[str], revision: str | None = None) -> "ChangeSet":
        """Build a change set from bare paths (kind unknown to the caller)."""
        return cls(revision=revision, changes=tuple(ChangedPath(path=p) for p in paths))

    @property
    def paths(self) -> list[str]:
        return [c.path for c in self.changes]

    def __len__(self) -> int:
        return len(self.changes)


class DecisionKind(str, Enum):
    """What a run should regenerate."""

    SKIP = "skip"
    FULL = "full"
    INCREMENTAL = "incremental"


class Decision(BaseModel):
    """Outcome of classifying a change set.

    Attributes:
        kind: Skip, full or incremental regeneration.
        paths: Changed paths left after exclusions.
        sections: Affected sections in first-seen order (incremental only).
        reason: Short human-readable explanation for logs.
    """

    model_config = ConfigDict(frozen=True)

    kind: DecisionKind
    paths: tuple[str, ...] = ()
    sections: tuple[str, ...] = ()
    reason: str = ""

    @classmethod
    def skip(cls, reason: str) -> "Decision":
        return cls(kind=DecisionKind.SKIP, reason=reason)
