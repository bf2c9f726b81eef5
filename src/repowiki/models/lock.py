"""Run lock marker stored at .repowiki/repowiki.lock."""

from datetime import datetime, timedelta

from pydantic import BaseModel, Field


class Lock(BaseModel):
    """Marker held by the single repowiki run allowed per repository.

    Attributes:
        pid: Process that owns the run.
        command: How the run was started ("full", "incremental" or
            "update --from-hook"), shown when another run is refused.
        started_at: Local time the lock was taken.
        last_heartbeat: Last time the owner reported progress. Markers
            written without one age from ``started_at``.
    """

    pid: int = Field(description="Owning process ID")
    command: str = Field(description="Command that started the run")
    started_at: datetime = Field(default_factory=datetime.now)
    last_heartbeat: datetime | None = Field(default=None, description="Last owner heartbeat")

    def age(self, now: datetime | None = None) -> timedelta:
        """Time since the owner last showed signs of life."""
        return (now or datetime.now()) - (self.last_heartbeat or self.started_at)
