"""Lock manager for repowiki run concurrency control.

Provides PID-based file locking so that rapid successive commits cannot
start overlapping runs on one repository. A second run fails fast with
LockHeld; it never waits. Stale locks left by crashed or hung runs are
reclaimed.

Every read-check-write of the marker happens under an exclusive flock on a
sidecar guard file, so reclaiming a stale marker and writing the new one
are atomic with respect to other repowiki processes.
"""

import fcntl
import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Protocol

from ..constants import LOCK_FILE, LOCK_GUARD_FILE, STALE_TIMEOUT_SECONDS
from ..errors import LockHeld
from ..models import Lock

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
LivenessCheck = Callable[[int], bool]


def lock_path(lock_dir: Path) -> Path:
    """Get path to lock file."""
    return lock_dir / LOCK_FILE


def is_pid_running(pid: int) -> bool:
    """Check if a process with given PID is running."""
    try:
        os.kill(pid, 0)  # Signal 0 doesn't kill, just checks
    except PermissionError:
        # Exists, owned by another user
        return True
    except OSError:
        return False
    return True


def get_current_lock(lock_dir: Path) -> Lock | None:
    """Get current lock if it exists and is readable.

    Args:
        lock_dir: Directory holding the lock file

    Returns:
        Lock if a valid lock file exists, None otherwise
    """
    path = lock_path(lock_dir)
    if not path.exists():
        return None

    try:
        return Lock.model_validate_json(path.read_text())
    except (OSError, ValueError):
        # Corrupted or vanished lock file - treat as no lock
        return None


def is_stale_lock(
    lock: Lock,
    timeout_seconds: int = STALE_TIMEOUT_SECONDS,
    now: datetime | None = None,
    is_alive: LivenessCheck = is_pid_running,
) -> bool:
    """Check if lock is stale (owner dead, or no heartbeat within the timeout).

    Args:
        lock: Lock to check
        timeout_seconds: Max time since the last heartbeat
        now: Current time (defaults to datetime.now())
        is_alive: Liveness oracle for the owner PID

    Returns:
        True if lock is stale and may be reclaimed
    """
    if not is_alive(lock.pid):
        return True
    return lock.age(now) > timedelta(seconds=timeout_seconds)


class LockProvider(Protocol):
    """Mutual exclusion for runs on one repository."""

    def acquire(self, command: str) -> Lock: ...

    def heartbeat(self) -> None: ...

    def release(self) -> None: ...


class FileLockProvider:
    """LockProvider backed by a JSON marker file.

    The clock, liveness oracle and PID are injectable so staleness policy can
    be exercised without inspecting real processes.
    """

    def __init__(
        self,
        lock_dir: Path,
        timeout_seconds: int = STALE_TIMEOUT_SECONDS,
        clock: Clock = datetime.now,
        is_alive: LivenessCheck | None = None,
        pid: int | None = None,
    ):
        self.lock_dir = lock_dir
        self.timeout_seconds = timeout_seconds
        self.clock = clock
        self.is_alive = is_alive or is_pid_running
        self.pid = os.getpid() if pid is None else pid

    @property
    def path(self) -> Path:
        return lock_path(self.lock_dir)

    @contextmanager
    def _guard(self, blocking: bool) -> Iterator[bool]:
        """Hold the sidecar flock; yields False if non-blocking and busy.

        The guard file is never removed, so every process locks the same inode.
        """
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        fd = os.open(str(self.lock_dir / LOCK_GUARD_FILE), os.O_CREAT | os.O_RDWR, 0o644)
        try:
            flags = fcntl.LOCK_EX if blocking else fcntl.LOCK_EX | fcntl.LOCK_NB
            try:
                fcntl.flock(fd, flags)
            except BlockingIOError:
                yield False
                return
            yield True
        finally:
            # Closing the descriptor drops the flock
            os.close(fd)

    def _try_atomic_create(self, lock: Lock) -> bool:
        """Attempt atomic lock file creation.

        Returns:
            True if lock was created, False if file already exists
        """
        try:
            fd = os.open(str(self.path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        try:
            os.write(fd, lock.model_dump_json(indent=2).encode())
        finally:
            os.close(fd)
        return True

    def _held(self) -> LockHeld:
        existing = get_current_lock(self.lock_dir)
        if existing is None:
            return LockHeld(-1, "acquiring")
        return LockHeld(existing.pid, existing.command)

    def acquire(self, command: str) -> Lock:
        """Acquire the repository lock.

        Args:
            command: Command acquiring the lock (recorded for diagnostics)

        Returns:
            The held Lock

        Raises:
            LockHeld: If another live, non-stale lock exists, or another
                process is acquiring or releasing at this moment
        """
        with self._guard(blocking=False) as guarded:
            if not guarded:
                raise self._held()

            existing = get_current_lock(self.lock_dir)
            if existing is not None:
                if not is_stale_lock(existing, self.timeout_seconds, self.clock(), self.is_alive):
                    raise LockHeld(existing.pid, existing.command)
                logger.info(
                    "Reclaiming stale lock (PID %d, started %s)",
                    existing.pid,
                    existing.started_at.isoformat(timespec="seconds"),
                )
            # Stale, corrupted or absent: nobody else can touch it while guarded
            self.path.unlink(missing_ok=True)

            now = self.clock()
            lock = Lock(pid=self.pid, command=command, started_at=now, last_heartbeat=now)
            if not self._try_atomic_create(lock):
                raise self._held()
            return lock

    def heartbeat(self) -> None:
        """Refresh the marker's heartbeat if owned by this provider's PID."""
        with self._guard(blocking=True):
            existing = get_current_lock(self.lock_dir)
            if existing is None or existing.pid != self.pid:
                return
            existing.last_heartbeat = self.clock()
            tmp = self.path.with_name(self.path.name + ".tmp")
            tmp.write_text(existing.model_dump_json(indent=2))
            os.replace(tmp, self.path)

    def release(self) -> None:
        """Release the lock if owned by this provider's PID."""
        with self._guard(blocking=True):
            existing = get_current_lock(self.lock_dir)
            if existing is not None and existing.pid == self.pid:
                self.path.unlink(missing_ok=True)
