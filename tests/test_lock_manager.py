"""Tests for lock manager."""

import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from repowiki.core.lock_manager import (
    FileLockProvider,
    get_current_lock,
    is_pid_running,
    is_stale_lock,
)
from repowiki.errors import LockHeld
from repowiki.models import Lock

T0 = datetime(2026, 1, 4, 12, 0, 0)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FakeLiveness:
    """Liveness oracle over a set of live PIDs."""

    def __init__(self, *alive: int):
        self.alive = set(alive)

    def __call__(self, pid: int) -> bool:
        return pid in self.alive


@pytest.fixture
def lock_dir(tmp_path: Path) -> Path:
    """Create temporary .repowiki directory."""
    d = tmp_path / ".repowiki"
    d.mkdir()
    return d


def provider(lock_dir: Path, pid: int, clock: FakeClock, liveness: FakeLiveness) -> FileLockProvider:
    return FileLockProvider(lock_dir, timeout_seconds=3600, clock=clock, is_alive=liveness, pid=pid)


@pytest.mark.unit
class TestAcquire:
    """Tests for FileLockProvider.acquire."""

    def test_acquire_creates_lock_file(self, lock_dir: Path) -> None:
        """Acquiring writes a marker with owner and start time."""
        clock = FakeClock()
        lock = provider(lock_dir, 100, clock, FakeLiveness(100)).acquire("update")

        assert lock.pid == 100
        assert lock.started_at == T0
        stored = get_current_lock(lock_dir)
        assert stored is not None
        assert stored.command == "update"

    def test_acquire_creates_missing_directory(self, tmp_path: Path) -> None:
        """The lock directory is created on demand."""
        lock_dir = tmp_path / "missing" / ".repowiki"
        FileLockProvider(lock_dir).acquire("generate")
        assert (lock_dir / "repowiki.lock").exists()

    def test_second_acquire_fails_while_owner_live(self, lock_dir: Path) -> None:
        """A second run fails fast with LockHeld while the holder is live."""
        clock = FakeClock()
        liveness = FakeLiveness(100, 200)
        provider(lock_dir, 100, clock, liveness).acquire("update")

        with pytest.raises(LockHeld, match="PID 100") as exc_info:
            provider(lock_dir, 200, clock, liveness).acquire("update")
        assert exc_info.value.pid == 100

    def test_same_process_cannot_acquire_twice(self, lock_dir: Path) -> None:
        """The lock is not reentrant."""
        clock = FakeClock()
        first = provider(lock_dir, 100, clock, FakeLiveness(100))
        first.acquire("generate")
        with pytest.raises(LockHeld):
            first.acquire("generate")

    def test_reclaims_lock_of_dead_owner(self, lock_dir: Path) -> None:
        """A lock whose owner is gone is reclaimed immediately."""
        clock = FakeClock()
        provider(lock_dir, 100, clock, FakeLiveness(100)).acquire("update")

        lock = provider(lock_dir, 200, clock, FakeLiveness(200)).acquire("update")
        assert lock.pid == 200
        assert get_current_lock(lock_dir).pid == 200  # type: ignore[union-attr]

    def test_reclaims_lock_older_than_timeout(self, lock_dir: Path) -> None:
        """A live owner that stops heartbeating is abandoned after the timeout."""
        clock = FakeClock()
        liveness = FakeLiveness(100, 200)
        provider(lock_dir, 100, clock, liveness).acquire("update")

        clock.advance(seconds=3599)
        with pytest.raises(LockHeld):
            provider(lock_dir, 200, clock, liveness).acquire("update")

        clock.advance(seconds=2)
        lock = provider(lock_dir, 200, clock, liveness).acquire("update")
        assert lock.pid == 200

    def test_reclaims_after_crash_and_timeout(self, lock_dir: Path) -> None:
        """Owner dead and marker old: reclaimed."""
        clock = FakeClock()
        liveness = FakeLiveness(100)
        provider(lock_dir, 100, clock, liveness).acquire("update")

        liveness.alive.discard(100)
        clock.advance(hours=2)
        lock = provider(lock_dir, 200, clock, liveness).acquire("generate")
        assert lock.command == "generate"

    def test_concurrent_reclaim_leaves_single_holder(self, lock_dir: Path) -> None:
        """A run reclaiming a stale marker cannot be overtaken mid-reclaim."""
        clock = FakeClock()
        provider(lock_dir, 50, clock, FakeLiveness(50)).acquire("update")
        other = provider(lock_dir, 200, clock, FakeLiveness(200))
        outcomes: list[object] = []

        def liveness(pid: int) -> bool:
            # Another run tries to take the lock while this one decides staleness
            try:
                outcomes.append(other.acquire("update"))
            except LockHeld as e:
                outcomes.append(e)
            return False

        lock = FileLockProvider(
            lock_dir, timeout_seconds=3600, clock=clock, is_alive=liveness, pid=100
        ).acquire("update")

        assert lock.pid == 100
        assert len(outcomes) == 1
        assert isinstance(outcomes[0], LockHeld)
        assert get_current_lock(lock_dir).pid == 100  # type: ignore[union-attr]

    def test_heartbeat_keeps_live_lock(self, lock_dir: Path) -> None:
        """A long run that keeps heartbeating is never reclaimed."""
        clock = FakeClock()
        liveness = FakeLiveness(100, 200)
        owner = provider(lock_dir, 100, clock, liveness)
        owner.acquire("generate")

        for _ in range(3):
            clock.advance(seconds=3000)
            owner.heartbeat()

        with pytest.raises(LockHeld, match="PID 100"):
            provider(lock_dir, 200, clock, liveness).acquire("update")
        stored = get_current_lock(lock_dir)
        assert stored is not None
        assert stored.started_at == T0
        assert stored.last_heartbeat == T0 + timedelta(seconds=9000)

    def test_heartbeat_ignores_other_owner(self, lock_dir: Path) -> None:
        clock = FakeClock()
        liveness = FakeLiveness(100, 200)
        provider(lock_dir, 100, clock, liveness).acquire("update")

        clock.advance(seconds=60)
        provider(lock_dir, 200, clock, liveness).heartbeat()
        assert get_current_lock(lock_dir).last_heartbeat == T0  # type: ignore[union-attr]

    def test_reclaims_corrupted_lock_file(self, lock_dir: Path) -> None:
        """A corrupted marker does not block runs forever."""
        (lock_dir / "repowiki.lock").write_text("not valid json")
        lock = provider(lock_dir, 100, FakeClock(), FakeLiveness(100)).acquire("update")
        assert lock.pid == 100


@pytest.mark.unit
class TestRelease:
    """Tests for FileLockProvider.release."""

    def test_release_removes_lock_file(self, lock_dir: Path) -> None:
        """Releasing removes the marker so the next run can start."""
        clock = FakeClock()
        liveness = FakeLiveness(100, 200)
        first = provider(lock_dir, 100, clock, liveness)
        first.acquire("update")
        first.release()

        assert not (lock_dir / "repowiki.lock").exists()
        assert provider(lock_dir, 200, clock, liveness).acquire("update").pid == 200

    def test_release_ignores_other_owner(self, lock_dir: Path) -> None:
        """A run never removes a lock it does not own."""
        clock = FakeClock()
        liveness = FakeLiveness(100, 200)
        provider(lock_dir, 100, clock, liveness).acquire("update")

        provider(lock_dir, 200, clock, liveness).release()
        assert get_current_lock(lock_dir).pid == 100  # type: ignore[union-attr]

    def test_release_without_lock_is_noop(self, lock_dir: Path) -> None:
        FileLockProvider(lock_dir).release()
        assert not (lock_dir / "repowiki.lock").exists()


@pytest.mark.unit
class TestIsStale:
    """Tests for is_stale_lock function."""

    def test_dead_pid_is_stale(self) -> None:
        lock = Lock(pid=100, command="update", started_at=T0)
        assert is_stale_lock(lock, now=T0, is_alive=lambda pid: False) is True

    def test_old_lock_is_stale(self) -> None:
        lock = Lock(pid=100, command="update", started_at=T0 - timedelta(hours=2))
        assert is_stale_lock(lock, timeout_seconds=3600, now=T0, is_alive=lambda pid: True)

    def test_fresh_live_lock_not_stale(self) -> None:
        lock = Lock(pid=100, command="update", started_at=T0)
        assert is_stale_lock(lock, now=T0 + timedelta(minutes=5), is_alive=lambda pid: True) is False

    def test_recent_heartbeat_not_stale(self) -> None:
        """Age is measured from the last heartbeat, not the start."""
        lock = Lock(
            pid=100,
            command="generate",
            started_at=T0 - timedelta(hours=5),
            last_heartbeat=T0 - timedelta(minutes=1),
        )
        assert is_stale_lock(lock, timeout_seconds=3600, now=T0, is_alive=lambda pid: True) is False

    def test_real_liveness_for_current_process(self) -> None:
        """The default liveness check sees this process as running."""
        assert is_pid_running(os.getpid()) is True
        lock = Lock(pid=os.getpid(), command="update")
        assert is_stale_lock(lock) is False


@pytest.mark.unit
class TestGetCurrentLock:
    """Tests for get_current_lock function."""

    def test_returns_none_if_no_lock_file(self, lock_dir: Path) -> None:
        assert get_current_lock(lock_dir) is None

    def test_returns_none_if_corrupted(self, lock_dir: Path) -> None:
        (lock_dir / "repowiki.lock").write_text("{broken")
        assert get_current_lock(lock_dir) is None
