"""Engine adapter contract and registry.

An engine is an external AI coding CLI that writes the wiki. Every engine
exposes the same two capabilities: ``locate`` resolves its executable and
``invoke`` runs it once against an :class:`EngineRequest`.
"""

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import ClassVar

from ..constants import HEARTBEAT_INTERVAL_SECONDS
from ..errors import EngineInvocationFailed, EngineNotFound, UnknownEngine
from ..models import EngineRequest, EngineResult

logger = logging.getLogger(__name__)

ALLOWED_TOOLS = "Read,Write,Edit,Glob,Grep,Bash"


class Engine(ABC):
    """Base class for engine adapters.

    Subclasses set ``name``, ``binary`` and ``install_hint`` and implement
    :meth:`build_args` with their own flag vocabulary.
    """

    name: ClassVar[str]
    binary: ClassVar[str]
    install_hint: ClassVar[str] = "install it or set engine path in config"
    wait_interval: ClassVar[float] = HEARTBEAT_INTERVAL_SECONDS

    def __init__(self, engine_path: str | None = None):
        self.engine_path = engine_path

    def well_known_locations(self) -> list[Path]:
        """Install locations checked after the PATH lookup."""
        return []

    def locate(self) -> Path:
        """Resolve a usable executable.

        Order: configured path (if it exists), PATH lookup, well-known
        install locations.

        Raises:
            EngineNotFound: If no candidate exists
        """
        if self.engine_path:
            configured = Path(self.engine_path).expanduser()
            if configured.exists():
                return configured
            logger.debug("Configured %s path %s does not exist", self.name, configured)

        found = shutil.which(self.binary)
        if found:
            return Path(found)

        for candidate in self.well_known_locations():
            if candidate.exists():
                return candidate

        raise EngineNotFound(self.name, self.install_hint)

    @abstractmethod
    def build_args(self, request: EngineRequest) -> list[str]:
        """Engine-specific arguments (without the executable)."""

    def invoke(
        self,
        request: EngineRequest,
        executable: Path,
        on_wait: Callable[[], None] | None = None,
    ) -> EngineResult:
        """Run the engine once and wait for it to finish.

        Stdout and stderr are captured together. No timeout is applied:
        the engine's own turn budget bounds the run.

        Args:
            request: Prompt, working directory and budget
            executable: Path returned by :meth:`locate`
            on_wait: Called every ``wait_interval`` seconds while the
                process is still running

        Returns:
            EngineResult with the combined output and exit code

        Raises:
            EngineInvocationFailed: If the process cannot start or exits non-zero
        """
        cmd = [str(executable), *self.build_args(request)]
        logger.debug("Running %s in %s", executable, request.cwd)
        try:
            proc = subprocess.Popen(
                cmd,
                cwd=request.cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            raise EngineInvocationFailed(self.name, str(e)) from e

        try:
            while True:
                try:
                    output, _ = proc.communicate(timeout=self.wait_interval)
                    break
                except subprocess.TimeoutExpired:
                    if on_wait is not None:
                        on_wait()
        except BaseException:
            proc.kill()
            proc.wait()
            raise

        result = EngineResult(
            engine=self.name,
            output=output or "",
            exit_code=proc.returncode,
            success=proc.returncode == 0,
        )
        if not result.success:
            raise EngineInvocationFailed(self.name, result.output, result.exit_code)
        return result


class EngineRegistry:
    """Engine classes keyed by identifier."""

    def __init__(self) -> None:
        self._engines: dict[str, type[Engine]] = {}

    def register(self, engine_cls: type[Engine]) -> type[Engine]:
        """Register an engine class. Usable as a class decorator."""
        self._engines[engine_cls.name] = engine_cls
        return engine_cls

    def unregister(self, name: str) -> None:
        self._engines.pop(name, None)

    def names(self) -> list[str]:
        return list(self._engines)

    def create(self, name: str, engine_path: str | None = None) -> Engine:
        """Instantiate the engine registered under ``name``.

        Raises:
            UnknownEngine: If no engine has that name
        """
        try:
            engine_cls = self._engines[name]
        except KeyError:
            raise UnknownEngine(name, self.names()) from None
        return engine_cls(engine_path=engine_path)

    def __contains__(self, name: object) -> bool:
        return name in self._engines

    def __iter__(self) -> Iterator[str]:
        return iter(self._engines)


registry = EngineRegistry()
