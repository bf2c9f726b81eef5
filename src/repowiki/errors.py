"""Error taxonomy for repowiki runs."""


class RepowikiError(Exception):
    """Base exception for repowiki errors."""


class ConfigError(RepowikiError):
    """Raised when the config file is missing or invalid."""


class LockHeld(RepowikiError):
    """Raised when another live run already holds the repository lock."""

    def __init__(self, pid: int, command: str):
        self.pid = pid
        self.command = command
        super().__init__(f"Run already in progress (PID {pid}, command: {command})")


class UnknownEngine(RepowikiError):
    """Raised when no engine is registered under the requested name."""

    def __init__(self, name: str, known: list[str]):
        self.name = name
        super().__init__(f"Unknown engine: {name} (valid: {', '.join(known)})")


class EngineNotFound(RepowikiError):
    """Raised when an engine binary cannot be resolved."""

    def __init__(self, engine: str, hint: str):
        self.engine = engine
        self.hint = hint
        super().__init__(f"{engine} not found; {hint}")


class EngineInvocationFailed(RepowikiError):
    """Raised when an engine process cannot be spawned or exits non-zero."""

    def __init__(self, engine: str, output: str, exit_code: int | None = None):
        self.engine = engine
        self.output = output
        self.exit_code = exit_code
        status = f"exit code {exit_code}" if exit_code is not None else "spawn error"
        super().__init__(f"{engine} failed ({status}): {output.strip()[-2000:]}")


class CommitFailed(RepowikiError):
    """Raised when auto-commit fails after the engine already wrote content."""

    content_generated = True

    def __init__(self, message: str):
        super().__init__(f"Content generated, not committed: {message}")
