"""Claude Code engine."""

from pathlib import Path

from ..models import EngineRequest
from .base import ALLOWED_TOOLS, Engine, registry


@registry.register
class ClaudeCodeEngine(Engine):
    name = "claude-code"
    binary = "claude"
    install_hint = "install Claude Code or set engine path in config"

    def well_known_locations(self) -> list[Path]:
        home = Path.home()
        return [
            home / ".local" / "bin" / "claude",
            home / ".claude" / "bin" / "claude",
            Path("/usr/local/bin/claude"),
        ]

    def build_args(self, request: EngineRequest) -> list[str]:
        args = [
            "-p",
            request.prompt,
            "--max-turns",
            str(request.max_turns),
            "--dangerously-skip-permissions",
            "--allowedTools",
            ALLOWED_TOOLS,
        ]
        if request.model:
            args.extend(["--model", request.model])
        return args
