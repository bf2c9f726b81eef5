"""OpenAI Codex CLI engine."""

from pathlib import Path

from ..models import EngineRequest
from .base import Engine, registry


@registry.register
class CodexEngine(Engine):
    name = "codex"
    binary = "codex"
    install_hint = "install OpenAI Codex CLI or set engine path in config"

    def well_known_locations(self) -> list[Path]:
        return [
            Path.home() / ".local" / "bin" / "codex",
            Path("/usr/local/bin/codex"),
            Path("/opt/homebrew/bin/codex"),
        ]

    def build_args(self, request: EngineRequest) -> list[str]:
        # codex exec has no turn limit flag; --full-auto lets it write files
        args = ["exec", request.prompt, "--full-auto"]
        if request.model:
            args.extend(["--model", request.model])
        return args
