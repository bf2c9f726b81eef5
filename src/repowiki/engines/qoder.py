"""Qoder CLI engine."""

import sys
from pathlib import Path

from ..models import EngineRequest
from .base import ALLOWED_TOOLS, Engine, registry

QODER_APP_BIN = Path("/Applications/Qoder.app/Contents/Resources/app/resources/bin")


@registry.register
class QoderEngine(Engine):
    name = "qoder"
    binary = "qodercli"
    install_hint = "install Qoder or set engine path in config"

    def well_known_locations(self) -> list[Path]:
        # Qoder bundles its CLI inside the macOS app only
        if sys.platform != "darwin":
            return []
        return [
            QODER_APP_BIN / "aarch64_darwin" / "qodercli",
            QODER_APP_BIN / "x86_64_darwin" / "qodercli",
        ]

    def build_args(self, request: EngineRequest) -> list[str]:
        args = [
            "-p",
            request.prompt,
            "-q",
            "-w",
            str(request.cwd),
            "--max-turns",
            str(request.max_turns),
            "--dangerously-skip-permissions",
            "--allowed-tools",
            ALLOWED_TOOLS,
        ]
        if request.model:
            args.extend(["--model", request.model])
        return args
