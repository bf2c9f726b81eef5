"""Engine adapters for external AI coding CLIs.

Importing this package registers the built-in engines:
- qoder: Qoder CLI (qodercli)
- claude-code: Claude Code (claude)
- codex: OpenAI Codex CLI (codex)

New engines subclass :class:`Engine` and decorate themselves with
``@registry.register``.
"""

from .base import ALLOWED_TOOLS, Engine, EngineRegistry, registry
from .claude import ClaudeCodeEngine
from .codex import CodexEngine
from .qoder import QoderEngine

__all__ = [
    "ALLOWED_TOOLS",
    "ClaudeCodeEngine",
    "CodexEngine",
    "Engine",
    "EngineRegistry",
    "QoderEngine",
    "registry",
]
