"""CLI command implementations for repowiki.

This package contains the implementation of each CLI command,
separated from the CLI framework setup in cli.py.
"""

from .enable import disable, enable
from .run import generate, update
from .status import logs, status

__all__ = [
    "disable",
    "enable",
    "generate",
    "logs",
    "status",
    "update",
]
