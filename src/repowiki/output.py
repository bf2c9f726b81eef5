"""Console and JSON output for repowiki commands.

Each command reports through one OutputContext: Rich text by default, or a
single JSON document on stdout when ``--json`` is given.
"""

import json
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

Payload = dict[str, Any]


@dataclass
class OutputContext:
    """Where and how command output is written."""

    console: Console
    json_mode: bool = False

    def print(self, message: str, style: str | None = None) -> None:
        """Print a human-readable line (suppressed in JSON mode)."""
        if not self.json_mode:
            self.console.print(message, style=style)

    def emit(self, data: Payload) -> None:
        """Write one JSON document to stdout (JSON mode only)."""
        if self.json_mode:
            print(json.dumps(data, indent=2, default=str))

    def result(self, data: Payload, message: str = "") -> None:
        if self.json_mode:
            self.emit(data)
        elif message:
            self.console.print(message)

    def fields(self, rows: Iterable[tuple[str, object]], data: Payload) -> None:
        """Aligned ``label: value`` listing, or ``data`` as JSON.

        Args:
            rows: Label/value pairs shown in text mode, in order
            data: Machine-readable equivalent emitted in JSON mode
        """
        if self.json_mode:
            self.emit(data)
            return
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        for label, value in rows:
            table.add_row(f"{label}:", escape(str(value)))
        self.console.print(table)

    def _report(self, key: str, style: str, message: str, data: Payload | None) -> None:
        if self.json_mode:
            self.emit({key: message, **(data or {})})
            return
        prefix = "Error: " if key == "error" else ""
        self.console.print(f"[{style}]{prefix}{escape(message)}[/{style}]")

    def error(self, message: str, data: Payload | None = None) -> None:
        self._report("error", "red", message, data)

    def success(self, message: str, data: Payload | None = None) -> None:
        self._report("success", "green", message, data)

    def warning(self, message: str) -> None:
        if not self.json_mode:
            self.console.print(f"[yellow]Warning: {escape(message)}[/yellow]")


# Set by the cli.py main callback
_ctx: OutputContext | None = None


def get_output_context() -> OutputContext:
    """Current output context, or a plain console one outside the CLI."""
    return _ctx if _ctx is not None else OutputContext(Console())


def set_output_context(ctx: OutputContext) -> None:
    global _ctx
    _ctx = ctx
