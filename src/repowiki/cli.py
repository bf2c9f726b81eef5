"""repowiki CLI: auto-generate a repository wiki on every commit."""

import typer

from repowiki import __version__

from .commands import disable, enable, generate, logs, status, update
from .logging import configure_logging
from .output import OutputContext, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"repowiki {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="repowiki",
    help="Auto-generate a repo wiki on git commits (Qoder, Claude Code, Codex)",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
) -> None:
    """repowiki - keep a repository wiki in sync with every commit."""
    console = configure_logging(
        verbosity=verbose,
        quiet=quiet,
        json_mode=json_output,
        no_color=no_color,
    )
    set_output_context(OutputContext(console=console, json_mode=json_output))


app.command()(enable)
app.command()(disable)
app.command()(status)
app.command()(generate)
app.command()(update)
app.command()(logs)
