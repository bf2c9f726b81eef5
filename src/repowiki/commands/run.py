"""Generate and update commands."""

import typer

from ..config import get_repowiki_dir, load_config
from ..errors import (
    CommitFailed,
    ConfigError,
    EngineInvocationFailed,
    EngineNotFound,
    LockHeld,
    RepowikiError,
)
from ..core import Orchestrator
from ..models import Run
from ..output import get_output_context
from ..services.git import GitError, GitRepository


def _orchestrator() -> Orchestrator:
    ctx = get_output_context()
    try:
        git = GitRepository.discover()
    except GitError:
        ctx.error("Not a git repository")
        raise typer.Exit(3) from None

    try:
        config = load_config(get_repowiki_dir(git.root))
    except ConfigError as e:
        ctx.error(str(e))
        raise typer.Exit(1) from None
    return Orchestrator(config, git)


def _report(run: Run) -> None:
    ctx = get_output_context()
    data = {
        "state": run.state.value,
        "mode": run.mode.value,
        "decision": run.decision.kind.value if run.decision else None,
        "sections": list(run.decision.sections) if run.decision else [],
        "output_length": run.output_length,
        "commit": run.commit.sha if run.commit else None,
    }
    if run.skipped:
        reason = run.decision.reason if run.decision else ""
        ctx.result(data, f"[yellow]Skipped:[/yellow] {reason}")
    elif run.commit:
        ctx.success(f"Wiki updated and committed ({run.commit.sha[:12]})", data)
    else:
        ctx.success("Wiki updated", data)


def _execute(orchestrator: Orchestrator, **kwargs: object) -> None:
    ctx = get_output_context()
    try:
        run = orchestrator.run(**kwargs)  # type: ignore[arg-type]
    except LockHeld as e:
        ctx.error(str(e), {"kind": "lock_held"})
        raise typer.Exit(1) from None
    except EngineNotFound as e:
        ctx.error(str(e), {"kind": "engine_not_found"})
        ctx.print("Set the path with: repowiki enable --engine-path /path/to/binary")
        raise typer.Exit(1) from None
    except EngineInvocationFailed as e:
        ctx.error(str(e), {"kind": "engine_failed", "exit_code": e.exit_code})
        raise typer.Exit(1) from None
    except CommitFailed as e:
        ctx.error(str(e), {"kind": "commit_failed", "content_generated": True})
        raise typer.Exit(2) from None
    except RepowikiError as e:
        ctx.error(str(e))
        raise typer.Exit(1) from None
    _report(run)


def generate() -> None:
    """Run a full wiki generation."""
    _execute(_orchestrator(), full=True)


def update(
    commit: str = typer.Option(
        "HEAD", "--commit", "-c", help="Commit or A..B range to process"
    ),
    from_hook: bool = typer.Option(
        False, "--from-hook", hidden=True, help="Internal: run was triggered by the git hook"
    ),
) -> None:
    """Run an incremental wiki update for recent changes."""
    _execute(_orchestrator(), revision=commit, from_hook=from_hook)
