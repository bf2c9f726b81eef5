"""Enable and disable commands."""

import typer

from ..config import get_config_path, get_repowiki_dir, load_config_or_default, save_config
from ..engines import registry
from ..errors import ConfigError, EngineNotFound, UnknownEngine
from ..hooks import get_hook_path, install_hook, install_slash_command, uninstall_hook
from ..output import get_output_context
from ..services.git import GitError, get_repo_root


def enable(
    engine: str | None = typer.Option(
        None, "--engine", "-e", help="AI engine: qoder, claude-code, codex"
    ),
    engine_path: str | None = typer.Option(
        None, "--engine-path", help="Path to engine CLI binary"
    ),
    model: str | None = typer.Option(None, "--model", "-m", help="Model (engine-specific)"),
    force: bool = typer.Option(False, "--force", help="Reinstall hook even if already present"),
    no_auto_commit: bool = typer.Option(
        False, "--no-auto-commit", help="Don't auto-commit wiki changes"
    ),
) -> None:
    """Enable repowiki in the current repository and install the git hook."""
    ctx = get_output_context()

    try:
        repo_root = get_repo_root()
    except GitError:
        ctx.error("Not a git repository")
        raise typer.Exit(3) from None

    repowiki_dir = get_repowiki_dir(repo_root)
    try:
        config = load_config_or_default(repowiki_dir)
    except ConfigError as e:
        ctx.error(str(e))
        raise typer.Exit(1) from None

    if engine is not None:
        if engine not in registry:
            ctx.error(str(UnknownEngine(engine, registry.names())))
            raise typer.Exit(1)
        config.engine.name = engine
    if engine_path:
        config.engine.path = engine_path
    if model:
        config.engine.model = model
    if no_auto_commit:
        config.commit.auto_commit = False
    config.enabled = True

    binary = None
    try:
        binary = registry.create(config.engine.name, config.engine.path).locate()
    except EngineNotFound as e:
        ctx.warning(str(e))
        ctx.print("Set the path with: repowiki enable --engine-path /path/to/binary\n")

    config_path = save_config(repowiki_dir, config)
    installed = install_hook(repo_root, force=force)
    slash_command = install_slash_command(repo_root, config)
    hook_path = get_hook_path(repo_root)

    ctx.print(f"[green]repowiki enabled in {repo_root}[/green]\n")
    rows: list[tuple[str, object]] = [("Engine", config.engine.name)]
    if binary:
        rows.append(("Binary", binary))
    rows += [
        ("Config", config_path),
        ("Hook", hook_path if installed else f"{hook_path} (already installed)"),
    ]
    if slash_command:
        rows.append(("Command", slash_command))
    ctx.fields(
        rows,
        {
            "repo_root": str(repo_root),
            "engine": config.engine.name,
            "binary": str(binary) if binary else None,
            "config": str(config_path),
            "hook_installed": installed,
            "slash_command": str(slash_command) if slash_command else None,
        },
    )
    ctx.print("\nEvery commit will now auto-update the repo wiki.")
    ctx.print("Run 'repowiki generate' for the initial full wiki generation.")


def disable() -> None:
    """Disable repowiki and remove the git hook."""
    ctx = get_output_context()

    try:
        repo_root = get_repo_root()
    except GitError:
        ctx.error("Not a git repository")
        raise typer.Exit(3) from None

    repowiki_dir = get_repowiki_dir(repo_root)
    if get_config_path(repowiki_dir).exists():
        try:
            config = load_config_or_default(repowiki_dir)
        except ConfigError as e:
            ctx.error(str(e))
            raise typer.Exit(1) from None
        config.enabled = False
        save_config(repowiki_dir, config)

    removed = uninstall_hook(repo_root)
    ctx.success(
        "repowiki disabled" + ("" if removed else " (hook was not installed)"),
        {"hook_removed": removed},
    )
