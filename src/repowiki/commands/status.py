"""Status and logs commands."""

import typer

from ..config import get_config_path, get_log_dir, get_repowiki_dir, load_config
from ..core import get_current_lock, wiki_exists
from ..engines import registry
from ..errors import ConfigError, RepowikiError
from ..hooks import is_hook_installed
from ..logging import latest_run_log
from ..output import get_output_context
from ..services.git import GitError, get_repo_root


def status() -> None:
    """Show current status and configuration."""
    ctx = get_output_context()

    try:
        repo_root = get_repo_root()
    except GitError:
        ctx.error("Not a git repository")
        raise typer.Exit(3) from None

    repowiki_dir = get_repowiki_dir(repo_root)
    if not get_config_path(repowiki_dir).exists():
        ctx.result({"configured": False}, "Status: not configured")
        ctx.print("Run 'repowiki enable' to get started.")
        return

    try:
        config = load_config(repowiki_dir)
    except ConfigError as e:
        ctx.error(str(e))
        raise typer.Exit(1) from None

    try:
        binary = str(registry.create(config.engine.name, config.engine.path).locate())
    except RepowikiError:
        binary = None

    has_wiki = wiki_exists(repo_root, config)
    pages = len(list(config.wiki.content_dir(repo_root).rglob("*.md"))) if has_wiki else 0
    lock = get_current_lock(repowiki_dir)
    hook = is_hook_installed(repo_root)

    data = {
        "configured": True,
        "enabled": config.enabled,
        "engine": config.engine.name,
        "binary": binary,
        "hook_installed": hook,
        "wiki_path": config.wiki.path,
        "pages": pages,
        "model": config.engine.model,
        "auto_commit": config.commit.auto_commit,
        "max_turns": config.engine.max_turns,
        "last_run": config.state.last_run,
        "last_commit": config.state.last_commit_hash,
        "lock_pid": lock.pid if lock else None,
    }
    if has_wiki:
        wiki = f"{config.wiki.path}/{config.wiki.language}/content/ ({pages} pages)"
    else:
        wiki = f"{config.wiki.path} (not generated yet)"
    rows: list[tuple[str, object]] = [
        ("Status", "enabled" if config.enabled else "disabled"),
        ("Engine", config.engine.name),
        ("Hook", "installed" if hook else "not installed"),
        ("Binary", binary or f"not found ({config.engine.name})"),
        ("Wiki path", wiki),
    ]
    if config.engine.model:
        rows.append(("Model", config.engine.model))
    rows += [
        ("Auto-commit", config.commit.auto_commit),
        ("Max turns", config.engine.max_turns),
    ]
    if config.state.last_run:
        rows.append(("Last run", config.state.last_run.isoformat()))
    if config.state.last_commit_hash:
        rows.append(("Last commit", config.state.last_commit_hash))
    if lock:
        since = f"{lock.started_at:%H:%M:%S}"
        rows.append(("Running", f"PID {lock.pid} ({lock.command}) since {since}"))
    ctx.fields(rows, data)


def logs() -> None:
    """Show the latest run log."""
    ctx = get_output_context()

    try:
        repo_root = get_repo_root()
    except GitError:
        ctx.error("Not a git repository")
        raise typer.Exit(3) from None

    latest = latest_run_log(get_log_dir(get_repowiki_dir(repo_root)))
    if latest is None:
        ctx.result({"log": None}, "No logs yet.")
        return

    content = latest.read_text()
    ctx.result({"log": latest.name, "content": content}, f"=== {latest.name} ===")
    if not ctx.json_mode:
        ctx.console.print(content, markup=False, highlight=False, end="")
