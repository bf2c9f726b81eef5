"""Post-commit hook installation.

repowiki owns a marked block inside .git/hooks/post-commit so that other
hook content in the same file survives install and uninstall. Enabling also
drops an `/update-wiki` slash command for interactive Qoder sessions.
"""

import shlex
import stat
import sys
from pathlib import Path

from .config import RepowikiConfig
from .constants import SLASH_COMMAND_FILE
from .core.prompts import build_slash_command
from .services.git import get_hooks_dir

HOOK_NAME = "post-commit"
BEGIN_MARKER = "# >>> repowiki >>>"
END_MARKER = "# <<< repowiki <<<"
SHEBANG = "#!/bin/sh"


def default_hook_command() -> str:
    """Command the hook runs: this interpreter's repowiki, detached."""
    return f"{shlex.quote(sys.executable)} -m repowiki update --from-hook"


def hook_block(command: str) -> str:
    """The marked hook block. The run is backgrounded so the commit returns."""
    return "\n".join(
        [
            BEGIN_MARKER,
            f"{command} >/dev/null 2>&1 &",
            END_MARKER,
        ]
    )


def get_hook_path(repo_root: Path) -> Path:
    return get_hooks_dir(repo_root) / HOOK_NAME


def _strip_block(content: str) -> str:
    lines = content.splitlines()
    kept: list[str] = []
    inside = False
    for line in lines:
        if line.strip() == BEGIN_MARKER:
            inside = True
            continue
        if line.strip() == END_MARKER:
            inside = False
            continue
        if not inside:
            kept.append(line)
    return "\n".join(kept).rstrip() + "\n" if kept else ""


def is_hook_installed(repo_root: Path) -> bool:
    """Check whether the repowiki block is present in the post-commit hook."""
    hook_path = get_hook_path(repo_root)
    return hook_path.exists() and BEGIN_MARKER in hook_path.read_text()


def install_hook(repo_root: Path, force: bool = False, command: str | None = None) -> bool:
    """Install the repowiki block into the post-commit hook.

    Args:
        repo_root: Repository root
        force: Replace an existing repowiki block
        command: Command to run (defaults to :func:`default_hook_command`)

    Returns:
        True if the hook was written, False if already installed
    """
    hook_path = get_hook_path(repo_root)
    existing = hook_path.read_text() if hook_path.exists() else ""

    if BEGIN_MARKER in existing:
        if not force:
            return False
        existing = _strip_block(existing)

    if not existing.strip():
        existing = SHEBANG + "\n"
    content = existing.rstrip() + "\n\n" + hook_block(command or default_hook_command()) + "\n"

    hook_path.parent.mkdir(parents=True, exist_ok=True)
    hook_path.write_text(content)
    mode = hook_path.stat().st_mode
    hook_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return True


def uninstall_hook(repo_root: Path) -> bool:
    """Remove the repowiki block, deleting the hook if nothing else remains.

    Returns:
        True if a block was removed
    """
    hook_path = get_hook_path(repo_root)
    if not is_hook_installed(repo_root):
        return False

    remaining = _strip_block(hook_path.read_text())
    if remaining.strip() in ("", SHEBANG):
        hook_path.unlink()
    else:
        hook_path.write_text(remaining)
    return True


def install_slash_command(repo_root: Path, config: RepowikiConfig) -> Path | None:
    """Write the ``/update-wiki`` command for interactive Qoder sessions.

    An existing file is left untouched so local edits survive re-enabling.

    Returns:
        Path written, or None if the file already existed
    """
    path = repo_root / SLASH_COMMAND_FILE
    if path.exists():
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(build_slash_command(config))
    return path
