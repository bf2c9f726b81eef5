"""Constants for repowiki."""

REPOWIKI_DIR = ".repowiki"
CONFIG_FILE = "config.toml"
LOG_DIR = "logs"
LOCK_FILE = "repowiki.lock"
LOCK_GUARD_FILE = "repowiki.lock.guard"
SLASH_COMMAND_FILE = ".qoder/commands/update-wiki.md"

# Subprocess timeouts (seconds). Engines are never given one.
GIT_TIMEOUT = 30

STALE_TIMEOUT_SECONDS = 3600  # 1 hour without a heartbeat
HEARTBEAT_INTERVAL_SECONDS = 60

# Section for files that live at the repository root
ROOT_SECTION = "overview"
