"""Configuration management for repowiki."""

import tomllib
from datetime import UTC, datetime
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import CONFIG_FILE, LOG_DIR, REPOWIKI_DIR, STALE_TIMEOUT_SECONDS
from .engines import registry
from .errors import ConfigError

DEFAULT_EXCLUDED_PATHS = [
    ".qoder/repowiki/",
    ".repowiki/",
    "node_modules/",
    "vendor/",
    ".git/",
]


class EngineConfig(BaseModel):
    """Which AI engine generates the wiki and how it is invoked."""

    name: str = "qoder"
    path: str | None = None  # Override executable path
    model: str | None = None  # Engine-specific model hint
    max_turns: int = Field(default=50, ge=1)

    @field_validator("name")
    @classmethod
    def _known_engine(cls, value: str) -> str:
        if value not in registry:
            raise ValueError(f"unknown engine {value!r} (valid: {', '.join(registry.names())})")
        return value


class WikiConfig(BaseModel):
    """Where the generated wiki lives."""

    path: str = ".qoder/repowiki"
    language: str = "en"

    def content_dir(self, repo_root: Path) -> Path:
        return repo_root / self.path / self.language / "content"


class CommitConfig(BaseModel):
    """Auto-commit behaviour."""

    auto_commit: bool = True
    prefix: str = "[repowiki]"  # Marks automated commits; guards against hook loops


class ChangesConfig(BaseModel):
    """Change classification rules."""

    excluded_paths: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDED_PATHS))
    full_generate_threshold: int = Field(default=20, ge=1)
    sections: dict[str, str] = Field(
        default_factory=dict, description="Path prefix -> section name"
    )


class LockConfig(BaseModel):
    """Run lock settings."""

    timeout_seconds: int = Field(default=STALE_TIMEOUT_SECONDS, ge=1)


class StateConfig(BaseModel):
    """Written back after each completed run."""

    last_run: datetime | None = None
    last_commit_hash: str | None = None


class RepowikiConfig(BaseModel):
    """Root configuration for repowiki."""

    enabled: bool = True
    engine: EngineConfig = Field(default_factory=EngineConfig)
    wiki: WikiConfig = Field(default_factory=WikiConfig)
    commit: CommitConfig = Field(default_factory=CommitConfig)
    changes: ChangesConfig = Field(default_factory=ChangesConfig)
    lock: LockConfig = Field(default_factory=LockConfig)
    state: StateConfig = Field(default_factory=StateConfig)

    def excluded_prefixes(self) -> list[str]:
        """Configured exclusions plus the wiki and state directories.

        Changes to repowiki's own output never trigger a run, whatever the
        wiki path is configured to.
        """
        own = [self.wiki.path.rstrip("/") + "/", REPOWIKI_DIR + "/"]
        return list(dict.fromkeys([*self.changes.excluded_paths, *own]))


def get_repowiki_dir(repo_root: Path) -> Path:
    """Get .repowiki directory path."""
    return repo_root / REPOWIKI_DIR


def get_config_path(repowiki_dir: Path) -> Path:
    return repowiki_dir / CONFIG_FILE


def get_log_dir(repowiki_dir: Path) -> Path:
    return repowiki_dir / LOG_DIR


def load_config(repowiki_dir: Path) -> RepowikiConfig:
    """Load config from .repowiki/config.toml.

    Args:
        repowiki_dir: Path to .repowiki directory

    Returns:
        Loaded configuration

    Raises:
        ConfigError: If the file is missing, is not valid TOML, or fails validation
    """
    config_path = get_config_path(repowiki_dir)
    if not config_path.exists():
        raise ConfigError(f"Config not found: {config_path}. Run 'repowiki enable' first.")
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        return RepowikiConfig.model_validate(data)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse config: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Invalid config: {e}") from e


def load_config_or_default(repowiki_dir: Path) -> RepowikiConfig:
    """Load config, falling back to defaults when none has been written yet."""
    if not get_config_path(repowiki_dir).exists():
        return RepowikiConfig()
    return load_config(repowiki_dir)


def save_config(repowiki_dir: Path, config: RepowikiConfig) -> Path:
    """Write config to .repowiki/config.toml.

    Args:
        repowiki_dir: Path to .repowiki directory
        config: Configuration to persist

    Returns:
        Path to the written config file
    """
    repowiki_dir.mkdir(parents=True, exist_ok=True)
    config_path = get_config_path(repowiki_dir)
    # TOML has no null, so unset optionals are simply omitted
    data = config.model_dump(exclude_none=True)
    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
    return config_path


def update_last_run(repowiki_dir: Path, commit_hash: str | None) -> RepowikiConfig | None:
    """Record the last run time and processed commit in the config file.

    Reloads the file first so concurrent edits by the operator are kept.
    Nothing is written when no config file exists yet.
    """
    if not get_config_path(repowiki_dir).exists():
        return None
    config = load_config(repowiki_dir)
    config.state.last_run = datetime.now(UTC).replace(microsecond=0)
    config.state.last_commit_hash = commit_hash
    save_config(repowiki_dir, config)
    return config
