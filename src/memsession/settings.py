"""Configuration for memsession.

Loads configuration from:
1. memsession.yaml (session store and logging sections)
2. Environment variables (.env)

Environment variables win over memsession.yaml, which wins over defaults.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

CONFIG_FILENAME = "memsession.yaml"
DEFAULT_SERVERS = ["localhost:11211"]


class ProjectRootNotFoundError(RuntimeError):
    """Raised when MEMSESSION_PROJECT_ROOT does not point at a project directory."""


@dataclass(frozen=True)
class SessionConfig:
    """Session store configuration."""
    store: str = "memcached"  # "memcached" or "memory"
    servers: list[str] = field(default_factory=lambda: list(DEFAULT_SERVERS))
    prefix: str = ""
    touch_after: int = 0  # Seconds; 0 disables touch debouncing
    debug: bool = False
    maxsize: int = 10000  # Max entries for memory store
    options: dict[str, Any] = field(default_factory=dict)  # Passed to HashClient


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"


@dataclass(frozen=True)
class Settings:
    """Complete memsession configuration."""
    project_root: Path
    session: SessionConfig
    logging: LoggingConfig


def _find_project_root() -> Path:
    """Find project root by looking for memsession.yaml or a .env file.

    MEMSESSION_PROJECT_ROOT short-circuits the search and must point at a
    directory holding one of those files.
    """
    explicit = os.getenv("MEMSESSION_PROJECT_ROOT")
    if explicit:
        root = Path(explicit).expanduser().resolve()
        if (root / CONFIG_FILENAME).exists() or (root / ".env").exists():
            return root
        raise ProjectRootNotFoundError(
            f"MEMSESSION_PROJECT_ROOT={explicit} does not contain {CONFIG_FILENAME} or .env"
        )

    current = Path.cwd().resolve()
    for path in [current] + list(current.parents):
        if (path / CONFIG_FILENAME).exists():
            return path
        if (path / ".env").exists():
            return path

    # Configuration files are optional; defaults and env vars still apply
    return current


def _load_yaml_config(path: Path) -> dict[str, Any]:
    """Load and parse YAML config file."""
    if not path.exists():
        return {}

    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_servers(value: Any) -> list[str]:
    """Normalize a server list given as a list or a comma-joined string."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return []


def parse_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def int_with_default(value: Any, default: int) -> int:
    """Parse int values safely with fallback."""
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def env_servers() -> list[str]:
    """Server list from MEMCACHIER_SERVERS, falling back to MEMCACHE_SERVERS."""
    return parse_servers(os.getenv("MEMCACHIER_SERVERS") or os.getenv("MEMCACHE_SERVERS"))


def load_settings() -> Settings:
    """Load memsession configuration.

    Process:
    1. Find project root
    2. Load .env file
    3. Load memsession.yaml (if exists)
    4. Apply environment overrides
    5. Build Settings object
    """
    project_root = _find_project_root()

    env_file = project_root / ".env"
    if env_file.exists():
        load_dotenv(env_file)

    config = _load_yaml_config(project_root / CONFIG_FILENAME)

    session_config = config.get("session") or {}
    servers = env_servers() or parse_servers(session_config.get("servers")) or list(DEFAULT_SERVERS)
    options = session_config.get("options") or {}
    if not isinstance(options, dict):
        options = {}

    session = SessionConfig(
        store=str(os.getenv("SESSION_STORE") or session_config.get("store") or "memcached")
        .strip()
        .lower(),
        servers=servers,
        prefix=str(os.getenv("SESSION_PREFIX") or session_config.get("prefix") or ""),
        touch_after=int_with_default(
            os.getenv("SESSION_TOUCH_AFTER"),
            int_with_default(session_config.get("touch_after"), 0),
        ),
        debug=parse_bool(
            os.getenv("SESSION_DEBUG"),
            parse_bool(session_config.get("debug"), False),
        ),
        maxsize=int_with_default(
            os.getenv("SESSION_MAXSIZE"),
            int_with_default(session_config.get("maxsize"), 10000),
        ),
        options=dict(options),
    )

    logging_config = config.get("logging") or {}
    log_level = str(
        os.getenv("MEMSESSION_LOG_LEVEL") or logging_config.get("level") or "INFO"
    ).strip().upper()

    return Settings(
        project_root=project_root,
        session=session,
        logging=LoggingConfig(level=log_level),
    )


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the configured level to the memsession logger hierarchy."""
    settings = settings or load_settings()
    level = logging.getLevelName(settings.logging.level)
    if not isinstance(level, int):
        level = logging.INFO
    logging.getLogger("memsession").setLevel(level)
