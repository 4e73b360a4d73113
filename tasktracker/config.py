"""Settings loaded from environment variables.

- One Settings object for the CLI process.
- TASKTRACKER_DB unset means in-memory storage (nothing persisted).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TASKTRACKER"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_level(name: str, default: str) -> str:
    raw = (os.getenv(name) or default).strip().upper()
    return raw if raw in logging.getLevelNamesMapping() else default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- storage ----
    database: str | None

    # ---- logging ----
    log_level: str
    log_dir: Path

    # ---- listings ----
    page_size: int

    def database_target(self) -> str | Path | None:
        """SQLAlchemy URL as-is, anything else is treated as a SQLite file path."""
        if not self.database:
            return None
        if "://" in self.database:
            return self.database
        return Path(self.database).expanduser().resolve()


def load_settings(database: str | None = None) -> Settings:
    """
    Reads TASKTRACKER_* variables.

    :param database: Overrides TASKTRACKER_DB (CLI --db).
    """
    page_size = _env_int(_k("PAGE_SIZE"), 10)
    return Settings(
        database=database or os.getenv(_k("DB")) or None,
        log_level=_env_level(_k("LOG_LEVEL"), "WARNING"),
        log_dir=_env_path(_k("LOG_DIR"), Path(".local/tasktracker")),
        page_size=page_size if page_size >= 1 else 10,
    )
