"""Runtime configuration for pnlkit.

Settings come from environment variables; CLI options override them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from pnlkit.domain.errors import ValidationError

DEFAULT_PAGE_SIZE = 1000


def default_database_path() -> Path:
    """Return the default SQLite database location (~/.pnlkit/pnlkit.db)."""
    return Path.home() / ".pnlkit" / "pnlkit.db"


def _int_setting(env: Mapping[str, str], name: str, default: Optional[int]) -> Optional[int]:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got '{raw}'")
    if value < 1:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


@dataclass
class Settings:
    """Configuration values used by the CLI and services.

    Attributes:
        database_url: SQLAlchemy URL; when set it wins over database_path.
        database_path: SQLite database file used when no URL is configured.
        page_size: Rows fetched per page when reading line items.
        max_workers: Worker threads for batch aggregation (None: CPU count).
        log_level: Level name for the pnlkit logger.
    """

    database_url: Optional[str] = None
    database_path: Optional[str] = None
    page_size: int = DEFAULT_PAGE_SIZE
    max_workers: Optional[int] = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> Settings:
        """Build settings from PNLKIT_* environment variables.

        Raises:
            ValidationError: If a numeric setting is not a positive integer
        """
        env = os.environ if env is None else env
        return cls(
            database_url=env.get("PNLKIT_DB_URL") or None,
            database_path=env.get("PNLKIT_DB_PATH") or None,
            page_size=_int_setting(env, "PNLKIT_PAGE_SIZE", DEFAULT_PAGE_SIZE),
            max_workers=_int_setting(env, "PNLKIT_MAX_WORKERS", None),
            log_level=(env.get("PNLKIT_LOG_LEVEL") or "WARNING").upper(),
        )
