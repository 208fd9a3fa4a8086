"""
Application settings and configuration management.

Supports loading from:
1. YAML files (plain, or SOPS-encrypted when named *.enc.yaml)
2. Environment variables (fallback)
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from .constants import DEFAULT_ORDER_BY, DEFAULT_PAGE_SIZE, SITEID

logger = logging.getLogger(__name__)

LOG_STORE_KINDS = ("standard", "legacy")


@dataclass
class Settings:
    """Application settings for the log report."""

    # Storage Backend Settings
    storage_backend: str = "sqlite"
    sqlite_db_path: str = "data/lms-logs.db"
    log_store: str = "standard"

    # Report Settings
    site_id: int = SITEID
    page_size: int = DEFAULT_PAGE_SIZE
    default_order_by: str = DEFAULT_ORDER_BY

    def validate(self) -> list[str]:
        """Validate settings values. Returns list of errors."""
        errors = []

        if self.storage_backend != "sqlite":
            errors.append("Only SQLite backend is supported in this version")

        if self.log_store not in LOG_STORE_KINDS:
            errors.append(
                f"log_store must be one of {', '.join(LOG_STORE_KINDS)}, "
                f"got {self.log_store!r}"
            )

        if self.page_size < 1:
            errors.append(f"page_size must be >= 1, got {self.page_size}")

        if self.site_id < 1:
            errors.append(f"site_id must be >= 1, got {self.site_id}")

        return errors

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "storage": {
                "backend": self.storage_backend,
                "sqlite_db_path": self.sqlite_db_path,
                "log_store": self.log_store,
            },
            "report": {
                "site_id": self.site_id,
                "page_size": self.page_size,
                "default_order_by": self.default_order_by,
            },
        }

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "Settings":
        """Create Settings from configuration dictionary (e.g., from YAML)."""
        storage = config.get("storage", {}) or {}
        report = config.get("report", {}) or {}

        return cls(
            storage_backend=storage.get("backend", "sqlite"),
            sqlite_db_path=storage.get("sqlite_db_path", "data/lms-logs.db"),
            log_store=storage.get("log_store", "standard"),
            site_id=int(report.get("site_id", SITEID)),
            page_size=int(report.get("page_size", DEFAULT_PAGE_SIZE)),
            default_order_by=report.get("default_order_by", DEFAULT_ORDER_BY),
        )

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""

        def safe_int(key: str, default: int) -> int:
            """Safely parse int from env var, using default on error."""
            try:
                return int(os.environ.get(key, str(default)))
            except ValueError:
                return default

        return cls(
            storage_backend="sqlite",
            sqlite_db_path=os.environ.get(
                "LOGREPORT_SQLITE_DB_PATH", "data/lms-logs.db"
            ),
            log_store=os.environ.get("LOGREPORT_LOG_STORE", "standard").lower(),
            site_id=safe_int("LOGREPORT_SITE_ID", SITEID),
            page_size=safe_int("LOGREPORT_PAGE_SIZE", DEFAULT_PAGE_SIZE),
            default_order_by=os.environ.get(
                "LOGREPORT_DEFAULT_ORDER_BY", DEFAULT_ORDER_BY
            ),
        )


# Default config file path
DEFAULT_CONFIG_PATH = Path("logreport.yaml")


@lru_cache
def get_settings(config_path: Optional[str] = None) -> Settings:
    """
    Get cached settings instance.

    Loads from the YAML config file if available, otherwise from env vars.

    Args:
        config_path: Optional path to a YAML (or SOPS-encrypted YAML) file

    Returns:
        Settings instance
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if path.exists():
        try:
            from .loader import load_config_file

            config = load_config_file(path)
            return Settings.from_dict(config)
        except (RuntimeError, ValueError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            logger.warning("Falling back to environment variables")

    return Settings.from_env()


def clear_settings_cache() -> None:
    """Clear the cached settings (useful for testing)."""
    get_settings.cache_clear()
