"""Configuration module."""

from .constants import (
    CORE_ORIGINS,
    DAYSECS,
    HITS_GRANULARITIES,
    HITS_LOOKBACK_DAYS,
    OTHER_ORIGINS,
    SITEID,
)
from .loader import decrypt_sops_file, load_config_file
from .settings import Settings, clear_settings_cache, get_settings

__all__ = [
    # Report constants
    "SITEID",
    "DAYSECS",
    "CORE_ORIGINS",
    "OTHER_ORIGINS",
    "HITS_LOOKBACK_DAYS",
    "HITS_GRANULARITIES",
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Config loading
    "load_config_file",
    "decrypt_sops_file",
]
