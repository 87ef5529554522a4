"""Configuration module."""

from .constants import (
    DEFAULT_DEDUP_THRESHOLD,
    DEFAULT_INPUT_FORMAT,
    DEFAULT_OUTPUT_FORMAT,
    RANK_PREFIXES,
    VERSION,
)
from .settings import (
    Settings,
    clear_settings_cache,
    get_settings,
    load_settings,
    parse_date,
    parse_utc_offset,
)

__all__ = [
    # Defaults
    "DEFAULT_DEDUP_THRESHOLD",
    "DEFAULT_INPUT_FORMAT",
    "DEFAULT_OUTPUT_FORMAT",
    "RANK_PREFIXES",
    "VERSION",
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "load_settings",
    # Parsing helpers
    "parse_utc_offset",
    "parse_date",
]
