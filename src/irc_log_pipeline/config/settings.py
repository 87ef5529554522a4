"""
Application settings and configuration management.

Supports loading from:
1. YAML config files (irc-log.yaml)
2. Environment variables (fallback)

Example config file:

    time:
      timezone_in: "+01:00"
      timezone_out: UTC
      date: 2016-02-26
    channel: "#example"
    formats:
      input: weechat
      output: energymech
    dedup:
      threshold: 5000
    logging:
      level: INFO
"""

import logging
import os
import re
from dataclasses import dataclass
from datetime import date, timedelta, timezone, tzinfo
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from ..ingestion.exceptions import ConfigError
from .constants import (
    DEFAULT_DEDUP_THRESHOLD,
    DEFAULT_INPUT_FORMAT,
    DEFAULT_OUTPUT_FORMAT,
    ENV_PREFIX,
    LOG_LEVELS,
)

logger = logging.getLogger(__name__)

_OFFSET = re.compile(r"^([+-])(\d{2}):(\d{2})$")
_SECONDS_WEST = re.compile(r"^-?\d+$")


def parse_utc_offset(value: Union[str, int, None]) -> tzinfo:
    """
    Parse a fixed UTC offset.

    Accepted forms are ``"UTC"`` / ``"Z"``, a signed ``"+02:00"`` /
    ``"-05:00"`` (the colon is required) and a plain integer of seconds
    *west* of UTC (``"3600"`` is UTC-1, ``"-1800"`` is UTC+00:30), the last
    one matching the ``--timezone`` convention of older ilc releases.

    Raises:
        ValueError: If the value is not a recognised offset
    """
    if value is None:
        return timezone.utc
    if isinstance(value, bool):
        raise ValueError(f"Invalid UTC offset: {value!r}")
    if isinstance(value, int):
        return timezone(timedelta(seconds=-value))

    text = value.strip()
    if text.upper() in ("UTC", "Z", ""):
        return timezone.utc

    m = _OFFSET.match(text)
    if m:
        sign, hours, minutes = m.groups()
        delta = timedelta(hours=int(hours), minutes=int(minutes))
        return timezone(-delta if sign == "-" else delta)

    if _SECONDS_WEST.match(text):
        return timezone(timedelta(seconds=-int(text)))

    raise ValueError(f"Invalid UTC offset: {value!r}")


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Parse an ISO date (``YYYY-MM-DD``); None passes through."""
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


# =============================================================================
# Main Settings
# =============================================================================


@dataclass
class Settings:
    """Application settings for IRC log processing."""

    # Time handling
    timezone_in: tzinfo = timezone.utc
    timezone_out: tzinfo = timezone.utc
    override_date: Optional[date] = None

    # Default channel for formats that don't record one
    channel: Optional[str] = None

    # Formats
    input_format: str = DEFAULT_INPUT_FORMAT
    output_format: str = DEFAULT_OUTPUT_FORMAT

    # Deduplication window in seconds
    dedup_threshold: int = DEFAULT_DEDUP_THRESHOLD

    # Logging
    log_level: str = "INFO"

    def validate(self) -> list[str]:
        """Validate settings values. Returns list of errors."""
        from ..ingestion.registry import FormatRegistry

        errors = []

        if self.dedup_threshold < 0:
            errors.append(f"dedup.threshold must be >= 0, got {self.dedup_threshold}")

        if self.log_level.upper() not in LOG_LEVELS:
            errors.append(
                f"logging.level must be one of {', '.join(LOG_LEVELS)}, "
                f"got {self.log_level}"
            )

        for key, name in (
            ("formats.input", self.input_format),
            ("formats.output", self.output_format),
        ):
            try:
                FormatRegistry.resolve(name)
            except ConfigError as e:
                errors.append(f"{key}: {e}")

        return errors

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "Settings":
        """
        Create Settings from configuration dictionary (e.g., from YAML).

        Raises:
            ConfigError: If a time or date value cannot be parsed
        """
        time_cfg = config.get("time", {}) or {}
        formats = config.get("formats", {}) or {}
        dedup = config.get("dedup", {}) or {}
        log_cfg = config.get("logging", {}) or {}

        # A single "timezone" sets both directions
        both = time_cfg.get("timezone")
        try:
            timezone_in = parse_utc_offset(time_cfg.get("timezone_in", both))
            timezone_out = parse_utc_offset(time_cfg.get("timezone_out", both))
            override_date = parse_date(time_cfg.get("date"))
        except ValueError as e:
            raise ConfigError(f"Invalid time configuration: {e}") from e

        try:
            threshold = int(dedup.get("threshold", DEFAULT_DEDUP_THRESHOLD))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid dedup threshold: {e}") from e

        return cls(
            timezone_in=timezone_in,
            timezone_out=timezone_out,
            override_date=override_date,
            channel=config.get("channel"),
            input_format=formats.get("input", DEFAULT_INPUT_FORMAT),
            output_format=formats.get("output", DEFAULT_OUTPUT_FORMAT),
            dedup_threshold=threshold,
            log_level=str(log_cfg.get("level", "INFO")).upper(),
        )

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Create Settings from environment variables.

        Malformed numeric or offset values fall back to their defaults.
        """

        def env(key: str, default: Optional[str] = None) -> Optional[str]:
            return os.environ.get(ENV_PREFIX + key, default)

        def safe_offset(key: str) -> tzinfo:
            """Parse an offset from env var, falling back to the shared one."""
            value = env(key, env("TIMEZONE"))
            try:
                return parse_utc_offset(value)
            except ValueError:
                logger.warning(f"Ignoring invalid {ENV_PREFIX}{key}: {value!r}")
                return timezone.utc

        def safe_int(key: str, default: int) -> int:
            """Safely parse int from env var, using default on error."""
            try:
                return int(env(key, str(default)))
            except ValueError:
                return default

        try:
            override_date = parse_date(env("DATE"))
        except ValueError:
            logger.warning(f"Ignoring invalid {ENV_PREFIX}DATE: {env('DATE')!r}")
            override_date = None

        return cls(
            timezone_in=safe_offset("TIMEZONE_IN"),
            timezone_out=safe_offset("TIMEZONE_OUT"),
            override_date=override_date,
            channel=env("CHANNEL"),
            input_format=env("INPUT_FORMAT", DEFAULT_INPUT_FORMAT),
            output_format=env("OUTPUT_FORMAT", DEFAULT_OUTPUT_FORMAT),
            dedup_threshold=safe_int("DEDUP_THRESHOLD", DEFAULT_DEDUP_THRESHOLD),
            log_level=env("LOG_LEVEL", "INFO").upper(),
        )


# Default config file path
DEFAULT_CONFIG_PATH = Path("irc-log.yaml")


def load_settings(config_path: Union[str, Path, None] = None) -> Settings:
    """
    Load settings from a YAML file, or from environment variables.

    Args:
        config_path: Optional path to a YAML config file. Without one the
            default path is tried and environment variables are the
            fallback.

    Returns:
        Settings instance

    Raises:
        ConfigError: If an explicitly given file is missing or invalid
    """
    explicit = config_path is not None
    path = Path(config_path) if explicit else DEFAULT_CONFIG_PATH

    if not path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return Settings.from_env()

    try:
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    logger.debug(f"Loaded settings from {path}")
    return Settings.from_dict(config)


@lru_cache
def get_settings(config_path: Optional[str] = None) -> Settings:
    """
    Get cached settings instance.

    Args:
        config_path: Optional path to a YAML config file

    Returns:
        Settings instance
    """
    return load_settings(config_path)


def clear_settings_cache() -> None:
    """Clear the cached settings (useful for testing)."""
    get_settings.cache_clear()
