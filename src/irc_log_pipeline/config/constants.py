"""
Constants for IRC log processing.
"""

# =============================================================================
# Package
# =============================================================================

VERSION = "0.1.0"

# =============================================================================
# Formats
# =============================================================================

DEFAULT_INPUT_FORMAT = "weechat"
DEFAULT_OUTPUT_FORMAT = "weechat"

# =============================================================================
# Deduplication
# =============================================================================

# Width of the deduplication window, in seconds. Identical events further
# apart than this are considered distinct occurrences.
DEFAULT_DEDUP_THRESHOLD = 5000

# =============================================================================
# Statistics
# =============================================================================

# Channel rank markers some clients prepend to nicks (owner, admin, op,
# half-op, voice)
RANK_PREFIXES = "~&@%+"

DAYS_PER_WEEK = 7
HOURS_PER_DAY = 24

WEEKDAY_NAMES = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]

# =============================================================================
# Environment
# =============================================================================

ENV_PREFIX = "IRC_LOG_"

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
