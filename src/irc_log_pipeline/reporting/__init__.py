"""Reporting and analytics module."""

from .stats import (
    NickStat,
    Stats,
    StatsAggregator,
    compute_stats,
    format_freq,
    normalize_nick,
    top_talkers,
    words_alpha,
)

__all__ = [
    # Results
    "NickStat",
    "Stats",
    # Aggregation
    "StatsAggregator",
    "compute_stats",
    "top_talkers",
    "format_freq",
    # Helpers
    "normalize_nick",
    "words_alpha",
]
