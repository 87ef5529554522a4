"""Stream algorithms and log operations."""

from .ageset import AgeSet
from .dedup import AgeWindowDeduplicator
from .filters import (
    Contains,
    Equal,
    Exactly,
    Filter,
    Greater,
    Less,
    Matches,
    Subject,
    parse_filter,
)
from .merge import MergeStats, merge_streams
from .operations import OperationResult, setup_logging
from .sort import sort_events

__all__ = [
    # Stream algorithms
    "AgeSet",
    "AgeWindowDeduplicator",
    "MergeStats",
    "merge_streams",
    "sort_events",
    # Filters
    "Filter",
    "Subject",
    "Exactly",
    "Contains",
    "Matches",
    "Equal",
    "Greater",
    "Less",
    "parse_filter",
    # Operations
    "OperationResult",
    "setup_logging",
]
