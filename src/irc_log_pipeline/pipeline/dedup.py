"""
Windowed deduplication of event streams.

Two events are duplicates when they have the same type payload and channel;
their times are ignored. Only events seen within ``threshold`` seconds of
the current one are remembered, so memory stays bounded on sorted input
no matter how long the log is.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from ..config.constants import DEFAULT_DEDUP_THRESHOLD
from ..ingestion.events import Event, EventType, as_timestamp
from .ageset import AgeSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _WindowEntry:
    """Signature of a seen event; equality and hashing ignore the time."""

    type: EventType
    channel: Optional[str]
    timestamp: int = field(compare=False)


class AgeWindowDeduplicator:
    """
    Suppress repeats of an event within a sliding time window.

    Input is expected in chronological order. On unsorted input the window
    is pruned too early or too late, so some duplicates may survive.

    Usage:
        dedup = AgeWindowDeduplicator(threshold=5000)
        for event in dedup.filter(events):
            ...
    """

    def __init__(self, threshold: int = DEFAULT_DEDUP_THRESHOLD):
        """
        Initialize the deduplicator.

        Args:
            threshold: Window width in seconds; must not be negative

        Raises:
            ValueError: If threshold is negative
        """
        if threshold < 0:
            raise ValueError(f"threshold must be >= 0, got {threshold}")
        self.threshold = threshold
        self._window: AgeSet[_WindowEntry] = AgeSet()
        self.seen = 0
        self.dropped = 0

    def process(self, event: Event) -> bool:
        """
        Feed one event through the window.

        Returns:
            True if the event is new and should be emitted, False if it
            duplicates an event still inside the window
        """
        now = as_timestamp(event.time)
        self.seen += 1

        self._window.prune(lambda entry: now - entry.timestamp > self.threshold)

        entry = _WindowEntry(type=event.type, channel=event.channel, timestamp=now)
        if entry in self._window:
            self.dropped += 1
            logger.debug(f"Dropping duplicate {event.type_desc()} event at {now}")
            return False

        self._window.push(entry)
        return True

    def filter(self, events: Iterable[Event]) -> Iterator[Event]:
        """Yield the events that are not duplicates, preserving order."""
        for event in events:
            if self.process(event):
                yield event

    @property
    def window_size(self) -> int:
        return len(self._window)
