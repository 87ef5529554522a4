"""
K-way merge of individually sorted event streams.

Each input is consumed lazily through a peekable cursor, so memory use is
one pending item per input regardless of log sizes.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence

from ..ingestion.base import DecodeResult
from ..ingestion.events import Event, time_lt
from ..ingestion.exceptions import ParseError

logger = logging.getLogger(__name__)


@dataclass
class MergeStats:
    """Counters collected while merging."""

    streams: int = 0
    events_merged: int = 0
    errors_dropped: int = 0


class _Cursor:
    """Peekable view over one decoded stream."""

    _EXHAUSTED = object()

    def __init__(self, index: int, items: Iterable[DecodeResult]):
        self.index = index
        self._items = iter(items)
        self._head = None
        self._loaded = False

    def peek(self):
        if not self._loaded:
            self._head = next(self._items, self._EXHAUSTED)
            self._loaded = True
        return self._head

    def advance(self):
        head = self.peek()
        self._loaded = False
        self._head = None
        return head

    @property
    def exhausted(self) -> bool:
        return self.peek() is self._EXHAUSTED


def merge_streams(
    streams: Sequence[Iterable[DecodeResult]],
    stats: Optional[MergeStats] = None,
) -> Iterator[Event]:
    """
    Merge decoded streams into one stream ordered by time.

    Every input must already be sorted. Parse errors at the head of a stream
    are dropped for good (logged at WARNING) and the stream continues with
    its next item. Among the current heads the earliest event wins; ties and
    heads whose times cannot be compared go to the lowest stream index, so
    the merge is stable with respect to input order.

    Args:
        streams: Decoded inputs, each yielding Events or ParseErrors
        stats: Optional MergeStats updated while merging

    Yields:
        Events in merged order
    """
    if stats is None:
        stats = MergeStats()
    stats.streams = len(streams)

    live = [_Cursor(i, s) for i, s in enumerate(streams)]

    while live:
        best: Optional[_Cursor] = None
        still_live = []

        for cursor in live:
            head = cursor.peek()
            while isinstance(head, ParseError):
                stats.errors_dropped += 1
                logger.warning(f"Dropping undecodable item from input {cursor.index}: {head}")
                cursor.advance()
                head = cursor.peek()

            if cursor.exhausted:
                logger.debug(f"Input {cursor.index} exhausted")
                continue

            still_live.append(cursor)
            if best is None or time_lt(head.time, best.peek().time):
                best = cursor

        live = still_live
        if best is not None:
            stats.events_merged += 1
            yield best.advance()
