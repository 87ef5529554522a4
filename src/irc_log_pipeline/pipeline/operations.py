"""
Log operations.

Each operation composes a decoder, one of the stream algorithms and an
encoder. Error handling differs per operation:

    parse           logs parse errors and keeps going
    convert, seen   the first parse or encode error aborts
    sort            parse errors are discarded, encode errors abort
    dedup           parse errors are discarded, encode errors abort
    merge           parse errors are dropped with a warning
    stats, freq     the first parse error aborts

Read and write failures (OSError) always propagate.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import IO, Iterable, Iterator, Optional, Sequence, Union

from ..config.constants import DEFAULT_DEDUP_THRESHOLD
from ..ingestion.base import DecodeResult, LogFormat, only_events, raise_errors
from ..ingestion.context import Context
from ..ingestion.events import Event, as_timestamp
from ..ingestion.exceptions import ParseError
from ..reporting.stats import NickStat, Stats, compute_stats, top_talkers
from .dedup import AgeWindowDeduplicator
from .filters import Filter
from .merge import MergeStats, merge_streams
from .sort import sort_events

logger = logging.getLogger(__name__)


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure root logging for command line use."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@dataclass
class OperationResult:
    """Result of one operation run."""

    operation: str
    started_at: datetime = field(default_factory=lambda: datetime.now().astimezone())
    completed_at: Optional[datetime] = None
    # Counters
    events_read: int = 0
    events_written: int = 0
    events_dropped: int = 0
    parse_errors: int = 0

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get operation duration in seconds."""
        if self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def finish(self) -> "OperationResult":
        self.completed_at = datetime.now().astimezone()
        logger.info(
            f"{self.operation}: read {self.events_read} events, "
            f"wrote {self.events_written}, dropped {self.events_dropped}, "
            f"{self.parse_errors} parse errors"
        )
        return self

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/serialization."""
        return {
            "operation": self.operation,
            "started_at": self.started_at.isoformat(),
            "completed_at": (
                self.completed_at.isoformat() if self.completed_at else None
            ),
            "duration_seconds": self.duration_seconds,
            "events_read": self.events_read,
            "events_written": self.events_written,
            "events_dropped": self.events_dropped,
            "parse_errors": self.parse_errors,
        }


# =============================================================================
# Decoded stream helpers
# =============================================================================


def _counting(items: Iterable[DecodeResult], result: OperationResult) -> Iterator[DecodeResult]:
    for item in items:
        if isinstance(item, ParseError):
            result.parse_errors += 1
        else:
            result.events_read += 1
        yield item


def _write(
    context: Context,
    writer: IO[bytes],
    encoder: LogFormat,
    event: Event,
    result: OperationResult,
) -> None:
    encoder.encode(context, writer, event)
    result.events_written += 1


# =============================================================================
# Operations
# =============================================================================


def parse(context: Context, reader: IO[bytes], decoder: LogFormat) -> OperationResult:
    """
    Decode a log without producing output, reporting every parse error.

    Args:
        context: Decode context
        reader: Binary input stream
        decoder: Input format

    Returns:
        OperationResult with event and error counts
    """
    result = OperationResult("parse")
    for item in decoder.decode(context, reader):
        if isinstance(item, ParseError):
            result.parse_errors += 1
            logger.error(f"{item}")
        else:
            result.events_read += 1
            logger.debug(f"{item}")
    return result.finish()


def convert(
    context: Context,
    reader: IO[bytes],
    decoder: LogFormat,
    writer: IO[bytes],
    encoder: LogFormat,
    filter: Optional[Filter] = None,
    negate: bool = False,
) -> OperationResult:
    """
    Re-encode a log, optionally keeping only events matching a filter.

    Combined with differing input and output timezones this also shifts
    timestamps.

    Args:
        context: Decode/encode context
        reader: Binary input stream
        decoder: Input format
        writer: Binary output stream
        encoder: Output format
        filter: Keep only events satisfying this filter
        negate: Invert the filter (keep events NOT satisfying it)

    Raises:
        ParseError: On the first malformed input line
        EncodeError: If an event cannot be written
    """
    result = OperationResult("convert")
    items = _counting(decoder.decode(context, reader), result)
    for event in raise_errors(items):
        if filter is not None and not (negate ^ filter.satisfied_by(event)):
            result.events_dropped += 1
            continue
        _write(context, writer, encoder, event, result)
    return result.finish()


def seen(
    nick: str,
    context: Context,
    reader: IO[bytes],
    decoder: LogFormat,
    writer: IO[bytes],
    encoder: LogFormat,
) -> OperationResult:
    """
    Write the latest event involving ``nick``.

    "Latest" compares absolute timestamps; the first of several events at
    the same time wins. Nothing is written if the nick never appears.

    Raises:
        ParseError: On the first malformed input line
        EncodeError: If the event cannot be written
    """
    result = OperationResult("seen")
    last: Optional[Event] = None
    items = _counting(decoder.decode(context, reader), result)
    for event in raise_errors(items):
        if not event.involves(nick):
            continue
        if last is None or as_timestamp(event.time) > as_timestamp(last.time):
            last = event

    if last is not None:
        _write(context, writer, encoder, last, result)
    else:
        logger.info(f"No events involving {nick!r}")
    return result.finish()


def sort(
    context: Context,
    reader: IO[bytes],
    decoder: LogFormat,
    writer: IO[bytes],
    encoder: LogFormat,
) -> OperationResult:
    """
    Sort a whole log chronologically. Holds the entire log in memory.

    Raises:
        EncodeError: If an event cannot be written
    """
    result = OperationResult("sort")
    events = sort_events(_counting(decoder.decode(context, reader), result))
    for event in events:
        _write(context, writer, encoder, event, result)
    return result.finish()


def dedup(
    context: Context,
    reader: IO[bytes],
    decoder: LogFormat,
    writer: IO[bytes],
    encoder: LogFormat,
    threshold: int = DEFAULT_DEDUP_THRESHOLD,
) -> OperationResult:
    """
    Drop repeated events within a sliding window of ``threshold`` seconds.

    Input should be sorted; see AgeWindowDeduplicator.

    Raises:
        EncodeError: If an event cannot be written
    """
    result = OperationResult("dedup")
    deduplicator = AgeWindowDeduplicator(threshold=threshold)
    items = _counting(decoder.decode(context, reader), result)
    for event in deduplicator.filter(only_events(items)):
        _write(context, writer, encoder, event, result)
    result.events_dropped = deduplicator.dropped
    return result.finish()


def merge(
    context: Context,
    readers: Sequence[IO[bytes]],
    decoder: LogFormat,
    writer: IO[bytes],
    encoder: LogFormat,
    contexts: Optional[Sequence[Context]] = None,
) -> OperationResult:
    """
    Merge individually sorted logs without reading them fully into memory.

    Args:
        context: Encode context, and decode context for every input unless
            ``contexts`` is given
        readers: One binary stream per input log
        decoder: Input format shared by all inputs
        writer: Binary output stream
        encoder: Output format
        contexts: Optional per-input decode contexts, matched to ``readers``
            by position

    Raises:
        ValueError: If ``contexts`` doesn't match ``readers`` in length
        EncodeError: If an event cannot be written
    """
    if contexts is not None and len(contexts) != len(readers):
        raise ValueError(
            f"Got {len(contexts)} contexts for {len(readers)} inputs"
        )

    result = OperationResult("merge")
    merge_stats = MergeStats()
    streams = [
        _counting(
            decoder.decode(contexts[i] if contexts else context, reader), result
        )
        for i, reader in enumerate(readers)
    ]
    for event in merge_streams(streams, stats=merge_stats):
        _write(context, writer, encoder, event, result)
    result.events_dropped = merge_stats.errors_dropped
    return result.finish()


def stats(
    context: Context,
    reader: IO[bytes],
    decoder: LogFormat,
    tz: tzinfo = timezone.utc,
) -> Stats:
    """
    Compute per-nick statistics and the weekly histogram.

    Args:
        tz: Timezone in which weekdays and hours are evaluated

    Raises:
        ParseError: On the first malformed input line
    """
    result = OperationResult("stats")
    items = _counting(decoder.decode(context, reader), result)
    computed = compute_stats(raise_errors(items), tz=tz)
    busiest = computed.busiest_hour()
    if busiest is not None:
        logger.info(f"Busiest hour: {busiest[0]} {busiest[1]:02d}:00")
    result.finish()
    return computed


def freq(
    context: Context,
    reader: IO[bytes],
    decoder: LogFormat,
    count: Optional[int] = None,
) -> list[tuple[str, NickStat]]:
    """
    Rank the most talkative nicks by word count.

    Args:
        count: Maximum number of nicks to return, or None for all

    Raises:
        ParseError: On the first malformed input line
    """
    return top_talkers(stats(context, reader, decoder), count=count)
