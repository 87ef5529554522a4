"""
Per-nick statistics and weekly activity histogram.

Only messages count: for every ``Msg`` event the (normalized) sender gets
one more line, the number of whitespace-separated words, and an "alpha
line" if any word contains a letter. Messages with an absolute timestamp
are also binned into a weekday x hour histogram.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

import numpy as np
import pandas as pd

from ..config.constants import (
    DAYS_PER_WEEK,
    HOURS_PER_DAY,
    RANK_PREFIXES,
    WEEKDAY_NAMES,
)
from ..ingestion.events import Event, Msg, Timestamp

logger = logging.getLogger(__name__)


def normalize_nick(nick: str) -> str:
    """
    Normalize a nick for aggregation.

    Strips one leading channel rank marker (``~&@%+``) and then any
    trailing underscores, so ``@Foo__`` and ``Foo`` count as one person.
    A nick made only of underscores after the marker keeps its underscores.
    """
    if nick and nick[0] in RANK_PREFIXES:
        nick = nick[1:]
    stripped = nick.rstrip("_")
    return stripped if stripped else nick


def words_alpha(content: str) -> tuple[int, bool]:
    """
    Count words in a message.

    Returns:
        Tuple of (word count, whether any word contains a letter)
    """
    words = content.split()
    alpha = any(ch.isalpha() for word in words for ch in word)
    return len(words), alpha


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class NickStat:
    """Message counters for one nick."""

    lines: int = 0
    alpha_lines: int = 0
    words: int = 0

    @property
    def non_alpha_lines(self) -> int:
        return self.lines - self.alpha_lines

    @property
    def words_per_line(self) -> float:
        return self.words / self.lines if self.lines else 0.0

    def to_dict(self) -> dict:
        return {
            "lines": self.lines,
            "alpha_lines": self.alpha_lines,
            "words": self.words,
        }


@dataclass(frozen=True, eq=False)
class Stats:
    """
    Result of a statistics pass.

    Attributes:
        freqs: Read-only mapping of normalized nick to NickStat
        week: Read-only int64 array of shape (7, 24); rows are weekdays
            starting on Monday, columns are hours
    """

    freqs: Mapping[str, NickStat]
    week: np.ndarray

    def to_dict(self) -> dict:
        """Convert to the external ``{"freqs": ..., "week": ...}`` shape."""
        return {
            "freqs": {nick: stat.to_dict() for nick, stat in self.freqs.items()},
            "week": self.week.tolist(),
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    def freqs_frame(self) -> pd.DataFrame:
        """
        Per-nick counters as a DataFrame, busiest nick (by words) first.

        Columns: lines, alpha_lines, words, words_per_line; indexed by nick.
        """
        columns = ["lines", "alpha_lines", "words", "words_per_line"]
        if not self.freqs:
            return pd.DataFrame(columns=columns).rename_axis("nick")

        df = pd.DataFrame.from_dict(
            {nick: stat.to_dict() for nick, stat in self.freqs.items()},
            orient="index",
        )
        df["words_per_line"] = df["words"] / df["lines"]
        df = df.rename_axis("nick").sort_values(
            ["words", "nick"], ascending=[False, True], kind="stable"
        )
        return df[columns]

    def week_frame(self) -> pd.DataFrame:
        """Weekly histogram as a DataFrame indexed by weekday name."""
        return pd.DataFrame(
            self.week,
            index=pd.Index(WEEKDAY_NAMES, name="weekday"),
            columns=pd.Index(range(HOURS_PER_DAY), name="hour"),
        )

    def busiest_hour(self) -> Optional[tuple[str, int]]:
        """Return (weekday name, hour) of the busiest slot, or None if empty."""
        if not self.week.any():
            return None
        day, hour = self.week_frame().stack().idxmax()
        return str(day), int(hour)


# =============================================================================
# Aggregation
# =============================================================================


class StatsAggregator:
    """
    Accumulate Stats one event at a time.

    Usage:
        aggregator = StatsAggregator(tz=timezone.utc)
        for event in events:
            aggregator.add(event)
        stats = aggregator.result()
    """

    def __init__(self, tz: tzinfo = timezone.utc):
        """
        Initialize the aggregator.

        Args:
            tz: Timezone in which weekday and hour of timestamps are taken
        """
        self.tz = tz
        self._freqs: dict[str, NickStat] = {}
        self._week = np.zeros((DAYS_PER_WEEK, HOURS_PER_DAY), dtype=np.int64)
        self.messages = 0

    def add(self, event: Event) -> None:
        ty = event.type
        if not isinstance(ty, Msg):
            return

        self.messages += 1
        if isinstance(event.time, Timestamp):
            moment = datetime.fromtimestamp(event.time.seconds, self.tz)
            self._week[moment.weekday(), moment.hour] += 1

        nick = normalize_nick(ty.from_)
        words, alpha = words_alpha(ty.content)
        current = self._freqs.get(nick, NickStat())
        self._freqs[nick] = NickStat(
            lines=current.lines + 1,
            alpha_lines=current.alpha_lines + (1 if alpha else 0),
            words=current.words + words,
        )

    def result(self) -> Stats:
        """Return an immutable snapshot of the counters so far."""
        week = self._week.copy()
        week.setflags(write=False)
        return Stats(freqs=MappingProxyType(dict(self._freqs)), week=week)


def compute_stats(events: Iterable[Event], tz: tzinfo = timezone.utc) -> Stats:
    """Compute Stats over an event stream in a single pass."""
    aggregator = StatsAggregator(tz=tz)
    for event in events:
        aggregator.add(event)
    stats = aggregator.result()
    logger.debug(
        f"Aggregated {aggregator.messages} messages from {len(stats.freqs)} nicks"
    )
    return stats


def top_talkers(stats: Stats, count: Optional[int] = None) -> list[tuple[str, NickStat]]:
    """
    Rank nicks by word count, most words first.

    Ties are broken alphabetically by nick.

    Args:
        stats: Computed statistics
        count: Maximum number of entries, or None for all
    """
    frame = stats.freqs_frame()
    if count is not None:
        frame = frame.head(count)
    return [(nick, stats.freqs[nick]) for nick in frame.index]


def format_freq(ranking: Iterable[tuple[str, NickStat]]) -> str:
    """Render a ranking as the plain-text freq report."""
    blocks = []
    for nick, stat in ranking:
        blocks.append(
            f"{nick}:\n"
            f"\tTotal lines: {stat.lines}\n"
            f"\tLines without alphabetic characters: {stat.non_alpha_lines}\n"
            f"\tTotal words: {stat.words}\n"
            f"\tWords per line: {stat.words_per_line:.2f}\n"
        )
    return "".join(blocks)
