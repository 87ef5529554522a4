"""
Unit tests for statistics aggregation.
"""

from datetime import timedelta, timezone

import numpy as np
import pytest

from irc_log_pipeline.ingestion.events import (
    Action,
    Event,
    Msg,
    TimeOfDay,
    Timestamp,
    UnknownTime,
)
from irc_log_pipeline.reporting.stats import (
    NickStat,
    StatsAggregator,
    compute_stats,
    format_freq,
    normalize_nick,
    top_talkers,
    words_alpha,
)

# Friday 2016-02-26 10:00:00 UTC
FRIDAY_10 = 1456480800


class TestHelpers:
    """Tests for nick normalization and word counting."""

    @pytest.mark.parametrize(
        "nick,expected",
        [
            ("Foo", "Foo"),
            ("@Foo", "Foo"),
            ("+Foo__", "Foo"),
            ("~&Foo", "&Foo"),
            ("Foo_", "Foo"),
            ("___", "___"),
            ("@", ""),
            ("", ""),
        ],
    )
    def test_normalize_nick(self, nick, expected):
        assert normalize_nick(nick) == expected

    def test_words_alpha(self):
        assert words_alpha("a b  c") == (3, True)
        assert words_alpha("123 :-)") == (2, False)
        assert words_alpha("   ") == (0, False)
        assert words_alpha("42 x") == (2, True)


class TestStatsAggregator:
    """Tests for StatsAggregator and compute_stats."""

    def test_counts_messages_per_nick(self):
        stats = compute_stats(
            [
                Event(Msg("alice", "a b c")),
                Event(Msg("alice", "d")),
            ]
        )
        assert stats.freqs["alice"] == NickStat(lines=2, alpha_lines=2, words=4)

    def test_only_messages_count(self):
        stats = compute_stats([Event(Action("alice", "waves hello"))])
        assert dict(stats.freqs) == {}

    def test_non_alpha_lines(self):
        stats = compute_stats([Event(Msg("bob", "42")), Event(Msg("@bob", "hi"))])
        stat = stats.freqs["bob"]
        assert stat.lines == 2
        assert stat.alpha_lines == 1
        assert stat.non_alpha_lines == 1
        assert stat.words_per_line == 1.0

    def test_week_histogram_only_timestamps(self):
        stats = compute_stats(
            [
                Event(Msg("a", "x"), Timestamp(FRIDAY_10)),
                Event(Msg("a", "x"), Timestamp(FRIDAY_10 + 60)),
                Event(Msg("a", "x"), TimeOfDay(10, 0, 0)),
                Event(Msg("a", "x"), UnknownTime()),
            ]
        )
        assert stats.week.shape == (7, 24)
        assert stats.week[4, 10] == 2
        assert stats.week.sum() == 2
        assert stats.freqs["a"].lines == 4

    def test_week_histogram_timezone(self):
        stats = compute_stats(
            [Event(Msg("a", "x"), Timestamp(FRIDAY_10))],
            tz=timezone(timedelta(hours=-11)),
        )
        assert stats.week[3, 23] == 1

    def test_result_is_read_only(self):
        aggregator = StatsAggregator()
        aggregator.add(Event(Msg("a", "x"), Timestamp(FRIDAY_10)))
        stats = aggregator.result()

        with pytest.raises(ValueError):
            stats.week[0, 0] = 1
        with pytest.raises(TypeError):
            stats.freqs["b"] = NickStat()

        # Later additions don't leak into an earlier snapshot
        aggregator.add(Event(Msg("a", "y"), Timestamp(FRIDAY_10)))
        assert stats.freqs["a"].lines == 1
        assert stats.week.sum() == 1

    def test_to_dict_shape(self):
        stats = compute_stats([Event(Msg("a", "x y"), Timestamp(FRIDAY_10))])
        data = stats.to_dict()
        assert data["freqs"] == {"a": {"lines": 1, "alpha_lines": 1, "words": 2}}
        assert len(data["week"]) == 7
        assert all(len(day) == 24 for day in data["week"])
        assert data["week"][4][10] == 1


class TestReporting:
    """Tests for rankings and tabular views."""

    @pytest.fixture
    def stats(self):
        return compute_stats(
            [
                Event(Msg("quiet", "hi"), Timestamp(FRIDAY_10)),
                Event(Msg("loud", "one two three"), Timestamp(FRIDAY_10)),
                Event(Msg("loud", "four"), Timestamp(FRIDAY_10 + 3600)),
                Event(Msg("also", "hey"), Timestamp(FRIDAY_10)),
            ]
        )

    def test_top_talkers(self, stats):
        ranking = top_talkers(stats)
        assert [nick for nick, _ in ranking] == ["loud", "also", "quiet"]
        assert len(top_talkers(stats, count=1)) == 1

    def test_format_freq(self, stats):
        text = format_freq(top_talkers(stats, count=1))
        assert text == (
            "loud:\n"
            "\tTotal lines: 2\n"
            "\tLines without alphabetic characters: 0\n"
            "\tTotal words: 4\n"
            "\tWords per line: 2.00\n"
        )

    def test_freqs_frame(self, stats):
        df = stats.freqs_frame()
        assert list(df.index) == ["loud", "also", "quiet"]
        assert df.loc["loud", "words_per_line"] == 2.0
        assert list(df.columns) == ["lines", "alpha_lines", "words", "words_per_line"]

    def test_empty_freqs_frame(self):
        assert compute_stats([]).freqs_frame().empty

    def test_week_frame(self, stats):
        df = stats.week_frame()
        assert df.shape == (7, 24)
        assert df.loc["Friday", 10] == 3
        assert df.loc["Friday", 11] == 1

    def test_busiest_hour(self, stats):
        assert stats.busiest_hour() == ("Friday", 10)
        assert compute_stats([]).busiest_hour() is None

    def test_week_dtype(self, stats):
        assert stats.week.dtype == np.int64

    def test_top_talkers_from_frame_order(self, stats):
        ranking = top_talkers(stats, count=2)
        assert ranking == [("loud", stats.freqs["loud"]), ("also", stats.freqs["also"])]

    def test_top_talkers_ties_by_nick(self):
        stats = compute_stats([Event(Msg("zed", "hi")), Event(Msg("amy", "yo"))])
        assert [nick for nick, _ in top_talkers(stats)] == ["amy", "zed"]

    def test_top_talkers_empty(self):
        assert top_talkers(compute_stats([])) == []
        assert format_freq(top_talkers(compute_stats([]), count=3)) == ""

    def test_busiest_hour_tie_takes_earliest_slot(self):
        stats = compute_stats(
            [
                # Friday 11:00, then Thursday 10:00
                Event(Msg("a", "x"), Timestamp(FRIDAY_10 + 3600)),
                Event(Msg("a", "x"), Timestamp(FRIDAY_10 - 86400)),
            ]
        )
        assert stats.busiest_hour() == ("Thursday", 10)
