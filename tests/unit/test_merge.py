"""
Unit tests for the k-way stream merge.
"""

import itertools

from irc_log_pipeline.ingestion import ParseError
from irc_log_pipeline.ingestion.events import Event, Msg, TimeOfDay, Timestamp, UnknownTime
from irc_log_pipeline.pipeline.merge import MergeStats, merge_streams


def ev(t: int, label: str) -> Event:
    return Event(Msg(label, str(t)), Timestamp(t))


class TestMergeStreams:
    """Tests for merge_streams."""

    def test_sorted_inputs_merge_sorted(self):
        a = [ev(1, "a"), ev(4, "a"), ev(9, "a")]
        b = [ev(2, "b"), ev(3, "b"), ev(10, "b")]
        c = [ev(5, "c")]

        merged = list(merge_streams([a, b, c]))

        times = [e.time.seconds for e in merged]
        assert times == sorted(times)
        assert sorted(merged, key=repr) == sorted(a + b + c, key=repr)

    def test_ties_go_to_lowest_index(self):
        a = [ev(1, "a")]
        b = [ev(1, "b")]
        merged = list(merge_streams([b, a]))
        assert [e.actor() for e in merged] == ["b", "a"]

    def test_errors_are_dropped_and_counted(self):
        a = [ParseError("bad", line_number=1), ev(2, "a"), ParseError("bad", line_number=3)]
        b = [ev(1, "b")]
        stats = MergeStats()

        merged = list(merge_streams([a, b], stats=stats))

        assert [e.actor() for e in merged] == ["b", "a"]
        assert stats.errors_dropped == 2
        assert stats.events_merged == 2
        assert stats.streams == 2

    def test_empty_inputs(self):
        assert list(merge_streams([])) == []
        assert list(merge_streams([[], []])) == []

    def test_incomparable_heads_keep_input_order(self):
        a = [Event(Msg("a", "x"), UnknownTime())]
        b = [ev(0, "b")]
        merged = list(merge_streams([a, b]))
        assert [e.actor() for e in merged] == ["a", "b"]

    def test_times_of_day(self):
        a = [Event(Msg("a", "1"), TimeOfDay(10, 0, 0))]
        b = [Event(Msg("b", "1"), TimeOfDay(9, 0, 0))]
        assert [e.actor() for e in merge_streams([a, b])] == ["b", "a"]

    def test_inputs_consumed_lazily(self):
        pulled = []

        def source(label):
            for t in itertools.count(0, 2):
                pulled.append(label)
                yield ev(t, label)

        merged = merge_streams([source("a"), source("b")])
        first = [next(merged) for _ in range(4)]

        assert [e.time.seconds for e in first] == [0, 0, 2, 2]
        assert len(pulled) <= 6
