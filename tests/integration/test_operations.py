"""
End-to-end tests for the log operations.

Each test decodes sample logs, runs an operation and checks the encoded
output.
"""

import io
import logging
from datetime import date, timedelta, timezone

import pytest

from irc_log_pipeline.ingestion import (
    Context,
    EncodeError,
    MissingFieldError,
    ParseError,
    get_decoder,
    get_encoder,
)
from irc_log_pipeline.ingestion.events import Event, Msg, Nick, TimeOfDay
from irc_log_pipeline.pipeline import operations
from irc_log_pipeline.pipeline.filters import Contains, Exactly, Filter, Subject

from sample_logs import ENERGYMECH_LOG, WEECHAT_DAY_A, WEECHAT_DAY_B, reader

pytestmark = pytest.mark.integration


def run(op, context, source, decoder, encoder, **kwargs) -> tuple[str, operations.OperationResult]:
    """Run a single-input operation and return its decoded output."""
    out = io.BytesIO()
    result = op(context, source, decoder, out, encoder, **kwargs)
    return out.getvalue().decode("utf-8"), result


class TestParse:
    """Tests for the parse operation."""

    def test_counts_events(self, context, energymech):
        result = operations.parse(context, reader(ENERGYMECH_LOG), energymech)
        assert result.events_read == 7
        assert result.parse_errors == 0
        assert result.completed_at is not None

    def test_reports_errors_and_continues(self, context, energymech, caplog):
        text = "garbage\n" + ENERGYMECH_LOG + "more garbage\n"
        with caplog.at_level(logging.ERROR):
            result = operations.parse(context, reader(text), energymech)
        assert result.events_read == 7
        assert result.parse_errors == 2
        assert "line 1" in caplog.text

    def test_malformed_ndjson_is_counted(self, context, ndjson):
        text = (
            '{"type": {}}\n'
            '{"type":"message","from":1,"content":2}\n'
            '{"type":"connect"}\n'
        )
        result = operations.parse(context, reader(text), ndjson)
        assert result.parse_errors == 2
        assert result.events_read == 1

    def test_end_to_end_lines(self, context, energymech):
        items = list(
            energymech.decode(
                context,
                reader("[21:53:49] <Foo> hi there\n[21:24:57] *** Foo is now known as Bar\n"),
            )
        )
        assert items == [
            Event(type=Msg("Foo", "hi there"), time=TimeOfDay(21, 53, 49), channel=None),
            Event(type=Nick("Foo", "Bar"), time=TimeOfDay(21, 24, 57)),
        ]


class TestConvert:
    """Tests for the convert operation."""

    def test_identity(self, context, energymech):
        output, result = run(
            operations.convert, context, reader(ENERGYMECH_LOG), energymech, energymech
        )
        assert output == ENERGYMECH_LOG
        assert result.events_written == 7

    def test_weechat_identity(self, context, weechat):
        output, _ = run(operations.convert, context, reader(WEECHAT_DAY_A), weechat, weechat)
        assert output == WEECHAT_DAY_A

    def test_energymech_to_weechat_with_date(self, energymech, weechat):
        context = Context(override_date=date(2016, 2, 26), channel="#example")
        output, _ = run(
            operations.convert,
            context,
            reader("[21:53:49] <Foo> hi there\n"),
            energymech,
            weechat,
        )
        assert output == "2016-02-26 21:53:49\tFoo\thi there\n"

    def test_timezone_shift(self, weechat):
        context = Context(timezone_out=timezone(timedelta(hours=2)))
        output, _ = run(
            operations.convert,
            context,
            reader("2016-02-26 10:00:00\tFoo\thi\n"),
            weechat,
            weechat,
        )
        assert output == "2016-02-26 12:00:00\tFoo\thi\n"

    def test_filter(self, context, energymech):
        output, result = run(
            operations.convert,
            context,
            reader(ENERGYMECH_LOG),
            energymech,
            energymech,
            filter=Filter(Subject.TYPE, Exactly("message")),
        )
        assert output.count("\n") == 3
        assert result.events_dropped == 4

    def test_negated_filter(self, context, energymech):
        output, _ = run(
            operations.convert,
            context,
            reader(ENERGYMECH_LOG),
            energymech,
            energymech,
            filter=Filter(Subject.NICK, Contains("Foo")),
            negate=True,
        )
        # Nick filters look at the actor only, not at the message text
        assert output == (
            "[21:54:02] <@Bar> hello Foo\n"
            "[21:55:13] *** Joins: Baz (baz@host.mask)\n"
            "[21:56:00] <Baz_> 123\n"
        )

    def test_fails_fast_on_parse_error(self, context, energymech):
        out = io.BytesIO()
        with pytest.raises(ParseError):
            operations.convert(
                context,
                reader("[21:53:49] <Foo> hi\nbroken\n[21:53:50] <Foo> never\n"),
                energymech,
                out,
                energymech,
            )
        assert out.getvalue() == b"[21:53:49] <Foo> hi\n"

    def test_fails_fast_on_encode_error(self, context, energymech, weechat):
        # Energymech joins carry no channel, which weechat requires
        with pytest.raises(MissingFieldError):
            run(operations.convert, context, reader(ENERGYMECH_LOG), energymech, weechat)

    def test_ndjson_rejects_nothing(self, context, energymech, ndjson):
        output, result = run(
            operations.convert, context, reader(ENERGYMECH_LOG), energymech, ndjson
        )
        assert result.events_written == 7
        back, _ = run(operations.convert, context, reader(output), ndjson, energymech)
        assert back == ENERGYMECH_LOG


class TestSeen:
    """Tests for the seen operation."""

    def test_latest_event_involving_nick(self, context, weechat):
        text = WEECHAT_DAY_A + WEECHAT_DAY_B
        out = io.BytesIO()
        operations.seen("Foo", context, reader(text), weechat, out, weechat)
        assert out.getvalue() == b"2016-02-26 10:20:00\tFoo\tcoffee?\n"

    def test_unknown_nick_writes_nothing(self, context, weechat):
        out = io.BytesIO()
        result = operations.seen("Nobody", context, reader(WEECHAT_DAY_A), weechat, out, weechat)
        assert out.getvalue() == b""
        assert result.events_written == 0


class TestSortDedupMerge:
    """Tests for sort, dedup and merge."""

    def test_sort(self, context, weechat):
        output, result = run(
            operations.sort,
            context,
            reader(WEECHAT_DAY_A + WEECHAT_DAY_B + "broken line\n"),
            weechat,
            weechat,
        )
        stamps = [line.split("\t")[0] for line in output.splitlines()]
        assert stamps == sorted(stamps)
        assert len(stamps) == 6
        assert result.parse_errors == 1

    def test_sort_is_idempotent(self, context, weechat):
        once, _ = run(operations.sort, context, reader(WEECHAT_DAY_B + WEECHAT_DAY_A), weechat, weechat)
        twice, _ = run(operations.sort, context, reader(once), weechat, weechat)
        assert once == twice

    def test_dedup_after_sort(self, context, weechat):
        sorted_text, _ = run(
            operations.sort, context, reader(WEECHAT_DAY_A + WEECHAT_DAY_B), weechat, weechat
        )
        output, result = run(
            operations.dedup, context, reader(sorted_text + "junk\n"), weechat, weechat
        )
        assert output.count("morning Foo") == 1
        assert result.events_written == 5
        assert result.events_dropped == 1
        assert result.parse_errors == 1

    def test_dedup_threshold(self, context, weechat):
        text = (
            "2016-02-26 10:00:00\tFoo\tping\n"
            "2016-02-26 10:01:00\tFoo\tping\n"
            "2016-02-26 10:03:00\tFoo\tping\n"
        )
        output, _ = run(operations.dedup, context, reader(text), weechat, weechat, threshold=90)
        assert output.count("ping") == 2

    def test_merge(self, context, weechat):
        out = io.BytesIO()
        result = operations.merge(
            context,
            [reader(WEECHAT_DAY_A), reader("oops\n" + WEECHAT_DAY_B)],
            weechat,
            out,
            weechat,
        )
        lines = out.getvalue().decode("utf-8").splitlines()
        assert len(lines) == 6
        assert [line.split("\t")[0] for line in lines] == sorted(
            line.split("\t")[0] for line in lines
        )
        assert result.events_dropped == 1

    def test_merge_per_input_contexts(self, energymech):
        out = io.BytesIO()
        contexts = [
            Context(override_date=date(2016, 2, 27)),
            Context(override_date=date(2016, 2, 26)),
        ]
        operations.merge(
            Context(),
            [reader("[01:00:00] <A> later\n"), reader("[23:00:00] <B> earlier\n")],
            energymech,
            out,
            get_encoder("weechat"),
            contexts=contexts,
        )
        assert out.getvalue().decode("utf-8") == (
            "2016-02-26 23:00:00\tB\tearlier\n2016-02-27 01:00:00\tA\tlater\n"
        )

    def test_merge_context_count_mismatch(self, context, weechat):
        with pytest.raises(ValueError):
            operations.merge(context, [reader("")], weechat, io.BytesIO(), weechat, contexts=[])


class TestStatsFreq:
    """Tests for stats and freq."""

    def test_stats(self, context, energymech):
        stats = operations.stats(context, reader(ENERGYMECH_LOG), energymech)
        data = stats.to_dict()
        assert data["freqs"]["Foo"] == {"lines": 1, "alpha_lines": 1, "words": 2}
        assert data["freqs"]["Bar"] == {"lines": 1, "alpha_lines": 1, "words": 2}
        assert data["freqs"]["Baz"] == {"lines": 1, "alpha_lines": 0, "words": 1}
        # Times of day never reach the histogram
        assert stats.week.sum() == 0

    def test_stats_histogram_with_date(self, energymech):
        context = Context(override_date=date(2016, 2, 26))
        stats = operations.stats(context, reader(ENERGYMECH_LOG), energymech)
        assert stats.week[4, 21] == 3

    def test_stats_logs_busiest_hour(self, energymech, caplog):
        context = Context(override_date=date(2016, 2, 26))
        with caplog.at_level(logging.INFO):
            operations.stats(context, reader(ENERGYMECH_LOG), energymech)
        assert "Busiest hour: Friday 21:00" in caplog.text

    def test_stats_fail_fast(self, context, energymech):
        with pytest.raises(ParseError):
            operations.stats(context, reader("nonsense\n"), energymech)

    def test_freq(self, context):
        decoder = get_decoder("weechat")
        ranking = operations.freq(context, reader(WEECHAT_DAY_A + WEECHAT_DAY_B), decoder, count=2)
        assert [nick for nick, _ in ranking] == ["Bar", "Baz"]
        assert ranking[0][1].words == 4

    def test_encode_error_is_encode_error(self, context, energymech, weechat):
        with pytest.raises(EncodeError):
            run(operations.sort, context, reader(ENERGYMECH_LOG), energymech, weechat)
