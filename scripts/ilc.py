#!/usr/bin/env python3
"""
Converter and statistics utility for IRC log files.

Reads logs in one format (energymech, weechat, ndjson), and converts,
filters, sorts, deduplicates or merges them, or computes statistics.
Input comes from stdin unless files are given with --input; output goes to
stdout unless --output is given.

Usage:
    # Check a log for malformed lines
    python scripts/ilc.py parse -f weechat -i logs/2016-02-26.log

    # Convert energymech to weechat, dating the lines from the file name
    python scripts/ilc.py convert --inf em --outf w --infer-date -i logs/2016-02-26.log

    # Shift to UTC-5 (negative offsets need the '=' form)
    python scripts/ilc.py convert -f w --timezone-out=-05:00 -i irc.example.weechatlog

    # Keep only messages mentioning a nick
    python scripts/ilc.py convert -f w --filter "text~Foo" -i logs/*.log

    # Most talkative nicks
    python scripts/ilc.py freq -f w --count 10 -i logs/*.log.gz

    # Last event involving a nick
    python scripts/ilc.py seen Foo -f w -i logs/*.log

    # Merge sorted per-day logs and drop duplicates
    python scripts/ilc.py merge -f w -i a.log b.log -o merged.log
    python scripts/ilc.py dedup -f w -i merged.log

    # Statistics as JSON
    python scripts/ilc.py stats -f w --pretty -i logs/*.log

    # List available formats
    python scripts/ilc.py formats
"""

import argparse
import json
import logging
import sys
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from email.utils import format_datetime
from pathlib import Path
from typing import IO, Iterator, Optional

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from irc_log_pipeline.config import (
    VERSION,
    Settings,
    load_settings,
    parse_date,
    parse_utc_offset,
)
from irc_log_pipeline.ingestion import (
    ConfigError,
    Context,
    FormatRegistry,
    expand_input_patterns,
    get_decoder,
    get_encoder,
    iter_concatenated,
    open_file_auto_decompress,
)
from irc_log_pipeline.pipeline import operations, parse_filter, setup_logging
from irc_log_pipeline.reporting import format_freq

logger = logging.getLogger(__name__)


class Abort(Exception):
    """Raised for invalid command line usage; printed as "Aborting: ..."."""


# =============================================================================
# Argument parsing
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--timezone",
        "-t",
        help="UTC offset for input and output, e.g. +02:00, UTC or seconds west "
        "of UTC; attach negative offsets with \"=\", as in --timezone=-05:00",
    )
    common.add_argument(
        "--timezone-in", help="UTC offset of the input times, e.g. --timezone-in=-05:00"
    )
    common.add_argument(
        "--timezone-out",
        help="UTC offset for rendered output times, e.g. --timezone-out=-05:00",
    )
    common.add_argument(
        "--date", "-d", help="Override the date for this log (YYYY-MM-DD)"
    )
    common.add_argument(
        "--infer-date",
        action="store_true",
        help="Use the file name (e.g. 2016-02-26.log) as date for the log",
    )
    common.add_argument("--channel", "-c", help="Set a channel for the current log")
    common.add_argument(
        "--format", "-f", help="Set the input and output format for the current log"
    )
    common.add_argument("--inf", help="Set the input format for the current log")
    common.add_argument("--outf", help="Set the output format for the current log")
    common.add_argument(
        "--input",
        "-i",
        action="extend",
        nargs="+",
        default=[],
        metavar="PATH",
        help="Input files or glob patterns, instead of stdin (.gz is detected)",
    )
    common.add_argument("--output", "-o", help="Output file, instead of stdout")
    common.add_argument("--config", help="Path to a YAML config file")
    common.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    parser = argparse.ArgumentParser(
        prog="ilc",
        description="A converter and statistics utility for IRC log files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    subparsers.add_parser(
        "parse", parents=[common], help="Parse the input, checking the format"
    )

    convert = subparsers.add_parser(
        "convert", parents=[common], help="Convert from a source to a target format"
    )
    convert.add_argument(
        "--filter",
        help="Only keep events matching EXPR, e.g. nick~bot, type==join, time>1456485265",
        metavar="EXPR",
    )
    convert.add_argument(
        "--not",
        dest="negate",
        action="store_true",
        help="Invert the filter",
    )

    freq = subparsers.add_parser(
        "freq",
        parents=[common],
        help="Analyse the activity of users by certain metrics",
    )
    freq.add_argument("--count", type=int, help="The number of items to be displayed")

    seen = subparsers.add_parser(
        "seen", parents=[common], help="Print the last line a nick was active"
    )
    seen.add_argument("nick", help="The nick you're looking for")

    subparsers.add_parser("sort", parents=[common], help="Sorts a log by time")

    dedup = subparsers.add_parser(
        "dedup",
        parents=[common],
        help="Removes duplicate log entries in close proximity",
    )
    dedup.add_argument(
        "--threshold",
        type=int,
        help="Window in seconds within which identical events are duplicates",
    )

    subparsers.add_parser(
        "merge",
        parents=[common],
        help="Merges individually sorted input logs",
    )

    stats = subparsers.add_parser(
        "stats", parents=[common], help="Per-nick statistics and weekly activity as JSON"
    )
    stats.add_argument("--pretty", action="store_true", help="Indent the JSON output")

    subparsers.add_parser("formats", parents=[common], help="List available formats")

    return parser


def build_settings(args: argparse.Namespace) -> Settings:
    """
    Load settings from config file or environment and apply CLI overrides.

    Raises:
        Abort: If an option value is invalid
        ConfigError: If the config file cannot be loaded
    """
    settings = load_settings(args.config)

    if args.format and (args.inf or args.outf):
        raise Abort("--format conflicts with --inf/--outf")

    overrides = {}
    try:
        if args.timezone is not None:
            overrides["timezone_in"] = overrides["timezone_out"] = parse_utc_offset(
                args.timezone
            )
        if args.timezone_in is not None:
            overrides["timezone_in"] = parse_utc_offset(args.timezone_in)
        if args.timezone_out is not None:
            overrides["timezone_out"] = parse_utc_offset(args.timezone_out)
        if args.date is not None:
            overrides["override_date"] = parse_date(args.date)
    except ValueError as e:
        raise Abort(str(e)) from e

    if args.channel is not None:
        overrides["channel"] = args.channel
    if args.format:
        overrides["input_format"] = overrides["output_format"] = args.format
    if args.inf:
        overrides["input_format"] = args.inf
    if args.outf:
        overrides["output_format"] = args.outf
    if getattr(args, "threshold", None) is not None:
        overrides["dedup_threshold"] = args.threshold

    return replace(settings, **overrides)


# =============================================================================
# I/O helpers
# =============================================================================


def resolve_inputs(args: argparse.Namespace) -> list[Path]:
    paths = expand_input_patterns(args.input)
    if args.input and not paths:
        raise Abort("No input files matched")
    return paths


def input_context(
    context: Context, paths: list[Path], infer_date: bool
) -> Context:
    """Return the decode context, with the date taken from the single input file."""
    if not infer_date:
        return context
    if not paths:
        raise Abort("No input files given, can't infer date")
    if len(paths) > 1:
        raise Abort("Too many input files, can't infer date")
    inferred = context.with_inferred_date(paths[0])
    if inferred.override_date is None:
        raise Abort(f"Can't infer a date from the file name {paths[0].name}")
    return inferred


@contextmanager
def open_output(path: Optional[str]) -> Iterator[IO[bytes]]:
    """Yield a binary output stream: the given file, or stdout."""
    if path is None:
        yield sys.stdout.buffer
        sys.stdout.buffer.flush()
        return
    with open(path, "wb") as handle:
        yield handle


def read_input(paths: list[Path]):
    """Return a line source over all inputs, or stdin without inputs."""
    if not paths:
        return sys.stdin.buffer
    return iter_concatenated(paths)


def format_error(exc: BaseException) -> str:
    """Render an exception and its cause chain, one tab-indented cause per line."""
    lines = [f"Error: {exc}"]
    seen = {id(exc)}
    cause = exc.__cause__ or exc.__context__
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        lines.append(f"\t{cause}")
        cause = cause.__cause__ or cause.__context__
    return "\n".join(lines)


# =============================================================================
# Commands
# =============================================================================


def list_format_names() -> str:
    lines = ["Available formats:"]
    for name in FormatRegistry.list_formats(include_reserved=True):
        aliases = FormatRegistry.aliases_for(name)
        suffix = f" (aliases: {', '.join(aliases)})" if aliases else ""
        if not FormatRegistry.is_format_registered(name):
            suffix += " [not implemented]"
        lines.append(f"  {name}{suffix}")
    return "\n".join(lines) + "\n"


def run_command(args: argparse.Namespace, settings: Settings) -> int:
    """Dispatch to the operation selected on the command line."""
    base_context = Context.from_settings(settings)
    paths = resolve_inputs(args)
    command = args.command

    if command == "formats":
        with open_output(args.output) as writer:
            writer.write(list_format_names().encode("utf-8"))
        return 0

    decoder = get_decoder(settings.input_format)

    if command == "merge":
        if not paths:
            raise Abort("No input files given, merge needs at least one")
        contexts = None
        if args.infer_date:
            contexts = [input_context(base_context, [p], True) for p in paths]
        encoder = get_encoder(settings.output_format)
        with open_output(args.output) as writer:
            handles = [open_file_auto_decompress(p) for p in paths]
            try:
                operations.merge(
                    base_context, handles, decoder, writer, encoder, contexts=contexts
                )
            finally:
                for handle in handles:
                    handle.close()
        return 0

    context = input_context(base_context, paths, args.infer_date)
    reader = read_input(paths)

    if command == "parse":
        operations.parse(context, reader, decoder)
        return 0

    if command == "stats":
        stats = operations.stats(context, reader, decoder, tz=settings.timezone_out)
        document = {
            "version": VERSION,
            "time": format_datetime(datetime.now().astimezone()),
            "stats": stats.to_dict(),
        }
        text = json.dumps(document, indent=2 if args.pretty else None)
        with open_output(args.output) as writer:
            writer.write((text + "\n").encode("utf-8"))
        return 0

    if command == "freq":
        if args.count is not None and args.count < 0:
            raise Abort("--count must not be negative")
        ranking = operations.freq(context, reader, decoder, count=args.count)
        with open_output(args.output) as writer:
            writer.write(format_freq(ranking).encode("utf-8"))
        return 0

    encoder = get_encoder(settings.output_format)
    with open_output(args.output) as writer:
        if command == "convert":
            try:
                event_filter = parse_filter(args.filter) if args.filter else None
            except ValueError as e:
                raise Abort(str(e)) from e
            if args.negate and event_filter is None:
                raise Abort("--not needs a --filter")
            operations.convert(
                context,
                reader,
                decoder,
                writer,
                encoder,
                filter=event_filter,
                negate=args.negate,
            )
        elif command == "seen":
            operations.seen(args.nick, context, reader, decoder, writer, encoder)
        elif command == "sort":
            operations.sort(context, reader, decoder, writer, encoder)
        elif command == "dedup":
            operations.dedup(
                context,
                reader,
                decoder,
                writer,
                encoder,
                threshold=settings.dedup_threshold,
            )
        else:
            raise Abort(f"Unknown command {command!r}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help(sys.stderr)
        return 1

    try:
        settings = build_settings(args)
        errors = settings.validate()
        if errors:
            raise Abort("; ".join(errors))

        setup_logging(level=logging.DEBUG if args.verbose else settings.log_level)
        return run_command(args, settings)

    except Abort as e:
        print(f"Aborting: {e}", file=sys.stderr)
        return 1
    except ConfigError as e:
        print(f"Aborting: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(format_error(e), file=sys.stderr)
        if args.verbose:
            logger.exception("Unexpected error")
        return 1


if __name__ == "__main__":
    sys.exit(main())
