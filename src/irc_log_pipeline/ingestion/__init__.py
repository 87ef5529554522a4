"""
Log decoding and encoding layer.

Provides the canonical event model shared by every IRC log format and the
adapters that translate between raw log bytes and events.

Usage:
    from irc_log_pipeline.ingestion import Context, get_decoder, get_encoder

    context = Context(channel="#chan")
    decoder = get_decoder("weechat")
    encoder = get_encoder("energymech")

    with open("2016-02-26.log", "rb") as reader:
        for item in decoder.decode(context, reader):
            if isinstance(item, ParseError):
                print(item)
            else:
                encoder.encode(context, sys.stdout.buffer, item)
"""

from .base import (
    DecodeResult,
    LineFormat,
    LogFormat,
    only_events,
    raise_errors,
)
from .context import Context
from .events import (
    Action,
    Connect,
    Disconnect,
    Event,
    EventType,
    Join,
    Kick,
    Mode,
    Msg,
    Nick,
    Notice,
    Part,
    Quit,
    Time,
    TimeOfDay,
    Timestamp,
    Topic,
    TopicChange,
    UnknownTime,
    as_timestamp,
    compare_times,
    time_lt,
)
from .exceptions import (
    ConfigError,
    EncodeError,
    FormatNotFoundError,
    FormatNotImplementedError,
    IngestionError,
    MissingFieldError,
    MissingTimeDataError,
    ParseError,
    UnsupportedEventError,
)
from .file_utils import (
    expand_input_patterns,
    iter_concatenated,
    open_file_auto_decompress,
)
from .registry import (
    FormatRegistry,
    get_decoder,
    get_encoder,
    get_format,
    list_formats,
    register_format,
)

# Register the built-in formats
from . import formats  # noqa: E402,F401

__all__ = [
    # Event model
    "Event",
    "EventType",
    "Connect",
    "Disconnect",
    "Msg",
    "Action",
    "Join",
    "Part",
    "Quit",
    "Nick",
    "Notice",
    "Kick",
    "Topic",
    "TopicChange",
    "Mode",
    "Time",
    "UnknownTime",
    "TimeOfDay",
    "Timestamp",
    "as_timestamp",
    "compare_times",
    "time_lt",
    # Formats
    "Context",
    "DecodeResult",
    "LogFormat",
    "LineFormat",
    "only_events",
    "raise_errors",
    # Registry functions
    "FormatRegistry",
    "get_format",
    "get_decoder",
    "get_encoder",
    "register_format",
    "list_formats",
    # Exceptions
    "IngestionError",
    "ParseError",
    "EncodeError",
    "MissingFieldError",
    "MissingTimeDataError",
    "UnsupportedEventError",
    "ConfigError",
    "FormatNotFoundError",
    "FormatNotImplementedError",
    # File utilities
    "open_file_auto_decompress",
    "expand_input_patterns",
    "iter_concatenated",
]
