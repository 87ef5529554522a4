"""
Canonical event model shared by every log format.

Different log formats carry different amounts of time information, so
``Time`` is a closed union of three variants:

    UnknownTime                 no usable time was recovered
    TimeOfDay(h, m, s)          wall-clock time without a date
    Timestamp(seconds)          absolute epoch seconds

Events carry one of the thirteen ``EventType`` variants below. The variants
are independent frozen dataclasses joined by a ``Union``; the shared
operations (``actor``, ``involves``, ``type_desc``, ``text``) dispatch over
the closed set and reject anything else.
"""

from dataclasses import dataclass, fields
from datetime import date, datetime
from datetime import time as dt_time
from datetime import timezone, tzinfo
from typing import Any, Optional, Union

from .exceptions import MissingTimeDataError

# =============================================================================
# Time
# =============================================================================


@dataclass(frozen=True)
class UnknownTime:
    """No usable time information."""


@dataclass(frozen=True)
class TimeOfDay:
    """Wall-clock time without a date."""

    hour: int
    minute: int
    second: int

    def __post_init__(self):
        if not (0 <= self.hour < 24 and 0 <= self.minute < 60 and 0 <= self.second < 60):
            raise ValueError(
                f"Invalid time of day: {self.hour:02}:{self.minute:02}:{self.second:02}"
            )


@dataclass(frozen=True)
class Timestamp:
    """Absolute point in time, in seconds since the Unix epoch."""

    seconds: int


Time = Union[UnknownTime, TimeOfDay, Timestamp]


def as_timestamp(time: Time) -> int:
    """
    Convert any time variant to absolute epoch seconds.

    ``UnknownTime`` maps to 0 and ``TimeOfDay`` is placed on today's date in
    the local timezone.
    """
    if isinstance(time, Timestamp):
        return time.seconds
    if isinstance(time, TimeOfDay):
        moment = datetime.combine(
            date.today(), dt_time(time.hour, time.minute, time.second)
        )
        return int(moment.timestamp())
    if isinstance(time, UnknownTime):
        return 0
    raise TypeError(f"Not a Time variant: {time!r}")


def compare_times(a: Time, b: Time) -> Optional[int]:
    """
    Partial comparison of two times.

    Returns:
        -1, 0 or 1 when the times are comparable, None otherwise. Unknown
        times are incomparable with everything, and times of day are
        incomparable with absolute timestamps.
    """
    if isinstance(a, Timestamp) and isinstance(b, Timestamp):
        left, right = a.seconds, b.seconds
    elif isinstance(a, TimeOfDay) and isinstance(b, TimeOfDay):
        left = (a.hour, a.minute, a.second)
        right = (b.hour, b.minute, b.second)
    else:
        return None
    return (left > right) - (left < right)


def time_lt(a: Time, b: Time) -> bool:
    """True only if ``a`` is known to be strictly earlier than ``b``."""
    return compare_times(a, b) == -1


def chronological_key(time: Time) -> int:
    """Total-order sort key used for full sorts."""
    return as_timestamp(time)


def with_format(time: Time, tz: tzinfo, fmt: str) -> str:
    """
    Render a time with a strftime pattern.

    Times of day are rendered as-is; timestamps are converted to ``tz``
    first.

    Raises:
        MissingTimeDataError: If the time is unknown or out of range
    """
    if isinstance(time, TimeOfDay):
        return dt_time(time.hour, time.minute, time.second).strftime(fmt)
    if isinstance(time, Timestamp):
        try:
            moment = datetime.fromtimestamp(time.seconds, tz)
        except (OverflowError, OSError, ValueError):
            raise MissingTimeDataError(
                f"Timestamp {time.seconds} cannot be represented as a date"
            ) from None
        return moment.strftime(fmt)
    if isinstance(time, UnknownTime):
        raise MissingTimeDataError()
    raise TypeError(f"Not a Time variant: {time!r}")


def from_format(tz: tzinfo, text: str, fmt: str) -> Time:
    """
    Parse ``text`` with a strptime pattern, interpreting it in ``tz``.

    Malformed input degrades to ``UnknownTime`` instead of raising.
    """
    try:
        parsed = datetime.strptime(text, fmt)
    except (TypeError, ValueError):
        return UnknownTime()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    try:
        return Timestamp(int(parsed.timestamp()))
    except (OverflowError, OSError, ValueError):
        return UnknownTime()


def time_to_value(time: Time) -> Union[None, str, int]:
    """Structured representation: None, ``"HH:MM:SS"`` or epoch seconds."""
    if isinstance(time, Timestamp):
        return time.seconds
    if isinstance(time, TimeOfDay):
        return f"{time.hour:02}:{time.minute:02}:{time.second:02}"
    if isinstance(time, UnknownTime):
        return None
    raise TypeError(f"Not a Time variant: {time!r}")


def time_from_value(value: Any) -> Time:
    """Inverse of :func:`time_to_value`."""
    if value is None:
        return UnknownTime()
    if isinstance(value, bool):
        raise ValueError(f"Invalid time value: {value!r}")
    if isinstance(value, int):
        try:
            datetime.fromtimestamp(value, timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise ValueError(f"Timestamp out of range: {value!r}") from None
        return Timestamp(value)
    if isinstance(value, str):
        parts = value.split(":")
        if len(parts) == 3 and all(p.isdigit() for p in parts):
            return TimeOfDay(int(parts[0]), int(parts[1]), int(parts[2]))
    raise ValueError(f"Invalid time value: {value!r}")


# =============================================================================
# Event types
# =============================================================================


@dataclass(frozen=True)
class Connect:
    pass


@dataclass(frozen=True)
class Disconnect:
    pass


@dataclass(frozen=True)
class Msg:
    from_: str
    content: str


@dataclass(frozen=True)
class Action:
    from_: str
    content: str


@dataclass(frozen=True)
class Join:
    nick: str
    mask: Optional[str] = None


@dataclass(frozen=True)
class Part:
    nick: str
    mask: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class Quit:
    nick: str
    mask: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class Nick:
    old_nick: str
    new_nick: str


@dataclass(frozen=True)
class Notice:
    from_: str
    content: str


@dataclass(frozen=True)
class Kick:
    kicked_nick: str
    kicking_nick: Optional[str] = None
    kick_message: Optional[str] = None


@dataclass(frozen=True)
class Topic:
    topic: str


@dataclass(frozen=True)
class TopicChange:
    new_topic: str
    nick: Optional[str] = None


@dataclass(frozen=True)
class Mode:
    mode: str
    masks: str
    nick: Optional[str] = None


EventType = Union[
    Connect,
    Disconnect,
    Msg,
    Action,
    Join,
    Part,
    Quit,
    Nick,
    Notice,
    Kick,
    Topic,
    TopicChange,
    Mode,
]

# Stable lowercase tags, one per variant
TYPE_DESCRIPTIONS: dict[type, str] = {
    Connect: "connect",
    Disconnect: "disconnect",
    Msg: "message",
    Action: "action",
    Join: "join",
    Part: "part",
    Quit: "quit",
    Nick: "nick",
    Notice: "notice",
    Kick: "kick",
    Topic: "topic",
    TopicChange: "topic_change",
    Mode: "mode",
}

EVENT_TYPES_BY_DESC: dict[str, type] = {
    desc: cls for cls, desc in TYPE_DESCRIPTIONS.items()
}


def _contains(haystack: Optional[str], needle: str) -> bool:
    return haystack is not None and needle in haystack


def actor(ty: EventType) -> Optional[str]:
    """Return the nick responsible for the event, if any."""
    if isinstance(ty, (Msg, Action, Notice)):
        return ty.from_
    if isinstance(ty, (Join, Part, Quit)):
        return ty.nick
    if isinstance(ty, Nick):
        return ty.old_nick
    if isinstance(ty, Kick):
        return ty.kicking_nick
    if isinstance(ty, (TopicChange, Mode)):
        return ty.nick
    if isinstance(ty, (Connect, Disconnect, Topic)):
        return None
    raise TypeError(f"Not an EventType variant: {ty!r}")


def involves(ty: EventType, needle: str) -> bool:
    """
    Check whether ``needle`` takes part in the event.

    Nicks must match exactly, free text matches by substring.
    """
    if isinstance(ty, (Msg, Action, Notice)):
        return ty.from_ == needle or needle in ty.content
    if isinstance(ty, Join):
        return ty.nick == needle
    if isinstance(ty, (Part, Quit)):
        return ty.nick == needle or _contains(ty.reason, needle)
    if isinstance(ty, Nick):
        return ty.old_nick == needle or ty.new_nick == needle
    if isinstance(ty, Kick):
        return (
            ty.kicked_nick == needle
            or ty.kicking_nick == needle
            or _contains(ty.kick_message, needle)
        )
    if isinstance(ty, Topic):
        return needle in ty.topic
    if isinstance(ty, TopicChange):
        return ty.nick == needle or needle in ty.new_topic
    if isinstance(ty, Mode):
        return ty.nick == needle
    if isinstance(ty, (Connect, Disconnect)):
        return False
    raise TypeError(f"Not an EventType variant: {ty!r}")


def type_desc(ty: EventType) -> str:
    """Return the stable lowercase tag for the variant."""
    try:
        return TYPE_DESCRIPTIONS[type(ty)]
    except KeyError:
        raise TypeError(f"Not an EventType variant: {ty!r}") from None


def text(ty: EventType) -> Optional[str]:
    """Return the primary free-text payload, if the variant carries one."""
    if isinstance(ty, (Msg, Action, Notice)):
        return ty.content
    if isinstance(ty, (Part, Quit)):
        return ty.reason
    if isinstance(ty, Kick):
        return ty.kick_message
    if isinstance(ty, Topic):
        return ty.topic
    if isinstance(ty, TopicChange):
        return ty.new_topic
    if isinstance(ty, (Connect, Disconnect, Join, Nick, Mode)):
        return None
    raise TypeError(f"Not an EventType variant: {ty!r}")


# =============================================================================
# Event
# =============================================================================


@dataclass(frozen=True)
class Event:
    """
    One log occurrence.

    Attributes:
        type: One of the EventType variants
        time: One of the Time variants
        channel: Channel name, when the format or context provides one
    """

    type: EventType
    time: Time = UnknownTime()
    channel: Optional[str] = None

    def actor(self) -> Optional[str]:
        return actor(self.type)

    def involves(self, needle: str) -> bool:
        return involves(self.type, needle)

    def type_desc(self) -> str:
        return type_desc(self.type)

    def text(self) -> Optional[str]:
        return text(self.type)

    def to_dict(self) -> dict:
        """
        Convert to dictionary representation.

        Variant fields are flattened next to ``type``, ``time`` and
        ``channel``; ``from_`` is written as ``from``.
        """
        result = {
            "type": type_desc(self.type),
            "time": time_to_value(self.time),
            "channel": self.channel,
        }
        for f in fields(self.type):
            result[f.name.rstrip("_")] = getattr(self.type, f.name)
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        """
        Create an Event from its dictionary representation.

        Raises:
            ValueError: If the type tag is unknown, fields are missing or
                mistyped, or the time is out of range
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected an object, got {type(data).__name__}")

        desc = data.get("type")
        if not isinstance(desc, str):
            raise ValueError(f"Event type must be a string, got {desc!r}")
        event_cls = EVENT_TYPES_BY_DESC.get(desc)
        if event_cls is None:
            raise ValueError(f"Unknown event type: {desc!r}")

        kwargs = {}
        for f in fields(event_cls):
            key = f.name.rstrip("_")
            if key not in data:
                continue
            value = data[key]
            # Every variant field is a str; optional ones default to None
            if not (isinstance(value, str) or (value is None and f.default is None)):
                raise ValueError(
                    f"Field {key!r} of {desc!r} event must be a string, got {value!r}"
                )
            kwargs[f.name] = value
        try:
            ty = event_cls(**kwargs)
        except TypeError as e:
            raise ValueError(f"Invalid fields for {desc!r} event: {e}") from e

        channel = data.get("channel")
        if channel is not None and not isinstance(channel, str):
            raise ValueError(f"Channel must be a string, got {channel!r}")

        return cls(
            type=ty,
            time=time_from_value(data.get("time")),
            channel=channel,
        )
