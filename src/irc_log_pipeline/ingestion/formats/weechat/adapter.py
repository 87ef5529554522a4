"""
WeeChat log format.

WeeChat writes one tab-separated line per event: a full date and time,
a prefix column and the message. Example lines:

    2016-01-24 20:32:25	nick	just some message
    2016-01-24 20:32:57	 *	nick emotes
    2016-02-25 01:15:05	-->	Foo (host@mask.foo) has joined #example
    2016-02-25 01:36:13	<--	Foo (host@mask.foo) has left #channel (Some reason)
    2016-02-25 01:38:55	<--	Foo (host@mask.foo) has quit (Some reason)
    2016-02-25 04:32:15	--	Notice(playbot-veno): ""
    2014-07-11 15:00:03	--	irc: disconnected from server
    2014-07-11 15:00:03	--	Foo|afk is now known as Foo

The join/part arrows are user-configurable, so membership lines are
recognised by their message and any prefix made of punctuation only.
"""

import logging
import re
from typing import Optional

from ...base import LineFormat, require_field
from ...context import Context
from ...events import (
    Action,
    Disconnect,
    Event,
    Join,
    Kick,
    Mode,
    Msg,
    Nick,
    Notice,
    Part,
    Quit,
    Topic,
    TopicChange,
    from_format,
    with_format,
)
from ...exceptions import ParseError
from ...registry import FormatRegistry

logger = logging.getLogger(__name__)

TIME_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_ARROW_PREFIX = re.compile(r"^[^\w\s]+$")

_JOIN = re.compile(r"^(\S+) \((\S*)\) has joined (\S+)$")
_PART = re.compile(r"^(\S+) \((\S*)\) has left (\S+)(?: \((.*)\))?$")
_QUIT = re.compile(r"^(\S+) \((\S*)\) has quit(?: \((.*)\))?$")
_KICK = re.compile(r"^(\S+) has kicked (\S+)(?: \((.*)\))?$")

_NOTICE = re.compile(r"^Notice\(([^)\s]+)\): (.*)$")
_DISCONNECT = re.compile(r"^irc: disconnected from server$")
_NICK = re.compile(r"^(\S+) (?:is|are) now known as (\S+)$")
_MODE = re.compile(r"^Mode (\S+) \[(\S+)(?: ([^\]]*))?\] by (\S+)$")
_TOPIC_CHANGE = re.compile(r'^(\S+) has changed topic for (\S+) to "(.*)"$')
_TOPIC = re.compile(r'^Topic for (\S+) is "(.*)"$')

# WeeChat logs the own nick as "You" in nick change lines
_SELF = "You"


@FormatRegistry.register("weechat", "w")
class WeechatFormat(LineFormat):
    """
    WeeChat format adapter.

    Times are parsed in ``context.timezone_in``; an unparseable date
    degrades to an unknown time rather than failing the line. Status lines
    that carry no event (channel info, server notices) are skipped, as are
    events the format cannot represent on encode.
    """

    skips_unsupported = True

    @property
    def format_name(self) -> str:
        return "weechat"

    def parse_line(
        self, context: Context, line: str, line_number: int
    ) -> Optional[Event]:
        parts = line.split("\t", 2)
        if len(parts) < 3:
            raise ParseError(
                "Expected three tab-separated columns",
                line_number=line_number,
                line_content=line,
            )

        stamp, prefix, message = parts
        time = from_format(context.timezone_in, stamp, TIME_DATE_FORMAT)
        bare_prefix = prefix.strip()

        if bare_prefix == "*":
            nick, _, content = message.partition(" ")
            return Event(
                type=Action(from_=nick, content=content),
                time=time,
                channel=context.channel,
            )

        if bare_prefix == "--" or _ARROW_PREFIX.match(bare_prefix):
            event = self._parse_status(context, message, time)
            if event is None:
                logger.debug(f"Skipping status line {line_number}: {message!r}")
            return event

        return Event(
            type=Msg(from_=prefix, content=message),
            time=time,
            channel=context.channel,
        )

    @staticmethod
    def _parse_status(context: Context, message: str, time) -> Optional[Event]:
        m = _JOIN.match(message)
        if m:
            return Event(
                type=Join(nick=m.group(1), mask=m.group(2)),
                time=time,
                channel=m.group(3),
            )
        m = _PART.match(message)
        if m:
            return Event(
                type=Part(nick=m.group(1), mask=m.group(2), reason=m.group(4)),
                time=time,
                channel=m.group(3),
            )
        m = _QUIT.match(message)
        if m:
            return Event(
                type=Quit(nick=m.group(1), mask=m.group(2), reason=m.group(3)),
                time=time,
                channel=context.channel,
            )
        m = _KICK.match(message)
        if m:
            return Event(
                type=Kick(
                    kicked_nick=m.group(2),
                    kicking_nick=m.group(1),
                    kick_message=m.group(3),
                ),
                time=time,
                channel=context.channel,
            )
        m = _NOTICE.match(message)
        if m:
            return Event(
                type=Notice(from_=m.group(1), content=m.group(2)),
                time=time,
                channel=context.channel,
            )
        if _DISCONNECT.match(message):
            return Event(type=Disconnect(), time=time, channel=context.channel)
        m = _NICK.match(message)
        if m:
            return Event(
                type=Nick(old_nick=m.group(1), new_nick=m.group(2)),
                time=time,
                channel=context.channel,
            )
        m = _MODE.match(message)
        if m:
            return Event(
                type=Mode(nick=m.group(4), mode=m.group(2), masks=m.group(3) or ""),
                time=time,
                channel=m.group(1),
            )
        m = _TOPIC_CHANGE.match(message)
        if m:
            return Event(
                type=TopicChange(nick=m.group(1), new_topic=m.group(3)),
                time=time,
                channel=m.group(2),
            )
        m = _TOPIC.match(message)
        if m:
            return Event(type=Topic(topic=m.group(2)), time=time, channel=m.group(1))
        return None

    def format_line(self, context: Context, event: Event) -> Optional[str]:
        ty = event.type
        desc = event.type_desc()

        if isinstance(ty, Msg):
            prefix, message = ty.from_, ty.content
        elif isinstance(ty, Action):
            prefix, message = " *", f"{ty.from_} {ty.content}"
        elif isinstance(ty, Join):
            mask = require_field(ty.mask, "mask", desc)
            channel = require_field(event.channel, "channel", desc)
            prefix, message = "-->", f"{ty.nick} ({mask}) has joined {channel}"
        elif isinstance(ty, Part):
            mask = require_field(ty.mask, "mask", desc)
            channel = require_field(event.channel, "channel", desc)
            prefix, message = "<--", f"{ty.nick} ({mask}) has left {channel}"
            if ty.reason is not None:
                message += f" ({ty.reason})"
        elif isinstance(ty, Quit):
            mask = require_field(ty.mask, "mask", desc)
            prefix, message = "<--", f"{ty.nick} ({mask}) has quit"
            if ty.reason is not None:
                message += f" ({ty.reason})"
        elif isinstance(ty, Kick):
            kicker = require_field(ty.kicking_nick, "kicking_nick", desc)
            prefix, message = "<--", f"{kicker} has kicked {ty.kicked_nick}"
            if ty.kick_message is not None:
                message += f" ({ty.kick_message})"
        elif isinstance(ty, Disconnect):
            prefix, message = "--", "irc: disconnected from server"
        elif isinstance(ty, Notice):
            prefix, message = "--", f"Notice({ty.from_}): {ty.content}"
        elif isinstance(ty, Nick):
            verb = "are" if ty.old_nick == _SELF else "is"
            prefix, message = "--", f"{ty.old_nick} {verb} now known as {ty.new_nick}"
        elif isinstance(ty, Mode):
            nick = require_field(ty.nick, "nick", desc)
            channel = require_field(event.channel, "channel", desc)
            change = f"{ty.mode} {ty.masks}" if ty.masks else ty.mode
            prefix, message = "--", f"Mode {channel} [{change}] by {nick}"
        elif isinstance(ty, TopicChange):
            nick = require_field(ty.nick, "nick", desc)
            channel = require_field(event.channel, "channel", desc)
            prefix, message = (
                "--",
                f'{nick} has changed topic for {channel} to "{ty.new_topic}"',
            )
        elif isinstance(ty, Topic):
            channel = require_field(event.channel, "channel", desc)
            prefix, message = "--", f'Topic for {channel} is "{ty.topic}"'
        else:
            self.unsupported(event)
            return None

        stamp = with_format(event.time, context.timezone_out, TIME_DATE_FORMAT)
        return f"{stamp}\t{prefix}\t{message}"
