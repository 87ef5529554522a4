"""
Energymech log format.

Energymech logs carry only the time of day; the date is implied by the
file. Example lines:

    [21:53:49] <Foo> hi there
    [21:53:50] * Foo waves
    [10:25:22] -playbot- true
    [21:24:57] *** Foo is now known as Bar
    [23:21:17] *** Paster was kicked by fripp.mozilla.org (Channel flood triggered)
    [21:49:59] *** ChanServ sets mode: +v Foo
    [21:49:59] *** Joins: Foo (host@some.mask)
    [03:52:11] *** Parts: Foo (some@host.mask) (A reason? Nah...)
    [03:48:33] *** Quits: Foo (just@a.hostmask) (Ping timeout: 42 seconds)
    [09:44:56] *** Foo changes topic to 'Hi there'
"""

import logging
import re
from datetime import datetime
from datetime import time as dt_time
from typing import Optional

from ...base import LineFormat, require_field
from ...context import Context
from ...events import (
    Action,
    Event,
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
    TopicChange,
    with_format,
)
from ...exceptions import ParseError
from ...registry import FormatRegistry

logger = logging.getLogger(__name__)

TIME_FORMAT = "%H:%M:%S"

_LINE = re.compile(r"^\[(\d{2}):(\d{2}):(\d{2})\] (.*)$")

_ACTION = re.compile(r"^\* (\S+) (.*)$")
_NICK = re.compile(r"^\*\*\* (\S+) is now known as (\S+)$")
_KICK = re.compile(r"^\*\*\* (\S+) was kicked by (\S+) \((.*)\)$")
_MODE = re.compile(r"^\*\*\* (\S+) sets mode: (\S+)(?: (.*))?$")
_JOIN = re.compile(r"^\*\*\* Joins: (\S+) \((\S*)\)$")
_PART = re.compile(r"^\*\*\* Parts: (\S+) \((\S*)\) \((.*)\)$")
_QUIT = re.compile(r"^\*\*\* Quits: (\S+) \((\S*)\) \((.*)\)$")
_TOPIC_CHANGE = re.compile(r"^\*\*\* (\S+) changes topic to '(.*)'$")
_MSG = re.compile(r"^<(\S+)> (.*)$")
_NOTICE = re.compile(r"^-(\S+)- (.*)$")


@FormatRegistry.register("energymech", "em")
class EnergymechFormat(LineFormat):
    """
    Energymech format adapter.

    Times become TimeOfDay values unless the context carries an override
    date, in which case they are resolved to Timestamps in
    ``context.timezone_in``. Events the format has no line for (connects,
    disconnects, plain topics) are skipped on encode.
    """

    skips_unsupported = True

    @property
    def format_name(self) -> str:
        return "energymech"

    def parse_line(
        self, context: Context, line: str, line_number: int
    ) -> Optional[Event]:
        match = _LINE.match(line)
        if not match:
            raise ParseError(
                "Missing [HH:MM:SS] time prefix",
                line_number=line_number,
                line_content=line,
            )

        hour, minute, second, body = match.groups()
        time = self._parse_time(context, int(hour), int(minute), int(second), line_number, line)
        ty = self._parse_body(body)
        if ty is None:
            raise ParseError(
                "Unrecognized energymech line", line_number=line_number, line_content=line
            )
        return Event(type=ty, time=time, channel=context.channel)

    @staticmethod
    def _parse_time(
        context: Context, hour: int, minute: int, second: int, line_number: int, line: str
    ) -> Time:
        try:
            time_of_day = TimeOfDay(hour, minute, second)
        except ValueError as e:
            raise ParseError(str(e), line_number=line_number, line_content=line) from e

        if context.override_date is None:
            return time_of_day

        moment = datetime.combine(
            context.override_date,
            dt_time(hour, minute, second),
            tzinfo=context.timezone_in,
        )
        return Timestamp(int(moment.timestamp()))

    @staticmethod
    def _parse_body(body: str):
        if body.startswith("*** "):
            m = _NICK.match(body)
            if m:
                return Nick(old_nick=m.group(1), new_nick=m.group(2))
            m = _KICK.match(body)
            if m:
                return Kick(
                    kicked_nick=m.group(1),
                    kicking_nick=m.group(2),
                    kick_message=m.group(3),
                )
            m = _MODE.match(body)
            if m:
                return Mode(nick=m.group(1), mode=m.group(2), masks=m.group(3) or "")
            m = _JOIN.match(body)
            if m:
                return Join(nick=m.group(1), mask=m.group(2))
            m = _PART.match(body)
            if m:
                return Part(nick=m.group(1), mask=m.group(2), reason=m.group(3))
            m = _QUIT.match(body)
            if m:
                return Quit(nick=m.group(1), mask=m.group(2), reason=m.group(3))
            m = _TOPIC_CHANGE.match(body)
            if m:
                return TopicChange(nick=m.group(1), new_topic=m.group(2))
            return None

        m = _ACTION.match(body)
        if m:
            return Action(from_=m.group(1), content=m.group(2))
        m = _MSG.match(body)
        if m:
            return Msg(from_=m.group(1), content=m.group(2))
        m = _NOTICE.match(body)
        if m:
            return Notice(from_=m.group(1), content=m.group(2))
        return None

    def format_line(self, context: Context, event: Event) -> Optional[str]:
        ty = event.type
        desc = event.type_desc()

        if isinstance(ty, Msg):
            body = f"<{ty.from_}> {ty.content}"
        elif isinstance(ty, Notice):
            body = f"-{ty.from_}- {ty.content}"
        elif isinstance(ty, Action):
            body = f"* {ty.from_} {ty.content}"
        elif isinstance(ty, Nick):
            body = f"*** {ty.old_nick} is now known as {ty.new_nick}"
        elif isinstance(ty, Mode):
            nick = require_field(ty.nick, "nick", desc)
            body = f"*** {nick} sets mode: {ty.mode}"
            if ty.masks:
                body += f" {ty.masks}"
        elif isinstance(ty, Join):
            body = f"*** Joins: {ty.nick} ({require_field(ty.mask, 'mask', desc)})"
        elif isinstance(ty, Part):
            mask = require_field(ty.mask, "mask", desc)
            body = f"*** Parts: {ty.nick} ({mask}) ({ty.reason or ''})"
        elif isinstance(ty, Quit):
            mask = require_field(ty.mask, "mask", desc)
            body = f"*** Quits: {ty.nick} ({mask}) ({ty.reason or ''})"
        elif isinstance(ty, Kick):
            kicker = require_field(ty.kicking_nick, "kicking_nick", desc)
            body = f"*** {ty.kicked_nick} was kicked by {kicker} ({ty.kick_message or ''})"
        elif isinstance(ty, TopicChange):
            nick = require_field(ty.nick, "nick", desc)
            body = f"*** {nick} changes topic to '{ty.new_topic}'"
        else:
            self.unsupported(event)
            return None

        return f"[{with_format(event.time, context.timezone_out, TIME_FORMAT)}] {body}"
