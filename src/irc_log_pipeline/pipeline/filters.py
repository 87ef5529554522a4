"""
Event filters.

A Filter pairs a Subject (which part of the event to look at) with an
Operator (how to compare it). String operators apply to nicks, type tags
and text; numeric operators apply to times. Any other pairing is simply
never satisfied.

Filters can be written as compact expressions for the command line:

    nick==Foo          actor is exactly "Foo"
    nick~bot           actor contains "bot"
    text=~^!\\w+        text matches a regular expression
    type==join         event is a join
    time>1456485265    event is later than the given epoch second
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Union

from ..ingestion.events import Event, as_timestamp


class Subject(Enum):
    """Part of an event a filter inspects."""

    NICK = "nick"
    TIME = "time"
    TYPE = "type"
    TEXT = "text"


@dataclass(frozen=True)
class Exactly:
    value: str


@dataclass(frozen=True)
class Contains:
    value: str


@dataclass(frozen=True)
class Matches:
    pattern: re.Pattern


@dataclass(frozen=True)
class Equal:
    value: int


@dataclass(frozen=True)
class Greater:
    value: int


@dataclass(frozen=True)
class Less:
    value: int


Operator = Union[Exactly, Contains, Matches, Equal, Greater, Less]

_STRING_OPERATORS = (Exactly, Contains, Matches)
_NUMERIC_OPERATORS = (Equal, Greater, Less)


def _match_string(op: Operator, value) -> bool:
    if value is None or not isinstance(op, _STRING_OPERATORS):
        return False
    if isinstance(op, Exactly):
        return value == op.value
    if isinstance(op, Contains):
        return op.value in value
    return op.pattern.search(value) is not None


def _match_number(op: Operator, value: int) -> bool:
    if isinstance(op, Equal):
        return value == op.value
    if isinstance(op, Greater):
        return value > op.value
    if isinstance(op, Less):
        return value < op.value
    return False


@dataclass(frozen=True)
class Filter:
    """A single predicate over events."""

    subject: Subject
    operator: Operator

    def satisfied_by(self, event: Event) -> bool:
        if self.subject is Subject.NICK:
            return _match_string(self.operator, event.actor())
        if self.subject is Subject.TYPE:
            return _match_string(self.operator, event.type_desc())
        if self.subject is Subject.TEXT:
            return _match_string(self.operator, event.text())
        if self.subject is Subject.TIME:
            if not isinstance(self.operator, _NUMERIC_OPERATORS):
                return False
            return _match_number(self.operator, as_timestamp(event.time))
        return False


# =============================================================================
# Expression parsing
# =============================================================================

# Longest operators first so "=~" isn't read as "=" followed by "~"
_EXPRESSION = re.compile(r"^(nick|time|type|text)(==|=~|~|>|<)(.*)$", re.DOTALL)


def parse_filter(expression: str) -> Filter:
    """
    Parse a filter expression such as ``nick~bot``.

    Args:
        expression: ``<subject><op><value>`` with subjects nick, time, type,
            text and operators ``==``, ``~``, ``=~``, ``>``, ``<``

    Returns:
        The corresponding Filter

    Raises:
        ValueError: If the expression is malformed, the regex is invalid or
            a numeric comparison has a non-integer value
    """
    m = _EXPRESSION.match(expression.strip())
    if not m:
        raise ValueError(
            f"Invalid filter expression: {expression!r} "
            f"(expected <nick|time|type|text><==|~|=~|>|<><value>)"
        )

    subject = Subject(m.group(1))
    symbol, value = m.group(2), m.group(3)

    if subject is Subject.TIME:
        try:
            number = int(value)
        except ValueError:
            raise ValueError(f"Time filters need an integer timestamp, got {value!r}") from None
        if symbol == "==":
            return Filter(subject, Equal(number))
        if symbol == ">":
            return Filter(subject, Greater(number))
        if symbol == "<":
            return Filter(subject, Less(number))
        raise ValueError(f"Operator {symbol!r} does not apply to time")

    if symbol == "==":
        return Filter(subject, Exactly(value))
    if symbol == "~":
        return Filter(subject, Contains(value))
    if symbol == "=~":
        try:
            return Filter(subject, Matches(re.compile(value)))
        except re.error as e:
            raise ValueError(f"Invalid regular expression {value!r}: {e}") from e
    raise ValueError(f"Operator {symbol!r} does not apply to {subject.value}")
