"""
Abstract base classes for log formats.

Every format adapter turns raw bytes into canonical Events (decode) and
Events back into bytes (encode). Decoding is lazy and strictly forward:
a decoder never holds more than the current line.
"""

import logging
from abc import ABC, abstractmethod
from typing import IO, Iterable, Iterator, Optional, Union

from .context import Context
from .events import Event
from .exceptions import MissingFieldError, ParseError, UnsupportedEventError

logger = logging.getLogger(__name__)

# A decoded item: either a well-formed event or the error for its line
DecodeResult = Union[Event, ParseError]


class LogFormat(ABC):
    """
    Abstract base class for all log format adapters.

    Subclasses must implement:
        - format_name: Property returning the registry identifier
        - decode(): Generator yielding Events or ParseErrors
        - encode(): Write exactly one event

    Class attributes:
        skips_unsupported: If True, events the format cannot represent are
            skipped silently by encode(); if False, they raise
            UnsupportedEventError.
    """

    skips_unsupported: bool = True

    @property
    @abstractmethod
    def format_name(self) -> str:
        """
        Return the format name identifier.

        This is used for registry lookup and logging.
        """
        pass

    @abstractmethod
    def decode(self, context: Context, reader: IO[bytes]) -> Iterator[DecodeResult]:
        """
        Decode events from a byte stream.

        Each call returns a fresh generator that reads ``reader`` line by
        line until end of input.

        Args:
            context: Decode context (timezones, override date, channel)
            reader: Binary stream, or any iterable of byte lines

        Yields:
            Event objects, or ParseError objects for malformed lines

        Raises:
            OSError: If reading the underlying stream fails
        """
        pass

    @abstractmethod
    def encode(self, context: Context, writer: IO[bytes], event: Event) -> None:
        """
        Encode a single event.

        Args:
            context: Encode context
            writer: Binary output stream
            event: Event to write

        Raises:
            EncodeError: If the event cannot be written in this format
            OSError: If writing fails
        """
        pass

    def unsupported(self, event: Event) -> None:
        """Apply this format's policy for events it cannot represent."""
        if self.skips_unsupported:
            logger.debug(
                f"{self.format_name}: skipping unsupported {event.type_desc()} event"
            )
            return
        raise UnsupportedEventError(event.type_desc(), self.format_name)


class LineFormat(LogFormat):
    """
    Base class for line-oriented text formats.

    Subclasses implement parse_line() and format_line(); this class takes
    care of byte decoding, line numbering and error reporting.
    """

    encoding = "utf-8"

    @abstractmethod
    def parse_line(
        self, context: Context, line: str, line_number: int
    ) -> Optional[Event]:
        """
        Parse one line (without its line terminator).

        Returns:
            The decoded Event, or None if the line carries no event

        Raises:
            ParseError: If the line is malformed
        """
        pass

    @abstractmethod
    def format_line(self, context: Context, event: Event) -> Optional[str]:
        """
        Render one event as a line (without terminator).

        Returns:
            The rendered line, or None if the event is skipped
        """
        pass

    def decode(self, context: Context, reader: IO[bytes]) -> Iterator[DecodeResult]:
        return self._iter_lines(context, reader)

    def _iter_lines(
        self, context: Context, reader: Iterable[Union[bytes, str]]
    ) -> Iterator[DecodeResult]:
        line_number = 0
        for raw in reader:
            line_number += 1
            if isinstance(raw, bytes):
                line = raw.decode(self.encoding, errors="replace")
            else:
                line = raw
            line = line.rstrip("\n").rstrip("\r")

            if not line.strip():
                continue

            logger.debug(f"Original:  `{line}`")
            try:
                event = self.parse_line(context, line, line_number)
            except ParseError as e:
                if e.line_number is None:
                    e = ParseError(e.message, line_number=line_number, line_content=line)
                yield e
                continue

            if event is not None:
                yield event

    def encode(self, context: Context, writer: IO[bytes], event: Event) -> None:
        line = self.format_line(context, event)
        if line is None:
            return
        writer.write((line + "\n").encode(self.encoding))


def only_events(results: Iterable[DecodeResult]) -> Iterator[Event]:
    """Yield the events of a decoded stream, discarding parse errors."""
    for item in results:
        if isinstance(item, ParseError):
            logger.debug(f"Discarding undecodable item: {item}")
            continue
        yield item


def raise_errors(results: Iterable[DecodeResult]) -> Iterator[Event]:
    """Yield the events of a decoded stream, raising the first parse error."""
    for item in results:
        if isinstance(item, ParseError):
            raise item
        yield item


def require_field(value: Optional[str], field_name: str, event_type: str) -> str:
    """
    Return a field value the target format cannot do without.

    Raises:
        MissingFieldError: If the value is absent
    """
    if value is None:
        raise MissingFieldError(field_name, event_type)
    return value

