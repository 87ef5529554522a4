"""
Custom exceptions for the ingestion module.

Provides specialized exception classes for decode, encode and
configuration failures. Read/write failures of the underlying streams are
plain ``OSError`` and are never wrapped.
"""


class IngestionError(Exception):
    """
    Base exception for all ingestion-related errors.

    All other ingestion exceptions inherit from this class,
    allowing for broad exception catching when needed.
    """

    pass


class ParseError(IngestionError):
    """
    Raised (or yielded by decoders) when a log line cannot be parsed.

    Attributes:
        line_number: The line number where parsing failed (optional)
        line_content: The content of the problematic line (optional)
        message: Detailed error message
    """

    def __init__(
        self,
        message: str,
        line_number: int | None = None,
        line_content: str | None = None,
    ):
        self.line_number = line_number
        self.line_content = line_content
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with line context."""
        if self.line_number is not None and self.line_content:
            # Truncate long lines for readability
            content = (
                self.line_content[:100] + "..."
                if len(self.line_content) > 100
                else self.line_content
            )
            return f"{self.message} (line {self.line_number}: {content!r})"
        elif self.line_number is not None:
            return f"{self.message} (line {self.line_number})"
        return self.message


class EncodeError(IngestionError):
    """Raised when an event cannot be written in the target format."""

    pass


class MissingFieldError(EncodeError):
    """
    Raised when the target format requires a field the event lacks.

    Attributes:
        field_name: Name of the missing field
        event_type: Type tag of the event being encoded (optional)
    """

    def __init__(self, field_name: str, event_type: str | None = None):
        self.field_name = field_name
        self.event_type = event_type
        if event_type:
            message = f"Field '{field_name}' not present, but required for {event_type} events"
        else:
            message = f"Field '{field_name}' not present, but required"
        super().__init__(message)


class MissingTimeDataError(EncodeError):
    """Raised when an event with unknown time has to be rendered."""

    def __init__(self, message: str = "Time data for this event is not present"):
        super().__init__(message)


class UnsupportedEventError(EncodeError):
    """
    Raised by formats that reject events they cannot represent.

    Attributes:
        event_type: Type tag of the rejected event
        format_name: Name of the rejecting format
    """

    def __init__(self, event_type: str, format_name: str):
        self.event_type = event_type
        self.format_name = format_name
        super().__init__(
            f"Format '{format_name}' cannot represent {event_type} events"
        )


class ConfigError(IngestionError):
    """Raised for invalid configuration, such as unknown format names."""

    pass


class FormatNotFoundError(ConfigError):
    """
    Raised when a log format is not registered.

    Attributes:
        format_name: The name of the missing format
        available_formats: List of registered format names
    """

    def __init__(
        self,
        format_name: str,
        available_formats: list[str] | None = None,
    ):
        self.format_name = format_name
        self.available_formats = available_formats or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with available formats."""
        if self.available_formats:
            available = ", ".join(sorted(self.available_formats))
            return (
                f"Unknown format: '{self.format_name}'. "
                f"Available formats: {available}"
            )
        return f"Unknown format: '{self.format_name}'. No formats registered."


class FormatNotImplementedError(ConfigError):
    """Raised when a reserved format name has no implementation yet."""

    def __init__(self, format_name: str):
        self.format_name = format_name
        super().__init__(f"Format '{format_name}' is reserved but not implemented")
