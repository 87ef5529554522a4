"""
Format registry for log format adapters.

Provides registration and lookup of format implementations by name or
short alias (e.g. ``"energymech"`` / ``"em"``). Formats register
themselves when ``irc_log_pipeline.ingestion.formats`` is imported.
"""

import logging
from typing import Type

from .base import LogFormat
from .exceptions import FormatNotFoundError, FormatNotImplementedError

logger = logging.getLogger(__name__)


class FormatRegistry:
    """
    Registry for log formats.

    Usage:
        # Register using decorator
        @FormatRegistry.register('energymech', 'em')
        class EnergymechFormat(LineFormat):
            ...

        # Or register manually
        FormatRegistry.register_format('energymech', EnergymechFormat, aliases=['em'])

        # Get format instance
        fmt = FormatRegistry.get_format('em')

        # List all formats
        formats = FormatRegistry.list_formats()
    """

    _formats: dict[str, Type[LogFormat]] = {}
    _aliases: dict[str, str] = {}
    _reserved: set[str] = set()

    @classmethod
    def register(cls, format_name: str, *aliases: str):
        """
        Decorator to register a format class.

        Args:
            format_name: Canonical format identifier
            *aliases: Additional short names resolving to the same format

        Returns:
            Decorator function
        """

        def decorator(format_class: Type[LogFormat]) -> Type[LogFormat]:
            cls.register_format(format_name, format_class, aliases=list(aliases))
            return format_class

        return decorator

    @classmethod
    def register_format(
        cls,
        format_name: str,
        format_class: Type[LogFormat],
        aliases: list[str] | None = None,
    ) -> None:
        """
        Register a format class.

        Args:
            format_name: Canonical format identifier (e.g., 'weechat')
            format_class: Class implementing LogFormat
            aliases: Optional short names (e.g., ['w'])

        Raises:
            TypeError: If format_class doesn't inherit from LogFormat
        """
        if not issubclass(format_class, LogFormat):
            raise TypeError(
                f"Format class must inherit from LogFormat, "
                f"got {format_class.__name__}"
            )

        format_name = format_name.lower()

        if format_name in cls._formats:
            logger.warning(f"Overwriting existing format '{format_name}'")

        cls._formats[format_name] = format_class
        cls._reserved.discard(format_name)
        for alias in aliases or []:
            cls._aliases[alias.lower()] = format_name
        logger.debug(f"Registered log format: {format_name}")

    @classmethod
    def reserve(cls, format_name: str) -> None:
        """
        Reserve a format name that has no implementation yet.

        Looking up a reserved name raises FormatNotImplementedError instead
        of FormatNotFoundError.
        """
        cls._reserved.add(format_name.lower())

    @classmethod
    def resolve(cls, format_name: str) -> str:
        """
        Resolve an alias to its canonical format name.

        Raises:
            FormatNotImplementedError: If the name is reserved
            FormatNotFoundError: If the name is unknown
        """
        name = format_name.lower()
        name = cls._aliases.get(name, name)

        if name in cls._formats:
            return name
        if name in cls._reserved:
            raise FormatNotImplementedError(name)
        raise FormatNotFoundError(
            format_name=format_name,
            available_formats=cls.list_formats(),
        )

    @classmethod
    def get_format_class(cls, format_name: str) -> Type[LogFormat]:
        """Get a format class by name or alias (without instantiation)."""
        return cls._formats[cls.resolve(format_name)]

    @classmethod
    def get_format(cls, format_name: str) -> LogFormat:
        """
        Get a format instance by name or alias.

        Raises:
            FormatNotFoundError: If the format is not registered
            FormatNotImplementedError: If the name is reserved
        """
        return cls.get_format_class(format_name)()

    @classmethod
    def list_formats(cls, include_reserved: bool = False) -> list[str]:
        """
        List canonical format names.

        Args:
            include_reserved: Also list reserved, unimplemented names

        Returns:
            Sorted list of format identifiers
        """
        names = set(cls._formats)
        if include_reserved:
            names |= cls._reserved
        return sorted(names)

    @classmethod
    def aliases_for(cls, format_name: str) -> list[str]:
        """Return the sorted aliases of a canonical format name."""
        name = format_name.lower()
        return sorted(alias for alias, target in cls._aliases.items() if target == name)

    @classmethod
    def is_format_registered(cls, format_name: str) -> bool:
        """Check if a format (or alias) is registered and implemented."""
        name = format_name.lower()
        return cls._aliases.get(name, name) in cls._formats

    @classmethod
    def clear(cls) -> None:
        """
        Clear all registered formats.

        Primarily used for testing to reset registry state.
        """
        cls._formats.clear()
        cls._aliases.clear()
        cls._reserved.clear()
        logger.debug("Cleared log format registry")


# =============================================================================
# Convenience Functions
# =============================================================================


def get_format(format_name: str) -> LogFormat:
    """Get a format instance by name or alias."""
    return FormatRegistry.get_format(format_name)


def get_decoder(format_name: str) -> LogFormat:
    """
    Get a format instance for decoding.

    Formats are symmetric, so this is the same object ``get_encoder``
    returns; the separate names keep call sites explicit.
    """
    return FormatRegistry.get_format(format_name)


def get_encoder(format_name: str) -> LogFormat:
    """Get a format instance for encoding."""
    return FormatRegistry.get_format(format_name)


def register_format(
    format_name: str, format_class: Type[LogFormat], aliases: list[str] | None = None
) -> None:
    """Register a format class."""
    FormatRegistry.register_format(format_name, format_class, aliases=aliases)


def list_formats(include_reserved: bool = False) -> list[str]:
    """List all registered format names."""
    return FormatRegistry.list_formats(include_reserved=include_reserved)
