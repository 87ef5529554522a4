"""
Decode/encode context.

The context is built once per invocation and shared read-only by every
decoder, encoder and operation.
"""

from dataclasses import dataclass, replace
from datetime import date, timezone, tzinfo
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from ..config.settings import Settings


@dataclass(frozen=True)
class Context:
    """
    Caller-supplied configuration for decoding and encoding.

    Attributes:
        timezone_in: Offset used to interpret input times
        timezone_out: Offset used to render output times
        override_date: Date substituted when a format only has times of day
        channel: Default channel for events that don't carry their own
    """

    timezone_in: tzinfo = timezone.utc
    timezone_out: tzinfo = timezone.utc
    override_date: Optional[date] = None
    channel: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: "Settings") -> "Context":
        """Create a Context from application settings."""
        return cls(
            timezone_in=settings.timezone_in,
            timezone_out=settings.timezone_out,
            override_date=settings.override_date,
            channel=settings.channel,
        )

    def with_inferred_date(self, path: Union[str, Path]) -> "Context":
        """
        Return a copy whose override date is taken from a file name.

        Log files are commonly named after their day, e.g. ``2016-02-26.log``.
        The stem is tried first, then the stem without further suffixes
        (``2016-02-26.log.gz``). If neither is an ISO date the context is
        returned unchanged.
        """
        name = Path(path).name
        for candidate in (Path(name).stem, name.split(".", 1)[0]):
            try:
                inferred = date.fromisoformat(candidate)
            except ValueError:
                continue
            return replace(self, override_date=inferred)
        return self
