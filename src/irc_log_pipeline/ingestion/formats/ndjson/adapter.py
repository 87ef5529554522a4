"""
NDJSON log format.

One JSON object per line, as produced by ``Event.to_dict()``. Unlike the
text formats this one represents every event variant and every time
variant, so converting to NDJSON and back is lossless. Example line:

    {"channel":"#chan","content":"hi","from":"Foo","time":1456485265,"type":"message"}
"""

import json
import logging
from typing import Optional

from ...base import LineFormat
from ...context import Context
from ...events import Event
from ...exceptions import ParseError
from ...registry import FormatRegistry

logger = logging.getLogger(__name__)


@FormatRegistry.register("ndjson", "json")
class NdjsonFormat(LineFormat):
    """
    NDJSON format adapter.

    Objects missing a ``channel`` fall back to ``context.channel``. Keys
    are written sorted with compact separators so output is stable.
    """

    skips_unsupported = False

    @property
    def format_name(self) -> str:
        return "ndjson"

    def parse_line(
        self, context: Context, line: str, line_number: int
    ) -> Optional[Event]:
        try:
            obj = json.loads(line)
        except json.JSONDecodeError as e:
            raise ParseError(
                f"Invalid JSON: {e}", line_number=line_number, line_content=line
            ) from e

        try:
            event = Event.from_dict(obj)
        except ValueError as e:
            raise ParseError(str(e), line_number=line_number, line_content=line) from e

        if event.channel is None and context.channel is not None:
            event = Event(type=event.type, time=event.time, channel=context.channel)
        return event

    def format_line(self, context: Context, event: Event) -> Optional[str]:
        return json.dumps(
            event.to_dict(), sort_keys=True, separators=(",", ":"), ensure_ascii=False
        )
