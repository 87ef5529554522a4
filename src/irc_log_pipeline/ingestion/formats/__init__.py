"""
Log format adapters.

Importing this package registers every implemented format with the
FormatRegistry. ``binary`` and ``msgpack`` are reserved names without an
implementation.
"""

from ..registry import FormatRegistry
from .energymech import EnergymechFormat
from .ndjson import NdjsonFormat
from .weechat import WeechatFormat

RESERVED_FORMATS = ("binary", "msgpack")

for _name in RESERVED_FORMATS:
    FormatRegistry.reserve(_name)


def register_builtin_formats() -> None:
    """
    (Re-)register the built-in formats.

    Useful after FormatRegistry.clear() in tests.
    """
    FormatRegistry.register_format("energymech", EnergymechFormat, aliases=["em"])
    FormatRegistry.register_format("weechat", WeechatFormat, aliases=["w"])
    FormatRegistry.register_format("ndjson", NdjsonFormat, aliases=["json"])
    for name in RESERVED_FORMATS:
        FormatRegistry.reserve(name)


__all__ = [
    "EnergymechFormat",
    "NdjsonFormat",
    "RESERVED_FORMATS",
    "WeechatFormat",
    "register_builtin_formats",
]
