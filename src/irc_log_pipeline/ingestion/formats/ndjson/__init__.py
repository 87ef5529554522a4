"""NDJSON log format."""

from .adapter import NdjsonFormat

__all__ = ["NdjsonFormat"]
