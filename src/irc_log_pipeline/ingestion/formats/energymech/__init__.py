"""Energymech log format."""

from .adapter import EnergymechFormat

__all__ = ["EnergymechFormat"]
