"""WeeChat log format."""

from .adapter import WeechatFormat

__all__ = ["WeechatFormat"]
