"""Messages module."""

from .log import IMessageLog, MessageLog

__all__ = ["IMessageLog", "MessageLog"]
