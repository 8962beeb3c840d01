"""Notification dispatch for detected status changes."""

from .base import NotificationDispatcher
from .dispatchers import CompositeDispatcher, LoggingDispatcher
from .events import ChangeEvent

__all__ = ["ChangeEvent", "NotificationDispatcher", "CompositeDispatcher", "LoggingDispatcher"]
