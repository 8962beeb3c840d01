"""Built-in notification dispatchers."""

import logging
from typing import List

from .events import ChangeEvent
from .base import NotificationDispatcher

logger = logging.getLogger(__name__)


class LoggingDispatcher(NotificationDispatcher):
    """Writes change events to the log."""

    def __init__(self, level: int = logging.INFO):
        super().__init__(name="log")
        self.level = level

    async def dispatch(self, event: ChangeEvent) -> bool:
        recipient = event.owner_identity or "<no recipient>"
        logger.log(
            self.level,
            f"Task '{event.title}' ({event.project_name}) changed "
            f"{event.previous_label} -> {event.current_label}; notify {recipient}",
        )
        return True


class CompositeDispatcher(NotificationDispatcher):
    """Fans an event out to several dispatchers.

    Every dispatcher is attempted; the result is True only when all of
    them succeed.
    """

    def __init__(self, dispatchers: List[NotificationDispatcher]):
        super().__init__(name="composite")
        self.dispatchers = list(dispatchers)

    async def dispatch(self, event: ChangeEvent) -> bool:
        success = True
        for dispatcher in self.dispatchers:
            try:
                delivered = await dispatcher.dispatch(event)
            except Exception as e:
                logger.error(f"Dispatcher '{dispatcher.get_name()}' failed for {event.entity_id}: {e}")
                delivered = False
            success = success and delivered
        return success
