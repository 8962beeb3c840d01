"""Notification dispatcher interface."""

from abc import ABC, abstractmethod

from .events import ChangeEvent


class NotificationDispatcher(ABC):
    """Delivers status change events to users."""

    def __init__(self, name: str):
        """
        Initialize dispatcher.

        Args:
            name: Dispatcher name used in logs
        """
        self.name = name

    @abstractmethod
    async def dispatch(self, event: ChangeEvent) -> bool:
        """
        Deliver a change event.

        Args:
            event: Detected status transition

        Returns:
            True if delivery succeeded, False otherwise
        """
        pass

    def get_name(self) -> str:
        """Get dispatcher name."""
        return self.name
