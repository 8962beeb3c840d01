"""Status cache and change-detection loop."""

from ..notifications.events import ChangeEvent
from .models import MonitorStatus, StatusSnapshot, TickResult
from .cache import StatusCache
from .status_monitor import (
    StatusMonitor,
    discovered_collections,
    fixed_collections,
    infer_project_name,
)

__all__ = [
    "ChangeEvent",
    "MonitorStatus",
    "StatusSnapshot",
    "TickResult",
    "StatusCache",
    "StatusMonitor",
    "discovered_collections",
    "fixed_collections",
    "infer_project_name",
]
