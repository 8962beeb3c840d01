"""Dataclasses for the status cache and poll ticks."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..notifications.events import ChangeEvent
from ..notion.models import StatusBucket


@dataclass(frozen=True)
class StatusSnapshot:
    """Last observed status of one tracked record."""

    entity_id: str
    title: str
    raw_label: str
    bucket: StatusBucket
    last_checked: datetime


@dataclass
class TickResult:
    """Outcome of one poll tick."""

    records_checked: int = 0
    changes: List[ChangeEvent] = field(default_factory=list)
    failed_notifications: int = 0
    skipped_collections: List[str] = field(default_factory=list)
    skipped: bool = False
    rejected: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recordsChecked": self.records_checked,
            "changes": [c.to_dict() for c in self.changes],
            "failedNotifications": self.failed_notifications,
            "skippedCollections": list(self.skipped_collections),
            "skipped": self.skipped,
            "rejected": self.rejected,
        }


@dataclass
class MonitorStatus:
    """Snapshot of the monitor for the status endpoint."""

    is_monitoring: bool
    tasks_tracked: int
    last_check: Optional[datetime]
    interval_seconds: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isMonitoring": self.is_monitoring,
            "tasksTracked": self.tasks_tracked,
            "lastCheck": self.last_check.isoformat() if self.last_check else None,
            "intervalSeconds": self.interval_seconds,
        }
