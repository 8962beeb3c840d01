"""Change event handed from the status monitor to dispatchers."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..notion.models import StatusBucket


@dataclass(frozen=True)
class ChangeEvent:
    """A status transition detected between two poll ticks."""

    entity_id: str
    title: str
    previous_label: str
    current_label: str
    previous_bucket: StatusBucket
    current_bucket: StatusBucket
    owner_identity: Optional[str]
    project_name: str
    url: str
    due_date: Optional[str] = None
    priority: Optional[str] = None
    detected_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "taskId": self.entity_id,
            "taskTitle": self.title,
            "projectName": self.project_name,
            "oldStatus": self.previous_label,
            "newStatus": self.current_label,
            "oldBucket": self.previous_bucket.value,
            "newBucket": self.current_bucket.value,
            "assigneeEmail": self.owner_identity,
            "taskUrl": self.url,
            "dueDate": self.due_date,
            "priority": self.priority,
            "detectedAt": self.detected_at.isoformat(),
        }
