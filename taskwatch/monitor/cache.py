"""In-memory store of the last observed status per record."""

import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional

from .models import StatusSnapshot

logger = logging.getLogger(__name__)


class StatusCache:
    """Thread-safe map from record ID to its last StatusSnapshot.

    Entries are overwritten on every observation and only removed by
    clear().
    """

    def __init__(self):
        self._entries: Dict[str, StatusSnapshot] = {}
        self._lock = threading.Lock()

    def get(self, entity_id: str) -> Optional[StatusSnapshot]:
        with self._lock:
            return self._entries.get(entity_id)

    def put(self, snapshot: StatusSnapshot) -> None:
        with self._lock:
            self._entries[snapshot.entity_id] = snapshot

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("Status cache cleared")

    def snapshots(self) -> List[StatusSnapshot]:
        with self._lock:
            return list(self._entries.values())

    def last_checked(self) -> Optional[datetime]:
        """Most recent check time across all entries."""
        with self._lock:
            if not self._entries:
                return None
            return max(s.last_checked for s in self._entries.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, entity_id: object) -> bool:
        with self._lock:
            return entity_id in self._entries
