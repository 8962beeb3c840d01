"""Poll tracked databases and notify on task status changes."""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..errors import CollectionReadError
from ..notifications.base import NotificationDispatcher
from ..notifications.events import ChangeEvent
from ..notion.client import plain_text
from ..notion.models import NodeKind, NormalizedRecord
from ..notion.reader import CollectionReader
from ..notion.status import StatusNormalizer
from ..notion.traversal import TreeWalker
from .cache import StatusCache
from .models import MonitorStatus, StatusSnapshot, TickResult

logger = logging.getLogger(__name__)

NOT_STARTED = "Not Started"
UNKNOWN_PROJECT = "Unknown"

CollectionSource = Callable[[], Iterable[str]]


def _select_of(name: str) -> Callable[[Dict[str, Any]], Optional[str]]:
    def read(properties: Dict[str, Any]) -> Optional[str]:
        prop = properties.get(name)
        if isinstance(prop, dict):
            return (prop.get("select") or {}).get("name")
        return None

    return read


def _text_of(name: str, key: str) -> Callable[[Dict[str, Any]], Optional[str]]:
    def read(properties: Dict[str, Any]) -> Optional[str]:
        prop = properties.get(name)
        if isinstance(prop, dict):
            return plain_text(prop.get(key)).strip() or None
        return None

    return read


# First rule yielding a value names the project.
PROJECT_RULES: List[Callable[[Dict[str, Any]], Optional[str]]] = [
    _select_of("Project"),
    _text_of("Project name", "title"),
    _text_of("Project name", "rich_text"),
    _text_of("Project", "rich_text"),
    _select_of("Section"),
]


def infer_project_name(properties: Dict[str, Any]) -> str:
    """Best-effort project label for a record."""
    for rule in PROJECT_RULES:
        value = rule(properties)
        if value:
            return value
    return UNKNOWN_PROJECT


def fixed_collections(collection_ids: Iterable[str]) -> CollectionSource:
    """Collection source returning a fixed list of database IDs."""
    ids = list(collection_ids)
    return lambda: list(ids)


def discovered_collections(
    walker: TreeWalker, root_id: str, max_depth: int = 1
) -> CollectionSource:
    """Collection source listing every database under a root on each call."""

    def source() -> List[str]:
        return [
            node.node_id
            for node in walker.walk(root_id, max_depth=max_depth)
            if node.kind is NodeKind.COLLECTION
        ]

    return source


class StatusMonitor:
    """Periodic read/diff/notify loop over tracked databases.

    A record seen for the first time only seeds the cache. On later ticks a
    differing raw status label produces one ChangeEvent, and the cache is
    overwritten with the current snapshot whether or not delivery of that
    event succeeded. Ticks never overlap.
    """

    def __init__(
        self,
        reader: CollectionReader,
        dispatcher: NotificationDispatcher,
        collection_source: CollectionSource,
        cache: Optional[StatusCache] = None,
        normalizer: Optional[StatusNormalizer] = None,
        interval_seconds: float = 60.0,
        read_timeout_seconds: float = 20.0,
        admin_identity: Optional[str] = None,
    ):
        """
        Initialize monitor.

        Args:
            reader: Collection reader used to fetch records
            dispatcher: Receives one call per detected change
            collection_source: Callable returning the database IDs to watch
            cache: Status cache (a fresh one is created if omitted)
            normalizer: Status normalizer (defaults to the reader's)
            interval_seconds: Seconds between tick starts
            read_timeout_seconds: Timeout for reading one database
            admin_identity: Recipient used when a record has no owner
        """
        self.reader = reader
        self.dispatcher = dispatcher
        self.collection_source = collection_source
        self.cache = cache if cache is not None else StatusCache()
        self.normalizer = normalizer or reader.normalizer
        self.interval_seconds = interval_seconds
        self.read_timeout_seconds = read_timeout_seconds
        self.admin_identity = admin_identity

        self._tick_lock = asyncio.Lock()
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None
        self._last_tick: Optional[datetime] = None

    @property
    def is_monitoring(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background loop; the first tick runs immediately."""
        if self.is_monitoring:
            logger.info("Status monitor already running")
            return

        logger.info(f"Starting status monitor (interval: {self.interval_seconds}s)")
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._stop_event))

    async def stop(self) -> None:
        """Stop the loop, letting an in-flight tick finish first."""
        if not self.is_monitoring:
            return

        self._stop_event.set()
        await self._task
        self._task = None
        logger.info("Stopped status monitor")

    async def _run(self, stop_event: asyncio.Event) -> None:
        loop = asyncio.get_running_loop()
        while not stop_event.is_set():
            next_tick = loop.time() + self.interval_seconds
            try:
                await self.run_tick()
            except Exception as e:
                logger.exception(f"Unexpected error in status monitor tick: {e}")

            try:
                await asyncio.wait_for(
                    stop_event.wait(), timeout=max(0.0, next_tick - loop.time())
                )
            except asyncio.TimeoutError:
                pass

    async def run_tick(self) -> TickResult:
        """
        Run one read/diff/notify pass.

        Returns:
            TickResult; rejected=True if another tick was still in flight
        """
        if self._tick_lock.locked():
            logger.warning("Previous status check still running, skipping tick")
            return TickResult(rejected=True)

        async with self._tick_lock:
            return await self._tick()

    async def _tick(self) -> TickResult:
        result = TickResult()

        try:
            collection_ids = list(await asyncio.to_thread(self.collection_source))
        except Exception as e:
            logger.error(f"Could not resolve tracked databases, skipping tick: {e}")
            result.skipped = True
            return result

        for collection_id in collection_ids:
            pages = await self._read(collection_id)
            if pages is None:
                result.skipped_collections.append(collection_id)
                continue

            for page in pages:
                record = self.reader.normalize_record(page)
                await self._check_record(record, result)

        if collection_ids and len(result.skipped_collections) == len(collection_ids):
            result.skipped = True
        else:
            self._last_tick = datetime.now()

        logger.debug(
            f"Status check done: {result.records_checked} records, "
            f"{len(result.changes)} changes"
        )
        return result

    async def _read(self, collection_id: str) -> Optional[List[Dict[str, Any]]]:
        """Fetch raw records, or None if the read failed or timed out."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.reader.fetch, collection_id),
                timeout=self.read_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Reading database {collection_id} timed out after "
                f"{self.read_timeout_seconds}s, skipping"
            )
        except CollectionReadError as e:
            logger.error(f"{e}, skipping")
        return None

    async def _check_record(self, record: NormalizedRecord, result: TickResult) -> None:
        status = record.status or self.normalizer.normalize(NOT_STARTED)
        current = StatusSnapshot(
            entity_id=record.record_id,
            title=record.title,
            raw_label=status.raw_label,
            bucket=status.bucket,
            last_checked=datetime.now(),
        )
        previous = self.cache.get(record.record_id)
        result.records_checked += 1

        if previous is not None and previous.raw_label != current.raw_label:
            logger.info(
                f"Status change detected for '{record.title}': "
                f"{previous.raw_label} -> {current.raw_label}"
            )
            event = ChangeEvent(
                entity_id=record.record_id,
                title=record.title,
                previous_label=previous.raw_label,
                current_label=current.raw_label,
                previous_bucket=previous.bucket,
                current_bucket=current.bucket,
                owner_identity=record.owner_identity or self.admin_identity,
                project_name=infer_project_name(record.properties),
                url=record.url or "",
                due_date=record.due_date,
                priority=record.priority,
            )
            result.changes.append(event)
            if not await self._notify(event):
                result.failed_notifications += 1

        # Committed even when delivery failed
        self.cache.put(current)

    async def _notify(self, event: ChangeEvent) -> bool:
        try:
            delivered = await self.dispatcher.dispatch(event)
        except Exception as e:
            logger.error(f"Error sending status change notification for '{event.title}': {e}")
            return False

        if delivered:
            logger.info(f"Notification sent for task '{event.title}'")
        else:
            logger.warning(f"Failed to send notification for task '{event.title}'")
        return bool(delivered)

    def get_status(self) -> MonitorStatus:
        return MonitorStatus(
            is_monitoring=self.is_monitoring,
            tasks_tracked=len(self.cache),
            last_check=self._last_tick or self.cache.last_checked(),
            interval_seconds=self.interval_seconds,
        )

    def clear_cache(self) -> None:
        self.cache.clear()
