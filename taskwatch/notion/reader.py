"""Read database records and map them into NormalizedRecord."""

import logging
from typing import Any, Dict, List, Optional

from ..errors import CollectionReadError
from .client import NotionClient, page_url, plain_text
from .models import NormalizedRecord
from .ownership import OwnershipResolver
from .status import StatusNormalizer, read_status_property

# Title candidates, checked before falling back to any title-typed property
TITLE_FIELDS = ["Title", "Name", "Project name", "title", "name"]
DUE_DATE_FIELDS = ["DueDate", "Due Date", "Due"]
UNTITLED = "Untitled"


class CollectionReader:
    """Queries Notion databases and normalizes their records."""

    def __init__(
        self,
        client: NotionClient,
        resolver: Optional[OwnershipResolver] = None,
        normalizer: Optional[StatusNormalizer] = None,
    ):
        """
        Initialize reader.

        Args:
            client: NotionClient instance
            resolver: Ownership resolver used by read_filtered
            normalizer: Status normalizer applied to each record's status
        """
        self.client = client
        self.resolver = resolver or OwnershipResolver()
        self.normalizer = normalizer or StatusNormalizer()
        self.logger = logging.getLogger(__name__)

    def fetch(self, collection_id: str) -> List[Dict[str, Any]]:
        """
        Fetch every raw record of a database.

        Raises:
            CollectionReadError: If any page of the query fails
        """
        try:
            return list(self.client.query_database(collection_id))
        except Exception as e:
            raise CollectionReadError(collection_id, e) from e

    def read_all(self, collection_id: str) -> List[NormalizedRecord]:
        """
        Read every record of a database.

        A failed query yields an empty list rather than an error.

        Args:
            collection_id: Database ID

        Returns:
            Normalized records in upstream order
        """
        try:
            pages = self.fetch(collection_id)
        except CollectionReadError as e:
            self.logger.error(str(e))
            return []

        self.logger.debug(f"Read {len(pages)} records from {collection_id}")
        return [self.normalize_record(page) for page in pages]

    def read_filtered(
        self, collection_id: str, user_identity: str
    ) -> List[NormalizedRecord]:
        """
        Read the records of a database that belong to a user.

        Args:
            collection_id: Database ID
            user_identity: Email address of the user

        Returns:
            Normalized records owned by the user (empty on query failure)
        """
        try:
            pages = self.fetch(collection_id)
        except CollectionReadError as e:
            self.logger.error(str(e))
            return []

        owned = [
            self.normalize_record(page)
            for page in pages
            if self.resolver.belongs_to_user(page, user_identity)
        ]
        self.logger.debug(
            f"Found {len(owned)} of {len(pages)} records in {collection_id} "
            f"for {user_identity}"
        )
        return owned

    def normalize_record(self, page: Dict[str, Any]) -> NormalizedRecord:
        """
        Map a raw database page into a NormalizedRecord.

        Args:
            page: Page object from a database query

        Returns:
            NormalizedRecord with title, timestamps, status and property bag
        """
        properties = page.get("properties") or {}
        record_id = page.get("id", "")

        status = None
        status_value = read_status_property(properties)
        if status_value:
            status = self.normalizer.normalize(*status_value)

        return NormalizedRecord(
            record_id=record_id,
            title=self.resolve_title(properties),
            created_time=page.get("created_time"),
            last_edited_time=page.get("last_edited_time"),
            url=page.get("url") or (page_url(record_id) if record_id else None),
            owner_identity=self.resolver.owner_identity(properties),
            status=status,
            due_date=_due_date(properties),
            priority=_select_name(properties.get("Priority")),
            assignee=_first_person_name(properties.get("Assignee")),
            properties=properties,
        )

    def resolve_title(self, properties: Dict[str, Any]) -> str:
        """Resolve a record title through the fallback list, never empty."""
        for name in TITLE_FIELDS:
            prop = properties.get(name)
            if isinstance(prop, dict):
                title = plain_text(prop.get("title")).strip()
                if title:
                    return title

        for prop in properties.values():
            if isinstance(prop, dict) and prop.get("type") == "title":
                title = plain_text(prop.get("title")).strip()
                if title:
                    return title

        return UNTITLED


def _select_name(prop: Any) -> Optional[str]:
    if not isinstance(prop, dict):
        return None
    option = prop.get("select") or {}
    return option.get("name")


def _first_person_name(prop: Any) -> Optional[str]:
    if not isinstance(prop, dict):
        return None
    people = prop.get("people") or []
    if not people:
        return None
    return people[0].get("name")


def _due_date(properties: Dict[str, Any]) -> Optional[str]:
    for name in DUE_DATE_FIELDS:
        prop = properties.get(name)
        if isinstance(prop, dict):
            date = prop.get("date") or {}
            if date.get("start"):
                return date["start"]
    return None
