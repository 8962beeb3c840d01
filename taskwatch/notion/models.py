"""Dataclasses for Notion tree nodes, collections and normalized records."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class NodeKind(Enum):
    """Kind of a child block in the page tree."""

    PAGE = "page"
    COLLECTION = "collection"
    OTHER = "other"


class StatusBucket(Enum):
    """Canonical lifecycle bucket for a task status."""

    TODO = "Todo"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


@dataclass
class Node:
    """A child block discovered while listing a page."""

    node_id: str
    kind: NodeKind
    title: str = ""
    parent_id: Optional[str] = None
    depth: int = 0
    block_type: str = ""


@dataclass
class TraversalProgress:
    """Progress tracking for a tree walk."""

    nodes_found: int = 0
    nodes_skipped: int = 0
    current_title: str = ""
    current_depth: int = 0


@dataclass
class Collection:
    """A Notion database found under a page."""

    collection_id: str
    title: str
    parent_id: str
    parent_title: str
    url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.collection_id,
            "title": self.title,
            "parentPageId": self.parent_id,
            "parentPageTitle": self.parent_title,
            "url": self.url,
        }


@dataclass(frozen=True)
class NormalizedStatus:
    """Status label mapped into a canonical bucket."""

    raw_label: str
    color: str
    bucket: StatusBucket
    sub_label: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.raw_label,
            "color": self.color,
            "bucket": self.bucket.value,
            "subLabel": self.sub_label,
        }


@dataclass
class NormalizedRecord:
    """One database entry mapped into a stable shape."""

    record_id: str
    title: str
    created_time: Optional[str] = None
    last_edited_time: Optional[str] = None
    url: Optional[str] = None
    owner_identity: Optional[str] = None
    status: Optional[NormalizedStatus] = None
    due_date: Optional[str] = None
    priority: Optional[str] = None
    assignee: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.record_id,
            "title": self.title,
            "createdTime": self.created_time,
            "lastEditedTime": self.last_edited_time,
            "url": self.url,
            "ownerIdentity": self.owner_identity,
            "status": self.status.to_dict() if self.status else None,
            "dueDate": self.due_date,
            "priority": self.priority,
            "assignee": self.assignee,
            "properties": self.properties,
        }


@dataclass
class OwnedPage:
    """A page whose ownership fields resolve to the requesting user."""

    page_id: str
    title: str
    owner_identity: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.page_id,
            "title": self.title,
            "userEmail": self.owner_identity,
            "url": self.url,
        }


@dataclass
class OwnedCollection:
    """A collection holding at least one record owned by the user."""

    collection: Collection
    record_count: int

    def to_dict(self) -> Dict[str, Any]:
        data = self.collection.to_dict()
        data["recordCount"] = self.record_count
        return data


@dataclass
class WorkspaceTotals:
    """Aggregate counts for administrative summaries."""

    collections: int = 0
    records: int = 0
    users: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DiscoveryResult:
    """Pages and collections relevant to one user."""

    root_id: str
    user_identity: str
    owned_pages: List[OwnedPage] = field(default_factory=list)
    owned_collections: List[OwnedCollection] = field(default_factory=list)
    all_collections: List[Collection] = field(default_factory=list)
    totals: WorkspaceTotals = field(default_factory=WorkspaceTotals)
    errors: List[str] = field(default_factory=list)

    @property
    def total_found(self) -> int:
        return len(self.owned_pages) + len(self.owned_collections)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rootId": self.root_id,
            "userEmail": self.user_identity,
            "userPages": [p.to_dict() for p in self.owned_pages],
            "userDatabases": [c.to_dict() for c in self.owned_collections],
            "databases": [c.to_dict() for c in self.all_collections],
            "totalFound": self.total_found,
            "totals": {
                "collections": self.totals.collections,
                "matchingRecords": self.totals.records,
                "users": list(self.totals.users),
            },
            "errors": list(self.errors),
        }


@dataclass
class PageSummary:
    """One child page of the root in the hierarchy summary."""

    page_id: str
    title: str
    owner_identity: Optional[str]
    url: str
    last_edited_time: Optional[str] = None
    collections: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def record_count(self) -> int:
        return sum(c["recordCount"] for c in self.collections)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.page_id,
            "title": self.title,
            "userEmail": self.owner_identity,
            "url": self.url,
            "lastUpdated": self.last_edited_time,
            "databaseCount": len(self.collections),
            "recordCount": self.record_count,
            "databases": list(self.collections),
        }


@dataclass
class HierarchySummary:
    """Administrative overview of the pages under a root."""

    root_id: str
    pages: List[PageSummary] = field(default_factory=list)
    root_collections: int = 0
    totals: WorkspaceTotals = field(default_factory=WorkspaceTotals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rootId": self.root_id,
            "subPages": [p.to_dict() for p in self.pages],
            "uniqueUsers": list(self.totals.users),
            "totalDatabases": self.totals.collections,
            "totalRecords": self.totals.records,
            "mainPageDatabases": self.root_collections,
        }
