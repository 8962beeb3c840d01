"""Notion integration: tree walking, record reading and workspace discovery."""

from .client import NotionClient, extract_page_id_from_url
from .discovery import WorkspaceDiscovery
from .models import (
    Collection,
    DiscoveryResult,
    NormalizedRecord,
    NormalizedStatus,
    StatusBucket,
)
from .ownership import OwnershipResolver
from .reader import CollectionReader
from .status import StatusNormalizer
from .traversal import TreeWalker

__all__ = [
    "NotionClient",
    "extract_page_id_from_url",
    "WorkspaceDiscovery",
    "Collection",
    "DiscoveryResult",
    "NormalizedRecord",
    "NormalizedStatus",
    "StatusBucket",
    "OwnershipResolver",
    "CollectionReader",
    "StatusNormalizer",
    "TreeWalker",
]
