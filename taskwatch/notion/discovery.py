"""Discover the pages and databases of a workspace that belong to a user."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set, TypeVar

from ..errors import TraversalError
from .client import page_url
from .models import (
    Collection,
    DiscoveryResult,
    HierarchySummary,
    Node,
    NodeKind,
    OwnedCollection,
    OwnedPage,
    PageSummary,
    TraversalProgress,
    WorkspaceTotals,
)
from .ownership import OwnershipResolver
from .reader import CollectionReader
from .traversal import TreeWalker

ROOT_TITLE = "Main Workspace"
UNTITLED_PAGE = "Untitled Page"

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class _ScanState:
    """Bookkeeping shared by one discovery call."""

    user_identity: str
    result: DiscoveryResult
    visited: Set[str] = field(default_factory=set)
    collection_ids: Set[str] = field(default_factory=set)
    record_ids: Set[str] = field(default_factory=set)
    users: Set[str] = field(default_factory=set)
    progress: TraversalProgress = field(default_factory=TraversalProgress)


class WorkspaceDiscovery:
    """Composes the walker, reader and resolver into per-user discovery."""

    def __init__(
        self,
        walker: TreeWalker,
        reader: CollectionReader,
        resolver: Optional[OwnershipResolver] = None,
        max_depth: int = 1,
        max_workers: int = 4,
    ):
        """
        Initialize discovery.

        Args:
            walker: Tree walker used to list pages
            reader: Collection reader used to count matching records
            resolver: Ownership resolver (defaults to the reader's)
            max_depth: Levels of child pages to descend into
            max_workers: Parallel collection reads per level
        """
        self.walker = walker
        self.reader = reader
        self.resolver = resolver or reader.resolver
        self.max_depth = max_depth
        self.max_workers = max_workers
        self.logger = logging.getLogger(__name__)

    def discover(self, root_id: str, user_identity: str) -> DiscoveryResult:
        """
        Find the pages and collections under a root that belong to a user.

        Every collection found is listed in all_collections; collections with
        at least one record owned by the user also appear in
        owned_collections with their match count. Failures below the root are
        logged, recorded in result.errors and skipped.

        result.totals counts every distinct collection and page owner seen,
        but only the user's matching records; summarize_hierarchy gives the
        unfiltered record count.

        Args:
            root_id: Workspace root page ID
            user_identity: Email address of the user

        Returns:
            DiscoveryResult for the user

        Raises:
            TraversalError: If the root's children cannot be listed
        """
        self.logger.info(f"Starting discovery for user {user_identity} in page {root_id}")

        result = DiscoveryResult(root_id=root_id, user_identity=user_identity)
        state = _ScanState(user_identity=user_identity, result=result, visited={root_id})

        # Listing the root is the only fatal step
        children = list(self.walker.iter_children(root_id, depth=0))
        self._scan_level(children, root_id, ROOT_TITLE, 0, state)

        result.totals = WorkspaceTotals(
            collections=len(state.collection_ids),
            records=len(state.record_ids),
            users=sorted(state.users),
        )

        self.logger.info(
            f"Discovery complete for {user_identity}: {len(result.owned_pages)} pages, "
            f"{len(result.owned_collections)} of {len(result.all_collections)} databases"
        )
        return result

    def _scan_level(
        self,
        children: List[Node],
        parent_id: str,
        parent_title: str,
        depth: int,
        state: _ScanState,
    ) -> None:
        collections = []
        for node in children:
            if node.kind is not NodeKind.COLLECTION or node.node_id in state.visited:
                continue
            state.visited.add(node.node_id)
            self._found(node, depth, state)
            collection = self.walker.describe_collection(node, parent_title, state.progress)
            if collection:
                collections.append(collection)
            else:
                state.result.errors.append(f"Database {node.node_id} could not be retrieved")

        self._record_collections(collections, state)

        if depth >= self.max_depth:
            return

        for node in children:
            if node.kind is not NodeKind.PAGE or node.node_id in state.visited:
                continue
            state.visited.add(node.node_id)
            self._scan_page(node, depth, state)

    def _record_collections(self, collections: List[Collection], state: _ScanState) -> None:
        """Read collections in parallel, then update bookkeeping in order."""
        reads = self._map(
            lambda c: self.reader.read_filtered(c.collection_id, state.user_identity),
            collections,
        )

        for collection, records in zip(collections, reads):
            state.result.all_collections.append(collection)
            state.collection_ids.add(collection.collection_id)
            if records:
                state.result.owned_collections.append(
                    OwnedCollection(collection=collection, record_count=len(records))
                )
                state.record_ids.update(r.record_id for r in records)

    def _found(self, node: Node, depth: int, state: _ScanState) -> None:
        self.walker.report(
            state.progress,
            nodes_found=state.progress.nodes_found + 1,
            current_title=node.title,
            current_depth=depth,
        )

    def _skipped(self, state: _ScanState) -> None:
        self.walker.report(state.progress, nodes_skipped=state.progress.nodes_skipped + 1)

    def _scan_page(self, node: Node, depth: int, state: _ScanState) -> None:
        self._found(node, depth, state)
        try:
            page = self.walker.client.get_page(node.node_id)
        except Exception as e:
            self.logger.error(f"Error retrieving page {node.node_id}: {e}")
            state.result.errors.append(f"Page {node.node_id} could not be retrieved")
            self._skipped(state)
            return

        title = node.title or self._page_title(page)
        properties = page.get("properties") or {}
        owner = self.resolver.owner_identity(properties)
        if owner:
            state.users.add(owner)

        if self.resolver.belongs_to_user(page, state.user_identity):
            state.result.owned_pages.append(
                OwnedPage(
                    page_id=node.node_id,
                    title=title,
                    owner_identity=state.user_identity,
                    url=page.get("url") or page_url(node.node_id),
                )
            )

        try:
            children = list(self.walker.iter_children(node.node_id, depth=depth + 1))
        except TraversalError as e:
            self.logger.error(str(e))
            state.result.errors.append(f"Children of page {node.node_id} could not be listed")
            self._skipped(state)
            return

        self._scan_level(children, node.node_id, title, depth + 1, state)

    def summarize_hierarchy(self, root_id: str) -> HierarchySummary:
        """
        Summarize the child pages of a root for administrative views.

        Args:
            root_id: Workspace root page ID

        Returns:
            HierarchySummary with per-page collection and record counts

        Raises:
            TraversalError: If the root's children cannot be listed
        """
        summary = HierarchySummary(root_id=root_id)
        users: Set[str] = set()
        total_collections = 0
        total_records = 0

        children = list(self.walker.iter_children(root_id))

        for node in children:
            if node.kind is not NodeKind.PAGE:
                continue
            try:
                page = self.walker.client.get_page(node.node_id)
            except Exception as e:
                self.logger.error(f"Error retrieving page {node.node_id}: {e}")
                continue

            title = node.title or self._page_title(page)
            owner = self.resolver.owner_identity(page.get("properties") or {})
            if owner:
                users.add(owner)

            try:
                collections = self.walker.list_collections(node.node_id, title)
            except TraversalError as e:
                self.logger.error(str(e))
                collections = []

            counts = self._map(lambda c: len(self.reader.read_all(c.collection_id)), collections)
            page_summary = PageSummary(
                page_id=node.node_id,
                title=title,
                owner_identity=owner,
                url=page.get("url") or page_url(node.node_id),
                last_edited_time=page.get("last_edited_time"),
                collections=[
                    {
                        "id": c.collection_id,
                        "title": c.title,
                        "recordCount": count,
                        "url": c.url,
                    }
                    for c, count in zip(collections, counts)
                ],
            )
            summary.pages.append(page_summary)
            total_collections += len(collections)
            total_records += page_summary.record_count

        summary.root_collections = sum(
            1 for node in children if node.kind is NodeKind.COLLECTION
        )
        summary.totals = WorkspaceTotals(
            collections=total_collections + summary.root_collections,
            records=total_records,
            users=sorted(users),
        )
        return summary

    def _page_title(self, page) -> str:
        title = self.walker.client.get_page_title(page)
        return UNTITLED_PAGE if title == "Untitled" else title

    def _map(self, fn: Callable[[T], R], items: Sequence[T]) -> List[R]:
        """Apply fn to items, in parallel when more than one worker is allowed."""
        if not items:
            return []
        if self.max_workers <= 1 or len(items) == 1:
            return [fn(item) for item in items]
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(items))) as executor:
            return list(executor.map(fn, items))
