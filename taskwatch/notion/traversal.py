"""Paginated traversal of the Notion page tree."""

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Set

from ..errors import TraversalError
from .client import NotionClient, page_url
from .models import Collection, Node, NodeKind, TraversalProgress

_KIND_BY_BLOCK_TYPE = {
    "child_page": NodeKind.PAGE,
    "child_database": NodeKind.COLLECTION,
}


class TreeWalker:
    """Walks child pages and databases under a Notion page.

    Each walk is independent: nothing is cached between calls, and every
    call counts into its own TraversalProgress. Failing to list the starting
    node raises TraversalError, while failures below it are logged and the
    affected subtree is skipped.
    """

    def __init__(
        self,
        client: NotionClient,
        progress_callback: Optional[Callable[[TraversalProgress], None]] = None,
    ):
        """
        Initialize walker.

        Args:
            client: NotionClient instance
            progress_callback: Optional callback for progress updates
        """
        self.client = client
        self.progress_callback = progress_callback
        self.logger = logging.getLogger(__name__)

    def report(self, progress: Optional[TraversalProgress], **kwargs) -> None:
        """Update a call's progress and pass it to the callback if set."""
        if progress is None:
            return
        for key, value in kwargs.items():
            if hasattr(progress, key):
                setattr(progress, key, value)
        if self.progress_callback:
            self.progress_callback(progress)

    def iter_children(self, node_id: str, depth: int = 0) -> Iterator[Node]:
        """
        Lazily list the direct children of a node, one API page at a time.

        Args:
            node_id: Page or block ID
            depth: Depth assigned to the yielded children

        Yields:
            Node descriptors in upstream order

        Raises:
            TraversalError: If any page of the listing cannot be fetched
        """
        cursor = None

        while True:
            try:
                response = self.client.list_children(node_id, cursor)
            except Exception as e:
                raise TraversalError(node_id, e) from e

            for block in response.get("results", []):
                yield self._to_node(block, node_id, depth)

            if not response.get("has_more"):
                break
            cursor = response.get("next_cursor")
            if not cursor:
                break

    def walk(
        self,
        root_id: str,
        max_depth: int = 0,
        progress: Optional[TraversalProgress] = None,
    ) -> Iterator[Node]:
        """
        Depth-first walk yielding the pages and collections under a root.

        Pages are descended into while their depth is below max_depth, so
        max_depth=0 yields only the root's direct children.

        Args:
            root_id: Page ID to start from
            max_depth: Deepest level of pages to descend into
            progress: Counters for this walk (a fresh one if omitted)

        Yields:
            Page and collection nodes

        Raises:
            TraversalError: If the root's children cannot be listed
        """
        if progress is None:
            progress = TraversalProgress()
        visited: Set[str] = {root_id}
        yield from self._walk(root_id, 0, max_depth, visited, progress)

    def _walk(
        self,
        node_id: str,
        depth: int,
        max_depth: int,
        visited: Set[str],
        progress: TraversalProgress,
    ) -> Iterator[Node]:
        for node in self.iter_children(node_id, depth):
            if node.kind is NodeKind.OTHER:
                continue

            if node.node_id in visited:
                self.logger.debug(f"Already visited node: {node.node_id}")
                continue
            visited.add(node.node_id)

            self.report(
                progress,
                nodes_found=progress.nodes_found + 1,
                current_title=node.title,
                current_depth=depth,
            )
            yield node

            if node.kind is NodeKind.PAGE and depth < max_depth:
                try:
                    yield from self._walk(node.node_id, depth + 1, max_depth, visited, progress)
                except TraversalError as e:
                    self.logger.error(f"Error traversing page {node.node_id}: {e}")
                    self.report(progress, nodes_skipped=progress.nodes_skipped + 1)

    def list_collections(self, node_id: str, parent_title: str) -> List[Collection]:
        """
        Retrieve the databases placed directly on a page.

        Databases whose details cannot be retrieved are logged and skipped.

        Args:
            node_id: Page ID to scan
            parent_title: Display title of that page

        Returns:
            Collections in upstream order

        Raises:
            TraversalError: If the page's children cannot be listed
        """
        collections = []
        for node in self.iter_children(node_id):
            if node.kind is not NodeKind.COLLECTION:
                continue
            collection = self.describe_collection(node, parent_title)
            if collection:
                collections.append(collection)

        self.logger.debug(f"Found {len(collections)} databases under {node_id}")
        return collections

    def describe_collection(
        self,
        node: Node,
        parent_title: str,
        progress: Optional[TraversalProgress] = None,
    ) -> Optional[Collection]:
        """
        Fetch database details for a collection node.

        Args:
            node: Node of kind COLLECTION
            parent_title: Display title of the parent page
            progress: Counters of the calling traversal, if any

        Returns:
            Collection, or None if the database could not be retrieved
        """
        try:
            database = self.client.get_database(node.node_id)
        except Exception as e:
            self.logger.error(f"Error retrieving database {node.node_id}: {e}")
            if progress is not None:
                self.report(progress, nodes_skipped=progress.nodes_skipped + 1)
            return None

        return Collection(
            collection_id=node.node_id,
            title=self.client.get_database_title(database),
            parent_id=node.parent_id or "",
            parent_title=parent_title,
            url=database.get("url") or page_url(node.node_id),
        )

    def _to_node(self, block: Dict[str, Any], parent_id: str, depth: int) -> Node:
        """Convert a raw child block into a Node."""
        block_type = block.get("type", "")
        kind = _KIND_BY_BLOCK_TYPE.get(block_type, NodeKind.OTHER)
        title = ""
        if kind is not NodeKind.OTHER:
            title = (block.get(block_type) or {}).get("title", "")

        return Node(
            node_id=block["id"],
            kind=kind,
            title=title,
            parent_id=parent_id,
            depth=depth,
            block_type=block_type,
        )
