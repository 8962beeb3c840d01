"""Notion API client wrapper with pagination and title helpers."""

import logging
import re
import time
from typing import Any, Dict, Iterator, Optional

from notion_client import Client

_PAGE_ID_PATTERN = re.compile(r"([a-f0-9]{32})(?:[?#]|$)", re.IGNORECASE)

# Notion rejects page_size above this
MAX_PAGE_SIZE = 100


def extract_page_id_from_url(page_url: str) -> str:
    """
    Extract the page ID from a Notion page URL.

    Args:
        page_url: URL such as https://www.notion.so/Team-Tasks-0123abcd...

    Returns:
        32-character hex page ID

    Raises:
        ValueError: If the URL contains no page ID
    """
    match = _PAGE_ID_PATTERN.search(page_url.strip())
    if not match:
        raise ValueError(f"Failed to extract page ID from URL: {page_url}")
    return match.group(1)


def page_url(object_id: str) -> str:
    """Build the public notion.so URL for a page or database ID."""
    return f"https://notion.so/{object_id.replace('-', '')}"


def plain_text(rich_text: Any) -> str:
    """Join the plain_text parts of a rich text array."""
    if not rich_text:
        return ""
    return "".join(t.get("plain_text", "") for t in rich_text)


class NotionClient:
    """Notion API client with rate limiting, timeouts and pagination."""

    def __init__(
        self,
        api_key: str,
        rate_limit_delay: float = 0.35,
        timeout_ms: int = 30000,
        page_size: int = MAX_PAGE_SIZE,
    ):
        """
        Initialize Notion client.

        Args:
            api_key: Notion integration API key
            rate_limit_delay: Delay between API calls (seconds) to avoid rate limits
            timeout_ms: Per-request timeout passed to the SDK
            page_size: Results per paginated request (capped at 100)
        """
        self.client = Client(auth=api_key, timeout_ms=timeout_ms)
        self.rate_limit_delay = rate_limit_delay
        self.page_size = min(page_size, MAX_PAGE_SIZE)
        self.logger = logging.getLogger(__name__)

    def _rate_limit(self) -> None:
        """Apply rate limiting delay between API calls."""
        if self.rate_limit_delay > 0:
            time.sleep(self.rate_limit_delay)

    def list_children(
        self, block_id: str, cursor: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Fetch one page of child blocks.

        Args:
            block_id: Page ID or block ID
            cursor: Continuation cursor from the previous response

        Returns:
            Raw response with results, has_more and next_cursor
        """
        self._rate_limit()
        kwargs: Dict[str, Any] = {"block_id": block_id, "page_size": self.page_size}
        if cursor:
            kwargs["start_cursor"] = cursor
        return self.client.blocks.children.list(**kwargs)

    def get_page(self, page_id: str) -> Dict[str, Any]:
        """
        Fetch a single page by ID.

        Args:
            page_id: Notion page ID

        Returns:
            Page object from Notion API
        """
        self._rate_limit()
        return self.client.pages.retrieve(page_id=page_id)

    def get_database(self, database_id: str) -> Dict[str, Any]:
        """
        Get database metadata.

        Args:
            database_id: Database ID

        Returns:
            Database object from Notion API
        """
        self._rate_limit()
        return self.client.databases.retrieve(database_id=database_id)

    def query_database(self, database_id: str) -> Iterator[Dict[str, Any]]:
        """
        Query a database and yield all pages, handling pagination.

        Args:
            database_id: Database ID

        Yields:
            Page objects from the database
        """
        cursor = None

        while True:
            self._rate_limit()
            kwargs: Dict[str, Any] = {
                "database_id": database_id,
                "page_size": self.page_size,
            }
            if cursor:
                kwargs["start_cursor"] = cursor
            response = self.client.databases.query(**kwargs)

            for page in response.get("results", []):
                yield page

            if not response.get("has_more"):
                break
            cursor = response.get("next_cursor")
            if not cursor:
                self.logger.warning(
                    f"Database {database_id} reported more results without a cursor"
                )
                break

    def get_page_title(self, page: Dict[str, Any]) -> str:
        """
        Extract title from page properties.

        Args:
            page: Page object from Notion API

        Returns:
            Page title as string
        """
        properties = page.get("properties") or {}

        for prop_name in ["title", "Title", "Name", "name"]:
            prop = properties.get(prop_name)
            if prop and prop.get("type") == "title":
                title = plain_text(prop.get("title"))
                if title:
                    return title

        for prop in properties.values():
            if isinstance(prop, dict) and prop.get("type") == "title":
                title = plain_text(prop.get("title"))
                if title:
                    return title

        return "Untitled"

    def get_database_title(self, database: Dict[str, Any]) -> str:
        """
        Extract title from database.

        Args:
            database: Database object from Notion API

        Returns:
            Database title as string
        """
        title = plain_text(database.get("title"))
        return title or "Untitled Database"
