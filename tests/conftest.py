"""Shared fixtures: an in-memory Notion workspace behind a mocked client."""

import time
from typing import Any, Dict, List, Optional

import pytest
from unittest.mock import Mock

from taskwatch.notion.client import NotionClient


def build_record(
    record_id: str,
    title: Optional[str] = "Task",
    status: Optional[str] = None,
    color: str = "default",
    owner: Optional[str] = None,
    people: Optional[List[str]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """Build a database page the way the Notion API returns it."""
    properties: Dict[str, Any] = {}
    if title is not None:
        properties["Title"] = {"type": "title", "title": [{"plain_text": title}]}
    if status is not None:
        properties["Status"] = {"type": "status", "status": {"name": status, "color": color}}
    if owner is not None:
        properties["User Email"] = {"type": "email", "email": owner}
    if people is not None:
        properties["People"] = {
            "type": "people",
            "people": [{"object": "user", "person": {"email": email}} for email in people],
        }
    properties.update(extra)

    return {
        "object": "page",
        "id": record_id,
        "created_time": "2024-01-10T09:00:00.000Z",
        "last_edited_time": "2024-01-15T10:00:00.000Z",
        "url": f"https://www.notion.so/{record_id}",
        "properties": properties,
    }


class FakeWorkspace:
    """Page tree, databases and records served through a mocked NotionClient."""

    def __init__(self, page_size: int = 100):
        self.page_size = page_size
        self.children: Dict[str, List[Dict[str, Any]]] = {}
        self.pages: Dict[str, Dict[str, Any]] = {}
        self.databases: Dict[str, Dict[str, Any]] = {}
        self.records: Dict[str, List[Dict[str, Any]]] = {}
        self.failing: set = set()
        self.query_delay = 0.0
        self.query_calls: List[str] = []

    def add_page(self, parent_id: str, page_id: str, title: str, owner: Optional[str] = None):
        self.children.setdefault(parent_id, []).append(
            {"id": page_id, "type": "child_page", "child_page": {"title": title}}
        )
        properties: Dict[str, Any] = {
            "title": {"type": "title", "title": [{"plain_text": title}]}
        }
        if owner:
            properties["User Email"] = {"type": "email", "email": owner}
        self.pages[page_id] = {
            "object": "page",
            "id": page_id,
            "last_edited_time": "2024-01-15T10:00:00.000Z",
            "properties": properties,
        }
        self.children.setdefault(page_id, [])

    def add_database(self, parent_id: str, db_id: str, title: str, records=()):
        self.children.setdefault(parent_id, []).append(
            {"id": db_id, "type": "child_database", "child_database": {"title": title}}
        )
        self.databases[db_id] = {"object": "database", "id": db_id, "title": [{"plain_text": title}]}
        self.records[db_id] = list(records)

    def add_block(self, parent_id: str, block_id: str, block_type: str = "paragraph"):
        self.children.setdefault(parent_id, []).append(
            {"id": block_id, "type": block_type, block_type: {"rich_text": []}}
        )

    def _list_children(self, block_id: str, cursor: Optional[str] = None):
        if block_id in self.failing:
            raise RuntimeError(f"cannot list {block_id}")
        blocks = self.children.get(block_id, [])
        start = int(cursor) if cursor else 0
        end = start + self.page_size
        has_more = end < len(blocks)
        return {
            "results": blocks[start:end],
            "has_more": has_more,
            "next_cursor": str(end) if has_more else None,
        }

    def _get_page(self, page_id: str):
        if page_id in self.failing:
            raise RuntimeError(f"cannot retrieve page {page_id}")
        return self.pages[page_id]

    def _get_database(self, db_id: str):
        if db_id in self.failing:
            raise RuntimeError(f"cannot retrieve database {db_id}")
        return self.databases[db_id]

    def _query_database(self, db_id: str):
        self.query_calls.append(db_id)
        if self.query_delay:
            time.sleep(self.query_delay)
        if f"query:{db_id}" in self.failing:
            raise RuntimeError(f"cannot query {db_id}")
        yield from list(self.records.get(db_id, []))

    def client(self) -> Mock:
        client = Mock(spec=NotionClient)
        client.list_children.side_effect = self._list_children
        client.get_page.side_effect = self._get_page
        client.get_database.side_effect = self._get_database
        client.query_database.side_effect = self._query_database
        client.get_page_title.side_effect = lambda page: NotionClient.get_page_title(client, page)
        client.get_database_title.side_effect = lambda db: NotionClient.get_database_title(client, db)
        return client


@pytest.fixture
def workspace():
    """Empty fake workspace."""
    return FakeWorkspace()


@pytest.fixture
def make_record():
    """Factory for raw database records."""
    return build_record


@pytest.fixture
def make_workspace():
    """Factory for fake workspaces with a custom listing page size."""
    return FakeWorkspace
