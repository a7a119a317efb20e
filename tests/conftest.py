"""Shared fixtures: an in-memory Notion SDK and client helpers."""

import itertools
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from notion_client.errors import APIResponseError

from notion_tools.notion.client import NotionClient


def make_api_error(status: int = 400, code: str = "validation_error", message: str = "error"):
    """Build an APIResponseError without going through an HTTP response."""
    error = APIResponseError.__new__(APIResponseError)
    Exception.__init__(error, message)
    error.status = status
    error.code = code
    error.headers = {}
    error.body = ""
    return error


def span(content: str, href: Optional[str] = None, bold: bool = False) -> Dict[str, Any]:
    """Rich text span as returned by the API."""
    return {
        "type": "text",
        "text": {"content": content, "link": {"url": href} if href else None},
        "annotations": {"bold": bold, "italic": False, "color": "default"},
        "plain_text": content,
        "href": href,
    }


def title_property(title: str) -> Dict[str, Any]:
    return {"type": "title", "title": [span(title)]}


def make_page(page_id: str, title: str = "Page", **properties: Any) -> Dict[str, Any]:
    props = {"Name": title_property(title)}
    props.update(properties)
    return {"object": "page", "id": page_id, "url": f"https://notion.so/{page_id}", "properties": props}


class FakeNotionSDK:
    """In-memory stand-in for ``notion_client.Client``.

    Blocks live in a parent -> ordered children map. Listings paginate with
    numeric cursors; ``has_children`` is derived from the map. Failures can be
    queued per (operation, id).
    """

    def __init__(self):
        self.block_data: Dict[str, Dict[str, Any]] = {}
        self.children: Dict[str, List[str]] = {}
        self.deleted: set = set()
        self.database_rows: Dict[str, List[Dict[str, Any]]] = {}
        self.search_results: Dict[str, List[Dict[str, Any]]] = {"page": [], "database": []}
        self.page_objects: Dict[str, Dict[str, Any]] = {}
        self.page_updates: List[tuple] = []
        self.rejected_properties: Dict[str, Exception] = {}
        self.failures: Dict[tuple, List[Exception]] = {}
        self.calls: List[tuple] = []
        self._ids = itertools.count(1)

        self.blocks = SimpleNamespace(
            children=SimpleNamespace(list=self._list_children, append=self._append_children),
            delete=self._delete_block,
            update=self._update_block,
            retrieve=self._retrieve_block,
        )
        self.pages = SimpleNamespace(update=self._update_page, retrieve=self._retrieve_page)
        self.databases = SimpleNamespace(query=self._query_database)

    # Setup helpers

    def add_block(
        self,
        parent_id: str,
        block_type: str,
        text: Optional[str] = None,
        block_id: Optional[str] = None,
        spans: Optional[List[Dict[str, Any]]] = None,
        **payload: Any,
    ) -> str:
        block_id = block_id or f"block-{next(self._ids)}"
        body = dict(payload)
        if spans is not None:
            body["rich_text"] = spans
        elif text is not None:
            body["rich_text"] = [span(text)]
        body.setdefault("color", "default")
        self.block_data[block_id] = {"object": "block", "id": block_id, "type": block_type, block_type: body}
        self.children.setdefault(parent_id, []).append(block_id)
        return block_id

    def add_page(self, page: Dict[str, Any], database_id: Optional[str] = None) -> Dict[str, Any]:
        self.page_objects[page["id"]] = page
        self.search_results["page"].append(page)
        if database_id:
            self.database_rows.setdefault(database_id, []).append(page)
        return page

    def fail(self, operation: str, target: str, *errors: Exception) -> None:
        """Queue errors raised by the next calls of an operation on a target (None lets a call through)."""
        self.failures.setdefault((operation, target), []).extend(errors)

    def block(self, block_id: str) -> Dict[str, Any]:
        return self.block_data[block_id]

    def child_blocks(self, parent_id: str) -> List[Dict[str, Any]]:
        return [self.block_data[i] for i in self.children.get(parent_id, [])]

    def all_blocks(self) -> List[Dict[str, Any]]:
        return [b for i, b in self.block_data.items() if i not in self.deleted]

    def calls_of(self, operation: str) -> List[Dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == operation]

    # SDK surface

    def _maybe_fail(self, operation: str, target: str) -> None:
        queue = self.failures.get((operation, target))
        if queue:
            error = queue.pop(0)
            if error is not None:
                raise error

    def _serialize(self, block_id: str) -> Dict[str, Any]:
        data = dict(self.block_data[block_id])
        data["has_children"] = bool(self.children.get(block_id)) or data.pop("_force_children", False)
        return data

    def _paginate(self, items: List[Any], start_cursor: Optional[str], page_size: int):
        start = int(start_cursor) if start_cursor else 0
        end = start + page_size
        has_more = end < len(items)
        return items[start:end], has_more, str(end) if has_more else None

    def _list_children(self, block_id: str, start_cursor: Optional[str] = None, page_size: int = 100):
        self.calls.append(("list", {"block_id": block_id, "start_cursor": start_cursor}))
        self._maybe_fail("list", block_id)
        if block_id in self.deleted:
            raise make_api_error(404, "object_not_found", f"Could not find block with ID: {block_id}")
        batch, has_more, cursor = self._paginate(self.children.get(block_id, []), start_cursor, page_size)
        return {
            "object": "list",
            "results": [self._serialize(i) for i in batch],
            "has_more": has_more,
            "next_cursor": cursor,
        }

    def _append_children(self, block_id: str, children: List[Dict[str, Any]], after: Optional[str] = None):
        self.calls.append(("append", {"block_id": block_id, "children": children, "after": after}))
        self._maybe_fail("append", block_id)
        siblings = self.children.setdefault(block_id, [])
        position = siblings.index(after) + 1 if after else len(siblings)
        created = []
        for child in children:
            new_id = f"new-{next(self._ids)}"
            self.block_data[new_id] = dict(child, id=new_id)
            siblings.insert(position, new_id)
            position += 1
            created.append(self._serialize(new_id))
        return {"object": "list", "results": created}

    def _delete_block(self, block_id: str):
        self.calls.append(("delete", {"block_id": block_id}))
        self._maybe_fail("delete", block_id)
        for siblings in self.children.values():
            if block_id in siblings:
                siblings.remove(block_id)
        self.deleted.add(block_id)
        return dict(self.block_data[block_id], archived=True)

    def _retrieve_block(self, block_id: str):
        if block_id in self.deleted or block_id not in self.block_data:
            raise make_api_error(404, "object_not_found", f"Could not find block with ID: {block_id}")
        return self._serialize(block_id)

    def _update_block(self, block_id: str, **payload: Any):
        self.calls.append(("update", dict(payload, block_id=block_id)))
        self._maybe_fail("update", block_id)
        data = self.block_data[block_id]
        for key, value in payload.items():
            data[key] = dict(data.get(key) or {}, **value)
        return self._serialize(block_id)

    def _retrieve_page(self, page_id: str):
        return self.page_objects[page_id]

    def _update_page(self, page_id: str, properties: Dict[str, Any]):
        self.calls.append(("pages.update", {"page_id": page_id, "properties": properties}))
        self._maybe_fail("pages.update", page_id)
        for name in properties:
            if name in self.rejected_properties:
                raise self.rejected_properties[name]
        self.page_updates.append((page_id, properties))
        page = self.page_objects.get(page_id)
        if page is not None:
            for name, value in properties.items():
                page["properties"][name] = dict(value, type="url" if "url" in value else "rich_text")
        return page or {"id": page_id}

    def _query_database(self, database_id: str, start_cursor: Optional[str] = None, page_size: int = 100):
        self.calls.append(("query", {"database_id": database_id, "page_size": page_size}))
        rows = self.database_rows.get(database_id, [])
        batch, has_more, cursor = self._paginate(rows, start_cursor, page_size)
        return {"results": batch, "has_more": has_more, "next_cursor": cursor}

    def search(self, filter: Dict[str, Any], page_size: int = 100, query: Optional[str] = None, start_cursor: Optional[str] = None):
        self.calls.append(("search", {"filter": filter, "query": query}))
        items = self.search_results.get(filter["value"], [])
        batch, has_more, cursor = self._paginate(items, start_cursor, page_size)
        return {"results": batch, "has_more": has_more, "next_cursor": cursor}


@pytest.fixture
def fake_sdk():
    """Empty in-memory workspace."""
    return FakeNotionSDK()


@pytest.fixture
def client(fake_sdk):
    """NotionClient talking to the fake workspace without delays."""
    return NotionClient(sdk=fake_sdk, rate_limit_delay=0, retry_backoff=0)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """Skip rate limit pauses and retry backoff."""
    monkeypatch.setattr("time.sleep", lambda seconds: None)
