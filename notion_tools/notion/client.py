"""Notion API client wrapper with pagination, rate limiting and retries."""

import logging
import time
from typing import Any, Callable, Dict, Iterator, List, Optional

from notion_client import Client

from ..utils.retry import transient_retrying
from .errors import is_transient_error

PAGE_SIZE = 100


class NotionClient:
    """Notion API client used by every tool.

    All calls go through ``_request`` which sleeps ``rate_limit_delay`` before
    each call and retries transient failures with a linearly increasing
    backoff. Permanent failures are raised immediately.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        rate_limit_delay: float = 0.35,
        max_retries: int = 3,
        retry_backoff: float = 1.0,
        sdk: Optional[Any] = None,
    ):
        """
        Initialize Notion client.

        Args:
            api_key: Notion integration API key
            rate_limit_delay: Delay between API calls (seconds) to avoid rate limits
            max_retries: Attempts made for transient errors
            retry_backoff: Base backoff in seconds, multiplied by the attempt number
            sdk: Pre-built SDK client (used instead of creating one from api_key)
        """
        if sdk is None:
            if not api_key:
                raise ValueError("A Notion API key is required")
            sdk = Client(auth=api_key)
        self.client = sdk
        self.rate_limit_delay = rate_limit_delay
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, notion_config) -> "NotionClient":
        """Create a client from a NotionConfig section."""
        return cls(
            api_key=notion_config.api_key,
            rate_limit_delay=notion_config.rate_limit_delay,
            max_retries=notion_config.max_retries,
            retry_backoff=notion_config.retry_backoff,
        )

    def _rate_limit(self) -> None:
        """Apply rate limiting delay between API calls."""
        if self.rate_limit_delay > 0:
            time.sleep(self.rate_limit_delay)

    def _request(
        self,
        method: Callable[..., Dict[str, Any]],
        max_retries: Optional[int] = None,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """
        Call an SDK method, retrying transient errors.

        Args:
            method: Bound SDK endpoint method
            max_retries: Override for the number of attempts
            **kwargs: Arguments forwarded to the endpoint

        Returns:
            API response
        """
        attempts = max_retries or self.max_retries
        retrying = transient_retrying(
            attempts, self.retry_backoff, is_transient_error, self.logger
        )
        for attempt in retrying:
            with attempt:
                self._rate_limit()
                return method(**kwargs)

    # Reads

    def get_page(self, page_id: str) -> Dict[str, Any]:
        """Fetch a single page by ID."""
        return self._request(self.client.pages.retrieve, page_id=page_id)

    def list_block_children(
        self,
        block_id: str,
        start_cursor: Optional[str] = None,
        page_size: int = PAGE_SIZE,
    ) -> Dict[str, Any]:
        """
        Fetch one page of children of a page or block.

        Returns:
            Raw listing response with ``results``, ``has_more`` and ``next_cursor``
        """
        return self._request(
            self.client.blocks.children.list,
            block_id=block_id,
            start_cursor=start_cursor,
            page_size=page_size,
        )

    def iter_block_children(self, block_id: str) -> Iterator[Dict[str, Any]]:
        """
        Yield all direct children of a page or block, handling pagination.

        Args:
            block_id: Page ID or block ID

        Yields:
            Block objects from the Notion API
        """
        cursor = None
        while True:
            response = self.list_block_children(block_id, start_cursor=cursor)
            yield from response.get("results", [])

            cursor = response.get("next_cursor")
            if not response.get("has_more") or not cursor:
                break

    def query_database(
        self, database_id: str, page_size: int = PAGE_SIZE
    ) -> Iterator[Dict[str, Any]]:
        """
        Query a database and yield all pages, handling pagination.

        Args:
            database_id: Database ID
            page_size: Number of results per page

        Yields:
            Page objects from the database
        """
        cursor = None
        while True:
            response = self._request(
                self.client.databases.query,
                database_id=database_id,
                start_cursor=cursor,
                page_size=page_size,
            )
            yield from response.get("results", [])

            cursor = response.get("next_cursor")
            if not response.get("has_more") or not cursor:
                break

    def _search(self, object_type: str, query: Optional[str] = None) -> Iterator[Dict[str, Any]]:
        cursor = None
        batch = 0
        while True:
            batch += 1
            params: Dict[str, Any] = {
                "filter": {"property": "object", "value": object_type},
                "page_size": PAGE_SIZE,
            }
            if query:
                params["query"] = query
            if cursor:
                params["start_cursor"] = cursor

            response = self._request(self.client.search, **params)
            results = response.get("results", [])
            self.logger.debug(f"Search batch {batch}: {len(results)} {object_type}s")
            yield from results

            cursor = response.get("next_cursor")
            if not response.get("has_more") or not cursor:
                break

    def search_pages(self, query: Optional[str] = None) -> Iterator[Dict[str, Any]]:
        """Yield every page shared with the integration."""
        return self._search("page", query)

    def search_databases(self, query: Optional[str] = None) -> Iterator[Dict[str, Any]]:
        """Yield databases shared with the integration."""
        return self._search("database", query)

    def find_database(self, query: str = "Blogs") -> Optional[str]:
        """
        Find a database by name.

        Prefers a database whose title contains the query (singular); falls back to the
        first search result.

        Args:
            query: Search query

        Returns:
            Database ID, or None if nothing matched
        """
        databases: List[Dict[str, Any]] = list(self.search_databases(query))
        needle = query.lower().rstrip("s")

        for database in databases:
            title = self.get_database_title(database)
            if needle in title.lower():
                self.logger.info(f"Found database: {title}")
                return database["id"]

        if databases:
            self.logger.warning("No database title matched, using first search result")
            return databases[0]["id"]

        return None

    def get_database_title(self, database: Dict[str, Any]) -> str:
        """Extract title from a database object."""
        title_array = database.get("title", [])
        if title_array:
            return "".join(t.get("plain_text", "") for t in title_array)
        return "Untitled Database"

    # Writes

    def update_page(
        self,
        page_id: str,
        properties: Dict[str, Any],
        max_retries: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Update named properties of a page."""
        return self._request(
            self.client.pages.update,
            max_retries=max_retries,
            page_id=page_id,
            properties=properties,
        )

    def append_children(
        self,
        parent_id: str,
        children: List[Dict[str, Any]],
        after: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Append blocks to a parent, optionally right after a given sibling.

        Args:
            parent_id: Page or block that receives the children
            children: Block objects to create
            after: Sibling block ID the new blocks are inserted after

        Returns:
            API response listing the created blocks
        """
        kwargs: Dict[str, Any] = {"block_id": parent_id, "children": children}
        if after:
            kwargs["after"] = after
        return self._request(self.client.blocks.children.append, **kwargs)

    def delete_block(self, block_id: str) -> Dict[str, Any]:
        """Delete (archive) a block."""
        return self._request(self.client.blocks.delete, block_id=block_id)

    def update_block(self, block_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update a block's typed payload in place.

        Args:
            block_id: Block ID
            payload: Mapping of block type to its new payload, e.g.
                ``{"paragraph": {"rich_text": [...]}}``
        """
        return self._request(self.client.blocks.update, block_id=block_id, **payload)
