"""Page enumeration across a workspace or a single database."""

import logging
from typing import Any, Dict, Iterator, List, Optional

from .client import NotionClient


class WorkspaceTraverser:
    """Enumerates the pages a tool should process."""

    def __init__(self, client: NotionClient):
        """
        Initialize traverser.

        Args:
            client: NotionClient instance
        """
        self.client = client
        self.logger = logging.getLogger(__name__)

    def all_pages(self) -> List[Dict[str, Any]]:
        """
        Fetch every page shared with the integration.

        Pages are collected up front so that mutating tools don't page through
        search results while editing the same workspace.
        """
        self.logger.info("Fetching all pages from Notion workspace")
        pages = list(self.client.search_pages())
        self.logger.info(f"Found {len(pages)} pages in workspace")
        return pages

    def database_pages(
        self, database_id: str, limit: Optional[int] = None
    ) -> Iterator[Dict[str, Any]]:
        """
        Yield pages of a database, stopping after ``limit`` pages.

        Args:
            database_id: Database ID
            limit: Maximum number of pages to yield (None for all)
        """
        page_size = min(limit, 100) if limit else 100
        for count, page in enumerate(
            self.client.query_database(database_id, page_size=page_size), start=1
        ):
            yield page
            if limit and count >= limit:
                self.logger.debug(f"Stopping after {limit} pages")
                return

    def resolve_database(
        self, database_id: Optional[str] = None, query: str = "Blogs"
    ) -> Optional[str]:
        """Return the configured database ID, or search for one by name."""
        if database_id:
            return database_id
        self.logger.info(f"Searching for database matching '{query}'")
        return self.client.find_database(query)
