"""Copy page body text into the ``Content`` property."""

import logging
from typing import Any, Dict, Iterable, Optional

from ..notion.client import NotionClient
from ..notion.extractor import ExtractMode, assemble_content
from ..notion.fetcher import BlockTreeFetcher
from ..notion.models import WorkflowStats
from ..notion.properties import get_title
from ..payload.chunking import split_fixed

SPAN_SIZE = 2000
PREVIEW_LENGTH = 100


class ContentCopyWorkflow:
    """Fills the ``Content`` property with each page's flattened text."""

    def __init__(
        self,
        client: NotionClient,
        property_name: str = "Content",
        fetcher: Optional[BlockTreeFetcher] = None,
    ):
        self.client = client
        self.property_name = property_name
        self.fetcher = fetcher or BlockTreeFetcher(client)
        self.stats = WorkflowStats()
        self.logger = logging.getLogger(__name__)

    def build_property(self, content: str) -> Dict[str, Any]:
        spans = [{"type": "text", "text": {"content": part}} for part in split_fixed(content, SPAN_SIZE)]
        return {self.property_name: {"rich_text": spans}}

    def process_page(self, page: Dict[str, Any]) -> str:
        title = get_title(page)
        try:
            content = assemble_content(self.fetcher.fetch(page["id"]), ExtractMode.FLAT)
            if not content:
                self.logger.warning(f"No content found in: {title}")
                self.stats.skipped += 1
                return "skipped"

            self.client.update_page(page["id"], self.build_property(content))
        except Exception as e:
            self.logger.error(f"Error processing {title}: {e}")
            self.stats.failed += 1
            self.stats.errors.append(f"{title}: {e}")
            return "failed"

        self.stats.processed += 1
        self.stats.total_bytes += len(content)
        self.logger.info(f"Processed: {title}")
        self.logger.debug(f"Preview: {content[:PREVIEW_LENGTH]}...")
        return "processed"

    def run(self, pages: Iterable[Dict[str, Any]]) -> WorkflowStats:
        for page in pages:
            self.process_page(page)
        return self.stats
