"""Find and replace text across a workspace.

Matching is exact and case-sensitive with no word boundaries, so replacing
"cat" also rewrites "category". Replacement covers span text, link URLs and
``href`` fields.
"""

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .client import NotionClient
from .fetcher import BlockTreeFetcher
from .models import Block, BlockFailure, PageResult, TransformStats
from .properties import get_title
from .transforms import ProgressCallback

RICH_TEXT_BLOCK_TYPES = frozenset(
    {
        "paragraph",
        "heading_1",
        "heading_2",
        "heading_3",
        "bulleted_list_item",
        "numbered_list_item",
        "toggle",
        "quote",
        "callout",
        "to_do",
        "code",
    }
)


def count_in_rich_text(spans: Iterable[Dict[str, Any]], search: str) -> int:
    """Count non-overlapping occurrences in span text, link URLs and hrefs."""
    count = 0
    for span in spans:
        text = span.get("text") or {}
        if span.get("type") == "text":
            count += (text.get("content") or "").count(search)
            count += ((text.get("link") or {}).get("url") or "").count(search)
        count += (span.get("href") or "").count(search)
    return count


def replace_in_rich_text(
    spans: List[Dict[str, Any]], search: str, replace: str
) -> Tuple[int, List[Dict[str, Any]]]:
    """
    Replace every occurrence of ``search`` in a span list.

    Args:
        spans: Rich text spans (left untouched)
        search: Exact text to find
        replace: Replacement text

    Returns:
        Tuple of (occurrences replaced, updated copy of the spans)
    """
    replaced = 0
    updated: List[Dict[str, Any]] = []

    for span in spans:
        new_span = copy.deepcopy(span)
        text = new_span.get("text")

        if new_span.get("type") == "text" and text:
            content = text.get("content")
            if content and search in content:
                replaced += content.count(search)
                text["content"] = content.replace(search, replace)

            link = text.get("link")
            url = link.get("url") if link else None
            if url and search in url:
                replaced += url.count(search)
                link["url"] = url.replace(search, replace)

        href = new_span.get("href")
        if href and search in href:
            replaced += href.count(search)
            new_span["href"] = href.replace(search, replace)

        updated.append(new_span)

    return replaced, updated


def block_spans(block: Block) -> List[List[Dict[str, Any]]]:
    """Span lists of a block: one for text blocks, one per cell for table rows."""
    if block.type in RICH_TEXT_BLOCK_TYPES:
        return [block.rich_text]
    if block.type == "table_row":
        return [cell or [] for cell in block.payload.get("cells") or []]
    return []


class FindReplace:
    """Replaces literal text in every block of every page."""

    def __init__(
        self,
        client: NotionClient,
        search: str,
        replace: str = "",
        fetcher: Optional[BlockTreeFetcher] = None,
    ):
        """
        Initialize find and replace.

        Args:
            client: NotionClient instance
            search: Text to search for (must not be empty)
            replace: Replacement text
            fetcher: Block tree fetcher (created from client if omitted)
        """
        if not search:
            raise ValueError("Search text cannot be empty")
        self.client = client
        self.search = search
        self.replace = replace
        self.fetcher = fetcher or BlockTreeFetcher(client)
        self.logger = logging.getLogger(__name__)

    def build_update(self, block: Block) -> Tuple[int, Optional[Dict[str, Any]]]:
        """
        Compute the update payload for a block.

        Returns:
            Tuple of (occurrences, payload or None when nothing matched)
        """
        if block.type == "table_row":
            total = 0
            cells = []
            for cell in block_spans(block):
                count, updated = replace_in_rich_text(cell, self.search, self.replace)
                total += count
                cells.append(updated)
            if not total:
                return 0, None
            return total, {"table_row": {"cells": cells}}

        if block.type not in RICH_TEXT_BLOCK_TYPES:
            return 0, None

        count, updated = replace_in_rich_text(block.rich_text, self.search, self.replace)
        if not count:
            return 0, None

        payload: Dict[str, Any] = {"rich_text": updated}
        if block.type == "to_do":
            payload["checked"] = bool(block.payload.get("checked", False))
        elif block.type == "code":
            payload["language"] = block.payload.get("language", "plain text")
        return count, {block.type: payload}

    def count_block(self, block: Block) -> int:
        """Occurrences of the search text in a block."""
        return sum(count_in_rich_text(spans, self.search) for spans in block_spans(block))

    def process_page(
        self,
        page_id: str,
        title: str,
        dry_run: bool,
        stats: TransformStats,
        silent: bool = False,
    ) -> PageResult:
        """
        Replace text in every block of one page.

        A failed block update is recorded and the page continues.
        """
        result = PageResult(page_id=page_id, title=title)
        blocks = self.fetcher.fetch(page_id)

        for error in self.fetcher.last_errors:
            stats.add_failure(BlockFailure(page_id=page_id, page_title=title, error=error))

        for block in blocks:
            if dry_run:
                occurrences = self.count_block(block)
                if occurrences:
                    result.matches += 1
                    result.occurrences += occurrences
                continue

            occurrences, payload = self.build_update(block)
            if payload is None:
                continue

            result.matches += 1
            result.occurrences += occurrences
            try:
                self.client.update_block(block.id, payload)
                result.changed += 1
                self.logger.debug(f"Updated block {block.id} ({occurrences} replacements)")
            except Exception as e:
                self.logger.debug(f"Error updating block {block.id}: {e}")
                if not silent:
                    self.logger.warning(f"Could not process block {block.id}: {e}")
                stats.add_failure(
                    BlockFailure(page_id=page_id, page_title=title, error=str(e), block_id=block.id)
                )

        return result

    def run(
        self,
        pages: Iterable[Dict[str, Any]],
        dry_run: bool = False,
        silent: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> TransformStats:
        """
        Find and replace across many pages.

        Args:
            pages: Page objects to process
            dry_run: Count occurrences without writing
            silent: Suppress per-block warnings
            progress_callback: Called with (index, total, title) before each page

        Returns:
            TransformStats for the run
        """
        pages = list(pages)
        stats = TransformStats(dry_run=dry_run)
        self.logger.info(
            f"Replacing '{self.search}' with '{self.replace}' on {len(pages)} pages"
            f"{' (dry run)' if dry_run else ''}"
        )

        for index, page in enumerate(pages, start=1):
            title = get_title(page)
            if progress_callback:
                progress_callback(index, len(pages), title)
            try:
                stats.add_page(self.process_page(page["id"], title, dry_run, stats, silent))
            except Exception as e:
                self.logger.error(f"Failed to process page {title}: {e}")
                stats.add_failure(BlockFailure(page_id=page["id"], page_title=title, error=str(e)))

        return stats
