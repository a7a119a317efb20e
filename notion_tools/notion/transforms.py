"""Destructive block type conversion.

The API can't change a block's type in place, so a conversion appends a new
block of the target type right after the original (same parent, same spans,
same color) and then deletes the original.
"""

import copy
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .client import NotionClient
from .fetcher import BlockTreeFetcher
from .models import Block, BlockFailure, PageResult, TransformStats
from .properties import get_title

SUPPORTED_CONVERSIONS = frozenset(
    {
        ("to_do", "bulleted_list_item"),
        ("bulleted_list_item", "to_do"),
        ("numbered_list_item", "bulleted_list_item"),
        ("bulleted_list_item", "numbered_list_item"),
        ("quote", "paragraph"),
    }
)

SpanDecorator = Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]
ProgressCallback = Callable[[int, int, str], None]


def text_span(content: str) -> Dict[str, Any]:
    """Build a plain text span."""
    return {"type": "text", "text": {"content": content}, "plain_text": content}


def wrap_in_quotes(spans: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Surround spans with literal double quote spans."""
    return [text_span('"')] + spans + [text_span('"')]


class BlockTypeConverter:
    """Converts every block of one type into another type across pages."""

    def __init__(
        self,
        client: NotionClient,
        source_type: str,
        target_type: str,
        decorate: Optional[SpanDecorator] = None,
        fetcher: Optional[BlockTreeFetcher] = None,
    ):
        """
        Initialize converter.

        Args:
            client: NotionClient instance
            source_type: Block type to replace
            target_type: Block type of the replacement
            decorate: Optional function applied to the copied span list
            fetcher: Block tree fetcher (created from client if omitted)

        Raises:
            ValueError: If the conversion pair isn't supported
        """
        if (source_type, target_type) not in SUPPORTED_CONVERSIONS:
            raise ValueError(f"Conversion from {source_type} to {target_type} is not supported")

        self.client = client
        self.source_type = source_type
        self.target_type = target_type
        self.decorate = decorate
        self.fetcher = fetcher or BlockTreeFetcher(client)
        self.logger = logging.getLogger(__name__)

    def build_replacement(self, block: Block) -> Dict[str, Any]:
        """
        Build the replacement block object.

        Spans are deep-copied in their original order; color is carried over.
        """
        spans = copy.deepcopy(block.rich_text)
        if self.decorate:
            spans = self.decorate(spans)

        payload: Dict[str, Any] = {"rich_text": spans, "color": block.color}
        if self.target_type == "to_do":
            payload["checked"] = False

        return {"object": "block", "type": self.target_type, self.target_type: payload}

    def find_matches(self, page_id: str) -> List[Block]:
        """
        Walk a page and return the blocks of the source type.

        Matching blocks are not descended into since they are about to be
        deleted; every other block with children is.
        """
        blocks = self.fetcher.fetch(page_id, descend=lambda b: b.type != self.source_type)
        return [block for block in blocks if block.type == self.source_type]

    def convert_block(self, block: Block) -> None:
        """Replace one block: append the new block after it, then delete it."""
        if block.has_children:
            self.logger.warning(
                f"Block {block.id} has nested children; they are removed with the original"
            )
        parent_id = block.parent_id
        if not parent_id:
            raise ValueError(f"Block {block.id} has no known parent")

        self.client.append_children(parent_id, [self.build_replacement(block)], after=block.id)
        self.client.delete_block(block.id)

    def convert_page(
        self,
        page_id: str,
        title: str,
        dry_run: bool,
        stats: TransformStats,
    ) -> PageResult:
        """
        Convert all matching blocks on one page.

        Per-block failures are recorded on ``stats`` and don't stop the page.
        """
        result = PageResult(page_id=page_id, title=title)
        matches = self.find_matches(page_id)

        for error in self.fetcher.last_errors:
            stats.add_failure(BlockFailure(page_id=page_id, page_title=title, error=error))

        result.matches = len(matches)
        for block in matches:
            if dry_run:
                self.logger.debug(f"Would convert {block.type} block {block.id}")
                continue
            try:
                self.convert_block(block)
                result.changed += 1
                self.logger.debug(f"Converted block {block.id} to {self.target_type}")
            except Exception as e:
                self.logger.error(f"Failed to convert block {block.id}: {e}")
                stats.add_failure(
                    BlockFailure(page_id=page_id, page_title=title, error=str(e), block_id=block.id)
                )

        return result

    def run(
        self,
        pages: Iterable[Dict[str, Any]],
        dry_run: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> TransformStats:
        """
        Convert blocks across many pages.

        Args:
            pages: Page objects to process
            dry_run: Count matches without writing
            progress_callback: Called with (index, total, title) before each page

        Returns:
            TransformStats for the run
        """
        pages = list(pages)
        stats = TransformStats(dry_run=dry_run)
        self.logger.info(
            f"Converting {self.source_type} to {self.target_type} on {len(pages)} pages"
            f"{' (dry run)' if dry_run else ''}"
        )

        for index, page in enumerate(pages, start=1):
            title = get_title(page)
            if progress_callback:
                progress_callback(index, len(pages), title)
            try:
                stats.add_page(self.convert_page(page["id"], title, dry_run, stats))
            except Exception as e:
                self.logger.error(f"Error processing page {title}: {e}")
                stats.add_failure(BlockFailure(page_id=page["id"], page_title=title, error=str(e)))

        return stats


def checkbox_to_bullet(
    client: NotionClient, fetcher: Optional[BlockTreeFetcher] = None
) -> BlockTypeConverter:
    """Converter turning to-do checkboxes into bulleted list items."""
    return BlockTypeConverter(client, "to_do", "bulleted_list_item", fetcher=fetcher)


def quote_to_paragraph(
    client: NotionClient,
    add_quote_marks: bool = True,
    fetcher: Optional[BlockTreeFetcher] = None,
) -> BlockTypeConverter:
    """Converter turning quote blocks into paragraphs, optionally wrapped in quote marks."""
    return BlockTypeConverter(
        client,
        "quote",
        "paragraph",
        decorate=wrap_in_quotes if add_quote_marks else None,
        fetcher=fetcher,
    )
