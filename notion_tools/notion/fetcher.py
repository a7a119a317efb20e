"""Depth-first block tree fetching for a single page."""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List, Optional

from .client import NotionClient, PAGE_SIZE
from .errors import is_unsupported_block_error
from .models import Block


@dataclass
class _ListingFrame:
    """Pagination state for one container whose children are being listed."""

    container_id: str
    depth: int
    cursor: Optional[str] = None
    exhausted: bool = False
    pending: Deque[Dict] = field(default_factory=deque)


class BlockTreeFetcher:
    """Fetches the full, pre-order block list of a page or block.

    Every block reporting ``has_children`` is expanded in place, directly
    after itself, except sub-pages and linked databases which are returned as
    leaves. The walk uses an explicit stack of listing frames so arbitrarily
    deep trees don't grow the call stack.
    """

    def __init__(self, client: NotionClient, page_size: int = PAGE_SIZE):
        """
        Initialize fetcher.

        Args:
            client: NotionClient instance
            page_size: Children requested per listing call
        """
        self.client = client
        self.page_size = page_size
        self.logger = logging.getLogger(__name__)
        self.last_errors: List[str] = []
        self.last_skipped: List[str] = []
        self.listing_calls = 0

    def fetch(
        self,
        container_id: str,
        descend: Optional[Callable[[Block], bool]] = None,
    ) -> List[Block]:
        """
        Fetch all descendant blocks of a container.

        A listing failure aborts pagination of that subtree only; whatever was
        collected so far is kept. Listings rejected because the block type is
        unsupported are skipped silently.

        Args:
            container_id: Page ID or block ID
            descend: Optional predicate; blocks for which it returns False are
                not expanded

        Returns:
            Blocks in provider sibling order, each followed by its subtree
        """
        self.last_errors = []
        self.last_skipped = []
        self.listing_calls = 0

        blocks: List[Block] = []
        stack: List[_ListingFrame] = [_ListingFrame(container_id=container_id, depth=0)]

        while stack:
            frame = stack[-1]

            if not frame.pending:
                if frame.exhausted:
                    stack.pop()
                    continue
                if not self._load_next_batch(frame):
                    stack.pop()
                continue

            block = Block.from_api(
                frame.pending.popleft(), parent_id=frame.container_id, depth=frame.depth
            )
            blocks.append(block)

            if self._should_descend(block, descend):
                stack.append(_ListingFrame(container_id=block.id, depth=frame.depth + 1))

        return blocks

    def _should_descend(
        self, block: Block, descend: Optional[Callable[[Block], bool]]
    ) -> bool:
        if not block.has_children or block.is_container:
            return False
        return descend is None or descend(block)

    def _load_next_batch(self, frame: _ListingFrame) -> bool:
        """
        Request the next page of children for a frame.

        Returns:
            False if the listing failed and the subtree should be abandoned
        """
        try:
            self.listing_calls += 1
            response = self.client.list_block_children(
                frame.container_id, start_cursor=frame.cursor, page_size=self.page_size
            )
        except Exception as e:
            if is_unsupported_block_error(e):
                self.logger.debug(f"Skipping unsupported block {frame.container_id}: {e}")
                self.last_skipped.append(frame.container_id)
            else:
                self.logger.error(f"Error fetching children of {frame.container_id}: {e}")
                self.last_errors.append(f"{frame.container_id}: {e}")
            return False

        frame.pending.extend(response.get("results", []))
        frame.cursor = response.get("next_cursor")
        frame.exhausted = not response.get("has_more") or not frame.cursor
        return True
