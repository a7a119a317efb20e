"""Dataclasses for Notion blocks and run statistics."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Block types that are separate addressable containers; listed but never descended into
CONTAINER_BLOCK_TYPES = frozenset({"child_page", "child_database"})


@dataclass
class Block:
    """A node of a page's content tree, as fetched during one run."""

    id: str
    type: str
    payload: Dict[str, Any] = field(default_factory=dict)
    has_children: bool = False
    parent_id: Optional[str] = None
    depth: int = 0
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(
        cls, data: Dict[str, Any], parent_id: Optional[str] = None, depth: int = 0
    ) -> "Block":
        """Build a Block from a block object returned by the API."""
        block_type = data.get("type", "")
        return cls(
            id=data["id"],
            type=block_type,
            payload=data.get(block_type) or {},
            has_children=bool(data.get("has_children", False)),
            parent_id=parent_id,
            depth=depth,
            raw=data,
        )

    @property
    def rich_text(self) -> List[Dict[str, Any]]:
        """Rich text spans of the block (empty for types without text)."""
        return self.payload.get("rich_text") or []

    @property
    def color(self) -> str:
        return self.payload.get("color") or "default"

    @property
    def is_container(self) -> bool:
        """True for sub-pages and linked databases."""
        return self.type in CONTAINER_BLOCK_TYPES


@dataclass
class BlockFailure:
    """A block (or page) that could not be processed."""

    page_id: str
    page_title: str
    error: str
    block_id: Optional[str] = None


@dataclass
class PageResult:
    """Per-page outcome of a mutating transform."""

    page_id: str
    title: str
    matches: int = 0  # blocks that need a change
    changed: int = 0  # blocks actually rewritten
    occurrences: int = 0  # text occurrences (find/replace only)


@dataclass
class TransformStats:
    """Statistics from a transform run across many pages."""

    dry_run: bool = False
    pages_processed: int = 0
    matches: int = 0
    changed: int = 0
    occurrences: int = 0
    failed: int = 0
    pages: List[PageResult] = field(default_factory=list)
    errors: List[BlockFailure] = field(default_factory=list)

    @property
    def pages_with_matches(self) -> List[PageResult]:
        return [page for page in self.pages if page.matches > 0]

    def add_page(self, result: PageResult) -> None:
        self.pages_processed += 1
        self.matches += result.matches
        self.changed += result.changed
        self.occurrences += result.occurrences
        self.pages.append(result)

    def add_failure(self, failure: BlockFailure) -> None:
        self.failed += 1
        self.errors.append(failure)


@dataclass
class WorkflowStats:
    """Statistics from a per-page workflow run (audio, export, copy)."""

    processed: int = 0
    skipped: int = 0
    failed: int = 0
    total_bytes: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.processed + self.skipped + self.failed
