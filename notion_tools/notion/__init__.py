"""Notion integration: client, tree walking, extraction and block transforms."""

from .models import Block, TransformStats, WorkflowStats
from .client import NotionClient
from .fetcher import BlockTreeFetcher
from .extractor import ExtractMode, assemble_content, block_to_text
from .traversal import WorkspaceTraverser
from .transforms import BlockTypeConverter, checkbox_to_bullet, quote_to_paragraph
from .find_replace import FindReplace

__all__ = [
    "Block",
    "TransformStats",
    "WorkflowStats",
    "NotionClient",
    "BlockTreeFetcher",
    "ExtractMode",
    "assemble_content",
    "block_to_text",
    "WorkspaceTraverser",
    "BlockTypeConverter",
    "checkbox_to_bullet",
    "quote_to_paragraph",
    "FindReplace",
]
