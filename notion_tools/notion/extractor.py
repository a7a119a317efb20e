"""Plain-text extraction from blocks for speech synthesis and Markdown export."""

import re
from enum import Enum
from typing import Any, Dict, Iterable, List

from .models import Block


class ExtractMode(str, Enum):
    """Output flavour of extracted text."""

    FLAT = "flat"  # speech synthesis input
    STRUCTURED = "structured"  # Markdown export


TEXT_BLOCK_TYPES = frozenset(
    {
        "paragraph",
        "heading_1",
        "heading_2",
        "heading_3",
        "bulleted_list_item",
        "numbered_list_item",
        "to_do",
        "toggle",
        "quote",
        "callout",
        "code",
    }
)

_WHITESPACE_RUN = re.compile(r"\s+")
_SENTENCE_THEN_CAPITAL = re.compile(r"([.!?])\s*([A-Z])")
_SPACE_BEFORE_PUNCTUATION = re.compile(r"\s+([.,;:!?])")
_BLANK_LINE_RUN = re.compile(r"\n{3,}")


def span_text(span: Dict[str, Any]) -> str:
    """Literal content of one rich text span (link targets are ignored)."""
    if "plain_text" in span and span["plain_text"] is not None:
        return span["plain_text"]
    text = span.get("text") or {}
    return text.get("content", "") or ""


def rich_text_to_plain(spans: Iterable[Dict[str, Any]]) -> str:
    """Join span contents in order with no separator."""
    return "".join(span_text(span) for span in spans or [])


def block_to_text(block: Block, mode: ExtractMode = ExtractMode.FLAT) -> str:
    """
    Render one block as text.

    Args:
        block: Block to render
        mode: FLAT for speech input, STRUCTURED for Markdown

    Returns:
        Formatted text, or an empty string for unsupported or empty blocks
    """
    block_type = block.type

    if block_type == "divider":
        return "\n" if mode == ExtractMode.FLAT else "\n---\n"

    if block_type not in TEXT_BLOCK_TYPES:
        return ""

    text = rich_text_to_plain(block.rich_text)
    if not text:
        return ""

    if mode == ExtractMode.FLAT:
        if block_type == "code":
            return text
        if block_type in ("heading_3", "bulleted_list_item", "numbered_list_item", "quote"):
            return f"{text}\n"
        return f"{text} "

    if block_type == "heading_1":
        return f"\n# {text}\n"
    if block_type == "heading_2":
        return f"\n## {text}\n"
    if block_type == "heading_3":
        return f"\n### {text}\n"
    if block_type == "bulleted_list_item":
        return f"• {text}\n"
    if block_type == "numbered_list_item":
        # No running counter; Markdown renderers renumber
        return f"1. {text}\n"
    if block_type == "quote":
        return f"> {text}\n"
    if block_type == "code":
        return f"```\n{text}\n```\n"
    return f"{text}\n"


def normalize_flat_text(text: str) -> str:
    """
    Clean up text for speech synthesis.

    Collapses whitespace runs, makes sure a sentence end followed by a
    capital letter is separated by one space and removes whitespace before
    punctuation. Intentional multi-space formatting is lost.
    """
    text = _WHITESPACE_RUN.sub(" ", text)
    text = _SENTENCE_THEN_CAPITAL.sub(r"\1 \2", text)
    text = _SPACE_BEFORE_PUNCTUATION.sub(r"\1", text)
    return text.strip()


def assemble_content(blocks: Iterable[Block], mode: ExtractMode = ExtractMode.FLAT) -> str:
    """
    Concatenate the text of many blocks into one document.

    Args:
        blocks: Blocks in document order
        mode: Extraction mode

    Returns:
        Assembled document
    """
    parts: List[str] = []
    for block in blocks:
        text = block_to_text(block, mode)
        if text.strip():
            parts.append(text)

    content = "".join(parts)
    if mode == ExtractMode.FLAT:
        return normalize_flat_text(content)
    return _BLANK_LINE_RUN.sub("\n\n", content).strip()
