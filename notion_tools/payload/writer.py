"""Chunked payload writer.

A page property holds at most ``spans_per_field`` rich text spans of at most
``span_size`` characters each. Larger payloads (base64 audio) are spread over
a numbered family of properties: ``Content64``, ``Content64_2``, and so on.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config.config_schema import WriterConfig
from ..notion.client import NotionClient
from ..notion.errors import is_transient_error
from ..notion.extractor import rich_text_to_plain
from ..notion.properties import payload_field_names
from ..utils.retry import transient_retrying
from .chunking import split_fixed


@dataclass
class WriteResult:
    """Outcome of writing one payload."""

    fields_written: int = 0
    chars_written: int = 0
    complete: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """At least one field was stored, even if the payload is incomplete."""
        return self.fields_written > 0


@dataclass
class ClearResult:
    """Outcome of clearing payload fields on one page."""

    fields_cleared: int = 0
    errors: List[str] = field(default_factory=list)


def read_chunked_payload(page: Dict[str, Any], field_names: List[str]) -> str:
    """Reassemble a payload from its properties, stopping at the first empty one."""
    properties = page.get("properties") or {}
    parts = []
    for name in field_names:
        spans = (properties.get(name) or {}).get("rich_text") or []
        if not spans:
            break
        parts.append(rich_text_to_plain(spans))
    return "".join(parts)


class ChunkedPayloadWriter:
    """Writes a large string across numbered rich text properties."""

    def __init__(self, client: NotionClient, config: Optional[WriterConfig] = None):
        self.client = client
        self.config = config or WriterConfig()
        self.field_names = payload_field_names(self.config.field_base, self.config.max_fields)
        self.logger = logging.getLogger(__name__)

    def spans_for_position(self, position: int) -> int:
        """Span capacity of the property at a 1-based position."""
        if position in self.config.fragile_fields:
            return min(self.config.fragile_spans_per_field, self.config.spans_per_field)
        return self.config.spans_per_field

    def plan(self, payload: str) -> List[List[str]]:
        """
        Lay a payload out as a list of span groups, one group per property.

        Groups beyond ``max_fields`` are included so callers can see the
        payload does not fit.
        """
        spans = split_fixed(payload, self.config.span_size)
        groups = []
        position = 1
        index = 0
        while index < len(spans):
            size = self.spans_for_position(position)
            groups.append(spans[index : index + size])
            index += size
            position += 1
        return groups

    def _write_field(self, page_id: str, name: str, spans: List[str]) -> None:
        """Write one property, retrying transient errors with linear backoff."""
        properties = {name: {"rich_text": [{"type": "text", "text": {"content": s}} for s in spans]}}
        retrying = transient_retrying(
            self.config.max_retries, self.config.retry_backoff, is_transient_error, self.logger
        )
        for attempt in retrying:
            with attempt:
                self.client.update_page(page_id, properties, max_retries=1)

    def write(self, page_id: str, payload: str) -> WriteResult:
        """
        Store a payload on a page.

        Properties are written one at a time in increasing order. A permanent
        failure (for example a property missing from the schema) stops the
        write; whatever was stored before it is kept and reported.

        Args:
            page_id: Page ID
            payload: String to store

        Returns:
            WriteResult; ``complete`` is False when only a prefix was stored
        """
        result = WriteResult()
        groups = self.plan(payload)

        if len(groups) > len(self.field_names):
            self.logger.warning(
                f"Payload needs {len(groups)} fields but only {len(self.field_names)} exist; "
                "it will be truncated"
            )

        for position, (name, spans) in enumerate(zip(self.field_names, groups), start=1):
            if position > 1 and self.config.field_pause > 0:
                time.sleep(self.config.field_pause)
            if position in self.config.fragile_fields and self.config.fragile_pause > 0:
                self.logger.debug(f"Extra pause before fragile field {name}")
                time.sleep(self.config.fragile_pause)

            try:
                self._write_field(page_id, name, spans)
            except Exception as e:
                self.logger.error(f"Failed to write {name} on page {page_id}: {e}")
                result.errors.append(f"{name}: {e}")
                break

            result.fields_written += 1
            result.chars_written += sum(len(s) for s in spans)
            self.logger.debug(f"Wrote {name} ({len(spans)} spans)")

        result.complete = result.chars_written == len(payload)
        if result.success and not result.complete:
            self.logger.warning(
                f"Stored {result.chars_written}/{len(payload)} characters on page {page_id}"
            )
        return result

    def clear(self, page: Dict[str, Any], pause: float = 0.2) -> ClearResult:
        """Empty every payload property that currently holds data."""
        result = ClearResult()
        properties = page.get("properties") or {}

        for name in self.field_names:
            prop = properties.get(name)
            if not prop or not prop.get("rich_text"):
                continue
            try:
                self.client.update_page(page["id"], {name: {"rich_text": []}})
                result.fields_cleared += 1
                self.logger.debug(f"Cleared {name} on page {page['id']}")
            except Exception as e:
                self.logger.error(f"Failed to clear {name}: {e}")
                result.errors.append(f"{name}: {e}")
            if pause > 0:
                time.sleep(pause)

        return result
