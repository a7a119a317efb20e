"""Base64 audio stored directly in page properties."""

import base64
import logging
import time
from typing import Any, Dict, Iterable, Optional

from ..notion.models import WorkflowStats
from ..notion.properties import CONTENT_PROPERTIES, get_rich_text_property, get_title, has_payload_data
from ..payload.writer import ChunkedPayloadWriter
from ..tts.base import SpeechSynthesizer


class Content64Workflow:
    """Encodes the ``Content`` property as speech into the Content64 fields."""

    def __init__(
        self,
        writer: ChunkedPayloadWriter,
        synthesizer: Optional[SpeechSynthesizer] = None,
        page_pause: float = 0.5,
    ):
        self.writer = writer
        self.synthesizer = synthesizer
        self.page_pause = page_pause
        self.stats = WorkflowStats()
        self.logger = logging.getLogger(__name__)

    def process_page(self, page: Dict[str, Any]) -> str:
        """Encode one page; returns "processed", "skipped" or "failed"."""
        if self.synthesizer is None:
            raise ValueError("A speech synthesizer is required to encode pages")

        title = get_title(page)
        self.logger.info(f"Processing: {title}")

        if has_payload_data(page, self.writer.field_names):
            self.logger.info(f"Skipped (already has audio): {title}")
            self.stats.skipped += 1
            return "skipped"

        content = get_rich_text_property(page, CONTENT_PROPERTIES)
        if not content or not content.strip():
            self.logger.warning(f"No content found in: {title}")
            self.stats.skipped += 1
            return "skipped"

        try:
            result = self.synthesizer.synthesize(content)
            encoded = base64.b64encode(result.audio).decode("ascii")
            self.stats.total_bytes += len(encoded)
            self.logger.info(f"Audio size: {len(encoded) / 1024:.2f} KB (base64)")
            written = self.writer.write(page["id"], encoded)
        except Exception as e:
            self.logger.error(f"Failed to encode {title}: {e}")
            self.stats.failed += 1
            self.stats.errors.append(f"{title}: {e}")
            return "failed"

        if not written.success:
            self.stats.failed += 1
            self.stats.errors.extend(f"{title}: {error}" for error in written.errors)
            return "failed"

        if not written.complete:
            self.stats.errors.append(
                f"{title}: stored {written.chars_written}/{len(encoded)} characters"
            )
        self.stats.processed += 1
        return "processed"

    def run(self, pages: Iterable[Dict[str, Any]]) -> WorkflowStats:
        for page in pages:
            self.process_page(page)
            if self.page_pause > 0:
                time.sleep(self.page_pause)
        return self.stats

    def clear(self, pages: Iterable[Dict[str, Any]]) -> WorkflowStats:
        """
        Remove stored payloads from every page.

        Pages without payload data are skipped. ``processed`` counts cleared
        pages and ``failed`` counts individual field errors.
        """
        stats = WorkflowStats()
        for page in pages:
            title = get_title(page)
            if not has_payload_data(page, self.writer.field_names):
                self.logger.debug(f"Skipped (no Content64 data): {title}")
                stats.skipped += 1
                continue

            result = self.writer.clear(page)
            if result.fields_cleared:
                self.logger.info(f"Cleared {result.fields_cleared} fields from: {title}")
                stats.processed += 1
            stats.failed += len(result.errors)
            stats.errors.extend(f"{title}: {error}" for error in result.errors)

            if self.page_pause > 0:
                time.sleep(self.page_pause)
        return stats
