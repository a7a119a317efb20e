"""Blog post narration: page blocks to speech, uploaded to R2, linked back."""

import logging
import time
from typing import Any, Dict, Iterable, Optional

from ..notion.client import NotionClient
from ..notion.extractor import ExtractMode, assemble_content
from ..notion.fetcher import BlockTreeFetcher
from ..notion.models import WorkflowStats
from ..notion.properties import get_page_metadata, get_url_property
from ..storage.r2 import R2Storage
from ..tts.base import SpeechSynthesizer

# Narration audio properties, tried in order when reading and writing the URL.
# NotebookLMAudio is not one of them: a NotebookLM overview is not a narration.
AUDIO_LINK_TARGETS = ("AudioLink", "audiolink")


def _ascii_metadata(value: Any) -> str:
    """S3 object metadata values must be ASCII."""
    return str(value).encode("ascii", "ignore").decode("ascii")


class AudioUploadWorkflow:
    """Narrates blog pages that don't have an audio link yet."""

    def __init__(
        self,
        client: NotionClient,
        synthesizer: SpeechSynthesizer,
        storage: R2Storage,
        min_content_length: int = 100,
        page_pause: float = 1.0,
        fetcher: Optional[BlockTreeFetcher] = None,
    ):
        self.client = client
        self.synthesizer = synthesizer
        self.storage = storage
        self.min_content_length = min_content_length
        self.page_pause = page_pause
        self.fetcher = fetcher or BlockTreeFetcher(client)
        self.stats = WorkflowStats()
        self.logger = logging.getLogger(__name__)

    def upload(self, audio: bytes, slug: str, metadata: Dict[str, Any]) -> str:
        """Upload audio unless an object already exists under the same key."""
        key = self.storage.generate_audio_key(slug, extension=self.synthesizer.file_extension)
        if self.storage.exists(key):
            self.logger.info(f"Audio already exists in R2 at {key}, reusing it")
            return self.storage.public_url(key)

        content_type = getattr(self.synthesizer, "content_type", "audio/opus")
        url = self.storage.upload_audio(
            audio,
            key,
            {k: _ascii_metadata(v) for k, v in metadata.items()},
            content_type=content_type,
        )
        self.logger.info(f"Uploaded audio to {url}")
        return url

    def set_audio_link(self, page_id: str, url: str) -> None:
        """Write the audio URL to the first audio link property the schema accepts."""
        last_error: Optional[Exception] = None
        for name in AUDIO_LINK_TARGETS:
            try:
                self.client.update_page(page_id, {name: {"url": url}})
                return
            except Exception as e:
                self.logger.debug(f"Could not set {name}: {e}")
                last_error = e
        raise RuntimeError(
            f"Could not set audio link; make sure the database has an AudioLink URL field: "
            f"{last_error}"
        )

    def process_page(self, page: Dict[str, Any]) -> str:
        """
        Narrate one page.

        Returns:
            Outcome: "processed", "skipped" or "failed"
        """
        metadata = get_page_metadata(page)
        self.logger.info(f"Processing: {metadata.title}")

        audio_link = get_url_property(page, AUDIO_LINK_TARGETS)
        if audio_link:
            self.logger.info(f"Skipped (already has audio): {audio_link}")
            self.stats.skipped += 1
            return "skipped"

        try:
            content = assemble_content(self.fetcher.fetch(page["id"]), ExtractMode.FLAT)
            if len(content.strip()) < self.min_content_length:
                self.logger.info(f"Content too short ({len(content)} chars), skipping")
                self.stats.skipped += 1
                return "skipped"

            result = self.synthesizer.synthesize(content)
            self.stats.total_bytes += result.size
            self.logger.info(
                f"Generated {result.size / 1024 / 1024:.2f} MB of audio in {result.chunks} chunks"
            )

            url = self.upload(
                result.audio,
                metadata.slug,
                {"title": metadata.title, "pageId": metadata.id, "contentLength": len(content)},
            )
            self.set_audio_link(page["id"], url)
        except Exception as e:
            self.logger.error(f"Error processing {metadata.title}: {e}")
            self.stats.failed += 1
            self.stats.errors.append(f"{metadata.title}: {e}")
            return "failed"

        self.stats.processed += 1
        return "processed"

    def run(self, pages: Iterable[Dict[str, Any]], limit: Optional[int] = None) -> WorkflowStats:
        """
        Narrate pages until ``limit`` pages have been handled.

        Args:
            pages: Database pages
            limit: Maximum pages to handle (skips count towards it)

        Returns:
            WorkflowStats for the run
        """
        for count, page in enumerate(pages, start=1):
            self.process_page(page)
            if limit and count >= limit:
                break
            if self.page_pause > 0:
                time.sleep(self.page_pause)
        return self.stats
