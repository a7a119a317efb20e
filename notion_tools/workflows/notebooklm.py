"""NotebookLM export and media link round trip.

Blog pages are exported as Markdown plus JSON metadata, processed by hand in
NotebookLM, and the resulting media URLs are recorded in ``<slug>.media.json``
sidecars that ``sync`` writes back to Notion.
"""

import csv
import json
import logging
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ..notion.client import NotionClient
from ..notion.extractor import ExtractMode, assemble_content
from ..notion.fetcher import BlockTreeFetcher
from ..notion.models import WorkflowStats
from ..notion.properties import PageMetadata, get_page_metadata

MANIFEST_FILE = "manifest.json"
INSTRUCTIONS_FILE = "NOTEBOOKLM_INSTRUCTIONS.md"
CSV_FILE = "batch_processing.csv"
MEDIA_SUFFIX = ".media.json"
CSV_HEADER = ["Title", "Slug", "File", "URL", "Status", "AudioURL", "VideoURL"]

INSTRUCTIONS = """# NotebookLM Processing Instructions

## Overview
This folder contains markdown files ready for NotebookLM processing.

## Manual Processing Steps

### 1. Create a NotebookLM project
1. Go to https://notebooklm.google.com
2. Create a new notebook called "Blog Content"
3. Upload the .md files from this folder

### 2. Generate an audio overview
1. Click "Audio Overview"
2. Download the generated audio and note its URL

### 3. Generate a video (if available)
1. Generate and download the video
2. Note the video URL

### 4. Record the media
For each processed file, record the URLs with
`notion-notebooklm record <slug> --audio <url> --video <url>`, or create
`<slug>.media.json` by hand:
```json
{{
  "slug": "blog-post-slug",
  "audio_url": "https://...",
  "video_url": "https://...",
  "processed_at": "2025-01-16T00:00:00+00:00"
}}
```
Then run `notion-notebooklm sync` to write the links to Notion.

## Tips
- Process in batches of 5-10 files
- Keep audio under 60 minutes
- Store generated media somewhere with a stable public URL

---
Generated: {generated}
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _read_json(path: Path) -> Dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def _write_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


@dataclass
class ExportResult:
    """Outcome of a pull."""

    total: int = 0
    exported: List[PageMetadata] = field(default_factory=list)
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    def to_manifest(self) -> Dict[str, Any]:
        return {
            "timestamp": _now(),
            "total_pages": self.total,
            "exported": len(self.exported),
            "skipped": self.skipped,
            "errors": len(self.errors),
            "pages": [page.to_dict() for page in self.exported],
        }


class NotebookLMWorkflow:
    """Exports blog pages for NotebookLM and syncs produced media back."""

    def __init__(
        self,
        client: NotionClient,
        output_dir: Union[str, Path] = "notebooklm_output",
        processed_dir: Union[str, Path] = "notebooklm_processed",
        site_base_url: str = "",
        min_content_length: int = 100,
        fetcher: Optional[BlockTreeFetcher] = None,
    ):
        self.client = client
        self.output_dir = Path(output_dir)
        self.processed_dir = Path(processed_dir)
        self.site_base_url = site_base_url
        self.min_content_length = min_content_length
        self.fetcher = fetcher or BlockTreeFetcher(client)
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, client: NotionClient, export_config) -> "NotebookLMWorkflow":
        return cls(
            client,
            output_dir=export_config.output_dir,
            processed_dir=export_config.processed_dir,
            site_base_url=export_config.site_base_url,
            min_content_length=export_config.min_content_length,
        )

    def media_path(self, slug: str) -> Path:
        if not slug or "/" in slug or "\\" in slug or slug in (".", ".."):
            raise ValueError(f"Invalid slug: {slug!r}")
        return self.output_dir / f"{slug}{MEDIA_SUFFIX}"

    @staticmethod
    def render_markdown(metadata: PageMetadata, content: str, date: Optional[str] = None) -> str:
        """Markdown document for one page: header, body and processing notes."""
        date = date or datetime.now().strftime("%Y-%m-%d")
        return (
            f"# {metadata.title}\n\n"
            f"**Blog URL:** {metadata.url}\n"
            f"**Page ID:** {metadata.id}\n"
            f"**Slug:** {metadata.slug}\n"
            f"**Date:** {date}\n\n"
            f"---\n\n"
            f"{content}\n\n"
            f"---\n\n"
            f"## Metadata for NotebookLM\n\n"
            f'This content is from the blog post "{metadata.title}" published at {metadata.url}.\n\n'
            f"When creating audio/video content, please:\n"
            f"1. Create an engaging introduction\n"
            f"2. Discuss the main points thoroughly\n"
            f"3. Provide practical examples and insights\n"
            f"4. Conclude with key takeaways\n"
        )

    def pull(self, pages: Iterable[Dict[str, Any]], force: bool = False) -> ExportResult:
        """
        Export pages as Markdown and JSON metadata.

        Pages that already have media links are skipped unless ``force`` is
        set; pages with too little text are always skipped. A manifest of the
        batch is written to ``manifest.json``.
        """
        result = ExportResult()
        self.output_dir.mkdir(parents=True, exist_ok=True)

        for page in pages:
            result.total += 1
            metadata = get_page_metadata(page, self.site_base_url)

            if metadata.has_media and not force:
                self.logger.info(f"Skipped (has media): {metadata.title}")
                result.skipped += 1
                continue

            try:
                content = assemble_content(self.fetcher.fetch(page["id"]), ExtractMode.STRUCTURED)
                if len(content.strip()) < self.min_content_length:
                    self.logger.warning(f"Skipped (too short): {metadata.title}")
                    result.skipped += 1
                    continue

                markdown_path = self.output_dir / f"{metadata.slug}.md"
                markdown_path.write_text(self.render_markdown(metadata, content), encoding="utf-8")
                _write_json(self.output_dir / f"{metadata.slug}.json", metadata.to_dict())
            except Exception as e:
                self.logger.error(f"Error exporting {metadata.title}: {e}")
                result.errors.append(f"{metadata.title}: {e}")
                continue

            result.exported.append(metadata)
            self.logger.info(f"Exported: {metadata.title}")

        _write_json(self.output_dir / MANIFEST_FILE, result.to_manifest())
        return result

    def write_instructions(self) -> Path:
        """Write the manual processing guide next to the exported files."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / INSTRUCTIONS_FILE
        path.write_text(INSTRUCTIONS.format(generated=_now()), encoding="utf-8")
        return path

    def media_files(self) -> List[Path]:
        if not self.output_dir.exists():
            return []
        return sorted(self.output_dir.glob(f"*{MEDIA_SUFFIX}"))

    def markdown_files(self) -> List[Path]:
        if not self.output_dir.exists():
            return []
        return sorted(p for p in self.output_dir.glob("*.md") if p.name != INSTRUCTIONS_FILE)

    def sync(self, archive: bool = True) -> WorkflowStats:
        """
        Write media URLs from sidecar files to their Notion pages.

        Args:
            archive: Move each synced sidecar to the processed directory

        Returns:
            WorkflowStats (processed = synced sidecars)
        """
        stats = WorkflowStats()
        media_files = self.media_files()
        if not media_files:
            self.logger.info("No media files found to sync")
            return stats

        for media_path in media_files:
            try:
                media = _read_json(media_path)
                metadata = _read_json(self.output_dir / f"{media['slug']}.json")

                properties: Dict[str, Any] = {}
                if media.get("video_url"):
                    properties["VideoLink"] = {"url": media["video_url"]}
                if media.get("audio_url"):
                    properties["AudioLink"] = {"url": media["audio_url"]}
                if not properties:
                    self.logger.warning(f"{media_path.name} has no media URLs, skipping")
                    stats.skipped += 1
                    continue

                self.client.update_page(metadata["id"], properties)

                if archive:
                    self.processed_dir.mkdir(parents=True, exist_ok=True)
                    shutil.move(str(media_path), str(self.processed_dir / media_path.name))
            except Exception as e:
                self.logger.error(f"Error syncing {media_path.name}: {e}")
                stats.failed += 1
                stats.errors.append(f"{media_path.name}: {e}")
                continue

            stats.processed += 1
            self.logger.info(f"Synced: {metadata.get('title', media['slug'])}")

        return stats

    def list_unprocessed(self) -> List[Dict[str, str]]:
        """Exported pages that have no media sidecar yet."""
        unprocessed = []
        for markdown_path in self.markdown_files():
            slug = markdown_path.stem
            if self.media_path(slug).exists():
                continue
            try:
                title = _read_json(self.output_dir / f"{slug}.json").get("title", slug)
            except (OSError, ValueError):
                title = slug
            unprocessed.append({"slug": slug, "title": title, "file": markdown_path.name})
        return unprocessed

    def record_media(
        self, slug: str, audio_url: Optional[str] = None, video_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """Write the media sidecar for one exported page."""
        if not audio_url and not video_url:
            raise ValueError("At least one of audio_url or video_url is required")
        media = {
            "slug": slug,
            "audio_url": audio_url or None,
            "video_url": video_url or None,
            "processed_at": _now(),
        }
        self.output_dir.mkdir(parents=True, exist_ok=True)
        _write_json(self.media_path(slug), media)
        return media

    def generate_csv(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write a tracking CSV listing every exported page and its media status."""
        path = Path(path) if path else self.output_dir / CSV_FILE
        rows = []
        for markdown_path in self.markdown_files():
            slug = markdown_path.stem
            try:
                metadata = _read_json(self.output_dir / f"{slug}.json")
            except (OSError, ValueError) as e:
                self.logger.error(f"Error reading metadata for {markdown_path.name}: {e}")
                continue

            status, audio_url, video_url = "Pending", "", ""
            if self.media_path(slug).exists():
                media = _read_json(self.media_path(slug))
                status = "Processed"
                audio_url = media.get("audio_url") or ""
                video_url = media.get("video_url") or ""

            rows.append(
                [
                    metadata.get("title", slug),
                    slug,
                    markdown_path.name,
                    metadata.get("url", ""),
                    status,
                    audio_url,
                    video_url,
                ]
            )

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, quoting=csv.QUOTE_ALL)
            writer.writerow(CSV_HEADER)
            writer.writerows(rows)
        return path

    def import_csv(self, path: Optional[Union[str, Path]] = None) -> int:
        """
        Create media sidecars from a filled-in tracking CSV.

        Returns:
            Number of sidecars written

        Raises:
            ValueError: If the CSV lacks the media URL columns
        """
        path = Path(path) if path else self.output_dir / CSV_FILE
        imported = 0
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            columns = reader.fieldnames or []
            if "AudioURL" not in columns or "VideoURL" not in columns:
                raise ValueError("CSV must have AudioURL and VideoURL columns")

            for row in reader:
                slug = (row.get("Slug") or "").strip()
                audio_url = (row.get("AudioURL") or "").strip()
                video_url = (row.get("VideoURL") or "").strip()
                if slug and (audio_url or video_url):
                    self.record_media(slug, audio_url, video_url)
                    imported += 1
        return imported
