"""Page property conventions.

Each semantic field is resolved from an explicit, ordered tuple of candidate
property names. The first candidate present on the page wins, so the order of
these tuples is part of the tools' contract with the workspace schema.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .extractor import rich_text_to_plain

TITLE_PROPERTIES = ("Name", "Title", "name", "title")
SLUG_PROPERTIES = ("Slug-AI", "slug-ai", "Slug")
AUDIO_LINK_PROPERTIES = ("AudioLink", "audiolink", "NotebookLMAudio")
VIDEO_LINK_PROPERTIES = ("VideoLink", "videolink", "NotebookLMVideo")
CONTENT_PROPERTIES = ("Content", "content")

DEFAULT_TITLE = "Untitled"

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")


def _first_span_text(spans: Optional[List[Dict[str, Any]]]) -> str:
    if not spans:
        return ""
    first = spans[0]
    return first.get("plain_text") or (first.get("text") or {}).get("content") or ""


def get_title(page: Dict[str, Any]) -> str:
    """
    Resolve the page title.

    Tries TITLE_PROPERTIES in order, then any title-typed property, taking the
    first span's plain text.
    """
    properties = page.get("properties") or {}

    for name in TITLE_PROPERTIES:
        text = _first_span_text((properties.get(name) or {}).get("title"))
        if text:
            return text

    for prop in properties.values():
        if prop.get("type") == "title":
            text = _first_span_text(prop.get("title"))
            if text:
                return text

    return DEFAULT_TITLE


def slugify(title: str, max_length: Optional[int] = None) -> str:
    """Lowercase, replace non-alphanumeric runs with '-', trim dashes."""
    slug = _NON_ALNUM_RUN.sub("-", title.lower()).strip("-")
    if max_length:
        slug = slug[:max_length].rstrip("-")
    return slug


def get_slug(page: Dict[str, Any], title: Optional[str] = None) -> str:
    """
    Resolve the page slug, deriving it from the title when no slug property is set.

    Property values go through ``slugify`` too, so the result is always safe to
    use as a file name or object key.
    """
    properties = page.get("properties") or {}
    for name in SLUG_PROPERTIES:
        text = _first_span_text((properties.get(name) or {}).get("rich_text"))
        if text:
            return slugify(text)
    return slugify(title if title is not None else get_title(page))


def get_url_property(page: Dict[str, Any], candidates: Sequence[str]) -> Optional[str]:
    """Return the first non-empty URL property among candidates."""
    properties = page.get("properties") or {}
    for name in candidates:
        url = (properties.get(name) or {}).get("url")
        if url:
            return url
    return None


def get_rich_text_property(page: Dict[str, Any], candidates: Sequence[str]) -> Optional[str]:
    """
    Return the full text of the first rich_text property present among candidates.

    Returns None when none of the candidates is a rich_text property.
    """
    properties = page.get("properties") or {}
    for name in candidates:
        prop = properties.get(name)
        if prop and prop.get("type", "rich_text") == "rich_text":
            return rich_text_to_plain(prop.get("rich_text") or [])
    return None


def payload_field_names(base: str = "Content64", count: int = 15) -> List[str]:
    """Names of the chunked payload properties: base, base_2, ... base_<count>."""
    return [base] + [f"{base}_{index}" for index in range(2, count + 1)]


def has_payload_data(page: Dict[str, Any], field_names: Sequence[str]) -> bool:
    """True if any payload property already holds spans."""
    properties = page.get("properties") or {}
    for name in field_names:
        prop = properties.get(name)
        if prop and prop.get("type", "rich_text") == "rich_text" and prop.get("rich_text"):
            return True
    return False


@dataclass
class PageMetadata:
    """Semantic fields of a blog page."""

    id: str
    title: str
    slug: str
    url: str
    audio_link: Optional[str] = None
    video_link: Optional[str] = None

    @property
    def has_media(self) -> bool:
        return bool(self.audio_link or self.video_link)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "url": self.url,
            "audio_link": self.audio_link,
            "video_link": self.video_link,
            "has_media": self.has_media,
        }


def get_page_metadata(page: Dict[str, Any], site_base_url: str = "") -> PageMetadata:
    """Collect title, slug, public URL and existing media links of a page."""
    title = get_title(page)
    slug = get_slug(page, title)
    base = site_base_url.rstrip("/")
    return PageMetadata(
        id=page["id"],
        title=title,
        slug=slug,
        url=f"{base}/{slug}" if base else slug,
        audio_link=get_url_property(page, AUDIO_LINK_PROPERTIES),
        video_link=get_url_property(page, VIDEO_LINK_PROPERTIES),
    )
