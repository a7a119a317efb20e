"""Workspace audits: top-level heading coverage and database page counts."""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ..notion.client import NotionClient
from ..notion.fetcher import BlockTreeFetcher
from ..notion.properties import get_title

REPORT_FILE = "h1-report.json"


@dataclass
class PageRef:
    title: str
    id: str
    url: Optional[str] = None


@dataclass
class H1Report:
    """Which pages contain a heading_1 block."""

    with_h1: List[PageRef] = field(default_factory=list)
    without_h1: List[PageRef] = field(default_factory=list)
    error_count: int = 0

    @property
    def checked(self) -> int:
        return len(self.with_h1) + len(self.without_h1) + self.error_count

    @property
    def percentage_with_h1(self) -> float:
        classified = len(self.with_h1) + len(self.without_h1)
        if not classified:
            return 0.0
        return round(len(self.with_h1) / classified * 100, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "total_pages": self.checked,
                "pages_with_h1": len(self.with_h1),
                "pages_without_h1": len(self.without_h1),
                "error_count": self.error_count,
                "percentage_with_h1": self.percentage_with_h1,
            },
            "pages_with_h1": [asdict(page) for page in self.with_h1],
            "pages_without_h1": [asdict(page) for page in self.without_h1],
        }


class H1Audit:
    """Checks every page for at least one heading_1 block."""

    def __init__(self, client: NotionClient, fetcher: Optional[BlockTreeFetcher] = None):
        self.client = client
        self.fetcher = fetcher or BlockTreeFetcher(client)
        self.logger = logging.getLogger(__name__)

    def has_h1(self, page_id: str) -> bool:
        """
        Check a page for a heading_1 block.

        Raises:
            RuntimeError: If no heading was found and part of the tree could not be listed
        """
        if any(block.type == "heading_1" for block in self.fetcher.fetch(page_id)):
            return True
        if self.fetcher.last_errors:
            raise RuntimeError(self.fetcher.last_errors[0])
        return False

    def run(self, pages: Iterable[Dict[str, Any]]) -> H1Report:
        report = H1Report()
        for page in pages:
            ref = PageRef(title=get_title(page), id=page["id"], url=page.get("url"))
            try:
                if self.has_h1(page["id"]):
                    report.with_h1.append(ref)
                else:
                    report.without_h1.append(ref)
            except Exception as e:
                self.logger.warning(f"Could not check {ref.title}: {e}")
                report.error_count += 1
        self.logger.info(
            f"H1 audit: {len(report.with_h1)} with, {len(report.without_h1)} without, "
            f"{report.error_count} errors"
        )
        return report

    @staticmethod
    def save_report(report: H1Report, path: Union[str, Path] = REPORT_FILE) -> Path:
        path = Path(path)
        path.write_text(json.dumps(report.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        return path


@dataclass
class PageCount:
    database_id: str
    total: int
    sample_titles: List[str]


def count_database_pages(
    client: NotionClient, database_id: str, sample_size: int = 10
) -> PageCount:
    """Count the pages of a database and collect the first few titles."""
    total = 0
    titles: List[str] = []
    for page in client.query_database(database_id):
        total += 1
        if len(titles) < sample_size:
            titles.append(get_title(page))
    return PageCount(database_id=database_id, total=total, sample_titles=titles)
