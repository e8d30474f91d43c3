from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class ScrapeType(str, Enum):
    """Which extraction rules apply to a source."""

    MAIN = "main"
    FORUM = "forum"
    CHANGELOG = "changelog"


@dataclass(frozen=True)
class Source:
    """One polled page of the publisher."""

    name: str  # unique key, also the ledger's source column
    scrape_type: ScrapeType
    url: str


@dataclass(frozen=True)
class NewsItem:
    """A single post found on a source's listing page."""

    url: str  # identity within a source
    title: str = ""
    img_url: str = ""
    preview_text: str = ""
    published: date | None = None

    @classmethod
    def build(
        cls,
        url: str,
        title: str = "",
        img_url: str = "",
        preview_text: str = "",
        published: date | None = None,
    ) -> NewsItem:
        return cls(
            url=url,
            title=title.strip(),
            img_url=img_url.replace(" ", "%20"),
            preview_text=preview_text.strip(),
            published=published,
        )


@dataclass(frozen=True)
class StatsSnapshot:
    """Counters for one reporting window."""

    fetch_attempts: int
    new_items: int
    errors: int
    window_start: datetime

    def as_dict(self) -> dict:
        return {
            "fetch_attempts": self.fetch_attempts,
            "new_items": self.new_items,
            "errors": self.errors,
            "window_start": self.window_start.isoformat(),
        }
