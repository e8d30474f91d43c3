from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup, Tag

from core.errors import EmptyResult, MonthParseError, NoItemIdentifier, SelectorMissing
from core.models import NewsItem, ScrapeType, Source
from scrapers.base import BaseExtractor

log = logging.getLogger(__name__)

CHANGELOG_PREVIEW = (
    "The current provided changelog reflects the major changes within the game "
    "as part of this Update. Some updates, additions and fixes may not be listed "
    "in the provided notes. War Thunder is constantly improving and specific "
    "fixes may be implemented without the client being updated."
)

_MONTHS = {
    name: number
    for number, name in enumerate(
        [
            "january", "february", "march", "april", "may", "june", "july",
            "august", "september", "october", "november", "december",
        ],
        start=1,
    )
}


@dataclass(frozen=True)
class PageRules:
    """CSS selectors describing one kind of listing page."""

    listing: str
    item: str
    link: str
    title: str
    image: str | None = None
    preview: str | None = None
    date: str | None = None


# Per scrape type extraction config.
PAGE_RULES: dict[ScrapeType, PageRules] = {
    ScrapeType.MAIN: PageRules(
        listing="div.showcase__content-wrapper",
        item="div.showcase__item",
        link="a.widget__link",
        title="div.widget__title",
        image="img.widget__poster-media",
        preview="div.widget__comment",
        date="li.widget-meta__item--right",
    ),
    ScrapeType.CHANGELOG: PageRules(
        listing="div.showcase__content-wrapper",
        item="div.showcase__item",
        link="a.widget__link",
        title="div.widget__title",
        image="img.widget__poster-media",
        date="li.widget-meta__item--right",
    ),
    ScrapeType.FORUM: PageRules(
        listing="table.topic-list",
        item="tr.topic-list-item",
        link="a.title",
        title="a.title",
        preview="p.excerpt",
    ),
}


def parse_date(text: str) -> date:
    """Parse listing dates such as ``18 October 2026``."""
    tokens = text.replace(",", " ").split()
    if len(tokens) != 3:
        raise MonthParseError(f"unexpected date format: {text!r}")
    day, month, year = tokens
    number = _MONTHS.get(month.lower())
    if number is None:
        raise MonthParseError(f"unknown month {month!r} in {text!r}")
    try:
        return date(int(year), number, int(day))
    except ValueError as e:
        raise MonthParseError(f"invalid date {text!r}: {e}") from e


def sanitize_preview(fragment: Tag, base_url: str = "") -> str:
    """Flatten an HTML fragment to text, keeping links as markdown."""
    copy = BeautifulSoup(str(fragment), "html.parser")
    for a in copy.find_all("a", href=True):
        href = urljoin(base_url, a["href"]) if base_url else a["href"]
        a.replace_with(f"[{a.get_text(strip=True)}]({href})")
    return " ".join(copy.get_text().split())


def _text(item: Tag, selector: str | None) -> str:
    if not selector:
        return ""
    el = item.select_one(selector)
    return el.get_text(strip=True) if el else ""


def _image(item: Tag, rules: PageRules, base_url: str) -> str:
    if not rules.image:
        return ""
    el = item.select_one(rules.image)
    if el is None:
        return ""
    src = el.get("data-src") or el.get("src") or ""
    return urljoin(base_url, src) if src else ""


def parse_listing(source: Source, html: str) -> list[NewsItem]:
    """Extract posts from a listing page, in page order."""
    rules = PAGE_RULES[source.scrape_type]
    soup = BeautifulSoup(html, "html.parser")

    listing = soup.select_one(rules.listing)
    if listing is None:
        raise SelectorMissing(
            f"{source.name}: listing not found", selector=rules.listing, document=html
        )

    elements = listing.select(rules.item)
    if not elements:
        raise EmptyResult(
            f"{source.name}: listing has no posts", selector=rules.item, document=html
        )

    items: list[NewsItem] = []
    seen_urls: set[str] = set()
    for el in elements:
        link = el.select_one(rules.link)
        href = link.get("href") if link is not None else None
        if not href:
            raise NoItemIdentifier(
                f"{source.name}: post without a link", selector=rules.link, document=html
            )
        url = urljoin(source.url, href)
        if url in seen_urls:
            continue
        seen_urls.add(url)

        published = None
        if rules.date:
            raw_date = _text(el, rules.date)
            if raw_date:
                published = parse_date(raw_date)

        preview = ""
        if source.scrape_type is ScrapeType.CHANGELOG:
            preview = CHANGELOG_PREVIEW
        elif rules.preview:
            fragment = el.select_one(rules.preview)
            if fragment is not None:
                preview = sanitize_preview(fragment, source.url)

        items.append(
            NewsItem.build(
                url=url,
                title=_text(el, rules.title),
                img_url=_image(el, rules, source.url),
                preview_text=preview,
                published=published,
            )
        )
    return items


class PublisherExtractor(BaseExtractor):
    """Fetches a source's listing page with httpx and parses it."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def extract(self, source: Source) -> list[NewsItem]:
        resp = await self._client.get(source.url)
        resp.raise_for_status()
        items = parse_listing(source, resp.text)
        log.info("Scraped %s: %d posts (status %d)", source.name, len(items), resp.status_code)
        return items
