from __future__ import annotations

from core.models import ScrapeType, Source

# Every page of the publisher we know how to read.  Order matters: the
# scheduler walks sources in this order.
KNOWN_SOURCES: dict[str, Source] = {
    "news": Source(
        name="news",
        scrape_type=ScrapeType.MAIN,
        url="https://warthunder.com/en/news/",
    ),
    "changelog": Source(
        name="changelog",
        scrape_type=ScrapeType.CHANGELOG,
        url="https://warthunder.com/en/game/changelog/",
    ),
    "forum_updates": Source(
        name="forum_updates",
        scrape_type=ScrapeType.FORUM,
        url="https://forum.warthunder.com/c/news-and-information/updates-information/11",
    ),
    "forum_project_news": Source(
        name="forum_project_news",
        scrape_type=ScrapeType.FORUM,
        url="https://forum.warthunder.com/c/news-and-information/project-news/12",
    ),
}


class UnknownSourceError(ValueError):
    pass


def load_sources(enabled: str) -> list[Source]:
    """Resolve a comma separated list of source names against the registry."""
    names = [s.strip() for s in enabled.split(",") if s.strip()]
    unknown = [n for n in names if n not in KNOWN_SOURCES]
    if unknown:
        raise UnknownSourceError(f"Unknown sources: {', '.join(unknown)}")
    if not names:
        raise UnknownSourceError("No sources enabled")
    wanted = set(names)
    return [src for name, src in KNOWN_SOURCES.items() if name in wanted]
