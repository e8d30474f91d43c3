"""Discord style webhook delivery via httpx."""

from __future__ import annotations

import logging

import httpx

from core.errors import NotificationError, Severity
from core.models import NewsItem, ScrapeType, Source
from notify.base import BaseNotifier

log = logging.getLogger(__name__)

_CONTENT_LIMIT = 2000
_DESCRIPTION_LIMIT = 4096

_COLOURS = {
    ScrapeType.MAIN: 0x4F6D8F,
    ScrapeType.CHANGELOG: 0xB5651D,
    ScrapeType.FORUM: 0x2E8B57,
}

_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.CRITICAL: logging.CRITICAL,
}


def build_embed(source: Source, item: NewsItem) -> dict:
    embed: dict = {
        "title": item.title[:256] or item.url,
        "url": item.url,
        "description": item.preview_text[:_DESCRIPTION_LIMIT],
        "color": _COLOURS[source.scrape_type],
        "footer": {"text": source.name},
    }
    if item.img_url:
        embed["image"] = {"url": item.img_url}
    if item.published:
        embed["timestamp"] = f"{item.published.isoformat()}T00:00:00Z"
    return embed


class WebhookNotifier(BaseNotifier):
    def __init__(
        self,
        client: httpx.AsyncClient,
        news_url: str = "",
        alert_url: str = "",
    ) -> None:
        self._client = client
        self._news_url = news_url
        self._alert_url = alert_url

    async def deliver(self, source: Source, item: NewsItem) -> None:
        if not self._news_url:
            log.info("[%s] new post (no webhook configured): %s", source.name, item.url)
            return
        try:
            resp = await self._client.post(
                self._news_url, json={"embeds": [build_embed(source, item)]}
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise NotificationError(f"delivery of {item.url} failed: {e}") from e
        log.info("[%s] delivered %s", source.name, item.url)

    async def escalate(self, kind: str, context: str, severity: Severity) -> None:
        message = f"[{severity.value.upper()}] {kind}: {context}"
        log.log(_LEVELS[severity], "Escalation %s", message)
        if not self._alert_url:
            return
        try:
            resp = await self._client.post(
                self._alert_url, json={"content": message[:_CONTENT_LIMIT]}
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            log.error("Failed to send escalation %s: %s", kind, e)

