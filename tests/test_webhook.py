import asyncio
import json
from datetime import date, datetime, timezone

import httpx
import pytest

from core.errors import NotificationError, Severity
from core.models import NewsItem, ScrapeType, Source, StatsSnapshot
from notify.webhook import WebhookNotifier, build_embed

NEWS = Source(name="news", scrape_type=ScrapeType.MAIN, url="https://warthunder.com/en/news/")
ITEM = NewsItem.build(
    url="https://warthunder.com/en/news/9002-new-update-en/",
    title="New update",
    img_url="https://warthunder.com/upload/image/poster.jpg",
    preview_text="Big patch",
    published=date(2026, 10, 18),
)


def _notifier(handler, news_url="https://hooks.example.com/news", alert_url="https://hooks.example.com/alerts"):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client, WebhookNotifier(client, news_url, alert_url)


def test_build_embed():
    embed = build_embed(NEWS, ITEM)
    assert embed["title"] == "New update"
    assert embed["url"] == ITEM.url
    assert embed["description"] == "Big patch"
    assert embed["image"] == {"url": ITEM.img_url}
    assert embed["timestamp"] == "2026-10-18T00:00:00Z"
    assert embed["footer"] == {"text": "news"}


def test_embed_without_image_or_title():
    embed = build_embed(NEWS, NewsItem.build(url="https://warthunder.com/en/news/1/"))
    assert "image" not in embed
    assert embed["title"] == "https://warthunder.com/en/news/1/"


def test_deliver_posts_embed():
    sent = []

    def handler(request):
        sent.append((str(request.url), json.loads(request.content)))
        return httpx.Response(204)

    async def scenario():
        client, notifier = _notifier(handler)
        async with client:
            await notifier.deliver(NEWS, ITEM)

    asyncio.run(scenario())
    assert len(sent) == 1
    url, body = sent[0]
    assert url == "https://hooks.example.com/news"
    assert body["embeds"][0]["url"] == ITEM.url


def test_deliver_failure_raises_notification_error():
    async def scenario():
        client, notifier = _notifier(lambda request: httpx.Response(500))
        async with client:
            await notifier.deliver(NEWS, ITEM)

    with pytest.raises(NotificationError):
        asyncio.run(scenario())


def test_deliver_without_webhook_only_logs():
    def handler(request):
        raise AssertionError("no request expected")

    async def scenario():
        client, notifier = _notifier(handler, news_url="")
        async with client:
            await notifier.deliver(NEWS, ITEM)

    asyncio.run(scenario())


def test_escalate_swallows_transport_errors():
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    async def scenario():
        client, notifier = _notifier(handler)
        async with client:
            await notifier.escalate("NetworkStatus", "news: HTTP 503", Severity.WARNING)

    asyncio.run(scenario())


def test_escalate_and_report_message_format():
    sent = []

    def handler(request):
        sent.append(json.loads(request.content)["content"])
        return httpx.Response(204)

    snapshot = StatsSnapshot(
        fetch_attempts=96,
        new_items=3,
        errors=1,
        window_start=datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc),
    )

    async def scenario():
        client, notifier = _notifier(handler)
        async with client:
            await notifier.escalate("NetworkConnect", "news: refused", Severity.WARNING)
            await notifier.report(snapshot)

    asyncio.run(scenario())
    assert sent[0] == "[WARNING] NetworkConnect: news: refused"
    assert sent[1] == (
        "[INFO] StatsReport: Since 2026-10-17 12:00 UTC: 96 fetches, 3 new posts, 1 errors"
    )
