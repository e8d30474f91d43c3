from __future__ import annotations

from core.errors import Severity
from core.models import NewsItem, Source
from notify.base import BaseNotifier
from scrapers.base import BaseExtractor


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.now += seconds


class ScriptedExtractor(BaseExtractor):
    """Returns (or raises) the queued outcomes for each source in order."""

    def __init__(self, script: dict[str, list]) -> None:
        self._script = {name: list(outcomes) for name, outcomes in script.items()}
        self.calls: list[str] = []

    async def extract(self, source: Source) -> list[NewsItem]:
        self.calls.append(source.name)
        outcome = self._script[source.name].pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return [NewsItem.build(url=u, title=f"Post {u}") for u in outcome]


class RecordingNotifier(BaseNotifier):
    def __init__(self, fail_delivery: Exception | None = None) -> None:
        self.delivered: list[tuple[str, str]] = []
        self.escalations: list[tuple[str, str, Severity]] = []
        self._fail_delivery = fail_delivery

    async def deliver(self, source, item) -> None:
        if self._fail_delivery is not None:
            raise self._fail_delivery
        self.delivered.append((source.name, item.url))

    async def escalate(self, kind, context, severity) -> None:
        self.escalations.append((kind, context, severity))
