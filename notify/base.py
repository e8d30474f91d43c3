from __future__ import annotations

from abc import ABC, abstractmethod

from core.errors import Severity
from core.models import NewsItem, Source, StatsSnapshot


class BaseNotifier(ABC):
    """Where new posts and operator alerts go."""

    @abstractmethod
    async def deliver(self, source: Source, item: NewsItem) -> None:
        """Announce a new post. Raises NotificationError on failure."""
        ...

    @abstractmethod
    async def escalate(self, kind: str, context: str, severity: Severity) -> None:
        """Alert the operator. Never raises."""
        ...

    async def report(self, snapshot: StatsSnapshot) -> None:
        await self.escalate(
            "StatsReport",
            (
                f"Since {snapshot.window_start:%Y-%m-%d %H:%M} UTC: "
                f"{snapshot.fetch_attempts} fetches, "
                f"{snapshot.new_items} new posts, "
                f"{snapshot.errors} errors"
            ),
            Severity.INFO,
        )
