from __future__ import annotations

from abc import ABC, abstractmethod

from core.models import NewsItem, Source


class BaseExtractor(ABC):
    """Turns a source into the posts currently listed on it.

    Implementations must not retry; failures are raised as-is and the
    scheduler decides what happens next.
    """

    @abstractmethod
    async def extract(self, source: Source) -> list[NewsItem]:
        ...
