from __future__ import annotations

import pytest

from core.models import ScrapeType, Source
from fakes import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def source_a() -> Source:
    return Source(name="A", scrape_type=ScrapeType.MAIN, url="https://example.com/news/")


@pytest.fixture
def source_b() -> Source:
    return Source(name="B", scrape_type=ScrapeType.FORUM, url="https://forum.example.com/c/news")


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}"
