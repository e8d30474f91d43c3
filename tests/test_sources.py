import pytest

from config.sources import KNOWN_SOURCES, UnknownSourceError, load_sources
from core.models import ScrapeType


def test_load_keeps_registry_order():
    sources = load_sources("forum_updates, news")
    assert [s.name for s in sources] == ["news", "forum_updates"]


def test_load_default_set():
    sources = load_sources("news,changelog,forum_updates,forum_project_news")
    assert len(sources) == len(KNOWN_SOURCES)
    assert sources[1].scrape_type is ScrapeType.CHANGELOG


def test_unknown_source_is_rejected():
    with pytest.raises(UnknownSourceError):
        load_sources("news,patch_notes")


@pytest.mark.parametrize("enabled", ["", " , ,"])
def test_empty_source_list_is_rejected(enabled):
    with pytest.raises(UnknownSourceError):
        load_sources(enabled)
