import pytest
from pydantic import ValidationError

from config.settings import Settings


def test_defaults_are_valid():
    cfg = Settings(_env_file=None)
    assert cfg.SUSPEND_MINUTES == 30
    assert cfg.STATS_FLUSH_HOURS == 24


@pytest.mark.parametrize(
    "field, value",
    [
        ("SUSPEND_MINUTES", 0),
        ("SUSPEND_MINUTES", -5),
        ("STATS_FLUSH_HOURS", 0),
        ("REQUEST_TIMEOUT_SECONDS", 0),
        ("INTER_SOURCE_DELAY_SECONDS", -1),
    ],
)
def test_rejects_out_of_range_values(field, value):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("SUSPEND_MINUTES", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
