"""
Pytest configuration and fixtures for timescope tests.

Settings are built explicitly per test so a developer's .env or
TIMESCOPE_* environment never leaks into assertions.
"""
import logging

import pytest

from timescope.config import Settings
from timescope.core.dates import CanonicalDate, to_epoch_ms
from timescope.core.scale import ScaleConfig
from timescope.schemas import TimelineEra, TimelineEvent

logger = logging.getLogger(__name__)

# Fixed "now" for the empty-dataset fallback: 2024-01-01T00:00:00Z
FIXED_NOW = to_epoch_ms(CanonicalDate(year=2024, month=1, day=1))


# ============================================
# Test Fixtures
# ============================================

@pytest.fixture
def test_settings(monkeypatch) -> Settings:
    """Default settings, isolated from the environment and .env."""
    for name in list(Settings.model_fields):
        monkeypatch.delenv(f"TIMESCOPE_{name}", raising=False)
    return Settings(_env_file=None)


@pytest.fixture
def fixed_now() -> float:
    return FIXED_NOW


@pytest.fixture
def scale_config() -> ScaleConfig:
    """Scale config with a 1000px display and 3x multiplier."""
    return ScaleConfig(display_width=1000)


@pytest.fixture
def decade_events() -> list[TimelineEvent]:
    """Three events spread over a decade, already sorted."""
    return [
        TimelineEvent(start_date={"year": 2000}, unique_id="start"),
        TimelineEvent(start_date={"year": 2005, "month": 6}, unique_id="middle"),
        TimelineEvent(start_date={"year": 2010}, unique_id="end"),
    ]


@pytest.fixture
def raw_events() -> list[dict]:
    """Raw records in TimelineJS shape."""
    return [
        {
            "start_date": {"year": 2020},
            "text": {"headline": "Second"},
            "unique_id": "b",
        },
        {
            "start_date": {"year": 2021},
            "end_date": {"year": 2022},
            "text": {"headline": "Third"},
            "unique_id": "c",
        },
        {
            "start_date": {"year": 2019},
            "text": {"headline": "First"},
            "unique_id": "a",
        },
    ]


@pytest.fixture
def sample_era() -> TimelineEra:
    return TimelineEra(
        start_date={"year": 2002},
        end_date={"year": 2008},
        text={"headline": "Middle years"},
    )


def _make_events(count: int, start_year: int = 1900) -> list[TimelineEvent]:
    return [
        TimelineEvent(start_date={"year": start_year + i}, unique_id=f"e{i}")
        for i in range(count)
    ]


@pytest.fixture
def make_events():
    """Factory: one event per year starting at ``start_year``."""
    return _make_events


@pytest.fixture
def many_events() -> list[TimelineEvent]:
    return _make_events(200)


# ============================================
# Pytest Configuration
# ============================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "fast: Fast unit tests (pure computation)"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that wait on real animation frames"
    )
