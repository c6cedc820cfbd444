"""Shared fixtures and log builders for the MyAmanah core tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from src.amanah.base import GeoCoordinate
from src.amanah.config_loader import AmanahConfig, load_amanah_config
from src.amanah.cycle.models import CycleLogEntry, FlowLevel
from src.amanah.cycle.statistics_engine import CycleStatisticsEngine
from src.amanah.prayer.calculator import PrayerTimeCalculator
from src.amanah.prayer.qibla import QiblaCalculator

TEST_DATE = date(2026, 3, 20)
CYCLE_ORIGIN = date(2025, 6, 1)

NEW_YORK = GeoCoordinate(40.7128, -74.0060, "America/New_York", "New York, USA")
LONDON = GeoCoordinate(51.5074, -0.1278, "Europe/London", "London, UK")
JAKARTA = GeoCoordinate(-6.2088, 106.8456, "Asia/Jakarta", "Jakarta, Indonesia")
TROMSO = GeoCoordinate(69.6492, 18.9553, "Europe/Oslo", "Tromsø, Norway")


# ---------------------------------------------------------------------------
# Config / engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def amanah_config() -> AmanahConfig:
    """Load the real bundled config for tests."""
    return load_amanah_config()


@pytest.fixture
def calculator(amanah_config: AmanahConfig) -> PrayerTimeCalculator:
    return PrayerTimeCalculator(amanah_config)


@pytest.fixture
def qibla(amanah_config: AmanahConfig) -> QiblaCalculator:
    return QiblaCalculator(amanah_config)


@pytest.fixture
def engine(amanah_config: AmanahConfig) -> CycleStatisticsEngine:
    return CycleStatisticsEngine(amanah_config)


@pytest.fixture
def start_of_day() -> datetime:
    """A 'now' before any prayer on TEST_DATE anywhere in the test locations."""
    return datetime(2026, 3, 19, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Log builders
# ---------------------------------------------------------------------------


def make_log(d: date, flow: FlowLevel | None = FlowLevel.MEDIUM, **kwargs) -> CycleLogEntry:
    return CycleLogEntry(log_date=d, flow=flow, **kwargs)


def period_logs(start: date, days: int = 5) -> list[CycleLogEntry]:
    """Consecutive period days beginning at ``start``."""
    return [make_log(start + timedelta(days=i)) for i in range(days)]


def build_history(
    cycle_lengths: list[int],
    period_length: int = 5,
    start: date = CYCLE_ORIGIN,
) -> list[CycleLogEntry]:
    """Logs producing ``len(cycle_lengths)`` completed cycles.

    One extra period run is appended so the final listed cycle is closed.
    Non-period days in between get a FlowLevel.NONE log every 7 days.
    """
    logs: list[CycleLogEntry] = []
    current = start
    for length in cycle_lengths:
        logs.extend(period_logs(current, period_length))
        for offset in range(period_length + 2, length, 7):
            logs.append(make_log(current + timedelta(days=offset), FlowLevel.NONE))
        current += timedelta(days=length)
    logs.extend(period_logs(current, period_length))
    return logs
