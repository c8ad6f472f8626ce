# tests/conftest.py
"""Shared fixtures and record builders."""

from datetime import date, datetime, timedelta, timezone

import pytest

from oljefond_dashboard.config import Settings
from oljefond_dashboard.data.store import SeriesStore
from oljefond_dashboard.models.series import FxRecord, PerCapitaRecord


T0 = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
POPULATION = 5_550_000


def at(minutes: float = 0, hours: float = 0, days: float = 0) -> datetime:
    """Instant relative to T0."""
    return T0 + timedelta(minutes=minutes, hours=hours, days=days)


def record(
    ts: datetime,
    per_capita: float,
    population: int = POPULATION,
) -> PerCapitaRecord:
    """Per-capita record with a fund value consistent with the per-capita value."""
    return PerCapitaRecord(
        timestamp=ts,
        fund_value=int(per_capita * population),
        population=population,
        per_capita_value=float(per_capita),
    )


def fx(day: date, rate: float | None) -> FxRecord:
    return FxRecord(date=day, rate=rate)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings rooted in a temporary data directory."""
    return Settings(
        data_dir=tmp_path / "data",
        fallback_usd_nok=10.0,
        exchangerate_api_key="",
        default_currency="NOK",
    )


@pytest.fixture
def store(settings) -> SeriesStore:
    """Empty series store."""
    return SeriesStore(settings.data_dir)
