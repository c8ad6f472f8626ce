# tests/test_fx_index.py
"""
Tests for the FxIndex.

This module tests:
- Fallback behaviour on empty or invalid input
- Step-function lookup (no interpolation, no look-ahead)
- Ordering and duplicate handling
- Timezone normalization of query instants
"""

import math
from datetime import date, datetime, timedelta, timezone

import pytest

from oljefond_dashboard.metrics.fx_index import FxIndex
from tests.conftest import at, fx


@pytest.fixture
def index() -> FxIndex:
    """Three observations supplied out of order."""
    return FxIndex.build(
        [
            fx(date(2024, 1, 3), 11.0),
            fx(date(2024, 1, 1), 10.0),
            fx(date(2024, 1, 2), 10.5),
        ],
        fallback_rate=9.0,
    )


class TestEmptyIndex:
    """An index without observations always uses the fallback."""

    @pytest.mark.parametrize("days", [-365, 0, 1, 10_000])
    def test_fallback_for_every_instant(self, days):
        index = FxIndex.build([], fallback_rate=10.0)

        assert index.rate_at_or_before(at(days=days)) == 10.0

    def test_last_observation_absent(self):
        index = FxIndex.build([], fallback_rate=10.0)

        assert index.is_empty
        assert index.last_date is None
        assert index.last_rate is None

    def test_invalid_records_are_filtered(self):
        index = FxIndex.build(
            [
                fx(None, 10.0),
                fx(date(2024, 1, 1), None),
                fx(date(2024, 1, 2), 0.0),
                fx(date(2024, 1, 3), -4.0),
                fx(date(2024, 1, 4), math.nan),
                fx(date(2024, 1, 5), math.inf),
            ],
            fallback_rate=7.5,
        )

        assert len(index) == 0
        assert index.rate_at_or_before(at(days=30)) == 7.5


class TestRateAtOrBefore:
    """Tests for step-function lookup."""

    def test_before_first_observation_uses_fallback(self, index):
        assert index.rate_at_or_before(at(minutes=-1)) == 9.0

    def test_rate_applies_from_start_of_day(self, index):
        assert index.rate_at_or_before(at(days=1)) == 10.5

    def test_rate_holds_until_next_observation(self, index):
        assert index.rate_at_or_before(at(days=2) - timedelta(microseconds=1)) == 10.5

    def test_no_interpolation_between_observations(self, index):
        assert index.rate_at_or_before(at(days=1, hours=12)) == 10.5

    def test_last_rate_applies_after_last_observation(self, index):
        assert index.rate_at_or_before(at(days=400)) == 11.0

    def test_last_observation(self, index):
        assert index.last_date == date(2024, 1, 3)
        assert index.last_rate == 11.0

    def test_chosen_date_never_decreases(self, index):
        instants = [at(hours=h) for h in range(-12, 24 * 5, 5)]
        chosen = [index.date_at_or_before(i) for i in instants]

        as_ordinals = [d.toordinal() if d else -1 for d in chosen]
        assert as_ordinals == sorted(as_ordinals)
        for instant, day in zip(instants, chosen):
            if day is not None:
                assert datetime(day.year, day.month, day.day, tzinfo=timezone.utc) <= instant

    def test_duplicate_dates_last_one_wins(self):
        index = FxIndex.build(
            [fx(date(2024, 1, 1), 10.0), fx(date(2024, 1, 1), 10.2)],
            fallback_rate=9.0,
        )

        assert index.rate_at_or_before(at(hours=6)) == 10.2
        assert index.last_rate == 10.2


class TestInstantNormalization:
    """Query instants are compared in UTC."""

    def test_aware_instant_converted_to_utc(self, index):
        # 00:30 on Jan 2 in UTC+1 is still Jan 1 in UTC
        oslo_winter = timezone(timedelta(hours=1))
        instant = datetime(2024, 1, 2, 0, 30, tzinfo=oslo_winter)

        assert index.rate_at_or_before(instant) == 10.0

    def test_naive_instant_treated_as_utc(self, index):
        assert index.rate_at_or_before(datetime(2024, 1, 2, 0, 0)) == 10.5
