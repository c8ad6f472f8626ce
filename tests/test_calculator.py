# tests/test_calculator.py
"""Tests for the PerCapitaCalculator query surface."""

from datetime import date

import pandas as pd
import pytest

from oljefond_dashboard.config import CHANGE_WINDOWS
from oljefond_dashboard.metrics.calculator import PerCapitaCalculator
from oljefond_dashboard.models.series import Currency, FundSnapshot, PopulationRecord
from tests.conftest import POPULATION, at, fx, record


@pytest.fixture
def calc() -> PerCapitaCalculator:
    """A day of samples, supplied out of order, with two FX observations."""
    series = [
        record(at(hours=24), 4_000_000),
        record(at(hours=0), 3_600_000),
        record(at(hours=23), 3_960_000),
        record(at(hours=23, minutes=45), 3_990_000),
    ]
    fx_records = [fx(date(2024, 1, 2), 10.0), fx(date(2024, 1, 1), 9.0)]
    return PerCapitaCalculator(series, fx_records, fallback_rate=10.0, windows=CHANGE_WINDOWS)


@pytest.fixture
def empty_calc() -> PerCapitaCalculator:
    return PerCapitaCalculator([], [], fallback_rate=10.0, windows=CHANGE_WINDOWS)


class TestPointReads:
    """Tests for latest_* reads."""

    def test_series_sorted_on_construction(self, calc):
        assert [r.timestamp for r in calc.series] == sorted(r.timestamp for r in calc.series)
        assert calc.latest_timestamp() == at(hours=24)

    def test_latest_value_in_each_currency(self, calc):
        assert calc.latest_value(Currency.NOK) == 4_000_000
        assert calc.latest_value(Currency.USD) == pytest.approx(400_000)

    def test_latest_fund_total(self, calc):
        assert calc.latest_fund_total(Currency.NOK) == 4_000_000 * POPULATION
        assert calc.latest_fund_total(Currency.USD) == pytest.approx(400_000 * POPULATION)

    def test_latest_population(self, calc):
        assert calc.latest_population() == POPULATION

    def test_empty_series_reads_none(self, empty_calc):
        assert empty_calc.latest_value(Currency.USD) is None
        assert empty_calc.latest_fund_total(Currency.NOK) is None
        assert empty_calc.latest_population() is None
        assert empty_calc.latest_timestamp() is None


class TestChanges:
    """Tests for change() and changes()."""

    def test_quarter_hour_change(self, calc):
        change = calc.change("15m", Currency.NOK)

        assert change.absolute_delta == pytest.approx(10_000)
        assert change.reference_timestamp == at(hours=23, minutes=45)

    def test_hour_change(self, calc):
        change = calc.change("1h", Currency.NOK)

        assert change.reference_timestamp == at(hours=23)
        assert change.percent_delta == pytest.approx(40_000 / 3_960_000 * 100)

    def test_day_change_includes_fx_movement(self, calc):
        change = calc.change("24h", Currency.USD)

        # 3 600 000 / 9 = 400 000 USD, then 4 000 000 / 10 = 400 000 USD
        assert change.absolute_delta == pytest.approx(0)
        assert change.reference_timestamp == at(hours=0)

    def test_changes_follow_window_order(self, calc):
        assert list(calc.changes(Currency.NOK)) == ["15m", "1h", "24h"]

    def test_unknown_window(self, calc):
        with pytest.raises(KeyError):
            calc.change("7d", Currency.NOK)

    def test_empty_series_changes_unavailable(self, empty_calc):
        assert all(c is None for c in empty_calc.changes(Currency.USD).values())


class TestChartSeries:
    """Tests for chart_series() and chart_frame()."""

    def test_points_converted_at_own_timestamp(self, calc):
        points = calc.chart_series(Currency.USD)

        assert points[0].value == pytest.approx(3_600_000 / 9.0)
        assert points[-1].value == pytest.approx(4_000_000 / 10.0)
        assert len(points) == 4

    def test_home_currency_points_unchanged(self, calc):
        assert [p.value for p in calc.chart_series(Currency.NOK)] == [
            r.per_capita_value for r in calc.series
        ]

    def test_chart_frame(self, calc):
        df = calc.chart_frame(Currency.USD)

        assert list(df.columns) == ["per_capita"]
        assert isinstance(df.index, pd.DatetimeIndex)
        assert str(df.index.tz) == "UTC"
        assert df["per_capita"].iloc[-1] == pytest.approx(400_000)

    def test_empty_chart_frame(self, empty_calc):
        assert empty_calc.chart_frame(Currency.NOK).empty


class TestFxObservation:
    """Tests for latest_fx_observation()."""

    def test_latest_observation(self, calc):
        obs = calc.latest_fx_observation()

        assert obs.date == date(2024, 1, 2)
        assert obs.rate == 10.0
        assert not obs.is_fallback

    def test_fallback_observation(self, empty_calc):
        obs = empty_calc.latest_fx_observation()

        assert obs.date is None
        assert obs.rate == 10.0
        assert obs.is_fallback


class TestFromStore:
    """Tests for loading from the series store."""

    def test_from_store(self, store, settings):
        store.append_population(PopulationRecord(date=date(2024, 1, 1), population=POPULATION))
        store.append_fx(fx(date(2024, 1, 1), 10.0))
        store.append_per_capita(record(at(minutes=15), 1100))
        store.append_per_capita(record(at(minutes=0), 1000))
        store.append_fund(FundSnapshot(timestamp=at(), fund_value=1))

        calc = PerCapitaCalculator.from_store(store, settings)

        assert calc.latest_value(Currency.NOK) == 1100
        assert calc.change("15m", Currency.NOK).percent_delta == pytest.approx(10.0)
        assert calc.latest_fx_observation().rate == 10.0
