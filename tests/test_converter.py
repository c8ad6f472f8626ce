# tests/test_converter.py
"""Tests for NOK to display-currency conversion."""

from datetime import date
from unittest.mock import MagicMock

import pytest

from oljefond_dashboard.metrics.converter import convert
from oljefond_dashboard.metrics.fx_index import FxIndex
from oljefond_dashboard.models.series import Currency
from tests.conftest import at, fx


class TestConvert:
    """Tests for convert()."""

    @pytest.mark.parametrize("amount", [0, 1, 123_456.78, 20_000_000_000_000])
    def test_home_currency_is_identity(self, amount):
        index = FxIndex.build([fx(date(2024, 1, 1), 10.0)], fallback_rate=3.0)

        assert convert(amount, Currency.NOK, at(days=5), index) == amount

    def test_home_currency_never_consults_index(self):
        index = MagicMock()

        assert convert(500.0, Currency.NOK, at(), index) == 500.0
        index.rate_at_or_before.assert_not_called()

    def test_foreign_currency_divides_by_rate_at_instant(self):
        index = FxIndex.build(
            [fx(date(2024, 1, 1), 10.0), fx(date(2024, 1, 2), 12.5)],
            fallback_rate=8.0,
        )

        assert convert(1000.0, Currency.USD, at(hours=12), index) == pytest.approx(100.0)
        assert convert(1000.0, Currency.USD, at(days=1, hours=1), index) == pytest.approx(80.0)

    def test_foreign_currency_uses_fallback_without_history(self):
        index = FxIndex.build([], fallback_rate=10.0)

        assert convert(550_000.0, Currency.USD, at(), index) == pytest.approx(55_000.0)
