# tests/test_i18n.py
"""Tests for string tables, formatting and display preferences."""

from datetime import datetime, timedelta, timezone

import pytest

from oljefond_dashboard.config import CURRENCY_HOSTS
from oljefond_dashboard.models.series import ChangeResult, Currency
from oljefond_dashboard.ui.i18n import (
    NBSP,
    PLACEHOLDER,
    STRINGS,
    JsonPreferenceStore,
    change_label,
    format_change,
    format_currency,
    format_int,
    format_percent,
    format_rate,
    format_timestamp,
    resolve_currency,
    resolve_language,
    t,
)


# =============================================================================
# STRINGS
# =============================================================================

class TestStrings:
    """Tests for the translation tables."""

    def test_tables_have_same_keys(self):
        assert set(STRINGS["nb"]) == set(STRINGS["en"])

    def test_lookup(self):
        assert t("title", "en") == "The oil fund per Norwegian"
        assert change_label("1h", "nb") == "Siste time"

    def test_unknown_language_uses_norwegian(self):
        assert t("title", "de") == STRINGS["nb"]["title"]

    def test_unknown_key_returns_key(self):
        assert t("missing_key", "en") == "missing_key"


# =============================================================================
# FORMATTING
# =============================================================================

class TestFormatting:
    """Tests for number and date formatting."""

    def test_format_int(self):
        assert format_int(5_594_340, "nb") == f"5{NBSP}594{NBSP}340"
        assert format_int(5_594_340, "en") == "5,594,340"

    @pytest.mark.parametrize(
        "value, currency, expected",
        [
            (3_650_123.4, Currency.NOK, f"3{NBSP}650{NBSP}123{NBSP}kr"),
            (345_678.6, Currency.USD, "$345,679"),
            (-1_234, Currency.NOK, f"-1{NBSP}234{NBSP}kr"),
            (-1_234, Currency.USD, "-$1,234"),
        ],
    )
    def test_format_currency(self, value, currency, expected):
        assert format_currency(value, currency) == expected

    @pytest.mark.parametrize(
        "pct, lang, expected",
        [
            (10.0, "nb", f"+10{NBSP}%"),
            (1.234, "en", "+1.23%"),
            (-0.5, "nb", f"-0,5{NBSP}%"),
            (0.0, "en", "+0%"),
        ],
    )
    def test_format_percent(self, pct, lang, expected):
        assert format_percent(pct, lang) == expected

    def test_format_rate(self):
        assert format_rate(10.61234, "en") == "10.6123"
        assert format_rate(10.5, "nb") == "10,5"

    def test_format_timestamp(self):
        ts = datetime(2024, 3, 5, 14, 7, tzinfo=timezone.utc)

        assert format_timestamp(ts, "nb") == "05.03.24, 14:07"
        assert format_timestamp(ts, "en") == "03/05/24, 14:07"
        assert format_timestamp(ts, "nb", timezone(timedelta(hours=1))) == "05.03.24, 15:07"
        assert format_timestamp(None) == PLACEHOLDER

    def test_format_change(self):
        ref = datetime(2024, 1, 1, tzinfo=timezone.utc)
        up = ChangeResult(absolute_delta=100.0, percent_delta=10.0, reference_timestamp=ref)
        down = ChangeResult(absolute_delta=-50.0, percent_delta=-5.0, reference_timestamp=ref)

        assert format_change(up, Currency.USD, "en") == "▲ +$100 (+10%)"
        assert format_change(down, Currency.NOK, "nb") == f"▼ -50{NBSP}kr (-5{NBSP}%)"
        assert format_change(None, Currency.NOK, "nb") == PLACEHOLDER


# =============================================================================
# PREFERENCES
# =============================================================================

class TestResolveCurrency:
    """Tests for resolve_currency()."""

    def test_saved_preference_wins(self):
        assert resolve_currency("NOK", "norwegianoilfundvalue.com", CURRENCY_HOSTS) is Currency.NOK

    def test_host_match(self):
        assert resolve_currency(None, "www.norwegianoilfundvalue.com", CURRENCY_HOSTS) is Currency.USD
        assert resolve_currency(None, "mitt-oljefond.no", CURRENCY_HOSTS, Currency.USD) is Currency.NOK

    def test_invalid_saved_value_ignored(self):
        assert resolve_currency("EUR", "NorwegianOilFundValue.com", CURRENCY_HOSTS) is Currency.USD

    def test_default(self):
        assert resolve_currency(None, "localhost:8501", CURRENCY_HOSTS) is Currency.NOK
        assert resolve_currency(None, None, CURRENCY_HOSTS, Currency.USD) is Currency.USD

    def test_resolve_language(self):
        assert resolve_language("en") == "en"
        assert resolve_language("sv") == "nb"
        assert resolve_language(None, "en") == "en"


class TestJsonPreferenceStore:
    """Tests for JsonPreferenceStore."""

    def test_missing_file(self, tmp_path):
        assert JsonPreferenceStore(tmp_path / "prefs.json").get("currency") is None

    def test_set_then_get(self, tmp_path):
        path = tmp_path / "nested" / "prefs.json"
        JsonPreferenceStore(path).set("currency", "USD")
        JsonPreferenceStore(path).set("lang", "en")

        prefs = JsonPreferenceStore(path)
        assert prefs.get("currency") == "USD"
        assert prefs.get("lang") == "en"

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text("[1, 2", encoding="utf-8")

        assert JsonPreferenceStore(path).get("currency") is None
