"""String tables, number formatting and display preferences."""

import json
import logging
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Protocol

from oljefond_dashboard.models.series import ChangeResult, Currency


logger = logging.getLogger(__name__)


LANGUAGES = ("nb", "en")
DEFAULT_LANGUAGE = "nb"
PLACEHOLDER = "—"

STRINGS: dict[str, dict[str, str]] = {
    "nb": {
        "title": "Oljefondet per nordmann",
        "subtitle": "Fondets markedsverdi delt på Norges befolkning",
        "per_capita": "Verdi per nordmann",
        "fund_total": "Oljefondets totale verdi",
        "population": "Norges befolkning",
        "updated": "Oppdatert",
        "change_15m": "Siste 15 min",
        "change_1h": "Siste time",
        "change_24h": "Siste 24 t",
        "per_person": "Per person",
        "currency": "Valuta",
        "language": "Språk",
        "sources": "Kilder: NBIM (fondets verdi) og SSB (befolkning). Oppdateres hvert 15. minutt.",
        "rate_used": "Kurs brukt: 1 USD = {rate} NOK",
        "rate_fallback": "reservekurs, ingen kurshistorikk",
        "no_data": "Ingen data ennå. Kjør innsamlingen først.",
    },
    "en": {
        "title": "The oil fund per Norwegian",
        "subtitle": "Fund market value divided by the population of Norway",
        "per_capita": "Value per Norwegian",
        "fund_total": "Total fund value",
        "population": "Population of Norway",
        "updated": "Updated",
        "change_15m": "Last 15 min",
        "change_1h": "Last hour",
        "change_24h": "Last 24 h",
        "per_person": "Per person",
        "currency": "Currency",
        "language": "Language",
        "sources": "Sources: NBIM (fund value) and SSB (population). Updated every 15 minutes.",
        "rate_used": "Rate used: 1 USD = {rate} NOK",
        "rate_fallback": "fallback rate, no rate history",
        "no_data": "No data yet. Run the collector first.",
    },
}


def t(key: str, lang: str = DEFAULT_LANGUAGE) -> str:
    """Translated string, falling back to Norwegian, then to the key."""
    table = STRINGS.get(lang, STRINGS[DEFAULT_LANGUAGE])
    return table.get(key, STRINGS[DEFAULT_LANGUAGE].get(key, key))


def change_label(window_label: str, lang: str = DEFAULT_LANGUAGE) -> str:
    return t(f"change_{window_label}", lang)


# =============================================================================
# NUMBER FORMATTING
# =============================================================================

NBSP = "\u00a0"


def _group(n: int, sep: str) -> str:
    return f"{n:,}".replace(",", sep)


def format_int(n: int | float, lang: str = DEFAULT_LANGUAGE) -> str:
    """Grouped integer: '5 594 340' (nb) or '5,594,340' (en)."""
    value = round(n)
    sign = "-" if value < 0 else ""
    sep = NBSP if lang == "nb" else ","
    return sign + _group(abs(value), sep)


def format_currency(value: float, currency: Currency) -> str:
    """Whole-unit amount: NOK as '1 234 kr', USD as '$1,234'."""
    rounded = round(value)
    sign = "-" if rounded < 0 else ""
    if currency is Currency.NOK:
        return f"{sign}{_group(abs(rounded), NBSP)}{NBSP}kr"
    return f"{sign}${_group(abs(rounded), ',')}"


def format_delta(delta: float, currency: Currency) -> str:
    """Signed amount, '+' for gains."""
    sign = "+" if delta > 0 else ""
    return sign + format_currency(round(delta), currency)


def _decimal(value: float, digits: int, lang: str) -> str:
    text = f"{value:.{digits}f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text.replace(".", ",") if lang == "nb" else text


def format_percent(pct: float, lang: str = DEFAULT_LANGUAGE) -> str:
    """Signed percentage with up to two decimals: '+1,23 %' (nb), '+1.23%' (en)."""
    sign = "+" if pct >= 0 else ""
    body = _decimal(pct, 2, lang)
    return f"{sign}{body}{NBSP}%" if lang == "nb" else f"{sign}{body}%"


def format_rate(rate: float, lang: str = DEFAULT_LANGUAGE) -> str:
    """Exchange rate with up to four decimals."""
    return _decimal(rate, 4, lang)


def format_timestamp(
    ts: datetime | None, lang: str = DEFAULT_LANGUAGE, tz: tzinfo = timezone.utc
) -> str:
    """Short date and time in the given zone, e.g. '18.10.26, 14:05'."""
    if ts is None:
        return PLACEHOLDER
    local = ts.astimezone(tz)
    if lang == "nb":
        return local.strftime("%d.%m.%y, %H:%M")
    return local.strftime("%m/%d/%y, %H:%M")


def format_change(change: ChangeResult | None, currency: Currency, lang: str) -> str:
    """'▲ +1 234 kr (+0,5 %)' or the placeholder when unavailable."""
    if change is None:
        return PLACEHOLDER
    arrow = "▲" if change.is_up else "▼"
    return (
        f"{arrow} {format_delta(change.absolute_delta, currency)} "
        f"({format_percent(change.percent_delta, lang)})"
    )


# =============================================================================
# PREFERENCES
# =============================================================================

class PreferenceStore(Protocol):
    """Read/write capability for user display preferences."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class JsonPreferenceStore:
    """Preferences kept in a small JSON object file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read preferences {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def resolve_currency(
    saved: str | None,
    host: str | None,
    host_map: dict[str, Currency],
    default: Currency = Currency.NOK,
) -> Currency:
    """
    Pick the display currency.

    A valid saved preference wins, then the first host substring match,
    then the default.
    """
    if saved in Currency.__members__:
        return Currency[saved]
    host = (host or "").lower()
    for fragment, currency in host_map.items():
        if fragment in host:
            return currency
    return default


def resolve_language(saved: str | None, default: str = DEFAULT_LANGUAGE) -> str:
    return saved if saved in LANGUAGES else default
