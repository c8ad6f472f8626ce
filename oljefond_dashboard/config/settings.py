"""Configuration settings for the dashboard."""

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
import math
import os

from dotenv import load_dotenv

from oljefond_dashboard.models.series import ChangeWindow, Currency


load_dotenv()


# Change windows shown on the page: label -> (lookback, tolerance)
CHANGE_WINDOWS: tuple[ChangeWindow, ...] = (
    ChangeWindow("15m", timedelta(minutes=15), timedelta(minutes=30)),
    ChangeWindow("1h", timedelta(minutes=60), timedelta(minutes=90)),
    ChangeWindow("24h", timedelta(hours=24), timedelta(hours=6)),
)

# Deployment host substring -> default display currency
CURRENCY_HOSTS: dict[str, Currency] = {
    "norwegianoilfundvalue.com": Currency.USD,
    "mitt-oljefond.no": Currency.NOK,
}

# Series file names inside the data directory
FUND_FILE = "fund_timeseries.json"
POPULATION_FILE = "pop_daily.json"
PER_CAPITA_FILE = "olje_per_capita.json"
USD_NOK_FILE = "usd_nok.json"

DEFAULT_USER_AGENT = "olje-per-nordmann/1.2 (+github actions; scraping nbim.no & ssb.no)"
DEFAULT_ACCEPT_LANGUAGE = "nb-NO,nb;q=0.9,no;q=0.8,en;q=0.7"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return math.nan


@dataclass
class Settings:
    """Application settings."""

    data_dir: Path = field(
        default_factory=lambda: Path(
            os.getenv("OLJEFOND_DATA_DIR", "")
            or Path(__file__).parent.parent.parent / "data"
        )
    )
    fallback_usd_nok: float = field(
        default_factory=lambda: _float_env("USD_NOK_FALLBACK", 10.0)
    )
    exchangerate_api_key: str = field(
        default_factory=lambda: os.getenv("EXCHANGERATE_API_KEY", "").strip()
    )
    default_currency: str = field(
        default_factory=lambda: os.getenv("DEFAULT_CURRENCY", Currency.NOK.value).upper()
    )
    user_agent: str = field(
        default_factory=lambda: os.getenv("OLJEFOND_USER_AGENT", DEFAULT_USER_AGENT)
    )
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE
    http_timeout: float = field(default_factory=lambda: _float_env("HTTP_TIMEOUT", 30.0))
    change_windows: tuple[ChangeWindow, ...] = CHANGE_WINDOWS
    currency_hosts: dict[str, Currency] = field(default_factory=lambda: dict(CURRENCY_HOSTS))

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)

    def validate(self) -> None:
        """Validate required settings."""
        if not math.isfinite(self.fallback_usd_nok) or self.fallback_usd_nok <= 0:
            raise ValueError(
                f"USD_NOK_FALLBACK must be a positive number, got {self.fallback_usd_nok!r}"
            )
        if self.default_currency not in Currency.__members__:
            raise ValueError(
                f"DEFAULT_CURRENCY must be one of {', '.join(Currency.__members__)}, "
                f"got {self.default_currency!r}"
            )

    def has_exchangerate_key(self) -> bool:
        """Check if an ExchangeRate-API key is configured."""
        return bool(self.exchangerate_api_key)

    @property
    def display_currency(self) -> Currency:
        return Currency[self.default_currency]
