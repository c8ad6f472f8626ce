"""Data models for the fund, population and exchange-rate series."""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum


class Currency(Enum):
    """Supported display currencies. Series are stored in NOK."""
    NOK = "NOK"  # Home currency
    USD = "USD"

    @classmethod
    def home(cls) -> "Currency":
        return cls.NOK

    @property
    def is_home(self) -> bool:
        return self is Currency.home()


@dataclass(frozen=True)
class PerCapitaRecord:
    """Fund value divided by population at one scrape instant."""

    timestamp: datetime  # UTC
    fund_value: int  # NOK
    population: int
    per_capita_value: float  # NOK per person
    population_date: date | None = None

    @classmethod
    def derive(
        cls,
        timestamp: datetime,
        fund_value: int,
        population: int,
        population_date: date | None = None,
    ) -> "PerCapitaRecord":
        """Build a record with the per-capita value rounded to whole NOK, halves up."""
        return cls(
            timestamp=timestamp,
            fund_value=fund_value,
            population=population,
            per_capita_value=float(math.floor(fund_value / population + 0.5)),
            population_date=population_date,
        )


@dataclass(frozen=True)
class FundSnapshot:
    """Raw fund market value at one scrape instant."""

    timestamp: datetime
    fund_value: int


@dataclass(frozen=True)
class PopulationRecord:
    """Population figure recorded once per calendar date."""

    date: date
    population: int


@dataclass(frozen=True)
class FxRecord:
    """USD/NOK observation: NOK per 1 USD on a calendar date.

    Missing or invalid values are kept as None and filtered by the Fx Index.
    """

    date: date | None
    rate: float | None
    source: str = "ExchangeRate-API"


@dataclass(frozen=True)
class ChangeWindow:
    """Lookback window for a change figure."""

    label: str
    lookback: timedelta
    tolerance: timedelta


@dataclass(frozen=True)
class ChangeResult:
    """Change of the per-capita value over a window, in one currency."""

    absolute_delta: float
    percent_delta: float
    reference_timestamp: datetime

    @property
    def is_up(self) -> bool:
        return self.absolute_delta >= 0


@dataclass(frozen=True)
class ChartPoint:
    """Single plotted point, already converted to the display currency."""

    timestamp: datetime
    value: float


@dataclass(frozen=True)
class FxObservation:
    """Most recent rate used for conversion, for attribution."""

    date: date | None
    rate: float
    is_fallback: bool
