"""Point-in-time USD/NOK lookup over an irregular daily rate series."""

import math
from datetime import date, datetime, time, timezone
from typing import Iterable

import numpy as np

from oljefond_dashboard.models.series import FxRecord


def _to_utc_naive(instant: datetime) -> datetime:
    """Drop tzinfo after normalizing to UTC. Naive instants are taken as UTC."""
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc).replace(tzinfo=None)
    return instant


def _is_valid(record: FxRecord) -> bool:
    if record.date is None or record.rate is None:
        return False
    try:
        rate = float(record.rate)
    except (TypeError, ValueError):
        return False
    return math.isfinite(rate) and rate > 0


class FxIndex:
    """
    Immutable sorted index of exchange-rate observations.

    A rate is valid from its observation date (00:00 UTC) until the next
    observation. Instants before the first observation, or any instant on an
    empty index, resolve to the fallback rate.
    """

    def __init__(
        self,
        dates: list[date],
        rates: list[float],
        fallback_rate: float,
    ) -> None:
        self._dates = tuple(dates)
        self._times = np.array(
            [datetime.combine(d, time.min) for d in dates], dtype="datetime64[us]"
        )
        self._rates = np.array(rates, dtype=np.float64)
        self._times.setflags(write=False)
        self._rates.setflags(write=False)
        self.fallback_rate = fallback_rate

    @classmethod
    def build(cls, records: Iterable[FxRecord], fallback_rate: float) -> "FxIndex":
        """
        Build an index from an unordered record collection.

        Args:
            records: Exchange-rate records, possibly empty or with invalid rows
            fallback_rate: Rate used when no observation precedes an instant

        Returns:
            FxIndex sorted ascending by date
        """
        valid = [r for r in records if _is_valid(r)]
        # Stable sort on ISO date: duplicates keep store order, the last one wins
        valid.sort(key=lambda r: r.date.isoformat())
        return cls(
            dates=[r.date for r in valid],
            rates=[float(r.rate) for r in valid],
            fallback_rate=fallback_rate,
        )

    def __len__(self) -> int:
        return len(self._dates)

    @property
    def is_empty(self) -> bool:
        return len(self._dates) == 0

    @property
    def last_date(self) -> date | None:
        return self._dates[-1] if self._dates else None

    @property
    def last_rate(self) -> float | None:
        return float(self._rates[-1]) if self._dates else None

    def _position_at_or_before(self, instant: datetime) -> int:
        """Index of the greatest date <= instant, or -1."""
        needle = np.datetime64(_to_utc_naive(instant), "us")
        return int(np.searchsorted(self._times, needle, side="right")) - 1

    def date_at_or_before(self, instant: datetime) -> date | None:
        """Observation date whose rate applies at the instant, None for fallback."""
        pos = self._position_at_or_before(instant)
        return self._dates[pos] if pos >= 0 else None

    def rate_at_or_before(self, instant: datetime) -> float:
        """Rate effective at the instant (step function, never look-ahead)."""
        pos = self._position_at_or_before(instant)
        if pos < 0:
            return self.fallback_rate
        return float(self._rates[pos])
