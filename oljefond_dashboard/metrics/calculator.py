"""Query surface for the display layer."""

import logging
from datetime import datetime
from typing import Iterable

import pandas as pd

from oljefond_dashboard.config import Settings
from oljefond_dashboard.data.store import SeriesStore
from oljefond_dashboard.metrics.change import compute_change
from oljefond_dashboard.metrics.converter import convert
from oljefond_dashboard.metrics.fx_index import FxIndex
from oljefond_dashboard.models.series import (
    ChangeResult,
    ChangeWindow,
    ChartPoint,
    Currency,
    FxObservation,
    FxRecord,
    PerCapitaRecord,
)


logger = logging.getLogger(__name__)


class PerCapitaCalculator:
    """
    Per-capita values, changes and chart series in any display currency.

    Built once per render from already-loaded series; never mutates them.
    """

    def __init__(
        self,
        series: Iterable[PerCapitaRecord],
        fx_records: Iterable[FxRecord],
        fallback_rate: float,
        windows: Iterable[ChangeWindow] = (),
    ) -> None:
        self.series: tuple[PerCapitaRecord, ...] = tuple(
            sorted(series, key=lambda r: r.timestamp)
        )
        self.fx_index = FxIndex.build(fx_records, fallback_rate)
        self.windows: dict[str, ChangeWindow] = {w.label: w for w in windows}
        if self.fx_index.is_empty:
            logger.debug(f"No USD/NOK history, using fallback rate {fallback_rate}")

    @classmethod
    def from_store(
        cls, store: SeriesStore, settings: Settings | None = None
    ) -> "PerCapitaCalculator":
        """Load the persisted series and build a calculator."""
        settings = settings or Settings()
        return cls(
            series=store.load_per_capita(),
            fx_records=store.load_fx(),
            fallback_rate=settings.fallback_usd_nok,
            windows=settings.change_windows,
        )

    @property
    def latest(self) -> PerCapitaRecord | None:
        return self.series[-1] if self.series else None

    def latest_timestamp(self) -> datetime | None:
        return self.latest.timestamp if self.latest else None

    def latest_value(self, currency: Currency) -> float | None:
        """Per-capita value of the latest record."""
        latest = self.latest
        if latest is None:
            return None
        return convert(latest.per_capita_value, currency, latest.timestamp, self.fx_index)

    def latest_fund_total(self, currency: Currency) -> float | None:
        """Total fund value of the latest record."""
        latest = self.latest
        if latest is None:
            return None
        return convert(latest.fund_value, currency, latest.timestamp, self.fx_index)

    def latest_population(self) -> int | None:
        return self.latest.population if self.latest else None

    def change(self, window_label: str, currency: Currency) -> ChangeResult | None:
        """
        Change over a configured window.

        Raises:
            KeyError: If the window label is not configured
        """
        window = self.windows[window_label]
        return compute_change(self.series, self.latest, window, currency, self.fx_index)

    def changes(self, currency: Currency) -> dict[str, ChangeResult | None]:
        """Changes for every configured window, in configuration order."""
        return {label: self.change(label, currency) for label in self.windows}

    def chart_series(self, currency: Currency) -> list[ChartPoint]:
        """All records, each converted at its own timestamp."""
        return [
            ChartPoint(
                timestamp=r.timestamp,
                value=convert(r.per_capita_value, currency, r.timestamp, self.fx_index),
            )
            for r in self.series
        ]

    def chart_frame(self, currency: Currency) -> pd.DataFrame:
        """
        Chart series as a DataFrame for plotting.

        Returns:
            DataFrame with UTC DatetimeIndex named 'ts' and 'per_capita' column
        """
        points = self.chart_series(currency)
        if not points:
            return pd.DataFrame(columns=["per_capita"])

        df = pd.DataFrame(
            {
                "ts": pd.to_datetime([p.timestamp for p in points], utc=True),
                "per_capita": [p.value for p in points],
            }
        )
        df.set_index("ts", inplace=True)
        return df

    def latest_fx_observation(self) -> FxObservation:
        """Most recent USD/NOK observation, or the fallback when there is none."""
        if self.fx_index.is_empty:
            return FxObservation(
                date=None, rate=self.fx_index.fallback_rate, is_fallback=True
            )
        return FxObservation(
            date=self.fx_index.last_date,
            rate=self.fx_index.last_rate,
            is_fallback=False,
        )
