"""Data models."""

from oljefond_dashboard.models.series import (
    ChangeResult,
    ChangeWindow,
    ChartPoint,
    Currency,
    FundSnapshot,
    FxObservation,
    FxRecord,
    PerCapitaRecord,
    PopulationRecord,
)

__all__ = [
    "ChangeResult",
    "ChangeWindow",
    "ChartPoint",
    "Currency",
    "FundSnapshot",
    "FxObservation",
    "FxRecord",
    "PerCapitaRecord",
    "PopulationRecord",
]
