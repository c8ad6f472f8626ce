"""Historical reference point lookup for change windows."""

from datetime import datetime, timedelta
from typing import Sequence

from oljefond_dashboard.models.series import PerCapitaRecord


def find_reference(
    series: Sequence[PerCapitaRecord],
    lookback: timedelta,
    tolerance: timedelta,
    now: datetime | None = None,
) -> PerCapitaRecord | None:
    """
    Find the record representing the value `lookback` before the latest one.

    Args:
        series: Records sorted ascending by timestamp
        lookback: How far back the reference should be (e.g. 15 minutes)
        tolerance: Largest accepted gap between target time and the record
        now: Anchor time, defaults to the latest record's timestamp

    Returns:
        The most recent record at or before the target, if within tolerance
    """
    if len(series) < 2:
        return None

    anchor = now if now is not None else series[-1].timestamp
    target = anchor - lookback

    for record in reversed(series):
        if record.timestamp <= target:
            if target - record.timestamp <= tolerance:
                return record
            return None

    return None
