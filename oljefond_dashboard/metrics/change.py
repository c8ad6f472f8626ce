"""Change of the per-capita value over a lookback window."""

import math
from typing import Sequence

from oljefond_dashboard.metrics.converter import convert
from oljefond_dashboard.metrics.fx_index import FxIndex
from oljefond_dashboard.metrics.reference import find_reference
from oljefond_dashboard.models.series import (
    ChangeResult,
    ChangeWindow,
    Currency,
    PerCapitaRecord,
)


def compute_change(
    series: Sequence[PerCapitaRecord],
    latest: PerCapitaRecord | None,
    window: ChangeWindow,
    currency: Currency,
    fx_index: FxIndex,
) -> ChangeResult | None:
    """
    Absolute and percentage change of the per-capita value over a window.

    Each point is converted at its own timestamp, so a USD figure includes
    USD/NOK movement between the two instants.

    Returns None when there is not enough history, no reference point lies
    within the window tolerance, or the reference converts to zero.
    """
    if latest is None or len(series) < 2:
        return None

    reference = find_reference(series, window.lookback, window.tolerance)
    if reference is None:
        return None

    latest_value = convert(latest.per_capita_value, currency, latest.timestamp, fx_index)
    reference_value = convert(
        reference.per_capita_value, currency, reference.timestamp, fx_index
    )
    if reference_value == 0:
        return None

    delta = latest_value - reference_value
    pct = delta / reference_value * 100
    if not (math.isfinite(delta) and math.isfinite(pct)):
        return None

    return ChangeResult(
        absolute_delta=delta,
        percent_delta=pct,
        reference_timestamp=reference.timestamp,
    )
