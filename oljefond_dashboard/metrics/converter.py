"""NOK to display-currency conversion at a given instant."""

from datetime import datetime

from oljefond_dashboard.metrics.fx_index import FxIndex
from oljefond_dashboard.models.series import Currency


def convert(
    amount: float,
    target: Currency,
    instant: datetime,
    fx_index: FxIndex,
) -> float:
    """
    Convert a NOK amount to the target currency using the rate at the instant.

    The home currency is returned unchanged without consulting the index.
    The index always yields a positive rate given a positive fallback.
    """
    if target.is_home:
        return amount
    return amount / fx_index.rate_at_or_before(instant)
