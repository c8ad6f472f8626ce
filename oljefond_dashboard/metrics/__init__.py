"""Currency conversion and change calculations."""

from oljefond_dashboard.metrics.calculator import PerCapitaCalculator
from oljefond_dashboard.metrics.change import compute_change
from oljefond_dashboard.metrics.converter import convert
from oljefond_dashboard.metrics.fx_index import FxIndex
from oljefond_dashboard.metrics.reference import find_reference

__all__ = [
    "FxIndex",
    "PerCapitaCalculator",
    "compute_change",
    "convert",
    "find_reference",
]
