"""Data fetching and storage."""

from .sources import FetchError, ValueSource
from .store import SeriesStore

__all__ = ["FetchError", "SeriesStore", "ValueSource"]
