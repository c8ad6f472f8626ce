"""Configuration."""

from oljefond_dashboard.config.settings import (
    CHANGE_WINDOWS,
    CURRENCY_HOSTS,
    FUND_FILE,
    PER_CAPITA_FILE,
    POPULATION_FILE,
    USD_NOK_FILE,
    Settings,
)

__all__ = [
    "CHANGE_WINDOWS",
    "CURRENCY_HOSTS",
    "FUND_FILE",
    "PER_CAPITA_FILE",
    "POPULATION_FILE",
    "USD_NOK_FILE",
    "Settings",
]
