"""USD/NOK rate from ExchangeRate-API."""

import logging
import math

from oljefond_dashboard.data.sources import FetchError, HttpSource


logger = logging.getLogger(__name__)


class ExchangeRateSource(HttpSource):
    """NOK per 1 USD, daily resolution."""

    name = "ExchangeRate-API"

    KEYED_URL = "https://v6.exchangerate-api.com/v6/{key}/latest/USD"
    OPEN_URL = "https://open.er-api.com/v6/latest/USD"  # requires attribution

    @property
    def url(self) -> str:
        if self.settings.has_exchangerate_key():
            return self.KEYED_URL.format(key=self.settings.exchangerate_api_key)
        return self.OPEN_URL

    def fetch(self) -> float:
        data = self._json("GET", self.url)
        rates = data.get("rates") if isinstance(data, dict) else None
        if not isinstance(rates, dict):
            raise FetchError(f"{self.name}: payload missing rates")

        rate = rates.get("NOK")
        if (
            isinstance(rate, bool)
            or not isinstance(rate, (int, float))
            or not math.isfinite(rate)
            or rate <= 0
        ):
            raise FetchError(f"{self.name}: NOK rate missing/invalid")

        return float(rate)
