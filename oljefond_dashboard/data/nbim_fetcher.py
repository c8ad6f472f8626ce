"""Fund market value scraped from nbim.no."""

import logging
import re

from bs4 import BeautifulSoup

from oljefond_dashboard.data.sources import (
    FetchError,
    HttpSource,
    digits_to_int,
    parse_number_like,
)


logger = logging.getLogger(__name__)


LIVE_PAGES = ("https://www.nbim.no/no/", "https://www.nbim.no/en/")
FUND_VALUE_PAGE = "https://www.nbim.no/no/investeringene/fondets-verdi/"

_BILLIONS_RE = re.compile(r"([\d\s.,]+)\s+milliarder?\s+kroner", re.IGNORECASE)


def extract_live_value(soup: BeautifulSoup) -> int | None:
    """
    Read the live NOK counter from a homepage.

    Tries the per-digit spans first, then the counter container, then any
    element that looks like the live number.
    """
    digits = "".join(el.get_text() for el in soup.select("#liveNavNumber .n"))
    value = digits_to_int(digits)
    if value is not None:
        return value

    container = soup.select_one("#liveNavNumber")
    value = digits_to_int(container.get_text() if container else None)
    if value is not None:
        return value

    fallback = soup.select_one('[id*="liveNavNumber"], .live-number')
    return digits_to_int(fallback.get_text() if fallback else None)


def extract_rounded_value(soup: BeautifulSoup) -> int | None:
    """Read the rounded 'N milliarder kroner' figure and convert to NOK."""
    body = soup.body or soup
    match = _BILLIONS_RE.search(body.get_text())
    if not match:
        return None
    billions = parse_number_like(match.group(1))
    if billions is None or billions <= 0:
        return None
    return round(billions * 1e9)


class NbimFundSource(HttpSource):
    """Current market value of the Government Pension Fund Global in NOK."""

    name = "NBIM"

    def fetch(self) -> int:
        for url in LIVE_PAGES:
            try:
                value = extract_live_value(self._soup(url))
            except FetchError as e:
                logger.warning(f"  {e}")
                continue
            if value is not None:
                logger.info(f"NBIM live value from {url}: {value}")
                return value
            logger.info(f"  No live counter on {url}")

        # Last resort: rounded billions on the fund value page
        value = extract_rounded_value(self._soup(FUND_VALUE_PAGE))
        if value is not None:
            logger.info(f"NBIM rounded value from {FUND_VALUE_PAGE}: {value}")
            return value

        raise FetchError("NBIM: NOK parsed invalid")
