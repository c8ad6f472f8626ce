"""Population of Norway from the SSB StatBank API or scraped from ssb.no."""

import logging
import re

from bs4 import BeautifulSoup

from oljefond_dashboard.data.sources import FetchError, HttpSource, parse_number_like


logger = logging.getLogger(__name__)


HOMEPAGE = "https://www.ssb.no/"
HOMEPAGE_EN = "https://www.ssb.no/en"
TOPIC_PAGE = "https://www.ssb.no/befolkning/folketall/statistikk/befolkning"

# StatBank (PXWeb v1) table 11342: population and area by region
STATBANK_TABLE = "https://api.statbank.no/statbank-api/en/table/11342"
WHOLE_COUNTRY_CODES = ("0", "00")

# Plausibility bounds: the primary key figure is trusted over a wider range
PRIMARY_BOUNDS = (4_000_000, 10_000_000)
FALLBACK_BOUNDS = (4_000_000, 7_000_000)

_EN_POPULATION_RE = re.compile(r"([0-9\s.,]{6,})\s+(population|inhabitants)", re.IGNORECASE)
_LONG_NUMBER_RE = re.compile(r"(\d[\d\s.,]{5,})")


def _within(value: float | None, bounds: tuple[int, int]) -> bool:
    return value is not None and bounds[0] < value < bounds[1]


def extract_key_figure(soup: BeautifulSoup) -> int | None:
    """Population key figure on the Norwegian homepage."""
    node = soup.select_one(
        'a.keyfigure-wrapper:has(.link-text:-soup-contains("Befolkning")) span.number'
    )
    value = parse_number_like(node.get_text().strip() if node else None)
    if _within(value, PRIMARY_BOUNDS):
        return round(value)

    node = soup.select_one(
        '.keyfigure:has(.link-text:-soup-contains("Befolkning")) span.number'
    )
    value = parse_number_like(node.get_text().strip() if node else None)
    if _within(value, FALLBACK_BOUNDS):
        return round(value)

    return None


def extract_english_mention(soup: BeautifulSoup) -> int | None:
    """'N population' or 'N inhabitants' anywhere in the English homepage."""
    body = soup.body or soup
    text = re.sub(r"\s+", " ", body.get_text())
    match = _EN_POPULATION_RE.search(text)
    if not match:
        return None
    value = parse_number_like(match.group(1))
    return round(value) if _within(value, FALLBACK_BOUNDS) else None


def extract_topic_figure(soup: BeautifulSoup) -> int | None:
    """First plausible long number among key-figure-like elements."""
    selector = (
        '[class*="key"], [class*="fact"], [class*="number"], '
        "h1, h2, h3, p, span, strong, div"
    )
    for el in soup.select(selector):
        match = _LONG_NUMBER_RE.search(el.get_text().strip())
        if not match:
            continue
        value = parse_number_like(match.group(1))
        if _within(value, FALLBACK_BOUNDS):
            return round(value)
    return None


def _find_variable(meta: dict, pattern: str) -> dict | None:
    for var in meta.get("variables") or []:
        if isinstance(var, dict) and re.search(pattern, str(var.get("code", "")), re.IGNORECASE):
            return var
    return None


def build_statbank_query(meta: dict) -> dict:
    """
    PXWeb query for the latest population of the whole country.

    Variable codes and value ids are taken from the table metadata, since
    they differ between tables and API versions.

    Raises:
        FetchError: If the table has no contents variable
    """
    contents = _find_variable(meta, "contents")
    if contents is None or not contents.get("values"):
        raise FetchError("SSB: could not find Contents variable")

    values = contents["values"]
    texts = contents.get("valueTexts") or values
    population = next(
        (
            value
            for value, text in zip(values, texts)
            if re.search(r"population|persons|befolk|folkemengde", f"{value} {text}", re.IGNORECASE)
        ),
        values[0],
    )
    query = [{"code": contents["code"], "selection": {"filter": "item", "values": [population]}}]

    region = _find_variable(meta, "region")
    if region is not None:
        whole = next((c for c in WHOLE_COUNTRY_CODES if c in (region.get("values") or [])), None)
        if whole is not None:
            query.append({"code": region["code"], "selection": {"filter": "item", "values": [whole]}})

    period = _find_variable(meta, r"^(tid|year|time)$")
    if period is not None:
        query.append({"code": period["code"], "selection": {"filter": "top", "values": ["1"]}})

    return {"query": query, "response": {"format": "json"}}


def extract_statbank_value(data) -> int | None:
    """First cell of a PXWeb JSON response, if plausible."""
    try:
        cell = data["data"][0]["values"][0]
    except (KeyError, IndexError, TypeError):
        return None
    value = parse_number_like(str(cell))
    return round(value) if _within(value, PRIMARY_BOUNDS) else None


class SsbPopulationSource(HttpSource):
    """Current population of Norway."""

    name = "SSB"

    def fetch_statbank(self) -> int | None:
        """Population from the StatBank API: metadata first, then the query."""
        meta = self._json("GET", STATBANK_TABLE)
        if not isinstance(meta, dict):
            raise FetchError("SSB: StatBank metadata is not an object")
        data = self._json("POST", STATBANK_TABLE, json=build_statbank_query(meta))
        return extract_statbank_value(data)

    def fetch(self) -> int:
        strategies = (
            (STATBANK_TABLE, self.fetch_statbank),
            (HOMEPAGE, lambda: extract_key_figure(self._soup(HOMEPAGE))),
            (HOMEPAGE_EN, lambda: extract_english_mention(self._soup(HOMEPAGE_EN))),
            (TOPIC_PAGE, lambda: extract_topic_figure(self._soup(TOPIC_PAGE))),
        )
        for url, strategy in strategies:
            try:
                value = strategy()
            except FetchError as e:
                logger.warning(f"  {e}")
                continue
            if value is not None:
                logger.info(f"SSB population from {url}: {value}")
                return value
            logger.info(f"  No population figure from {url}")

        raise FetchError("SSB: fant ikke gyldig befolkningstall")
