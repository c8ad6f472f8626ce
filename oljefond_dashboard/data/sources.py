"""Shared plumbing for scraped value sources."""

import logging
import math
import re
from typing import Protocol

import httpx
from bs4 import BeautifulSoup

from oljefond_dashboard.config import Settings


logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """A value source could not produce a valid number."""


class ValueSource(Protocol):
    """Anything that can fetch a single number from the outside world."""

    name: str

    def fetch(self) -> float:
        """Return the current value or raise FetchError."""
        ...


_NUMBER_CHARS = re.compile(r"[^0-9,.\s]")


def parse_number_like(text: str | None) -> float | None:
    """
    Loose number parser for scraped text.

    Accepts "20 367", "19,586", "19.586" and non-breaking spaces. A lone
    comma is read as a decimal separator.
    """
    if not text:
        return None
    t = _NUMBER_CHARS.sub("", text.replace("\u00a0", " ")).strip()
    no_space = re.sub(r"\s+", "", t)
    if "," in no_space and "." not in no_space:
        no_space = no_space.replace(",", ".", 1)
    try:
        n = float(no_space)
    except ValueError:
        return None
    return n if math.isfinite(n) else None


def digits_to_int(text: str | None) -> int | None:
    """Keep only the digits of a string; positive integer or None."""
    if not text:
        return None
    digits = re.sub(r"\D+", "", text)
    if not digits:
        return None
    n = int(digits)
    return n if n > 0 else None


class HttpSource:
    """Base for sources that fetch over HTTP with the project headers."""

    name = "http"

    def __init__(
        self, settings: Settings | None = None, client: httpx.Client | None = None
    ) -> None:
        self.settings = settings or Settings()
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialize HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.settings.http_timeout,
                follow_redirects=True,
                headers={
                    "user-agent": self.settings.user_agent,
                    "accept-language": self.settings.accept_language,
                },
            )
        return self._client

    def close(self) -> None:
        """Close HTTP client if this source created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(f"{self.name}: HTTP {e.response.status_code} from {url}") from e
        except httpx.HTTPError as e:
            raise FetchError(f"{self.name}: request to {url} failed: {e}") from e
        return response

    def _get(self, url: str, **kwargs) -> httpx.Response:
        return self._request("GET", url, **kwargs)

    def _json(self, method: str, url: str, **kwargs):
        """Send a request and decode the JSON body."""
        headers = {"accept": "application/json", **kwargs.pop("headers", {})}
        response = self._request(method, url, headers=headers, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"{self.name}: response from {url} is not JSON") from e

    def _soup(self, url: str) -> BeautifulSoup:
        """Fetch a page and parse it."""
        return BeautifulSoup(self._get(url).text, "lxml")

    def fetch(self) -> float:
        raise NotImplementedError
