"""
Spreadsheet price source: a published sheet exported as CSV over HTTP.

Column A holds the ticker, column B the price. Prices may use either "35.50" or
the Brazilian "3.500,00" format. Rows whose price does not parse are skipped, so
a header row is harmless.
"""

from __future__ import annotations

import io
import logging
import math
from collections.abc import Sequence

import pandas as pd
import requests

from folio_core.asset import Asset, normalize_ticker
from folio_core.errors import PriceSourceError
from folio_core.sources.base import PriceSource

logger = logging.getLogger(__name__)


def sheet_csv_url(spreadsheet_id: str, gid: str | None = None) -> str:
    """CSV export URL of a shared spreadsheet tab."""
    url = f"https://docs.google.com/spreadsheets/d/{spreadsheet_id}/export?format=csv"
    if gid:
        url += f"&gid={gid}"
    return url


def parse_price(text: object) -> float | None:
    """Parse '35.50', '35,50' or '3.500,00'. None if unparsable, negative or not finite."""
    if not isinstance(text, str):
        return None
    cleaned = text.replace('"', "").replace("'", "").strip()
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def parse_price_csv(csv_text: str) -> dict[str, float]:
    """Map ticker -> price from CSV text (ticker in first column, price in second)."""
    if not csv_text.strip():
        return {}
    try:
        df = pd.read_csv(
            io.StringIO(csv_text),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines="skip",
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise PriceSourceError(f"Malformed price sheet: {e!s}") from e
    if df.shape[1] < 2:
        raise PriceSourceError("Price sheet needs at least two columns (ticker, price)")

    prices: dict[str, float] = {}
    for raw_ticker, raw_price in zip(df.iloc[:, 0], df.iloc[:, 1]):
        ticker = normalize_ticker(raw_ticker if isinstance(raw_ticker, str) else None)
        ticker = ticker.replace('"', "").replace("'", "")
        price = parse_price(raw_price)
        if ticker and price is not None:
            prices[ticker] = price
    return prices


class SheetPriceSource(PriceSource):
    """
    Fetch quotes from a CSV endpoint. Network errors, non-2xx responses and
    unreadable CSV raise PriceSourceError from quote().
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_seconds: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._session = session

    def _get(self) -> requests.Response:
        getter = self._session.get if self._session is not None else requests.get
        return getter(self.url, timeout=self.timeout_seconds)

    def quote(self, assets: Sequence[Asset]) -> dict[str, float]:
        try:
            response = self._get()
        except requests.RequestException as e:
            raise PriceSourceError(f"Price sheet request failed: {e!s}") from e
        if not response.ok:
            raise PriceSourceError(f"Price sheet request failed with status {response.status_code}")

        prices = parse_price_csv(response.text or "")
        wanted = {a.ticker for a in assets}
        found = {t: p for t, p in prices.items() if t in wanted}
        logger.info("Price sheet: %d of %d tickers quoted", len(found), len(wanted))
        return found
