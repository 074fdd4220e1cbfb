"""
Collaborator interfaces: price sources, import sources, advisor.

PriceSource implementations fetch quotes from wherever (spreadsheet, simulation);
the ledger only relies on the contract below. ImportSource turns raw input into an
ImportBatch. Neither ever mutates the ledger.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import replace
from typing import Any, Protocol

from folio_core.asset import Asset, normalize_ticker
from folio_core.reconcile import ImportBatch

logger = logging.getLogger(__name__)


def apply_prices(assets: Sequence[Asset], prices: dict[str, float]) -> list[Asset]:
    """
    Same assets, same order, with current_price replaced where prices has a usable
    (finite, non-negative) quote for the ticker. Quantity and average price never change.
    """
    normalized = {normalize_ticker(k): v for k, v in prices.items()}
    out: list[Asset] = []
    for asset in assets:
        price = normalized.get(asset.ticker)
        if price is None:
            out.append(asset)
            continue
        try:
            value = float(price)
        except (TypeError, ValueError):
            value = math.nan
        if not math.isfinite(value) or value < 0:
            logger.warning("Ignoring unusable price %r for %s", price, asset.ticker)
            out.append(asset)
            continue
        out.append(replace(asset, current_price=value))
    return out


class PriceSource(ABC):
    """
    Abstract price source. Subclasses implement quote(); callers that want the plain
    "assets in, assets out" contract use fetch_latest_prices().
    """

    @abstractmethod
    def quote(self, assets: Sequence[Asset]) -> dict[str, float]:
        """
        Latest price per ticker for the given assets. Tickers without a quote are
        simply absent. Raises PriceSourceError when nothing usable could be fetched.
        """
        ...

    def fetch_latest_prices(self, assets: Sequence[Asset]) -> list[Asset]:
        """
        Assets with current_price refreshed where a quote was found. On any failure
        the original assets are returned unchanged; this method does not raise.
        """
        if not assets:
            return []
        try:
            prices = self.quote(assets)
        except Exception as e:  # noqa: BLE001
            logger.warning("Price fetch failed, keeping previous prices: %s", e)
            return list(assets)
        return apply_prices(assets, prices)


class ImportSource(ABC):
    """Turns raw user input (text, file payload) into candidate records."""

    @abstractmethod
    def parse(self, raw: Any) -> ImportBatch:
        """
        Parse raw input. May return an empty batch; the ledger treats that as
        ImportParseError. Raises ImportParseError for unreadable input.
        """
        ...


class Advisor(Protocol):
    """Chat advisor over the portfolio. Read-only; answers from advisor_context()."""

    def ask(self, message: str, context: dict[str, Any]) -> str:
        ...
