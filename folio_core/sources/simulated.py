"""
Simulated price source and fallback chaining.

SimulatedPriceSource nudges each current price by a small random move. It exists
so the app stays usable offline; its prices are not market data.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from folio_core.asset import Asset
from folio_core.errors import PriceSourceError
from folio_core.sources.base import PriceSource

logger = logging.getLogger(__name__)


class SimulatedPriceSource(PriceSource):
    """
    Random walk: price * (1 + U(-max_move, +max_move)), rounded to cents.
    A move that would make the price non-positive keeps the old price.
    """

    def __init__(self, *, max_move: float = 0.02, seed: int | None = None) -> None:
        self.max_move = max_move
        self._rng = np.random.default_rng(seed)

    def quote(self, assets: Sequence[Asset]) -> dict[str, float]:
        if not assets:
            return {}
        current = np.array([a.current_price for a in assets], dtype=float)
        moves = self._rng.uniform(-self.max_move, self.max_move, size=len(assets))
        simulated = np.round(current * (1.0 + moves), 2)
        simulated = np.where(simulated > 0, simulated, current)
        return {a.ticker: float(p) for a, p in zip(assets, simulated)}


class FallbackPriceSource(PriceSource):
    """Use primary; on PriceSourceError, log and use fallback instead."""

    def __init__(self, primary: PriceSource, fallback: PriceSource) -> None:
        self.primary = primary
        self.fallback = fallback

    def quote(self, assets: Sequence[Asset]) -> dict[str, float]:
        try:
            return self.primary.quote(assets)
        except PriceSourceError as e:
            logger.warning("Primary price source failed (%s); using %s", e, type(self.fallback).__name__)
            return self.fallback.quote(assets)
