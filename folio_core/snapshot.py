"""
LedgerSnapshot: the full {assets, dividends, transactions} state at one instant.

Immutable. Commands never mutate a snapshot; they build a new one. asset_version
increases whenever the set of tickers changes (asset added or removed), which lets
a price refresh detect that the portfolio was restructured while it was in flight.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from folio_core.asset import Asset, normalize_ticker
from folio_core.dividend import Dividend
from folio_core.transaction import Transaction


@dataclass(frozen=True)
class LedgerSnapshot:
    assets: tuple[Asset, ...] = field(default_factory=tuple)
    dividends: tuple[Dividend, ...] = field(default_factory=tuple)
    transactions: tuple[Transaction, ...] = field(default_factory=tuple)
    asset_version: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "assets", tuple(self.assets))
        object.__setattr__(self, "dividends", tuple(self.dividends))
        object.__setattr__(self, "transactions", tuple(self.transactions))

    def find_asset(self, ticker: str) -> Asset | None:
        """Asset for ticker (normalized) or None."""
        symbol = normalize_ticker(ticker)
        for asset in self.assets:
            if asset.ticker == symbol:
                return asset
        return None

    def asset_by_id(self, asset_id: str) -> Asset | None:
        for asset in self.assets:
            if asset.id == asset_id:
                return asset
        return None

    def tickers(self) -> tuple[str, ...]:
        return tuple(a.ticker for a in self.assets)

    def with_assets(self, assets: "tuple[Asset, ...] | list[Asset]") -> "LedgerSnapshot":
        """Replace the asset list, bumping asset_version if the ticker set changed."""
        new_assets = tuple(assets)
        version = self.asset_version
        if {a.ticker for a in new_assets} != set(self.tickers()):
            version += 1
        return replace(self, assets=new_assets, asset_version=version)

    def transactions_for(self, ticker: str) -> tuple[Transaction, ...]:
        symbol = normalize_ticker(ticker)
        return tuple(t for t in self.transactions if t.ticker == symbol)

    def dividends_for(self, ticker: str) -> tuple[Dividend, ...]:
        symbol = normalize_ticker(ticker)
        return tuple(d for d in self.dividends if d.ticker == symbol)
