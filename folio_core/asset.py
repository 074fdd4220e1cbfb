"""
Asset: one portfolio holding, keyed by ticker.

Immutable. Trades, imports and price refreshes produce new Asset values via
dataclasses.replace; the synthetic id stays stable across those updates.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum

UNKNOWN_TICKER = "UNKNOWN"


def new_id(prefix: str) -> str:
    """Short random id, e.g. 'ast-1f2e3d4c5b6a'."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def normalize_ticker(ticker: str | None) -> str:
    """Trim and uppercase. Empty or missing tickers normalize to ''."""
    if ticker is None:
        return ""
    return str(ticker).strip().upper()


class AssetType(Enum):
    EQUITY = "equity"
    REIT = "reit"
    TREASURY_BOND = "treasury_bond"
    CASH_OR_FIXED_INCOME = "cash_or_fixed_income"
    CRYPTO = "crypto"
    OTHER = "other"

    @classmethod
    def from_label(cls, label: "str | AssetType | None") -> "AssetType":
        """
        Map a free-form label to a type. Accepts member values and names plus the
        keywords brokers and spreadsheets commonly use. Unknown labels map to OTHER.
        """
        if isinstance(label, AssetType):
            return label
        if not label:
            return cls.OTHER
        text = str(label).strip()
        for member in cls:
            if text.lower() == member.value or text.upper() == member.name:
                return member
        upper = text.upper()
        # "Caixa / Renda Fixa" is cash, so CAIXA is checked before FIXA.
        if "ACAO" in upper or "AÇÃO" in upper or "EQUITY" in upper or "STOCK" in upper:
            return cls.EQUITY
        if "FII" in upper or "REIT" in upper:
            return cls.REIT
        if "CAIXA" in upper or "CASH" in upper:
            return cls.CASH_OR_FIXED_INCOME
        if "TESOURO" in upper or "FIXA" in upper or "TREASURY" in upper or "BOND" in upper:
            return cls.TREASURY_BOND
        if "CRIPTO" in upper or "CRYPTO" in upper:
            return cls.CRYPTO
        return cls.OTHER


@dataclass(frozen=True)
class Asset:
    """A holding: position (quantity, average_price) plus last known market price."""

    id: str
    ticker: str
    name: str
    type: AssetType
    quantity: float = 0.0
    average_price: float = 0.0
    current_price: float = 0.0

    @classmethod
    def create(
        cls,
        ticker: str,
        *,
        name: str | None = None,
        type: AssetType = AssetType.OTHER,
        quantity: float = 0.0,
        average_price: float = 0.0,
        current_price: float | None = None,
    ) -> "Asset":
        """New asset with a fresh id. current_price defaults to average_price."""
        symbol = normalize_ticker(ticker)
        return cls(
            id=new_id("ast"),
            ticker=symbol,
            name=name or symbol,
            type=type,
            quantity=quantity,
            average_price=average_price,
            current_price=average_price if current_price is None else current_price,
        )

    @property
    def market_value(self) -> float:
        return self.quantity * self.current_price

    @property
    def cost_basis(self) -> float:
        return self.quantity * self.average_price

    @property
    def unrealized_pnl(self) -> float:
        return self.market_value - self.cost_basis

    @property
    def unrealized_pnl_pct(self) -> float:
        """Price change vs. average cost, in percent. 0 when there is no cost basis."""
        if self.average_price == 0:
            return 0.0
        return (self.current_price - self.average_price) / self.average_price * 100.0
