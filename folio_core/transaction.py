"""
Transaction: immutable record of one executed buy or sell.

total is fixed at creation (quantity * price) and never recomputed, so later
changes to the asset do not alter history.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from folio_core.asset import new_id, normalize_ticker


class TransactionType(Enum):
    BUY = "buy"
    SELL = "sell"

    @classmethod
    def parse(cls, value: "str | TransactionType | None") -> "TransactionType":
        """Accept members, 'buy'/'sell' in any case, and the Compra/Venda labels. Default BUY."""
        if isinstance(value, TransactionType):
            return value
        if not value:
            return cls.BUY
        text = str(value).strip().lower()
        if text in ("sell", "venda", "s"):
            return cls.SELL
        if text in ("buy", "compra", "b"):
            return cls.BUY
        raise ValueError(f"Unknown transaction type: {value!r}")


def coerce_date(value: "date | datetime | str") -> date:
    """ISO strings and datetimes to date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


@dataclass(frozen=True)
class Transaction:
    """One trade as recorded in the history. asset_id is informational only."""

    id: str
    ticker: str
    type: TransactionType
    quantity: float
    price: float
    total: float
    date: date
    asset_id: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.date, date) or isinstance(self.date, datetime):
            object.__setattr__(self, "date", coerce_date(self.date))

    @classmethod
    def create(
        cls,
        ticker: str,
        type: TransactionType,
        quantity: float,
        price: float,
        trade_date: "date | str",
        *,
        asset_id: str | None = None,
    ) -> "Transaction":
        return cls(
            id=new_id("txn"),
            ticker=normalize_ticker(ticker),
            type=type,
            quantity=quantity,
            price=price,
            total=quantity * price,
            date=coerce_date(trade_date),
            asset_id=asset_id,
        )
