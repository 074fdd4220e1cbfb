"""
Dividend: immutable record of one payment received.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from folio_core.asset import new_id, normalize_ticker
from folio_core.transaction import coerce_date


@dataclass(frozen=True)
class Dividend:
    id: str
    ticker: str
    amount: float
    date: date
    description: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.date, date) or isinstance(self.date, datetime):
            object.__setattr__(self, "date", coerce_date(self.date))

    @classmethod
    def create(
        cls,
        ticker: str,
        amount: float,
        paid_on: "date | str",
        description: str | None = None,
    ) -> "Dividend":
        return cls(
            id=new_id("div"),
            ticker=normalize_ticker(ticker),
            amount=amount,
            date=coerce_date(paid_on),
            description=description,
        )
