"""
Position table: per-asset market value, cost basis and unrealized result.
"""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from folio_core.asset import Asset

POSITION_COLUMNS = (
    "ticker",
    "name",
    "type",
    "quantity",
    "average_price",
    "current_price",
    "market_value",
    "cost_basis",
    "unrealized_pnl",
    "unrealized_pnl_pct",
)


def position_summary(assets: Sequence[Asset]) -> pd.DataFrame:
    """One row per asset in portfolio order, indexed by ticker. Empty frame (same columns) for no assets."""
    rows = [
        {
            "ticker": a.ticker,
            "name": a.name,
            "type": a.type.value,
            "quantity": a.quantity,
            "average_price": a.average_price,
            "current_price": a.current_price,
            "market_value": a.market_value,
            "cost_basis": a.cost_basis,
            "unrealized_pnl": a.unrealized_pnl,
            "unrealized_pnl_pct": a.unrealized_pnl_pct,
        }
        for a in assets
    ]
    df = pd.DataFrame(rows, columns=list(POSITION_COLUMNS))
    return df.set_index("ticker")
