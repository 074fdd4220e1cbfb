"""
Read-only portfolio context for an advisor chat.
"""

from __future__ import annotations

from typing import Any

from folio_core.snapshot import LedgerSnapshot
from folio_core.sources.base import Advisor


def advisor_context(snapshot: LedgerSnapshot, recent_dividends: int = 5) -> dict[str, Any]:
    """Summary handed to an Advisor: asset list with types, total value, latest dividends."""
    latest = sorted(snapshot.dividends, key=lambda d: d.date, reverse=True)[:recent_dividends]
    return {
        "asset_count": len(snapshot.assets),
        "total_value": sum(a.market_value for a in snapshot.assets),
        "assets": [f"{a.ticker} ({a.type.value})" for a in snapshot.assets],
        "recent_dividends": [
            {"ticker": d.ticker, "amount": d.amount, "date": d.date.isoformat(), "description": d.description}
            for d in latest
        ],
    }


def ask_advisor(advisor: Advisor, message: str, snapshot: LedgerSnapshot) -> str:
    """Ask advisor about the snapshot. Never touches the ledger."""
    return advisor.ask(message, advisor_context(snapshot))
