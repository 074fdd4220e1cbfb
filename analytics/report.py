"""
Portfolio report: print a summary of a ledger snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass

from analytics.views import (
    allocation_by_type,
    group_dividends_by_month,
    total_balance,
    total_dividends,
)
from folio_core.snapshot import LedgerSnapshot


@dataclass
class PortfolioSummary:
    """Headline numbers for a snapshot."""

    total_balance: float
    total_cost: float
    unrealized_pnl: float
    total_dividends: float
    asset_count: int
    transaction_count: int


def summarize(snapshot: LedgerSnapshot) -> PortfolioSummary:
    balance = total_balance(snapshot.assets)
    cost = float(sum(a.cost_basis for a in snapshot.assets))
    return PortfolioSummary(
        total_balance=balance,
        total_cost=cost,
        unrealized_pnl=balance - cost,
        total_dividends=total_dividends(snapshot.dividends),
        asset_count=len(snapshot.assets),
        transaction_count=len(snapshot.transactions),
    )


def print_summary(snapshot: LedgerSnapshot, *, recent_months: int = 3) -> PortfolioSummary:
    """
    Compute the summary and print it with the allocation by type and the most
    recent dividend months.

    Returns
    -------
    PortfolioSummary
        The computed summary (e.g. for programmatic use).
    """
    summary = summarize(snapshot)
    print("--- Portfolio ---")
    print(f"Total balance:   {summary.total_balance:,.2f}")
    print(f"Total cost:      {summary.total_cost:,.2f}")
    print(f"Unrealized P&L:  {summary.unrealized_pnl:,.2f}")
    print(f"Dividends:       {summary.total_dividends:,.2f}")
    print(f"Assets:          {summary.asset_count}")
    print(f"Transactions:    {summary.transaction_count}")
    for entry in allocation_by_type(snapshot.assets):
        print(f"  {entry.name:<22}{entry.value:>14,.2f}  {entry.share_pct:6.2f}%")
    for month in group_dividends_by_month(snapshot.dividends)[:recent_months]:
        print(f"Dividends {month.key}: {month.total:,.2f} ({len(month.items)} payment(s))")
    print("-----------------")
    return summary
