"""
Read-side analytics on top of folio-core.

Aggregation views (totals, allocation, monthly dividends), the position table,
the display-only evolution projection and a console summary report.
"""

from analytics.positions import position_summary
from analytics.projection import EvolutionPoint, project_evolution
from analytics.report import PortfolioSummary, print_summary, summarize
from analytics.views import (
    AllocationEntry,
    AssetAllocation,
    DividendMonth,
    allocation_by_asset,
    allocation_by_type,
    group_dividends_by_month,
    sorted_transactions,
    total_balance,
    total_dividends,
)

__all__ = [
    "AllocationEntry",
    "AssetAllocation",
    "DividendMonth",
    "allocation_by_asset",
    "allocation_by_type",
    "group_dividends_by_month",
    "sorted_transactions",
    "total_balance",
    "total_dividends",
    "position_summary",
    "EvolutionPoint",
    "project_evolution",
    "PortfolioSummary",
    "print_summary",
    "summarize",
]
