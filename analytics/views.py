"""
Aggregation views: pure read-side projections over a ledger snapshot.

Totals, allocation breakdowns (by type, by ticker) and monthly dividend grouping.
Nothing here mutates its input; calling a view twice on the same data gives the
same result.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import pandas as pd

from folio_core.asset import Asset, AssetType
from folio_core.dividend import Dividend
from folio_core.transaction import Transaction


@dataclass(frozen=True)
class AllocationEntry:
    """One slice of an allocation: a type or ticker, its market value and share of the total."""

    name: str
    value: float
    share_pct: float


@dataclass(frozen=True)
class AssetAllocation:
    """Per-ticker allocation plus the total it was computed against (filtered when a type filter is set)."""

    entries: tuple[AllocationEntry, ...]
    total: float


@dataclass(frozen=True)
class DividendMonth:
    """Dividends paid in one calendar month, newest first."""

    key: str
    total: float
    items: tuple[Dividend, ...]


def total_balance(assets: Iterable[Asset]) -> float:
    """Sum of quantity * current_price."""
    return float(sum(a.quantity * a.current_price for a in assets))


def total_dividends(dividends: Iterable[Dividend]) -> float:
    return float(sum(d.amount for d in dividends))


def _share(value: float, total: float) -> float:
    return value / total * 100.0 if total > 0 else 0.0


def _grouped_values(assets: Sequence[Asset], key: str) -> pd.Series:
    """Market value summed per key ('type' or 'ticker'), largest first; ties keep first-seen order."""
    df = pd.DataFrame(
        {
            "ticker": [a.ticker for a in assets],
            "type": [a.type.value for a in assets],
            "value": [a.quantity * a.current_price for a in assets],
        }
    )
    grouped = df.groupby(key, sort=False)["value"].sum()
    return grouped.sort_values(ascending=False, kind="mergesort")


def _entries(grouped: pd.Series, total: float) -> tuple[AllocationEntry, ...]:
    return tuple(
        AllocationEntry(name=str(name), value=float(value), share_pct=_share(float(value), total))
        for name, value in grouped.items()
    )


def allocation_by_type(assets: Sequence[Asset]) -> list[AllocationEntry]:
    """Market value per asset type, descending. Names are AssetType values."""
    if not assets:
        return []
    grouped = _grouped_values(assets, "type")
    return list(_entries(grouped, float(grouped.sum())))


# Dashboard filter value meaning "every type".
ALL_TYPES = "ALL"


def allocation_by_asset(
    assets: Sequence[Asset],
    type_filter: AssetType | str | None = None,
) -> AssetAllocation:
    """
    Market value per ticker, descending, optionally restricted to one asset type.
    share_pct and total refer to the filtered set, not the whole portfolio.
    type_filter None or "ALL" means no filter.
    """
    if isinstance(type_filter, str) and type_filter.strip().upper() == ALL_TYPES:
        type_filter = None
    if type_filter is not None:
        wanted = AssetType.from_label(type_filter)
        assets = [a for a in assets if a.type == wanted]
    if not assets:
        return AssetAllocation(entries=(), total=0.0)
    grouped = _grouped_values(assets, "ticker")
    total = float(grouped.sum())
    return AssetAllocation(entries=_entries(grouped, total), total=total)


def month_key(d: Dividend) -> str:
    return f"{d.date.year:04d}-{d.date.month:02d}"


def group_dividends_by_month(dividends: Iterable[Dividend]) -> list[DividendMonth]:
    """
    Group by (year, month) of payment date. Months come most recent first; within a
    month items are sorted by date descending and total is the sum of amounts.
    """
    ordered = sorted(dividends, key=lambda d: d.date, reverse=True)
    groups: dict[str, list[Dividend]] = {}
    for d in ordered:
        groups.setdefault(month_key(d), []).append(d)
    return [
        DividendMonth(key=key, total=float(sum(d.amount for d in groups[key])), items=tuple(groups[key]))
        for key in sorted(groups, reverse=True)
    ]


def sorted_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Trade history, newest first."""
    return sorted(transactions, key=lambda t: t.date, reverse=True)
