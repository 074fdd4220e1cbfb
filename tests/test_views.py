"""
Tests for analytics: aggregation views, position table, projection, report.
"""

from datetime import date

import pytest

from analytics import (
    allocation_by_asset,
    allocation_by_type,
    group_dividends_by_month,
    position_summary,
    print_summary,
    project_evolution,
    sorted_transactions,
    summarize,
    total_balance,
    total_dividends,
)
from folio_core import Asset, AssetType, Dividend, LedgerSnapshot, Transaction, TransactionType


def _assets() -> list[Asset]:
    return [
        Asset.create("PETR4", type=AssetType.EQUITY, quantity=100, average_price=32.5, current_price=38.9),
        Asset.create("HGLG11", type=AssetType.REIT, quantity=15, average_price=160.0, current_price=165.5),
        Asset.create("BTC", type=AssetType.CRYPTO, quantity=0.05, average_price=150000, current_price=350000),
        Asset.create("CDB INTER", type=AssetType.CASH_OR_FIXED_INCOME, quantity=1, average_price=5000, current_price=5050),
        Asset.create("VALE3", type=AssetType.EQUITY, quantity=10, average_price=60.0, current_price=70.0),
    ]


def _dividends() -> list[Dividend]:
    return [
        Dividend.create("HGLG11", 16.5, "2023-11-15", "Rendimento"),
        Dividend.create("PETR4", 120.5, "2023-11-20", "JCP"),
        Dividend.create("VALE3", 80.0, "2024-01-05"),
        Dividend.create("HGLG11", 17.0, "2023-12-14"),
    ]


# --- Totals ---


def test_total_balance():
    assert total_balance(_assets()) == pytest.approx(3890 + 2482.5 + 17500 + 5050 + 700)
    assert total_balance([]) == 0.0


def test_total_dividends():
    assert total_dividends(_dividends()) == pytest.approx(234.0)


# --- Allocation ---


def test_allocation_by_type_grouped_and_sorted():
    entries = allocation_by_type(_assets())
    assert [e.name for e in entries] == ["crypto", "cash_or_fixed_income", "equity", "reit"]
    equity = entries[2]
    assert equity.value == pytest.approx(4590.0)
    assert sum(e.share_pct for e in entries) == pytest.approx(100.0)


def test_allocation_by_type_empty():
    assert allocation_by_type([]) == []


def test_allocation_by_asset_unfiltered():
    allocation = allocation_by_asset(_assets())
    assert [e.name for e in allocation.entries] == ["BTC", "CDB INTER", "PETR4", "HGLG11", "VALE3"]
    assert allocation.total == pytest.approx(total_balance(_assets()))


def test_allocation_by_asset_filter_uses_filtered_total():
    allocation = allocation_by_asset(_assets(), AssetType.EQUITY)
    assert [e.name for e in allocation.entries] == ["PETR4", "VALE3"]
    assert allocation.total == pytest.approx(4590.0)
    assert allocation.entries[0].share_pct == pytest.approx(3890 / 4590 * 100)
    assert allocation_by_asset(_assets(), "FII").total == pytest.approx(2482.5)
    assert allocation_by_asset(_assets(), AssetType.TREASURY_BOND).entries == ()


def test_allocation_by_asset_all_means_no_filter():
    assets = _assets()
    assert allocation_by_asset(assets, "ALL") == allocation_by_asset(assets)
    assert allocation_by_asset(assets, "all").total == pytest.approx(total_balance(assets))


def test_views_are_idempotent():
    assets = _assets()
    assert allocation_by_type(assets) == allocation_by_type(assets)
    assert allocation_by_asset(assets) == allocation_by_asset(assets)
    assert total_balance(assets) == total_balance(assets)


def test_allocation_zero_total_has_zero_shares():
    allocation = allocation_by_asset([Asset.create("X", quantity=0, average_price=10)])
    assert allocation.total == 0.0
    assert allocation.entries[0].share_pct == 0.0


# --- Dividends by month ---


def test_group_dividends_by_month():
    months = group_dividends_by_month(_dividends())
    assert [m.key for m in months] == ["2024-01", "2023-12", "2023-11"]
    november = months[2]
    assert november.total == pytest.approx(137.0)
    assert [d.date for d in november.items] == [date(2023, 11, 20), date(2023, 11, 15)]


def test_group_dividends_empty():
    assert group_dividends_by_month([]) == []


def test_sorted_transactions_newest_first():
    old = Transaction.create("A", TransactionType.BUY, 1, 1, "2023-01-01")
    new = Transaction.create("B", TransactionType.SELL, 1, 1, "2024-01-01")
    assert sorted_transactions([old, new]) == [new, old]


# --- Positions ---


def test_position_summary():
    df = position_summary(_assets())
    assert list(df.index) == ["PETR4", "HGLG11", "BTC", "CDB INTER", "VALE3"]
    assert df.loc["PETR4", "market_value"] == pytest.approx(3890.0)
    assert df.loc["PETR4", "unrealized_pnl"] == pytest.approx(640.0)
    assert df.loc["BTC", "type"] == "crypto"


def test_position_summary_empty():
    df = position_summary([])
    assert df.empty
    assert "market_value" in df.columns


# --- Projection ---


def test_project_evolution_monthly_anchors_current_month():
    points = project_evolution(10_000.0, "monthly", today=date(2024, 6, 15), seed=7)
    assert [p.label for p in points][:3] == ["Jan", "Feb", "Mar"]
    assert len(points) == 12
    assert points[5].value == 10_000.0
    assert all(p.value > 0 for p in points)


def test_project_evolution_is_reproducible_with_seed():
    a = project_evolution(5_000.0, "monthly", today=date(2024, 3, 1), seed=1)
    b = project_evolution(5_000.0, "monthly", today=date(2024, 3, 1), seed=1)
    assert a == b


def test_project_evolution_yearly():
    points = project_evolution(20_000.0, "yearly", today=date(2024, 6, 1), seed=3)
    assert [p.label for p in points] == ["2020", "2021", "2022", "2023", "2024"]
    assert points[-1].value == 20_000.0


def test_project_evolution_placeholder_and_bad_mode():
    points = project_evolution(0.0, "yearly", today=date(2024, 1, 1), seed=0, years=1)
    assert points[0].value == 10_000.0
    with pytest.raises(ValueError):
        project_evolution(1.0, "weekly")


# --- Report ---


def test_summarize_and_print(capsys):
    snapshot = LedgerSnapshot(assets=_assets()[:2], dividends=_dividends()[:2])
    summary = summarize(snapshot)
    assert summary.total_balance == pytest.approx(3890 + 2482.5)
    assert summary.total_cost == pytest.approx(3250 + 2400)
    assert summary.total_dividends == pytest.approx(137.0)
    printed = print_summary(snapshot)
    assert printed == summary
    out = capsys.readouterr().out
    assert "Total balance" in out
    assert "2023-11" in out
