"""
Tests for folio_core data model: Asset, AssetType, Transaction, Dividend, LedgerSnapshot.
"""

from dataclasses import FrozenInstanceError, replace
from datetime import date, datetime

import pytest

from folio_core import Asset, AssetType, Dividend, LedgerSnapshot, Transaction, TransactionType
from folio_core.asset import normalize_ticker


# --- Asset ---


def test_asset_create_defaults_current_price_to_average():
    a = Asset.create(" petr4 ", type=AssetType.EQUITY, quantity=100, average_price=32.5)
    assert a.ticker == "PETR4"
    assert a.name == "PETR4"
    assert a.current_price == 32.5
    assert a.id.startswith("ast-")


def test_asset_ids_are_unique():
    assert Asset.create("A").id != Asset.create("A").id


def test_asset_immutable():
    a = Asset.create("PETR4")
    with pytest.raises(FrozenInstanceError):
        a.quantity = 10


def test_asset_derived_values():
    a = Asset.create("PETR4", quantity=100, average_price=32.5, current_price=38.9)
    assert a.market_value == pytest.approx(3890.0)
    assert a.cost_basis == pytest.approx(3250.0)
    assert a.unrealized_pnl == pytest.approx(640.0)
    assert a.unrealized_pnl_pct == pytest.approx((38.9 - 32.5) / 32.5 * 100)


def test_asset_pnl_pct_without_cost_basis():
    a = Asset.create("GIFT", quantity=10, average_price=0.0, current_price=5.0)
    assert a.unrealized_pnl_pct == 0.0


def test_normalize_ticker():
    assert normalize_ticker("  hglg11 ") == "HGLG11"
    assert normalize_ticker(None) == ""


# --- AssetType ---


@pytest.mark.parametrize(
    "label,expected",
    [
        ("Ação", AssetType.EQUITY),
        ("acao", AssetType.EQUITY),
        ("FII", AssetType.REIT),
        ("Tesouro Direto", AssetType.TREASURY_BOND),
        ("Caixa / Renda Fixa", AssetType.CASH_OR_FIXED_INCOME),
        ("Criptomoeda", AssetType.CRYPTO),
        ("crypto", AssetType.CRYPTO),
        ("ETF", AssetType.OTHER),
        ("", AssetType.OTHER),
        (None, AssetType.OTHER),
        (AssetType.REIT, AssetType.REIT),
        ("TREASURY_BOND", AssetType.TREASURY_BOND),
    ],
)
def test_asset_type_from_label(label, expected):
    assert AssetType.from_label(label) == expected


# --- TransactionType / Transaction ---


def test_transaction_type_parse():
    assert TransactionType.parse("Compra") == TransactionType.BUY
    assert TransactionType.parse("VENDA") == TransactionType.SELL
    assert TransactionType.parse("sell") == TransactionType.SELL
    assert TransactionType.parse(None) == TransactionType.BUY
    with pytest.raises(ValueError):
        TransactionType.parse("short")


def test_transaction_total_fixed_at_creation():
    t = Transaction.create("petr4", TransactionType.BUY, 100, 32.5, "2023-01-15")
    assert t.ticker == "PETR4"
    assert t.total == pytest.approx(3250.0)
    assert t.date == date(2023, 1, 15)
    assert t.id.startswith("txn-")


def test_transaction_coerces_date():
    t = Transaction(
        id="t1",
        ticker="PETR4",
        type=TransactionType.BUY,
        quantity=1,
        price=1,
        total=1,
        date="2023-02-10",
    )
    assert t.date == date(2023, 2, 10)
    t2 = Transaction.create("X", TransactionType.SELL, 1, 2, datetime(2024, 3, 1, 12, 30))
    assert t2.date == date(2024, 3, 1)


# --- Dividend ---


def test_dividend_create():
    d = Dividend.create("hglg11", 16.5, "2023-11-15", "Rendimento")
    assert d.ticker == "HGLG11"
    assert d.date == date(2023, 11, 15)
    assert d.description == "Rendimento"


# --- LedgerSnapshot ---


def test_snapshot_lookup():
    a = Asset.create("PETR4")
    s = LedgerSnapshot(assets=[a])
    assert isinstance(s.assets, tuple)
    assert s.find_asset("petr4") is a
    assert s.asset_by_id(a.id) is a
    assert s.find_asset("VALE3") is None
    assert s.tickers() == ("PETR4",)


def test_snapshot_with_assets_bumps_version_only_on_ticker_change():
    a = Asset.create("PETR4", quantity=1)
    s = LedgerSnapshot(assets=(a,))
    same = s.with_assets((replace(a, quantity=5),))
    assert same.asset_version == 0
    grown = s.with_assets((a, Asset.create("VALE3")))
    assert grown.asset_version == 1
    shrunk = grown.with_assets(())
    assert shrunk.asset_version == 2


def test_snapshot_queries_by_ticker():
    t = Transaction.create("PETR4", TransactionType.BUY, 1, 10, "2023-01-01")
    d = Dividend.create("PETR4", 5, "2023-02-01")
    s = LedgerSnapshot(transactions=(t,), dividends=(d,))
    assert s.transactions_for("petr4") == (t,)
    assert s.dividends_for("PETR4") == (d,)
    assert s.transactions_for("VALE3") == ()
