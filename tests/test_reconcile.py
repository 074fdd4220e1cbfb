"""
Tests for the import reconciler: default filling, asset upsert, duplicates.
"""

from datetime import date

import pytest

from folio_core import (
    Asset,
    AssetCandidate,
    AssetType,
    Dividend,
    DividendCandidate,
    ImportBatch,
    LedgerSnapshot,
    Transaction,
    TransactionCandidate,
    TransactionType,
    ValidationError,
)
from folio_core.reconcile import IMPORTED_DESCRIPTION, reconcile

TODAY = date(2024, 5, 17)


def _snapshot() -> LedgerSnapshot:
    return LedgerSnapshot(
        assets=(
            Asset.create("PETR4", type=AssetType.EQUITY, quantity=100, average_price=32.5, current_price=38.9),
            Asset.create("HGLG11", type=AssetType.REIT, quantity=15, average_price=160.0, current_price=165.5),
        ),
        transactions=(Transaction.create("PETR4", TransactionType.BUY, 100, 32.5, "2023-01-15"),),
        dividends=(Dividend.create("PETR4", 120.5, "2023-11-20", "JCP"),),
    )


# --- ImportBatch ---


def test_batch_counts():
    batch = ImportBatch(assets=[AssetCandidate(ticker="A")], dividends=[DividendCandidate()])
    assert batch.row_count == 2
    assert not batch.is_empty
    assert ImportBatch().is_empty


def test_batch_from_dict_accepts_camel_case():
    batch = ImportBatch.from_dict(
        {
            "assets": [{"ticker": "IVVB11", "averagePrice": 280.0, "quantity": 50}, "garbage"],
            "transactions": [{"ticker": "PETR4", "type": "Venda", "quantity": 10, "price": 40, "date": "2024-01-02"}],
        }
    )
    assert batch.assets == (AssetCandidate(ticker="IVVB11", quantity=50, average_price=280.0),)
    assert batch.transactions[0].type == "Venda"
    assert batch.dividends == ()


# --- Assets ---


def test_upsert_overwrites_only_present_fields():
    outcome = reconcile(_snapshot(), ImportBatch(assets=[AssetCandidate(ticker="PETR4", quantity=200)]), today=TODAY)
    petr4 = outcome.snapshot.find_asset("PETR4")
    assert petr4.quantity == 200
    assert petr4.average_price == 32.5
    assert petr4.current_price == 38.9
    assert outcome.assets_updated == 1
    assert outcome.assets_created == 0
    assert outcome.snapshot.asset_version == 0


def test_upsert_is_not_a_weighted_average():
    candidate = AssetCandidate(ticker="PETR4", quantity=10, average_price=50.0)
    petr4 = reconcile(_snapshot(), ImportBatch(assets=[candidate]), today=TODAY).snapshot.find_asset("PETR4")
    assert petr4.quantity == 10
    assert petr4.average_price == 50.0


def test_upsert_matches_after_normalizing_ticker():
    outcome = reconcile(_snapshot(), ImportBatch(assets=[AssetCandidate(ticker=" petr4", quantity=1)]), today=TODAY)
    assert outcome.snapshot.tickers() == ("PETR4", "HGLG11")
    assert outcome.snapshot.find_asset("PETR4").quantity == 1


def test_new_asset_starts_at_average_price():
    candidate = AssetCandidate(ticker="IVVB11", type="ETF", quantity=50, average_price=280.0)
    outcome = reconcile(_snapshot(), ImportBatch(assets=[candidate]), today=TODAY)
    ivvb = outcome.snapshot.find_asset("IVVB11")
    assert ivvb.current_price == ivvb.average_price == 280.0
    assert ivvb.quantity == 50
    assert ivvb.type == AssetType.OTHER
    assert ivvb.name == "IVVB11"
    assert outcome.assets_created == 1
    assert outcome.snapshot.asset_version == 1


def test_new_asset_defaults():
    outcome = reconcile(LedgerSnapshot(), ImportBatch(assets=[AssetCandidate()]), today=TODAY)
    (asset,) = outcome.snapshot.assets
    assert asset.ticker == "UNKNOWN"
    assert asset.quantity == 0
    assert asset.current_price == 0


def test_same_ticker_twice_in_batch_creates_once():
    batch = ImportBatch(
        assets=[
            AssetCandidate(ticker="BTC", quantity=0.05, average_price=150000),
            AssetCandidate(ticker="btc", quantity=0.1),
        ]
    )
    outcome = reconcile(LedgerSnapshot(), batch, today=TODAY)
    assert len(outcome.snapshot.assets) == 1
    assert outcome.snapshot.assets[0].quantity == 0.1
    assert outcome.snapshot.assets[0].average_price == 150000
    assert (outcome.assets_created, outcome.assets_updated) == (1, 1)


# --- Transactions ---


def test_transaction_defaults():
    outcome = reconcile(_snapshot(), ImportBatch(transactions=[TransactionCandidate()]), today=TODAY)
    t = outcome.snapshot.transactions[-1]
    assert t.ticker == "UNKNOWN"
    assert t.type == TransactionType.BUY
    assert t.quantity == 0 and t.price == 0 and t.total == 0
    assert t.date == TODAY
    assert t.asset_id is None


def test_transaction_total_recomputed_and_linked():
    candidate = TransactionCandidate(ticker="hglg11", type="Compra", quantity=5, price=150.0, date="2024-03-01")
    outcome = reconcile(_snapshot(), ImportBatch(transactions=[candidate]), today=TODAY)
    t = outcome.snapshot.transactions[-1]
    assert t.ticker == "HGLG11"
    assert t.total == pytest.approx(750.0)
    assert t.asset_id == outcome.snapshot.find_asset("HGLG11").id
    # position is not touched by imported history
    assert outcome.snapshot.find_asset("HGLG11").quantity == 15


def test_reimport_duplicates_by_default():
    batch = ImportBatch(transactions=[TransactionCandidate(ticker="VALE3", quantity=1, price=60, date="2024-01-01")])
    once = reconcile(LedgerSnapshot(), batch, today=TODAY).snapshot
    twice = reconcile(once, batch, today=TODAY).snapshot
    assert len(twice.transactions) == 2


def test_skip_duplicates():
    batch = ImportBatch(
        transactions=[TransactionCandidate(ticker="VALE3", quantity=1, price=60, date="2024-01-01")],
        dividends=[DividendCandidate(ticker="PETR4", amount=120.5, date="2023-11-20")],
    )
    outcome = reconcile(_snapshot(), batch, today=TODAY, skip_duplicates=True)
    assert outcome.dividends_added == 0
    assert outcome.transactions_added == 1
    again = reconcile(outcome.snapshot, batch, today=TODAY, skip_duplicates=True)
    assert again.transactions_added == 0
    assert again.duplicates_skipped == 2
    assert len(again.snapshot.transactions) == 2


def test_skip_duplicates_keeps_identical_rows_within_batch():
    fill = TransactionCandidate(ticker="PETR4", type="Compra", quantity=100, price=32.5, date="2024-03-01")
    outcome = reconcile(LedgerSnapshot(), ImportBatch(transactions=[fill, fill]), today=TODAY, skip_duplicates=True)
    assert outcome.transactions_added == 2
    assert outcome.duplicates_skipped == 0

    payment = DividendCandidate(ticker="HGLG11", amount=16.5, date="2023-11-15")
    outcome = reconcile(LedgerSnapshot(), ImportBatch(dividends=[payment, payment]), today=TODAY, skip_duplicates=True)
    assert outcome.dividends_added == 2


# --- Dividends ---


def test_dividend_defaults():
    outcome = reconcile(_snapshot(), ImportBatch(dividends=[DividendCandidate(ticker="HGLG11", amount=16.5)]), today=TODAY)
    d = outcome.snapshot.dividends[-1]
    assert d.description == IMPORTED_DESCRIPTION
    assert d.date == TODAY
    assert d.amount == 16.5
    assert outcome.dividends_added == 1


# --- Validation ---


@pytest.mark.parametrize(
    "batch",
    [
        ImportBatch(assets=[AssetCandidate(ticker="X", quantity=-1)]),
        ImportBatch(assets=[AssetCandidate(ticker="X", average_price=float("nan"))]),
        ImportBatch(transactions=[TransactionCandidate(ticker="X", price=float("inf"))]),
        ImportBatch(dividends=[DividendCandidate(ticker="X", amount=-3)]),
    ],
)
def test_invalid_batch_rejected_whole(batch):
    snapshot = _snapshot()
    with pytest.raises(ValidationError):
        reconcile(snapshot, batch, today=TODAY)


def test_reconcile_is_pure():
    snapshot = _snapshot()
    reconcile(snapshot, ImportBatch(assets=[AssetCandidate(ticker="PETR4", quantity=1)]), today=TODAY)
    assert snapshot.find_asset("PETR4").quantity == 100


# --- Lenient fields ---


@pytest.mark.parametrize("text", ["15/11/2023", "15-11-2023", "15.11.2023", "2023-11-15"])
def test_day_first_and_iso_dates_accepted(text):
    outcome = reconcile(LedgerSnapshot(), ImportBatch(dividends=[DividendCandidate(ticker="HGLG11", amount=16.5, date=text)]), today=TODAY)
    assert outcome.snapshot.dividends[0].date == date(2023, 11, 15)


def test_unparsable_date_defaults_to_today_and_keeps_batch(caplog):
    batch = ImportBatch(
        dividends=[
            DividendCandidate(ticker="HGLG11", amount=16.5, date="sometime in november"),
            DividendCandidate(ticker="PETR4", amount=120.5, date="20/11/2023"),
        ]
    )
    outcome = reconcile(LedgerSnapshot(), batch, today=TODAY)
    assert outcome.dividends_added == 2
    assert [d.date for d in outcome.snapshot.dividends] == [TODAY, date(2023, 11, 20)]
    assert "Unrecognized import date" in caplog.text


def test_unknown_transaction_type_defaults_to_buy():
    candidate = TransactionCandidate(ticker="X", type="short", quantity=1, price=10)
    outcome = reconcile(LedgerSnapshot(), ImportBatch(transactions=[candidate]), today=TODAY)
    assert outcome.snapshot.transactions[0].type == TransactionType.BUY
