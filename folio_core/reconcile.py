"""
Import reconciler: merge an externally parsed batch into a ledger snapshot.

Candidates are partial records (any field may be missing). Transactions and
dividends are default-filled and appended; assets are upserted by ticker, with
present fields overwriting the held position directly (an import states the true
position, it is not an incremental trade). The three merges are independent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Mapping

import pandas as pd

from folio_core.asset import UNKNOWN_TICKER, Asset, AssetType, normalize_ticker
from folio_core.dividend import Dividend
from folio_core.errors import require_non_negative
from folio_core.snapshot import LedgerSnapshot
from folio_core.transaction import Transaction, TransactionType, coerce_date

logger = logging.getLogger(__name__)

IMPORTED_DESCRIPTION = "Imported"


@dataclass(frozen=True)
class AssetCandidate:
    ticker: str | None = None
    name: str | None = None
    type: AssetType | str | None = None
    quantity: float | None = None
    average_price: float | None = None


@dataclass(frozen=True)
class DividendCandidate:
    ticker: str | None = None
    amount: float | None = None
    date: date | str | None = None
    description: str | None = None


@dataclass(frozen=True)
class TransactionCandidate:
    ticker: str | None = None
    type: TransactionType | str | None = None
    quantity: float | None = None
    price: float | None = None
    date: date | str | None = None


def _pick(row: Mapping[str, Any], *keys: str) -> Any:
    """First present, non-None value among keys (camelCase and snake_case both accepted)."""
    for key in keys:
        if key in row and row[key] is not None:
            return row[key]
    return None


@dataclass(frozen=True)
class ImportBatch:
    """Three lists of candidates as handed over by an import source."""

    assets: tuple[AssetCandidate, ...] = field(default_factory=tuple)
    dividends: tuple[DividendCandidate, ...] = field(default_factory=tuple)
    transactions: tuple[TransactionCandidate, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "assets", tuple(self.assets))
        object.__setattr__(self, "dividends", tuple(self.dividends))
        object.__setattr__(self, "transactions", tuple(self.transactions))

    @property
    def row_count(self) -> int:
        return len(self.assets) + len(self.dividends) + len(self.transactions)

    @property
    def is_empty(self) -> bool:
        return self.row_count == 0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ImportBatch":
        """
        Build a batch from loosely-typed parser output, e.g. decoded JSON:
        {"assets": [{"ticker": ..., "averagePrice": ...}], "dividends": [...], "transactions": [...]}.
        Non-mapping rows are ignored.
        """
        assets = [
            AssetCandidate(
                ticker=_pick(row, "ticker"),
                name=_pick(row, "name"),
                type=_pick(row, "type"),
                quantity=_pick(row, "quantity"),
                average_price=_pick(row, "average_price", "averagePrice"),
            )
            for row in payload.get("assets") or ()
            if isinstance(row, Mapping)
        ]
        dividends = [
            DividendCandidate(
                ticker=_pick(row, "ticker"),
                amount=_pick(row, "amount"),
                date=_pick(row, "date"),
                description=_pick(row, "description"),
            )
            for row in payload.get("dividends") or ()
            if isinstance(row, Mapping)
        ]
        transactions = [
            TransactionCandidate(
                ticker=_pick(row, "ticker"),
                type=_pick(row, "type"),
                quantity=_pick(row, "quantity"),
                price=_pick(row, "price"),
                date=_pick(row, "date"),
            )
            for row in payload.get("transactions") or ()
            if isinstance(row, Mapping)
        ]
        return cls(assets=assets, dividends=dividends, transactions=transactions)


@dataclass(frozen=True)
class ImportOutcome:
    """New snapshot plus what the merge did."""

    snapshot: LedgerSnapshot
    assets_created: int = 0
    assets_updated: int = 0
    transactions_added: int = 0
    dividends_added: int = 0
    duplicates_skipped: int = 0


def _ticker_or_unknown(ticker: str | None) -> str:
    return normalize_ticker(ticker) or UNKNOWN_TICKER


def _optional_amount(name: str, value: float | None) -> float | None:
    if value is None:
        return None
    return require_non_negative(name, value)


# Day-first formats used by Brazilian broker statements and spreadsheets.
_DAY_FIRST_FORMATS = ("%d/%m/%Y", "%d-%m-%Y", "%d.%m.%Y", "%d/%m/%y")


def parse_import_date(value: "date | str") -> date | None:
    """ISO or day-first (DD/MM/YYYY) date, or None if value matches no known format."""
    try:
        return coerce_date(value)
    except (TypeError, ValueError):
        pass
    text = str(value).strip()
    for fmt in _DAY_FIRST_FORMATS:
        try:
            return pd.to_datetime(text, format=fmt).date()
        except (TypeError, ValueError):
            continue
    return None


def _date_or_today(value: "date | str | None", today: date) -> date:
    """Missing dates default to today; unparsable ones too, with a warning (the row is kept)."""
    if value is None or value == "":
        return today
    parsed = parse_import_date(value)
    if parsed is None:
        logger.warning("Unrecognized import date %r; using %s", value, today.isoformat())
        return today
    return parsed


def _type_or_buy(value: "TransactionType | str | None") -> TransactionType:
    try:
        return TransactionType.parse(value)
    except ValueError:
        logger.warning("Unrecognized transaction type %r; recorded as buy", value)
        return TransactionType.BUY


def fill_transaction(candidate: TransactionCandidate, today: date) -> Transaction:
    """Default-fill one transaction candidate; total is recomputed from quantity and price."""
    quantity = _optional_amount("quantity", candidate.quantity) or 0.0
    price = _optional_amount("price", candidate.price) or 0.0
    return Transaction.create(
        _ticker_or_unknown(candidate.ticker),
        _type_or_buy(candidate.type),
        quantity,
        price,
        _date_or_today(candidate.date, today),
    )


def fill_dividend(candidate: DividendCandidate, today: date) -> Dividend:
    return Dividend.create(
        _ticker_or_unknown(candidate.ticker),
        _optional_amount("amount", candidate.amount) or 0.0,
        _date_or_today(candidate.date, today),
        candidate.description or IMPORTED_DESCRIPTION,
    )


def upsert_asset(assets: list[Asset], candidate: AssetCandidate) -> bool:
    """
    Merge one candidate into assets (in place). Returns True if a new asset was created.

    Existing ticker: overwrite quantity/average_price only where the candidate has them.
    New ticker: current_price starts at the imported average price until the next refresh.
    """
    ticker = _ticker_or_unknown(candidate.ticker)
    quantity = _optional_amount("quantity", candidate.quantity)
    average_price = _optional_amount("average_price", candidate.average_price)

    for i, asset in enumerate(assets):
        if asset.ticker == ticker:
            assets[i] = replace(
                asset,
                quantity=asset.quantity if quantity is None else quantity,
                average_price=asset.average_price if average_price is None else average_price,
            )
            return False

    assets.append(
        Asset.create(
            ticker,
            name=candidate.name or ticker,
            type=AssetType.from_label(candidate.type),
            quantity=quantity or 0.0,
            average_price=average_price or 0.0,
        )
    )
    return True


def _transaction_key(t: Transaction) -> tuple:
    return (t.ticker, t.type, t.date, t.quantity, t.price)


def _dividend_key(d: Dividend) -> tuple:
    return (d.ticker, d.date, d.amount)


def reconcile(
    snapshot: LedgerSnapshot,
    batch: ImportBatch,
    *,
    today: date | None = None,
    skip_duplicates: bool = False,
) -> ImportOutcome:
    """
    Merge batch into snapshot and return the outcome. Pure: snapshot is not modified.

    Raises ValidationError (for the whole batch) if any numeric field is negative or
    non-finite. Unparsable dates fall back to today and unknown transaction types
    to buy; such rows are kept.

    With skip_duplicates, transactions equal on (ticker, type, date, quantity, price)
    and dividends equal on (ticker, date, amount) to one already recorded in snapshot
    are dropped. Identical rows within the batch itself are all kept.
    """
    today = today or date.today()

    assets = list(snapshot.assets)
    created = updated = 0
    for candidate in batch.assets:
        if upsert_asset(assets, candidate):
            created += 1
        else:
            updated += 1
    ids_by_ticker = {a.ticker: a.id for a in assets}

    skipped = 0
    recorded_transactions = {_transaction_key(t) for t in snapshot.transactions}
    new_transactions: list[Transaction] = []
    for candidate in batch.transactions:
        transaction = fill_transaction(candidate, today)
        key = _transaction_key(transaction)
        if skip_duplicates and key in recorded_transactions:
            skipped += 1
            continue
        new_transactions.append(replace(transaction, asset_id=ids_by_ticker.get(transaction.ticker)))

    recorded_dividends = {_dividend_key(d) for d in snapshot.dividends}
    new_dividends: list[Dividend] = []
    for candidate in batch.dividends:
        dividend = fill_dividend(candidate, today)
        key = _dividend_key(dividend)
        if skip_duplicates and key in recorded_dividends:
            skipped += 1
            continue
        new_dividends.append(dividend)

    merged = replace(
        snapshot.with_assets(assets),
        transactions=snapshot.transactions + tuple(new_transactions),
        dividends=snapshot.dividends + tuple(new_dividends),
    )
    if skipped:
        logger.info("Import skipped %d duplicate record(s)", skipped)
    return ImportOutcome(
        snapshot=merged,
        assets_created=created,
        assets_updated=updated,
        transactions_added=len(new_transactions),
        dividends_added=len(new_dividends),
        duplicates_skipped=skipped,
    )
