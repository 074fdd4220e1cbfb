"""
Ledger: single owner of the portfolio snapshot and its command surface.

Every command validates, builds a new LedgerSnapshot and swaps it in under a lock;
a command that raises leaves the current snapshot untouched. Readers get whole
snapshots and never observe a half-applied command.

Price refresh is the only command that does I/O. It runs the source against the
snapshot taken when it starts, then merges prices by ticker into whatever snapshot
is current when it completes. If tickers were added or removed meanwhile, the
refresh is discarded as stale.
"""

from __future__ import annotations

import concurrent.futures
import logging
import math
import threading
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import date, datetime
from typing import Any, TypeVar

from folio_core.asset import Asset, AssetType, normalize_ticker
from folio_core.dividend import Dividend
from folio_core.errors import (
    AssetNotFoundError,
    ImportParseError,
    LedgerError,
    ValidationError,
    require_non_negative,
)
from folio_core.reconcile import ImportBatch, ImportOutcome, reconcile
from folio_core.snapshot import LedgerSnapshot
from folio_core.sources.base import ImportSource, PriceSource, apply_prices
from folio_core.status import PriceRefreshKind, PriceRefreshStatus, RejectedCommandLog
from folio_core.trade import apply_trade
from folio_core.transaction import Transaction, TransactionType

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PRICE_TIMEOUT_SECONDS = 15.0

TradeObserver = Callable[[Transaction, LedgerSnapshot], None]

_UPDATABLE_FIELDS = ("name", "type", "quantity", "average_price", "current_price")
_NUMERIC_FIELDS = ("quantity", "average_price", "current_price")


def _checked_asset(asset: Asset) -> Asset:
    """Normalized ticker, non-negative finite numbers. ValidationError otherwise."""
    ticker = normalize_ticker(asset.ticker)
    if not ticker:
        raise ValidationError("Asset ticker must not be empty")
    return replace(
        asset,
        ticker=ticker,
        name=asset.name or ticker,
        type=AssetType.from_label(asset.type),
        quantity=require_non_negative("quantity", asset.quantity),
        average_price=require_non_negative("average_price", asset.average_price),
        current_price=require_non_negative("current_price", asset.current_price),
    )


class Ledger:
    """
    Portfolio ledger: assets, dividends and transaction history.

    Commands: add/update/remove asset, add/remove dividend, add/remove transaction,
    record_trade, import_batch / import_from, apply_price_update / refresh_prices.
    Removals never cascade: transactions and dividends may reference tickers that
    are no longer held, and removing a transaction does not roll back its trade.
    """

    def __init__(
        self,
        snapshot: LedgerSnapshot | None = None,
        *,
        observers: Sequence[TradeObserver] = (),
        price_timeout_seconds: float = DEFAULT_PRICE_TIMEOUT_SECONDS,
    ) -> None:
        self._snapshot = snapshot or LedgerSnapshot()
        self._lock = threading.Lock()
        self.observers: list[TradeObserver] = list(observers)
        self.price_timeout_seconds = price_timeout_seconds
        self._rejected_log: list[RejectedCommandLog] = []
        self.last_price_refresh: PriceRefreshStatus | None = None

    # --- read side ---

    @property
    def snapshot(self) -> LedgerSnapshot:
        """Current snapshot. Immutable; safe to hold while commands run."""
        return self._snapshot

    @property
    def assets(self) -> tuple[Asset, ...]:
        return self._snapshot.assets

    @property
    def dividends(self) -> tuple[Dividend, ...]:
        return self._snapshot.dividends

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._snapshot.transactions

    def get_rejected_log(self) -> list[RejectedCommandLog]:
        """Commands refused so far, oldest first."""
        return list(self._rejected_log)

    # --- command plumbing ---

    def _reject(self, command: str, error: Exception) -> None:
        self._rejected_log.append(RejectedCommandLog(command=command, reason=str(error), timestamp=datetime.now()))
        logger.info("Command %s rejected: %s", command, error)

    def _commit(self, command: str, build: Callable[[LedgerSnapshot], tuple[LedgerSnapshot, T]]) -> T:
        """Run build against the current snapshot and swap in its result atomically."""
        with self._lock:
            try:
                new_snapshot, result = build(self._snapshot)
            except LedgerError as e:
                self._reject(command, e)
                raise
            self._snapshot = new_snapshot
        return result

    # --- assets ---

    def add_asset(self, asset: Asset) -> Asset:
        """Add a holding. ValidationError if the ticker is empty or already held."""

        def build(s: LedgerSnapshot) -> tuple[LedgerSnapshot, Asset]:
            checked = _checked_asset(asset)
            if s.find_asset(checked.ticker) is not None:
                raise ValidationError(f"Asset {checked.ticker} already exists")
            return s.with_assets(s.assets + (checked,)), checked

        added = self._commit("add_asset", build)
        logger.info("Asset added: %s", added.ticker)
        return added

    def update_asset(self, ticker: str, /, **fields: Any) -> Asset:
        """
        Overwrite selected fields of the asset with this ticker.
        Allowed: name, type, quantity, average_price, current_price.
        """

        def build(s: LedgerSnapshot) -> tuple[LedgerSnapshot, Asset]:
            unknown = sorted(set(fields) - set(_UPDATABLE_FIELDS))
            if unknown:
                raise ValidationError(f"Cannot update field(s): {', '.join(unknown)}")
            current = s.find_asset(ticker)
            if current is None:
                raise AssetNotFoundError(normalize_ticker(ticker))
            changes = dict(fields)
            for name in _NUMERIC_FIELDS:
                if name in changes:
                    changes[name] = require_non_negative(name, changes[name])
            if "type" in changes:
                changes["type"] = AssetType.from_label(changes["type"])
            updated = replace(current, **changes)
            assets = tuple(updated if a.id == current.id else a for a in s.assets)
            return replace(s, assets=assets), updated

        return self._commit("update_asset", build)

    def remove_asset(self, asset_id: str) -> None:
        """Remove by id. No-op if absent; related transactions and dividends stay."""

        def build(s: LedgerSnapshot) -> tuple[LedgerSnapshot, None]:
            return s.with_assets(a for a in s.assets if a.id != asset_id), None

        self._commit("remove_asset", build)

    # --- dividends ---

    def add_dividend(self, dividend: Dividend) -> Dividend:
        def build(s: LedgerSnapshot) -> tuple[LedgerSnapshot, Dividend]:
            ticker = normalize_ticker(dividend.ticker)
            if not ticker:
                raise ValidationError("Dividend ticker must not be empty")
            checked = replace(dividend, ticker=ticker, amount=require_non_negative("amount", dividend.amount))
            return replace(s, dividends=s.dividends + (checked,)), checked

        return self._commit("add_dividend", build)

    def remove_dividend(self, dividend_id: str) -> None:
        def build(s: LedgerSnapshot) -> tuple[LedgerSnapshot, None]:
            return replace(s, dividends=tuple(d for d in s.dividends if d.id != dividend_id)), None

        self._commit("remove_dividend", build)

    # --- transactions ---

    def add_transaction(self, transaction: Transaction) -> Transaction:
        """
        Append a transaction record as-is. The held position is not touched; use
        record_trade for that. total must equal quantity * price.
        """

        def build(s: LedgerSnapshot) -> tuple[LedgerSnapshot, Transaction]:
            ticker = normalize_ticker(transaction.ticker)
            if not ticker:
                raise ValidationError("Transaction ticker must not be empty")
            quantity = require_non_negative("quantity", transaction.quantity)
            price = require_non_negative("price", transaction.price)
            if not math.isclose(transaction.total, quantity * price, rel_tol=1e-9, abs_tol=1e-9):
                raise ValidationError(
                    f"Transaction total {transaction.total} != quantity * price ({quantity * price})"
                )
            checked = replace(transaction, ticker=ticker)
            return replace(s, transactions=s.transactions + (checked,)), checked

        return self._commit("add_transaction", build)

    def remove_transaction(self, transaction_id: str) -> None:
        """Delete a history entry. The position change it caused is kept."""

        def build(s: LedgerSnapshot) -> tuple[LedgerSnapshot, None]:
            return replace(s, transactions=tuple(t for t in s.transactions if t.id != transaction_id)), None

        self._commit("remove_transaction", build)

    # --- trades ---

    def record_trade(
        self,
        ticker: str,
        type: TransactionType | str,
        quantity: float,
        price: float,
        trade_date: date | str | None = None,
    ) -> Transaction:
        """
        Buy or sell an existing holding. Raises ValidationError for non-positive
        quantity/price and AssetNotFoundError for an unknown ticker.
        Observers are called with the transaction and the new snapshot.
        """
        when = trade_date if trade_date is not None else date.today()
        transaction = self._commit(
            "record_trade",
            lambda s: apply_trade(s, ticker, type, quantity, price, when),
        )
        logger.info(
            "Trade recorded: %s %s %s @ %s",
            transaction.type.value,
            transaction.quantity,
            transaction.ticker,
            transaction.price,
        )
        snapshot = self._snapshot
        for obs in self.observers:
            obs(transaction, snapshot)
        return transaction

    # --- imports ---

    def import_batch(
        self,
        batch: ImportBatch,
        *,
        today: date | None = None,
        skip_duplicates: bool = False,
    ) -> ImportOutcome:
        """
        Merge an import batch. ImportParseError if the batch has no rows;
        ValidationError if any row carries negative or non-finite numbers.
        """

        def build(s: LedgerSnapshot) -> tuple[LedgerSnapshot, ImportOutcome]:
            if batch.is_empty:
                raise ImportParseError("Import produced no usable rows")
            outcome = reconcile(s, batch, today=today, skip_duplicates=skip_duplicates)
            return outcome.snapshot, outcome

        outcome = self._commit("import", build)
        logger.info(
            "Import applied: %d asset(s) created, %d updated, %d transaction(s), %d dividend(s)",
            outcome.assets_created,
            outcome.assets_updated,
            outcome.transactions_added,
            outcome.dividends_added,
        )
        return outcome

    def import_from(
        self,
        source: ImportSource,
        raw: Any,
        *,
        today: date | None = None,
        skip_duplicates: bool = False,
    ) -> ImportOutcome:
        """Parse raw with source, then import_batch. Source failures become ImportParseError."""
        try:
            batch = source.parse(raw)
        except ImportParseError as e:
            self._reject("import", e)
            raise
        except Exception as e:  # noqa: BLE001
            logger.exception("Import source %s failed", type(source).__name__)
            error = ImportParseError(f"Import source failed: {e!s}")
            self._reject("import", error)
            raise error from e
        return self.import_batch(batch, today=today, skip_duplicates=skip_duplicates)

    # --- prices ---

    def begin_price_refresh(self) -> LedgerSnapshot:
        """Snapshot to fetch prices for. Pass its asset_version back to apply_price_update."""
        return self._snapshot

    def apply_price_update(
        self,
        assets: Sequence[Asset],
        *,
        based_on_version: int | None = None,
    ) -> PriceRefreshStatus:
        """
        Take current_price from assets, matched by ticker, into the current snapshot.
        Quantity and average price are never changed. With based_on_version, the
        update is refused (STALE) if tickers were added or removed since then.
        """
        prices = {normalize_ticker(a.ticker): a.current_price for a in assets}
        with self._lock:
            current = self._snapshot
            if based_on_version is not None and based_on_version != current.asset_version:
                status = PriceRefreshStatus(
                    kind=PriceRefreshKind.STALE,
                    message=(
                        f"Portfolio changed during refresh (version {based_on_version} -> {current.asset_version})"
                    ),
                    timestamp=datetime.now(),
                )
            else:
                refreshed = apply_prices(current.assets, prices)
                changed = sum(1 for old, new in zip(current.assets, refreshed) if old is not new)
                self._snapshot = replace(current, assets=tuple(refreshed))
                status = PriceRefreshStatus(kind=PriceRefreshKind.APPLIED, updated=changed, timestamp=datetime.now())
            self.last_price_refresh = status
        if status.kind == PriceRefreshKind.STALE:
            logger.warning("Price update discarded: %s", status.message)
        else:
            logger.info("Price update applied to %d asset(s)", status.updated)
        return status

    def refresh_prices(
        self,
        source: PriceSource,
        *,
        timeout_seconds: float | None = None,
    ) -> PriceRefreshStatus:
        """
        Fetch quotes from source and apply them. Never raises: failures and timeouts
        leave the ledger untouched and are reported in the returned status (also kept
        in last_price_refresh).
        """
        start = self.begin_price_refresh()
        if not start.assets:
            status = PriceRefreshStatus(kind=PriceRefreshKind.APPLIED, timestamp=datetime.now())
            self.last_price_refresh = status
            return status
        timeout = timeout_seconds if timeout_seconds is not None else self.price_timeout_seconds

        pool = concurrent.futures.ThreadPoolExecutor(max_workers=1)
        try:
            future = pool.submit(source.quote, start.assets)
            prices = future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            status = PriceRefreshStatus(
                kind=PriceRefreshKind.TIMED_OUT,
                message=f"Price source did not answer within {timeout}s",
                timestamp=datetime.now(),
            )
        except LedgerError as e:
            status = PriceRefreshStatus(kind=PriceRefreshKind.FAILED, message=str(e), timestamp=datetime.now())
        except Exception as e:  # noqa: BLE001
            logger.exception("Price source %s raised unexpectedly", type(source).__name__)
            status = PriceRefreshStatus(kind=PriceRefreshKind.FAILED, message=str(e), timestamp=datetime.now())
        else:
            refreshed = apply_prices(start.assets, prices)
            # Only quoted assets; the rest keep whatever price they have by now.
            quoted = [new for old, new in zip(start.assets, refreshed) if new is not old]
            return self.apply_price_update(quoted, based_on_version=start.asset_version)
        finally:
            pool.shutdown(wait=False)

        logger.warning("Price refresh %s: %s", status.kind.value, status.message)
        self.last_price_refresh = status
        return status
