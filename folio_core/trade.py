"""
Trade processor: apply one buy or sell to one asset.

Buys update the weighted-average cost; sells reduce quantity (floored at zero) and
leave the average untouched. Every accepted trade yields exactly one Transaction.
Input is validated before anything is built, so a rejected trade has no effect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date

from folio_core.asset import Asset, normalize_ticker
from folio_core.errors import AssetNotFoundError, ValidationError, require_positive
from folio_core.snapshot import LedgerSnapshot
from folio_core.transaction import Transaction, TransactionType, coerce_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TradeResult:
    """Updated asset plus the transaction that produced it."""

    asset: Asset
    transaction: Transaction


def weighted_average(
    held_quantity: float,
    held_average: float,
    quantity: float,
    price: float,
) -> float:
    """Average cost after adding quantity @ price to an existing position."""
    total_quantity = held_quantity + quantity
    if total_quantity == 0:
        return 0.0
    return (held_quantity * held_average + quantity * price) / total_quantity


def record_trade(
    asset: Asset,
    type: TransactionType,
    quantity: float,
    price: float,
    trade_date: "date | str",
) -> TradeResult:
    """
    Apply a trade to asset. Raises ValidationError if quantity or price is not > 0
    or trade_date is not a date (ISO string accepted).

    Over-selling is clamped: the position goes to zero and the excess is dropped.
    The transaction still records the quantity that was requested.
    """
    quantity = require_positive("quantity", quantity)
    price = require_positive("price", price)
    try:
        type = TransactionType.parse(type)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    try:
        trade_date = coerce_date(trade_date)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid trade date {trade_date!r}") from e

    if type == TransactionType.BUY:
        updated = replace(
            asset,
            quantity=asset.quantity + quantity,
            average_price=weighted_average(asset.quantity, asset.average_price, quantity, price),
        )
    else:
        if quantity > asset.quantity:
            logger.warning(
                "Sell of %s %s exceeds held quantity %s; position clamped to 0",
                quantity,
                asset.ticker,
                asset.quantity,
            )
        updated = replace(asset, quantity=max(0.0, asset.quantity - quantity))

    transaction = Transaction.create(
        asset.ticker,
        type,
        quantity,
        price,
        trade_date,
        asset_id=asset.id,
    )
    return TradeResult(asset=updated, transaction=transaction)


def apply_trade(
    snapshot: LedgerSnapshot,
    ticker: str,
    type: TransactionType,
    quantity: float,
    price: float,
    trade_date: "date | str",
) -> tuple[LedgerSnapshot, Transaction]:
    """
    Record a trade against the asset with this ticker in snapshot.
    Returns the new snapshot (asset replaced in place, transaction appended).
    """
    asset = snapshot.find_asset(ticker)
    if asset is None:
        raise AssetNotFoundError(normalize_ticker(ticker))
    result = record_trade(asset, type, quantity, price, trade_date)
    assets = tuple(result.asset if a.id == asset.id else a for a in snapshot.assets)
    new_snapshot = replace(
        snapshot,
        assets=assets,
        transactions=snapshot.transactions + (result.transaction,),
    )
    return new_snapshot, result.transaction
