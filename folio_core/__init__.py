"""
folio-core: portfolio ledger and import reconciliation engine.

Holdings, trade history and dividends kept consistent as trades, imports and
price refreshes arrive. No UI, persistence or AI parsing; those are collaborators.
"""

__version__ = "0.1.0"

from folio_core.asset import Asset, AssetType
from folio_core.dividend import Dividend
from folio_core.errors import (
    AssetNotFoundError,
    ImportParseError,
    LedgerError,
    PriceSourceError,
    ValidationError,
)
from folio_core.ledger import Ledger
from folio_core.reconcile import (
    AssetCandidate,
    DividendCandidate,
    ImportBatch,
    ImportOutcome,
    TransactionCandidate,
)
from folio_core.snapshot import LedgerSnapshot
from folio_core.status import PriceRefreshKind, PriceRefreshStatus
from folio_core.trade import TradeResult, record_trade
from folio_core.transaction import Transaction, TransactionType

__all__ = [
    "Asset",
    "AssetType",
    "Dividend",
    "Transaction",
    "TransactionType",
    "LedgerSnapshot",
    "Ledger",
    "TradeResult",
    "record_trade",
    "AssetCandidate",
    "DividendCandidate",
    "TransactionCandidate",
    "ImportBatch",
    "ImportOutcome",
    "PriceRefreshKind",
    "PriceRefreshStatus",
    "LedgerError",
    "ValidationError",
    "AssetNotFoundError",
    "ImportParseError",
    "PriceSourceError",
]
