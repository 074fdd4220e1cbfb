"""
Error taxonomy for ledger commands.

All errors are recoverable at the command boundary: a raised error means the
ledger snapshot was not replaced.
"""

from __future__ import annotations

import math


class LedgerError(Exception):
    """Base class for every error raised by the ledger core."""


class ValidationError(LedgerError):
    """A command carried invalid input (non-positive trade size, negative price, ...)."""


class AssetNotFoundError(LedgerError):
    """A command referenced a ticker that is not in the portfolio."""

    def __init__(self, ticker: str) -> None:
        super().__init__(f"No asset with ticker {ticker!r}")
        self.ticker = ticker


class ImportParseError(LedgerError):
    """The import source produced no usable rows, or failed outright."""


class PriceSourceError(LedgerError):
    """A price source could not produce prices (network, HTTP status, bad payload)."""


def require_finite(name: str, value: float) -> float:
    """Return value as float; ValidationError if not a finite number."""
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return number


def require_positive(name: str, value: float) -> float:
    number = require_finite(name, value)
    if number <= 0:
        raise ValidationError(f"{name} must be > 0, got {value!r}")
    return number


def require_non_negative(name: str, value: float) -> float:
    number = require_finite(name, value)
    if number < 0:
        raise ValidationError(f"{name} must be >= 0, got {value!r}")
    return number
