"""
Ledger-level result types: price refresh status and the rejected-command log.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class PriceRefreshKind(Enum):
    """Outcome of a price refresh."""

    APPLIED = "applied"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    STALE = "stale"


@dataclass(frozen=True)
class PriceRefreshStatus:
    """Result of applying (or failing to apply) a price update. Immutable."""

    kind: PriceRefreshKind
    updated: int = 0
    message: str | None = None
    timestamp: datetime | None = None

    @property
    def ok(self) -> bool:
        return self.kind == PriceRefreshKind.APPLIED


@dataclass(frozen=True)
class RejectedCommandLog:
    """One entry for a command the ledger refused."""

    command: str
    reason: str
    timestamp: datetime
