"""
Rule-based import of position lines: TICKER;TYPE;QTY;PRICE.

Fields may be separated by ';' or ','. Blank lines, '#' comments and a 'Ticker'
header line are skipped, as are lines whose quantity or price do not parse.
Produces asset candidates only (a position snapshot, not trade history).
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any

from folio_core.asset import AssetType, normalize_ticker
from folio_core.errors import ImportParseError
from folio_core.reconcile import AssetCandidate, ImportBatch
from folio_core.sources.base import ImportSource

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[;,]")


def _number(text: str) -> float | None:
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_position_line(line: str) -> AssetCandidate | None:
    """One candidate from a line, or None if the line is not a position row."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#") or stripped.lower().startswith("ticker"):
        return None
    parts = [p.strip() for p in _SEPARATORS.split(stripped)]
    if len(parts) < 4:
        return None
    ticker = normalize_ticker(parts[0])
    quantity = _number(parts[2])
    price = _number(parts[3])
    if not ticker or quantity is None or price is None:
        return None
    return AssetCandidate(
        ticker=ticker,
        name=ticker,
        type=AssetType.from_label(parts[1]),
        quantity=quantity,
        average_price=price,
    )


class CsvImportSource(ImportSource):
    """Parse pasted text or file content (str or UTF-8 bytes)."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def parse(self, raw: Any) -> ImportBatch:
        if isinstance(raw, (bytes, bytearray)):
            try:
                raw = bytes(raw).decode(self.encoding)
            except UnicodeDecodeError as e:
                raise ImportParseError(f"Import file is not {self.encoding} text") from e
        if not isinstance(raw, str):
            raise ImportParseError(f"Unsupported import payload: {type(raw).__name__}")

        candidates = []
        for line in raw.splitlines():
            candidate = parse_position_line(line)
            if candidate is not None:
                candidates.append(candidate)
        logger.debug("CSV import: %d position row(s) parsed", len(candidates))
        return ImportBatch(assets=candidates)
