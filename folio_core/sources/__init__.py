"""
External collaborators: price sources, import sources, advisor.

PriceSource ABC with spreadsheet, simulated and fallback implementations;
ImportSource ABC with the rule-based CSV parser; Advisor protocol and its
read-only context builder.
"""

from folio_core.sources.advisor import advisor_context, ask_advisor
from folio_core.sources.base import Advisor, ImportSource, PriceSource, apply_prices
from folio_core.sources.csv_import import CsvImportSource, parse_position_line
from folio_core.sources.sheet import SheetPriceSource, parse_price, parse_price_csv, sheet_csv_url
from folio_core.sources.simulated import FallbackPriceSource, SimulatedPriceSource

__all__ = [
    "Advisor",
    "ImportSource",
    "PriceSource",
    "apply_prices",
    "advisor_context",
    "ask_advisor",
    "CsvImportSource",
    "parse_position_line",
    "SheetPriceSource",
    "parse_price",
    "parse_price_csv",
    "sheet_csv_url",
    "SimulatedPriceSource",
    "FallbackPriceSource",
]
