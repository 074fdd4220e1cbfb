"""
Environment-driven settings.

FOLIO_PRICE_SHEET_URL          CSV endpoint for quotes (unset: simulation only)
FOLIO_PRICE_TIMEOUT_SECONDS    timeout for one price refresh (default 15)
FOLIO_PRICE_SIMULATION_FALLBACK  "true"/"false": simulate when the sheet fails (default true)
FOLIO_LOG_LEVEL                logging level for configure_logging (default INFO)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from folio_core.ledger import DEFAULT_PRICE_TIMEOUT_SECONDS
from folio_core.sources.base import PriceSource
from folio_core.sources.sheet import SheetPriceSource
from folio_core.sources.simulated import FallbackPriceSource, SimulatedPriceSource

PRICE_SHEET_URL_ENV = "FOLIO_PRICE_SHEET_URL"
PRICE_TIMEOUT_ENV = "FOLIO_PRICE_TIMEOUT_SECONDS"
SIMULATION_FALLBACK_ENV = "FOLIO_PRICE_SIMULATION_FALLBACK"
LOG_LEVEL_ENV = "FOLIO_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    price_sheet_url: str | None = None
    price_timeout_seconds: float = DEFAULT_PRICE_TIMEOUT_SECONDS
    simulation_fallback: bool = True
    log_level: str = "INFO"


def _as_float(value: str | None, default: float) -> float:
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read settings from environ (default: os.environ). Bad values fall back to defaults."""
    env = os.environ if environ is None else environ
    url = (env.get(PRICE_SHEET_URL_ENV) or "").strip() or None
    return Settings(
        price_sheet_url=url,
        price_timeout_seconds=_as_float(env.get(PRICE_TIMEOUT_ENV), DEFAULT_PRICE_TIMEOUT_SECONDS),
        simulation_fallback=_as_bool(env.get(SIMULATION_FALLBACK_ENV), True),
        log_level=(env.get(LOG_LEVEL_ENV) or "INFO").strip().upper(),
    )


def configure_logging(settings: Settings) -> None:
    """basicConfig for scripts. The library itself never installs handlers."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_price_source(settings: Settings) -> PriceSource:
    """
    Sheet source when a URL is configured (wrapped with simulation fallback unless
    disabled); simulation alone otherwise.
    """
    if settings.price_sheet_url is None:
        return SimulatedPriceSource()
    sheet = SheetPriceSource(settings.price_sheet_url, timeout_seconds=settings.price_timeout_seconds)
    if settings.simulation_fallback:
        return FallbackPriceSource(sheet, SimulatedPriceSource())
    return sheet
