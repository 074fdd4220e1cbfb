"""
Portfolio example: import positions, trade, record dividends, refresh prices.

Shows: Ledger commands, CsvImportSource, price refresh with the configured source
(simulation unless FOLIO_PRICE_SHEET_URL is set), observers, rejected command log,
and the analytics summary.
"""

from __future__ import annotations

from datetime import date

from analytics import allocation_by_asset, position_summary, print_summary, project_evolution
from folio_core import Dividend, LedgerError, LedgerSnapshot, Ledger, Transaction
from folio_core.config import build_price_source, configure_logging, load_settings
from folio_core.sources import CsvImportSource

POSITIONS = """\
Ticker;Tipo;Qtd;Preco
PETR4;Ação;100;32.50
HGLG11;FII;15;160.00
BTC;Cripto;0.05;150000
CDB INTER;Caixa;1;5000
"""


def print_trade_observer(txn: Transaction, snapshot: LedgerSnapshot) -> None:
    """Observer: post-trade log."""
    print(f"  [Observer] {txn.type.value} {txn.quantity} {txn.ticker} @ {txn.price:.2f} = {txn.total:.2f}")


def main() -> None:
    settings = load_settings()
    configure_logging(settings)
    ledger = Ledger(observers=[print_trade_observer], price_timeout_seconds=settings.price_timeout_seconds)

    print("--- Import positions ---")
    outcome = ledger.import_from(CsvImportSource(), POSITIONS)
    print(f"Created {outcome.assets_created} asset(s), updated {outcome.assets_updated}")

    print("\n--- Trades ---")
    ledger.record_trade("PETR4", "buy", 50, 40.0, date(2024, 1, 10))
    ledger.record_trade("HGLG11", "sell", 5, 170.0, date(2024, 2, 1))
    try:
        ledger.record_trade("XPTO3", "buy", 1, 10.0)
    except LedgerError as e:
        print(f"  Rejected: {e}")

    ledger.add_dividend(Dividend.create("PETR4", 120.50, "2023-11-20", "JCP"))
    ledger.add_dividend(Dividend.create("HGLG11", 16.50, "2023-11-15", "Rendimento"))

    print("\n--- Price refresh ---")
    status = ledger.refresh_prices(build_price_source(settings))
    print(f"Refresh: {status.kind.value}, {status.updated} asset(s) updated")

    print()
    print(position_summary(ledger.assets).to_string())
    print()
    snapshot = ledger.snapshot
    summary = print_summary(snapshot)

    equities = allocation_by_asset(snapshot.assets, "equity")
    print(f"\nEquity total: {equities.total:,.2f}")
    for point in project_evolution(summary.total_balance, "yearly"):
        print(f"  {point.label}: {point.value:,.0f}")

    print("\n--- Rejected log ---")
    for entry in ledger.get_rejected_log():
        print(f"  {entry.timestamp:%H:%M:%S} {entry.command}: {entry.reason}")


if __name__ == "__main__":
    main()
