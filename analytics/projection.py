"""
Evolution projection for charts. DISPLAY ONLY.

There is no historical valuation data behind this: values before today are the
current balance discounted by random monthly/yearly moves, values after today are
extrapolated the same way. Never store these or treat them as ledger history.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

import numpy as np

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Chart placeholder when the portfolio is empty.
PLACEHOLDER_BALANCE = 10_000.0


@dataclass(frozen=True)
class EvolutionPoint:
    label: str
    value: float


def project_evolution(
    balance: float,
    mode: str = "monthly",
    *,
    today: date | None = None,
    seed: int | None = None,
    years: int = 5,
) -> list[EvolutionPoint]:
    """
    Simulated series around the current balance, oldest first.

    monthly: Jan..Dec of the current year; the current month holds the real balance,
             earlier months are discounted by U(-2%, +6%) per month, later months grow
             by U(0%, +3%) per month.
    yearly:  the last `years` years ending with the current one at the real balance,
             earlier years discounted by U(-5%, +15%) per year.
    Values are rounded to whole units.
    """
    today = today or date.today()
    rng = np.random.default_rng(seed)
    current = balance if balance > 0 else PLACEHOLDER_BALANCE

    if mode == "monthly":
        month = today.month - 1
        values = np.zeros(12)
        values[month] = current
        back = 1.0 + rng.uniform(-0.02, 0.06, size=month)
        for offset, factor in enumerate(back, start=1):
            values[month - offset] = values[month - offset + 1] / factor
        forward = 1.0 + rng.uniform(0.0, 0.03, size=11 - month)
        for offset, factor in enumerate(forward, start=1):
            values[month + offset] = values[month + offset - 1] * factor
        return [EvolutionPoint(label=MONTH_LABELS[i], value=float(np.round(v))) for i, v in enumerate(values)]

    if mode == "yearly":
        factors = 1.0 + rng.uniform(-0.05, 0.15, size=max(years - 1, 0))
        values = [current]
        for factor in factors:
            values.append(values[-1] / factor)
        points = [
            EvolutionPoint(label=str(today.year - i), value=float(np.round(v)))
            for i, v in enumerate(values)
        ]
        return list(reversed(points))

    raise ValueError(f"mode must be 'monthly' or 'yearly', got {mode!r}")
