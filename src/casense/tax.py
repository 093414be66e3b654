# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Tax calculators for CAsense.

Three independent calculators are provided:

1. GST
   ---
   gst_amount = base * rate / 100, total = base + gst_amount.

2. Income tax (annual income, individual)
   --------------------------------------
   Two illustrative slab systems are supported:

   - old regime: a standard deduction of 50 000 is applied first,
     taxable = max(0, income - 50 000), then

         taxable <=   250 000 : 0
         taxable <=   500 000 : 5%  over 250 000
         taxable <= 1 000 000 : 12 500 + 20% over 500 000
         otherwise            : 112 500 + 30% over 1 000 000

   - new regime: taxable = income, then

         taxable <=   300 000 : 0
         taxable <=   700 000 : 5%  over 300 000
         taxable <= 1 000 000 : 20 000 + 10% over 700 000
         taxable <= 1 200 000 : 50 000 + 15% over 1 000 000
         taxable <= 1 500 000 : 80 000 + 20% over 1 200 000
         otherwise            : 140 000 + 30% over 1 500 000

   Upper bounds are inclusive. A health & education cess of 4% of the tax
   is added on top. An unknown regime is computed with the new regime.

3. Simplified liability estimate
   -----------------------------
   Used by the dashboard only: income in the period times a flat rate
   (0.18 by default). It is unrelated to the slab tables above.

Slabs are plain data (``OLD_REGIME_SLABS``, ``NEW_REGIME_SLABS``) so the
calculation itself is a single loop shared by both regimes.
"""

from dataclasses import dataclass
from typing import Literal, Optional

from .logging_config import get_logger

logger = get_logger(__name__)

Regime = Literal["old", "new"]

REGIMES: tuple[str, ...] = ("old", "new")

CESS_RATE = 0.04
OLD_REGIME_STANDARD_DEDUCTION = 50000.0
DEFAULT_GST_RATE = 18.0
DEFAULT_LIABILITY_RATE = 0.18


@dataclass(frozen=True)
class Slab:
    """
    One income-tax slab.

    Taxable income up to `upper` (inclusive, None = unbounded) is taxed as
    ``base_tax + rate * (taxable - lower)``.
    """

    upper: Optional[float]
    lower: float
    base_tax: float
    rate: float


OLD_REGIME_SLABS: tuple[Slab, ...] = (
    Slab(upper=250000, lower=0, base_tax=0, rate=0.0),
    Slab(upper=500000, lower=250000, base_tax=0, rate=0.05),
    Slab(upper=1000000, lower=500000, base_tax=12500, rate=0.20),
    Slab(upper=None, lower=1000000, base_tax=112500, rate=0.30),
)

NEW_REGIME_SLABS: tuple[Slab, ...] = (
    Slab(upper=300000, lower=0, base_tax=0, rate=0.0),
    Slab(upper=700000, lower=300000, base_tax=0, rate=0.05),
    Slab(upper=1000000, lower=700000, base_tax=20000, rate=0.10),
    Slab(upper=1200000, lower=1000000, base_tax=50000, rate=0.15),
    Slab(upper=1500000, lower=1200000, base_tax=80000, rate=0.20),
    Slab(upper=None, lower=1500000, base_tax=140000, rate=0.30),
)


@dataclass(frozen=True)
class GstResult:
    base: float
    rate: float
    gst_amount: float
    total: float


@dataclass(frozen=True)
class IncomeTaxResult:
    """Income tax breakdown for one annual income and regime."""

    annual_income: float
    regime: str
    taxable_income: float
    tax: float
    cess: float
    total_tax: float


def calculate_gst(base: float, rate: float = DEFAULT_GST_RATE) -> GstResult:
    """Compute GST on a base amount at `rate` percent."""
    gst_amount = base * (rate / 100)
    return GstResult(base=base, rate=rate, gst_amount=gst_amount, total=base + gst_amount)


def tax_on_slabs(taxable: float, slabs: tuple[Slab, ...]) -> float:
    """Apply a slab table to a taxable amount (first slab whose bound holds)."""
    for slab in slabs:
        if slab.upper is None or taxable <= slab.upper:
            return slab.base_tax + (taxable - slab.lower) * slab.rate
    # Unreachable with a table ending in an unbounded slab.
    return 0.0


def calculate_income_tax(annual_income: float, regime: str = "new") -> IncomeTaxResult:
    """
    Compute income tax plus 4% cess for an annual income.

    Args:
        annual_income: Gross annual income.
        regime: 'old' or 'new'. Any other value uses the new regime.
    """
    if regime not in REGIMES:
        logger.warning("tax_regime_unknown", regime=regime, fallback="new")
        regime = "new"

    if regime == "old":
        taxable = max(0.0, annual_income - OLD_REGIME_STANDARD_DEDUCTION)
        tax = tax_on_slabs(taxable, OLD_REGIME_SLABS)
    else:
        taxable = annual_income
        tax = tax_on_slabs(taxable, NEW_REGIME_SLABS)

    cess = tax * CESS_RATE
    return IncomeTaxResult(
        annual_income=annual_income,
        regime=regime,
        taxable_income=taxable,
        tax=tax,
        cess=cess,
        total_tax=tax + cess,
    )


def estimate_tax_liability(income: float, rate: float = DEFAULT_LIABILITY_RATE) -> float:
    """Flat estimate shown on the dashboard: income * rate."""
    return income * rate
