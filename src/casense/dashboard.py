# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Dashboard aggregates for CAsense.

For a reporting period, the dashboard shows:

    revenue          = Σ income transactions dated in the period
    expenses         = Σ expense transactions dated in the period
    profit           = revenue - expenses
    active_clients   = number of clients (not period-dependent)
    pending_invoices = invoices dated in the period with status pending or overdue
    tax_liability    = revenue * liability_rate (simplified estimate)
"""

from dataclasses import dataclass

from .aggregation import sum_where, type_is
from .io import invoices_frame, transactions_frame
from .models import RecordSnapshot
from .periods import Period, filter_invoices_by_period, filter_transactions_by_period
from .tax import DEFAULT_LIABILITY_RATE, estimate_tax_liability


@dataclass(frozen=True)
class DashboardSummary:
    period: Period
    revenue: float
    expenses: float
    profit: float
    active_clients: int
    pending_invoices: int
    tax_liability: float


def compute_dashboard(
    snapshot: RecordSnapshot,
    period: Period,
    liability_rate: float = DEFAULT_LIABILITY_RATE,
) -> DashboardSummary:
    """Compute the dashboard figures of `snapshot` for `period`."""
    tx = filter_transactions_by_period(transactions_frame(snapshot.transactions), period)
    inv = filter_invoices_by_period(invoices_frame(snapshot.invoices), period)

    revenue = sum_where(tx, type_is("income"))
    expenses = sum_where(tx, type_is("expense"))
    pending = inv["status"].isin(["pending", "overdue"])

    return DashboardSummary(
        period=period,
        revenue=revenue,
        expenses=expenses,
        profit=revenue - expenses,
        active_clients=len(snapshot.clients),
        pending_invoices=int(pending.sum()),
        tax_liability=estimate_tax_liability(revenue, liability_rate),
    )
