# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for CAsense.

This module turns the objects computed by the core (reports, dashboard
summary, insights, compliance items) and the typed records into pandas
DataFrames ready for display or CSV export. It performs no computation of
its own besides rounding, label resolution and ordering.

Report frames share a common layout:

- P&L, balance sheet and cash flow: ``display_order, name, amount``
- trial balance: ``display_order, account, debit, credit`` with a final
  "Total" row.

``display_order`` is renumbered 10, 20, 30, ... in the order the rows are
produced.

``ACTION_TARGETS`` maps each insight ActionKind to the section of the
application where the suggested action can be carried out.
"""

from collections.abc import Iterable
from datetime import date
from typing import Optional

import pandas as pd

from .compliance import ComplianceItem
from .dashboard import DashboardSummary
from .formatting import format_currency
from .insights import ActionKind, Insight
from .models import Invoice, RecordSnapshot
from .records_service import client_name, invoice_status
from .reports import BalanceSheet, CashFlow, ProfitAndLoss, Report, TrialBalance

__all__ = [
    "ACTION_TARGETS",
    "format_currency",
    "report_to_dataframe",
    "dashboard_to_dataframe",
    "insights_to_dataframe",
    "transactions_to_display_frame",
    "invoices_to_display_frame",
    "invoice_items_to_dataframe",
    "compliance_to_dataframe",
]

ACTION_TARGETS: dict[ActionKind, str] = {
    ActionKind.CLIENTS: "clients",
    ActionKind.INVOICES: "invoices",
    ActionKind.TRANSACTIONS: "accounting",
    ActionKind.REPORTS: "reports",
    ActionKind.ADVISORY: "none",
}

AMOUNT_DECIMALS = 2


def _renumber_display_order(
    df: pd.DataFrame, start: int = 10, step: int = 10
) -> pd.DataFrame:
    """Reassign display_order to be strictly sequential: start, start+step, ...
    Preserves the current order of the lines (as it appears in df).
    """
    df = df.reset_index(drop=True)
    df.insert(0, "display_order", [start + i * step for i in range(len(df))])
    return df


def _amount_lines(lines: list[tuple[str, float]]) -> pd.DataFrame:
    df = pd.DataFrame(
        [{"name": name, "amount": round(amount, AMOUNT_DECIMALS)} for name, amount in lines],
        columns=["name", "amount"],
    )
    return _renumber_display_order(df)


def report_to_dataframe(report: Report) -> pd.DataFrame:
    """Convert a computed report into its display DataFrame."""
    if isinstance(report, ProfitAndLoss):
        label = "Net Profit" if report.is_profitable else "Net Loss"
        return _amount_lines(
            [
                ("Total Income", report.income),
                ("Total Expenses", report.expenses),
                (label, report.profit),
            ]
        )

    if isinstance(report, BalanceSheet):
        return _amount_lines(
            [
                ("Assets", report.assets),
                ("Retained Earnings", report.retained_earnings),
                ("Total Assets", report.total_assets),
                ("Liabilities", report.liabilities),
                ("Equity", report.equity),
                ("Total Liabilities & Equity", report.total_liabilities_and_equity),
            ]
        )

    if isinstance(report, CashFlow):
        return _amount_lines(
            [
                ("Cash Inflows", report.inflows),
                ("Cash Outflows", report.outflows),
                ("Net Cash Flow", report.net),
            ]
        )

    if isinstance(report, TrialBalance):
        rows = [
            {
                "account": r.account,
                "debit": round(r.debit, AMOUNT_DECIMALS),
                "credit": round(r.credit, AMOUNT_DECIMALS),
            }
            for r in report.rows
        ]
        rows.append(
            {
                "account": "Total",
                "debit": round(report.total_debit, AMOUNT_DECIMALS),
                "credit": round(report.total_credit, AMOUNT_DECIMALS),
            }
        )
        df = pd.DataFrame(rows, columns=["account", "debit", "credit"])
        return _renumber_display_order(df)

    raise TypeError(f"Unsupported report type: {type(report).__name__}")


def dashboard_to_dataframe(summary: DashboardSummary, currency: str = "INR") -> pd.DataFrame:
    """One row per dashboard figure, with a formatted value for display."""
    figures = [
        ("Total Revenue", summary.revenue, True),
        ("Total Expenses", summary.expenses, True),
        ("Net Profit", summary.profit, True),
        ("Active Clients", summary.active_clients, False),
        ("Pending Invoices", summary.pending_invoices, False),
        ("Tax Liability (est.)", summary.tax_liability, True),
    ]
    rows = [
        {
            "metric": name,
            "value": round(value, AMOUNT_DECIMALS) if is_amount else value,
            "formatted": format_currency(value, currency) if is_amount else str(value),
        }
        for name, value, is_amount in figures
    ]
    return pd.DataFrame(rows, columns=["metric", "value", "formatted"])


def insights_to_dataframe(insights: list[Insight]) -> pd.DataFrame:
    """
    Convert insights into a DataFrame, keeping their order.

    Columns: priority, title, description, action, impact, target.
    """
    columns = ["priority", "title", "description", "action", "impact", "target"]
    rows = [
        {
            "priority": i.priority,
            "title": i.title,
            "description": i.description,
            "action": i.action,
            "impact": i.impact,
            "target": ACTION_TARGETS[i.action_kind],
        }
        for i in insights
    ]
    return pd.DataFrame(rows, columns=columns)


def transactions_to_display_frame(
    snapshot: RecordSnapshot, currency: str = "INR"
) -> pd.DataFrame:
    """Transactions with client names and formatted amounts, newest first."""
    columns = ["id", "date", "client", "type", "category", "description", "amount"]
    rows = [
        {
            "id": t.id,
            "date": t.date.isoformat() if t.date else "",
            "client": client_name(snapshot, t.client_id),
            "type": t.type,
            "category": t.category,
            "description": t.description,
            "amount": format_currency(t.amount, currency),
        }
        for t in snapshot.transactions
    ]
    df = pd.DataFrame(rows, columns=columns)
    return df.sort_values("date", ascending=False, kind="stable").reset_index(drop=True)


def invoices_to_display_frame(
    snapshot: RecordSnapshot,
    today: Optional[date] = None,
    currency: str = "INR",
) -> pd.DataFrame:
    """Invoices with client names and their derived status (paid/overdue/pending)."""
    columns = ["id", "number", "client", "date", "due_date", "total", "status"]
    rows = [
        {
            "id": inv.id,
            "number": inv.number,
            "client": client_name(snapshot, inv.client_id),
            "date": inv.date.isoformat() if inv.date else "",
            "due_date": inv.due_date.isoformat() if inv.due_date else "",
            "total": format_currency(inv.total, currency),
            "status": invoice_status(inv, today),
        }
        for inv in snapshot.invoices
    ]
    return pd.DataFrame(rows, columns=columns)


def invoice_items_to_dataframe(invoice: Invoice, currency: str = "INR") -> pd.DataFrame:
    """
    Line items of one invoice followed by Subtotal, Tax and Total rows.

    Amounts are formatted strings; the summary rows leave quantity, rate
    and tax % empty.
    """
    columns = ["description", "quantity", "rate", "tax", "total"]
    rows = [
        {
            "description": item.description,
            "quantity": f"{item.quantity:g}",
            "rate": format_currency(item.rate, currency),
            "tax": f"{item.tax:g}%",
            "total": format_currency(item.total, currency),
        }
        for item in invoice.items
    ]
    for label, amount in (
        ("Subtotal", invoice.subtotal),
        ("Tax", invoice.tax),
        ("Total", invoice.total),
    ):
        rows.append(
            {
                "description": label,
                "quantity": "",
                "rate": "",
                "tax": "",
                "total": format_currency(amount, currency),
            }
        )
    return pd.DataFrame(rows, columns=columns)


def compliance_to_dataframe(items: Iterable[ComplianceItem]) -> pd.DataFrame:
    columns = ["title", "due_date", "frequency", "days_until", "status"]
    rows = [
        {
            "title": item.title,
            "due_date": item.due_date.isoformat(),
            "frequency": item.frequency,
            "days_until": item.days_until,
            "status": item.status,
        }
        for item in items
    ]
    return pd.DataFrame(rows, columns=columns)
