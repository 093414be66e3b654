# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Rule-based business insights for CAsense.

This module turns a record snapshot into an ordered list of short advisory
messages ("insights"). It works in two steps:

1. Metrics
   -------
   ``compute_insight_metrics(snapshot, today)`` computes, over the whole
   record set (no period filter), the aggregates every rule needs:

       income, expenses, profit, profit_margin (% of income, 0 if no income)
       client_count
       pending_count                      (status pending or overdue)
       overdue_count, overdue_amount      (due date < today, not paid)
       unpaid_count, unpaid_amount        (status != paid)
       paid_count, invoice_count
       expenses_by_category               ({category -> total}, first-seen order)

2. Rules
   -----
   ``generate_insights(metrics, category)`` runs the rule subset of one
   category (Profit, Cost, Growth, Risk, Cash Flow). Each rule is an
   (predicate, builder) pair with a fixed priority and an ``ActionKind``
   telling the presentation layer which section the action leads to.

   Rules are evaluated in table order and that order is the display order:
   insights are never re-sorted by priority. When no rule fires, exactly
   one "Getting Started" insight is returned.

   No category runs the Profit rules. An unrecognized category runs no
   rule and therefore yields the "Getting Started" insight.

Every ratio shown in a description is 0 when its denominator is 0, so
the output never contains NaN or infinity.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Literal, Optional

import pandas as pd

from .aggregation import group_sum, sum_where, type_is
from .formatting import format_currency
from .io import invoices_frame, transactions_frame
from .logging_config import get_logger
from .models import RecordSnapshot

logger = get_logger(__name__)

Priority = Literal["high", "medium", "low"]

PRIORITY_ORDER: dict[str, int] = {"high": 0, "medium": 1, "low": 2}

InsightCategory = Literal["profit", "cost", "growth", "risk", "cash-flow"]

INSIGHT_CATEGORIES: tuple[str, ...] = ("profit", "cost", "growth", "risk", "cash-flow")

CATEGORY_LABELS: dict[str, str] = {
    "profit": "Profit Optimization",
    "cost": "Cost Reduction",
    "growth": "Growth Opportunities",
    "risk": "Risk Management",
    "cash-flow": "Cash Flow",
}


class ActionKind(str, Enum):
    """Where the action of an insight leads."""

    CLIENTS = "clients"
    INVOICES = "invoices"
    TRANSACTIONS = "transactions"
    REPORTS = "reports"
    ADVISORY = "advisory"


@dataclass(frozen=True)
class Insight:
    """
    One advisory message.

    Attributes:
        title: Short headline.
        description: One or two sentences explaining the finding.
        action: Label of the suggested action.
        priority: 'high', 'medium' or 'low'.
        impact: Human-readable impact (often a formatted amount).
        action_kind: Section the action leads to.
        category: Insight category the rule belongs to ('' for the fallback).
        impact_amount: Numeric impact when the rule has one.
    """

    title: str
    description: str
    action: str
    priority: Priority
    impact: str
    action_kind: ActionKind
    category: str = ""
    impact_amount: Optional[float] = None


@dataclass(frozen=True)
class InsightMetrics:
    """Aggregates consumed by the insight rules."""

    income: float = 0.0
    expenses: float = 0.0
    client_count: int = 0
    pending_count: int = 0
    overdue_count: int = 0
    overdue_amount: float = 0.0
    unpaid_count: int = 0
    unpaid_amount: float = 0.0
    paid_count: int = 0
    invoice_count: int = 0
    expenses_by_category: dict[str, float] = field(default_factory=dict)

    @property
    def profit(self) -> float:
        return self.income - self.expenses

    @property
    def profit_margin(self) -> float:
        if self.income > 0:
            return self.profit / self.income * 100
        return 0.0

    @property
    def average_client_value(self) -> float:
        if self.client_count > 0:
            return self.income / self.client_count
        return 0.0

    @property
    def average_payment_days(self) -> float:
        if self.invoice_count > 0:
            return self.paid_count * 30 / self.invoice_count
        return 0.0

    @property
    def top_expense_category(self) -> Optional[tuple[str, float]]:
        if not self.expenses_by_category:
            return None
        # max() keeps the first of equal totals.
        return max(self.expenses_by_category.items(), key=lambda item: item[1])


def compute_insight_metrics(
    snapshot: RecordSnapshot, today: Optional[date] = None
) -> InsightMetrics:
    """Compute the insight aggregates over the whole snapshot."""
    today = today or date.today()
    tx = transactions_frame(snapshot.transactions)
    inv = invoices_frame(snapshot.invoices)

    unpaid = inv["status"] != "paid"
    pending = inv["status"].isin(["pending", "overdue"])
    overdue = unpaid & (inv["due_date"] < pd.Timestamp(today))

    return InsightMetrics(
        income=sum_where(tx, type_is("income")),
        expenses=sum_where(tx, type_is("expense")),
        client_count=len(snapshot.clients),
        pending_count=int(pending.sum()),
        overdue_count=int(overdue.sum()),
        overdue_amount=sum_where(inv, overdue, field="total"),
        unpaid_count=int(unpaid.sum()),
        unpaid_amount=sum_where(inv, unpaid, field="total"),
        paid_count=int((~unpaid).sum()),
        invoice_count=len(inv),
        expenses_by_category=group_sum(tx, "category", predicate=type_is("expense")),
    )


@dataclass(frozen=True)
class InsightRule:
    """A (predicate, builder) pair belonging to one category."""

    category: str
    title: str
    predicate: Callable[[InsightMetrics], bool]
    build: Callable[[InsightMetrics, str], Insight]


def _pct(numerator: float, denominator: float) -> float:
    return numerator / denominator * 100 if denominator else 0.0


# Profit ----------------------------------------------------------------------


def _low_margin(m: InsightMetrics, currency: str) -> Insight:
    gain = m.income * 0.15 - m.profit
    return Insight(
        title="Low Profit Margin Detected",
        description=(
            f"Your current profit margin is {m.profit_margin:.1f}%. Industry "
            "average is 15-20%. Consider reviewing your pricing strategy or "
            "reducing operational costs."
        ),
        action="Review Pricing Strategy",
        priority="high",
        impact=f"Potential increase: {format_currency(gain, currency)}",
        action_kind=ActionKind.ADVISORY,
        category="profit",
        impact_amount=gain,
    )


def _high_expense_ratio(m: InsightMetrics, currency: str) -> Insight:
    savings = m.expenses * 0.1
    return Insight(
        title="High Expense Ratio",
        description=(
            f"Your expenses represent {_pct(m.expenses, m.income):.1f}% of "
            "revenue. Focus on cost optimization in high-expense categories."
        ),
        action="Analyze Expense Categories",
        priority="high",
        impact=f"Potential savings: {format_currency(savings, currency)}",
        action_kind=ActionKind.TRANSACTIONS,
        category="profit",
        impact_amount=savings,
    )


def _excellent_profitability(m: InsightMetrics, currency: str) -> Insight:
    return Insight(
        title="Excellent Profitability",
        description=(
            f"Great job! Your profit margin of {m.profit_margin:.1f}% is above "
            "industry standards. Consider reinvesting profits for growth."
        ),
        action="Explore Growth Opportunities",
        priority="low",
        impact="Growth potential identified",
        action_kind=ActionKind.ADVISORY,
        category="profit",
    )


# Cost ------------------------------------------------------------------------


def _major_expense_category(m: InsightMetrics, currency: str) -> Insight:
    name, total = m.top_expense_category or ("", 0.0)
    savings = total * 0.15
    return Insight(
        title="Major Expense Category Identified",
        description=(
            f"{name} accounts for {_pct(total, m.expenses):.1f}% of total "
            "expenses. Review this category for optimization opportunities."
        ),
        action=f"Review {name}",
        priority="medium",
        impact=f"Potential savings: {format_currency(savings, currency)}",
        action_kind=ActionKind.TRANSACTIONS,
        category="cost",
        impact_amount=savings,
    )


def _has_major_expense_category(m: InsightMetrics) -> bool:
    top = m.top_expense_category
    return top is not None and top[1] > m.expenses * 0.3


def _automated_cost_tracking(m: InsightMetrics, currency: str) -> Insight:
    return Insight(
        title="Automated Cost Tracking",
        description=(
            "Consider implementing automated expense tracking to identify "
            "recurring costs and subscription services that may be "
            "underutilized."
        ),
        action="Set Up Expense Alerts",
        priority="medium",
        impact="Improved cost visibility",
        action_kind=ActionKind.TRANSACTIONS,
        category="cost",
    )


# Growth ----------------------------------------------------------------------


def _client_base_expansion(m: InsightMetrics, currency: str) -> Insight:
    potential = m.income * 0.2
    return Insight(
        title="Client Base Expansion Opportunity",
        description=(
            f"You currently have {m.client_count} clients. Expanding your "
            "client base by 20% could increase revenue by approximately "
            f"{format_currency(potential, currency)}."
        ),
        action="Develop Marketing Strategy",
        priority="medium",
        impact=f"Potential revenue: {format_currency(potential, currency)}",
        action_kind=ActionKind.ADVISORY,
        category="growth",
        impact_amount=potential,
    )


def _client_value_optimization(m: InsightMetrics, currency: str) -> Insight:
    gain = m.average_client_value * m.client_count * 0.15
    average = format_currency(m.average_client_value, currency)
    return Insight(
        title="Client Value Optimization",
        description=(
            f"Average client value is {average}. "
            "Consider upselling additional services to existing clients."
        ),
        action="Review Client Services",
        priority="low",
        impact=f"Potential increase: {format_currency(gain, currency)}",
        action_kind=ActionKind.CLIENTS,
        category="growth",
        impact_amount=gain,
    )


def _investment_opportunity(m: InsightMetrics, currency: str) -> Insight:
    return Insight(
        title="Investment Opportunity",
        description=(
            "Strong profitability indicates capacity for strategic investments "
            "in technology, marketing, or team expansion."
        ),
        action="Plan Strategic Investments",
        priority="low",
        impact="Long-term growth potential",
        action_kind=ActionKind.ADVISORY,
        category="growth",
    )


# Risk ------------------------------------------------------------------------


def _overdue_invoices(m: InsightMetrics, currency: str) -> Insight:
    return Insight(
        title="Overdue Invoices Risk",
        description=(
            f"You have {m.overdue_count} overdue invoices totaling "
            f"{format_currency(m.overdue_amount, currency)}. This impacts cash "
            "flow and increases collection risk."
        ),
        action="Follow Up on Overdue Invoices",
        priority="high",
        impact=f"At risk: {format_currency(m.overdue_amount, currency)}",
        action_kind=ActionKind.INVOICES,
        category="risk",
        impact_amount=m.overdue_amount,
    )


def _high_pending_volume(m: InsightMetrics, currency: str) -> Insight:
    return Insight(
        title="High Pending Invoice Volume",
        description=(
            f"You have {m.pending_count} pending invoices. Implement automated "
            "payment reminders to improve collection rates."
        ),
        action="Set Up Payment Reminders",
        priority="medium",
        impact="Improved cash flow",
        action_kind=ActionKind.INVOICES,
        category="risk",
    )


def _client_concentration(m: InsightMetrics, currency: str) -> Insight:
    return Insight(
        title="Client Concentration Risk",
        description=(
            f"You have a small client base ({m.client_count} clients). "
            "Diversifying your client portfolio reduces business risk."
        ),
        action="Develop New Client Acquisition",
        priority="medium",
        impact="Reduced business risk",
        action_kind=ActionKind.CLIENTS,
        category="risk",
    )


# Cash Flow -------------------------------------------------------------------


def _cash_flow_constraint(m: InsightMetrics, currency: str) -> Insight:
    return Insight(
        title="Cash Flow Constraint",
        description=(
            f"Unpaid invoices ({format_currency(m.unpaid_amount, currency)}) "
            "represent a significant portion of revenue. Accelerate "
            "collections to improve cash flow."
        ),
        action="Implement Collection Strategy",
        priority="high",
        impact=f"Potential cash inflow: {format_currency(m.unpaid_amount, currency)}",
        action_kind=ActionKind.ADVISORY,
        category="cash-flow",
        impact_amount=m.unpaid_amount,
    )


def _tight_margin(m: InsightMetrics, currency: str) -> Insight:
    return Insight(
        title="Tight Cash Flow Margin",
        description=(
            "Your expenses are very close to income, leaving minimal cash "
            "buffer. Consider building a cash reserve for unexpected expenses."
        ),
        action="Build Cash Reserve",
        priority="high",
        impact="Improved financial stability",
        action_kind=ActionKind.ADVISORY,
        category="cash-flow",
    )


def _slow_payment(m: InsightMetrics, currency: str) -> Insight:
    return Insight(
        title="Slow Payment Collection",
        description=(
            "Average payment collection appears slow. Consider offering early "
            "payment discounts or implementing stricter payment terms."
        ),
        action="Review Payment Terms",
        priority="medium",
        impact="Faster cash collection",
        action_kind=ActionKind.INVOICES,
        category="cash-flow",
    )


# Rule table (order = display order) ------------------------------------------

RULES: tuple[InsightRule, ...] = (
    InsightRule(
        "profit",
        "Low Profit Margin Detected",
        lambda m: m.income > 0 and 0 < m.profit_margin < 10,
        _low_margin,
    ),
    InsightRule(
        "profit",
        "High Expense Ratio",
        lambda m: m.expenses > m.income * 0.7,
        _high_expense_ratio,
    ),
    InsightRule(
        "profit",
        "Excellent Profitability",
        lambda m: m.profit > 0 and m.profit_margin > 20,
        _excellent_profitability,
    ),
    InsightRule(
        "cost",
        "Major Expense Category Identified",
        _has_major_expense_category,
        _major_expense_category,
    ),
    InsightRule(
        "cost",
        "Automated Cost Tracking",
        lambda m: m.expenses > 0,
        _automated_cost_tracking,
    ),
    InsightRule(
        "growth",
        "Client Base Expansion Opportunity",
        lambda m: m.client_count < 10,
        _client_base_expansion,
    ),
    InsightRule(
        "growth",
        "Client Value Optimization",
        lambda m: m.average_client_value > 0,
        _client_value_optimization,
    ),
    InsightRule(
        "growth",
        "Investment Opportunity",
        lambda m: m.income > 0 and m.profit_margin > 15,
        _investment_opportunity,
    ),
    InsightRule(
        "risk",
        "Overdue Invoices Risk",
        lambda m: m.overdue_count > 0,
        _overdue_invoices,
    ),
    InsightRule(
        "risk",
        "High Pending Invoice Volume",
        lambda m: m.pending_count > 5,
        _high_pending_volume,
    ),
    InsightRule(
        "risk",
        "Client Concentration Risk",
        lambda m: m.client_count < 5 and m.income > 0,
        _client_concentration,
    ),
    InsightRule(
        "cash-flow",
        "Cash Flow Constraint",
        lambda m: m.unpaid_amount > m.income * 0.3,
        _cash_flow_constraint,
    ),
    InsightRule(
        "cash-flow",
        "Tight Cash Flow Margin",
        lambda m: m.expenses > m.income * 0.8,
        _tight_margin,
    ),
    # paid_count * 30 / invoice_count never exceeds 30, so this rule is inert.
    InsightRule(
        "cash-flow",
        "Slow Payment Collection",
        lambda m: m.average_payment_days > 45,
        _slow_payment,
    ),
)

GETTING_STARTED = Insight(
    title="Getting Started",
    description=(
        "Add clients, transactions, and invoices to receive personalized "
        "AI-powered business insights and recommendations."
    ),
    action="Add Your First Client",
    priority="low",
    impact="Start tracking your business",
    action_kind=ActionKind.CLIENTS,
)


def normalize_category(category: Optional[str]) -> Optional[str]:
    """
    Map user input to a category key.

    Accepts keys ('cash-flow') as well as display labels ('Cash Flow',
    'Risk Management'), case-insensitively. Returns 'profit' for an empty
    value and None for an unrecognized one.
    """
    if category is None or not category.strip():
        return "profit"
    text = category.strip().lower().replace("_", " ").replace("-", " ")
    if "cash flow" in text:
        return "cash-flow"
    for key in ("profit", "cost", "growth", "risk"):
        if key in text:
            return key
    return None


def generate_insights(
    metrics: InsightMetrics,
    category: Optional[str] = None,
    currency: str = "INR",
) -> list[Insight]:
    """
    Evaluate the rules of one category against precomputed metrics.

    Args:
        metrics: Aggregates from compute_insight_metrics.
        category: Category key or label. None or "" selects Profit.
        currency: Currency code used for the amounts in insight texts.

    Returns:
        The insights in rule order, or [GETTING_STARTED] if none fired.
    """
    key = normalize_category(category)
    if key is None:
        logger.info("insight_category_unknown", category=category)

    insights = [
        rule.build(metrics, currency)
        for rule in RULES
        if rule.category == key and rule.predicate(metrics)
    ]
    if not insights:
        return [GETTING_STARTED]
    return insights


def insights_for_snapshot(
    snapshot: RecordSnapshot,
    category: Optional[str] = None,
    today: Optional[date] = None,
    currency: str = "INR",
) -> list[Insight]:
    """Convenience wrapper: compute metrics then generate insights."""
    metrics = compute_insight_metrics(snapshot, today)
    return generate_insights(metrics, category, currency)
