# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Financial report generators for CAsense.

This module turns a set of transactions, already filtered to a reporting
period, into one of four reports:

1. Profit & Loss
   -------------
   income   = Σ amount where type == "income"
   expenses = Σ amount where type == "expense"
   profit   = income - expenses

2. Balance Sheet
   -------------
   assets            = Σ amount where type == "asset"
   liabilities       = Σ amount where type == "liability"
   retained_earnings = income - expenses
   equity            = assets - liabilities + retained_earnings

   The period result is carried on the assets side as retained earnings,
   so that ``total_assets == liabilities + equity`` always holds.

3. Cash Flow
   ---------
   inflows  = Σ income, outflows = Σ expense, net = inflows - outflows.
   This is the same arithmetic as the Profit & Loss report: no distinction
   is made between accrual and cash timing, and asset/liability
   transactions are excluded.

4. Trial Balance
   -------------
   One row per transaction category, in first-seen order. Expense and
   asset amounts go to the debit column, every other type to the credit
   column. Column totals are provided.

All generators are pure: they never modify their input and return the
same report for the same transactions. Date-range validation happens
before they are called (see periods.period_from_dates).
"""

from dataclasses import dataclass
from typing import Literal, Optional, Union

import pandas as pd

from .aggregation import group_sum, sum_where, type_is
from .logging_config import get_logger

logger = get_logger(__name__)

ReportKind = Literal["pl", "balance-sheet", "cash-flow", "trial-balance"]

REPORT_KINDS: tuple[str, ...] = ("pl", "balance-sheet", "cash-flow", "trial-balance")

DEBIT_TYPES: frozenset[str] = frozenset({"expense", "asset"})


@dataclass(frozen=True)
class ProfitAndLoss:
    """Profit & Loss statement figures."""

    income: float
    expenses: float
    profit: float

    title = "Profit & Loss Statement"

    @property
    def is_profitable(self) -> bool:
        """Signed-profit display flag (profit >= 0)."""
        return self.profit >= 0


@dataclass(frozen=True)
class BalanceSheet:
    """Balance sheet figures."""

    assets: float
    liabilities: float
    retained_earnings: float
    equity: float

    title = "Balance Sheet"

    @property
    def total_assets(self) -> float:
        return self.assets + self.retained_earnings

    @property
    def total_liabilities_and_equity(self) -> float:
        return self.liabilities + self.equity


@dataclass(frozen=True)
class CashFlow:
    """Cash flow statement figures (operating activities only)."""

    inflows: float
    outflows: float
    net: float

    title = "Cash Flow Statement"

    @property
    def is_positive(self) -> bool:
        return self.net >= 0


@dataclass(frozen=True)
class TrialBalanceRow:
    """Debit and credit totals for one account (transaction category)."""

    account: str
    debit: float
    credit: float


@dataclass(frozen=True)
class TrialBalance:
    """Trial balance rows plus column totals."""

    rows: tuple[TrialBalanceRow, ...]
    total_debit: float
    total_credit: float

    title = "Trial Balance"


Report = Union[ProfitAndLoss, BalanceSheet, CashFlow, TrialBalance]


def _income_and_expenses(transactions: pd.DataFrame) -> tuple[float, float]:
    income = sum_where(transactions, type_is("income"))
    expenses = sum_where(transactions, type_is("expense"))
    return income, expenses


def generate_profit_loss(transactions: pd.DataFrame) -> ProfitAndLoss:
    """Compute the Profit & Loss statement for a set of transactions."""
    income, expenses = _income_and_expenses(transactions)
    return ProfitAndLoss(income=income, expenses=expenses, profit=income - expenses)


def generate_balance_sheet(transactions: pd.DataFrame) -> BalanceSheet:
    """Compute the balance sheet for a set of transactions."""
    assets = sum_where(transactions, type_is("asset"))
    liabilities = sum_where(transactions, type_is("liability"))
    income, expenses = _income_and_expenses(transactions)
    retained = income - expenses
    return BalanceSheet(
        assets=assets,
        liabilities=liabilities,
        retained_earnings=retained,
        equity=assets - liabilities + retained,
    )


def generate_cash_flow(transactions: pd.DataFrame) -> CashFlow:
    """Compute the cash flow statement for a set of transactions."""
    inflows, outflows = _income_and_expenses(transactions)
    return CashFlow(inflows=inflows, outflows=outflows, net=inflows - outflows)


def generate_trial_balance(transactions: pd.DataFrame) -> TrialBalance:
    """
    Compute the trial balance, one row per category in first-seen order.

    Transactions without a category are grouped under an empty account name.
    """
    if transactions.empty:
        return TrialBalance(rows=(), total_debit=0.0, total_credit=0.0)

    is_debit = transactions["type"].isin(DEBIT_TYPES)
    debit_by_account = group_sum(transactions, "category", predicate=is_debit)
    credit_by_account = group_sum(transactions, "category", predicate=~is_debit)

    accounts = transactions["category"].fillna("").astype(str).drop_duplicates()

    rows = tuple(
        TrialBalanceRow(
            account=account,
            debit=debit_by_account.get(account, 0.0),
            credit=credit_by_account.get(account, 0.0),
        )
        for account in accounts
    )
    return TrialBalance(
        rows=rows,
        total_debit=sum(r.debit for r in rows),
        total_credit=sum(r.credit for r in rows),
    )


_GENERATORS = {
    "pl": generate_profit_loss,
    "balance-sheet": generate_balance_sheet,
    "cash-flow": generate_cash_flow,
    "trial-balance": generate_trial_balance,
}


def generate_report(kind: str, transactions: pd.DataFrame) -> Optional[Report]:
    """
    Dispatch to the generator for `kind`.

    Returns:
        The report, or None when `kind` is not a known report type (the
        presentation layer shows "Report type not implemented yet.").
    """
    generator = _GENERATORS.get(kind)
    if generator is None:
        logger.warning("report_kind_unknown", kind=kind)
        return None
    return generator(transactions)
