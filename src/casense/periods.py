# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for CAsense.

This module defines a Period value object and helpers to derive reporting
periods from a named period (today, week, month, quarter, year) and a
reference instant, or from explicit from/to dates supplied by the user.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Literal, Optional, Union

import pandas as pd

from .logging_config import get_logger

logger = get_logger(__name__)

PeriodName = Literal["today", "week", "month", "quarter", "year"]

PERIOD_NAMES: tuple[str, ...] = ("today", "week", "month", "quarter", "year")

_LABELS = {
    "today": "Today",
    "week": "Last 7 days",
    "month": "Last month",
    "quarter": "Last quarter",
    "year": "Last year",
}


@dataclass(frozen=True)
class Period:
    """Represents a reporting period [start, end] with a human-readable label."""

    start: datetime
    end: datetime
    label: str


def _now() -> datetime:
    """Return the current local datetime (isolated for easier testing)."""
    return datetime.now()


def _as_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def resolve_period(
    name: str,
    reference: Optional[Union[date, datetime]] = None,
) -> Period:
    """
    Map a named period to a concrete range ending at the reference instant.

    Rules:
        today   -> start = reference date at 00:00:00
        week    -> start = reference - 7 days
        month   -> start = reference minus 1 calendar month
        quarter -> start = reference minus 3 calendar months
        year    -> start = reference minus 1 calendar year

    Calendar arithmetic clamps to the end of shorter months
    (2024-03-31 minus one month is 2024-02-29).

    An unknown name yields a range covering the reference instant only
    (start == end == reference).
    """
    ref = _as_datetime(reference) if reference is not None else _now()

    if name == "today":
        start = datetime.combine(ref.date(), time.min)
    elif name == "week":
        start = ref - timedelta(days=7)
    elif name == "month":
        start = (pd.Timestamp(ref) - pd.DateOffset(months=1)).to_pydatetime()
    elif name == "quarter":
        start = (pd.Timestamp(ref) - pd.DateOffset(months=3)).to_pydatetime()
    elif name == "year":
        start = (pd.Timestamp(ref) - pd.DateOffset(years=1)).to_pydatetime()
    else:
        logger.warning("period_name_unknown", period=name)
        return Period(start=ref, end=ref, label=f"Unknown period ({name})")

    return Period(start=start, end=ref, label=_LABELS[name])


def period_from_dates(from_raw: Optional[str], to_raw: Optional[str]) -> Period:
    """
    Build a custom period from two ISO dates (YYYY-MM-DD), both inclusive.

    Raises:
        ValueError: if a bound is missing, cannot be parsed, or if the end
            date is before the start date.
    """
    if not from_raw or not to_raw:
        raise ValueError("Please select a date range (both from and to dates).")

    try:
        start_day = date.fromisoformat(str(from_raw))
        end_day = date.fromisoformat(str(to_raw))
    except ValueError as exc:
        raise ValueError("Invalid date range, expected YYYY-MM-DD format.") from exc

    if end_day < start_day:
        raise ValueError("Custom period end date cannot be before start date.")

    return Period(
        start=datetime.combine(start_day, time.min),
        end=datetime.combine(end_day, time.min),
        label=f"Custom period ({start_day} → {end_day})",
    )


def _mask_in_period(dates: pd.Series, period: Period) -> pd.Series:
    return (dates >= pd.Timestamp(period.start)) & (dates <= pd.Timestamp(period.end))


def filter_transactions_by_period(
    transactions: pd.DataFrame, period: Period
) -> pd.DataFrame:
    """
    Keep only the transactions dated within the period (inclusive bounds).

    The `transactions` DataFrame is expected to contain a 'date' column of
    type datetime64[ns] (as produced by `io.transactions_frame`). Rows with
    an unknown date (NaT) are dropped.
    """
    mask = _mask_in_period(transactions["date"], period)
    return transactions.loc[mask].copy()


def filter_invoices_by_period(invoices: pd.DataFrame, period: Period) -> pd.DataFrame:
    """Keep only the invoices whose issue date falls within the period."""
    mask = _mask_in_period(invoices["date"], period)
    return invoices.loc[mask].copy()
