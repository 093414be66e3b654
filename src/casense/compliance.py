# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Statutory compliance calendar.

Four recurring obligations are tracked relative to a reference instant:

    GST Return Filing (GSTR-3B)     20th of the current month   Monthly
    TDS Return Filing (Form 26Q)    15th of the current month   Quarterly
    Income Tax Return Filing        31 July of the current year Annual
    Annual Compliance Certificate   30 September                Annual

``days_until`` is the day difference rounded up, so an obligation due
later today counts as 1 day away. Status is 'overdue' below 0 days,
'due-soon' up to ``due_soon_days`` (7 by default), 'upcoming' beyond.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Literal, Optional, Union

ComplianceStatus = Literal["overdue", "due-soon", "upcoming"]

DEFAULT_DUE_SOON_DAYS = 7


@dataclass(frozen=True)
class ComplianceItem:
    title: str
    due_date: date
    frequency: str
    days_until: int
    status: ComplianceStatus


def _obligations(year: int, month: int) -> list[tuple[str, date, str]]:
    return [
        ("GST Return Filing (GSTR-3B)", date(year, month, 20), "Monthly"),
        ("TDS Return Filing (Form 26Q)", date(year, month, 15), "Quarterly"),
        ("Income Tax Return Filing", date(year, 7, 31), "Annual"),
        ("Annual Compliance Certificate", date(year, 9, 30), "Annual"),
    ]


def _status(days_until: int, due_soon_days: int) -> ComplianceStatus:
    if days_until < 0:
        return "overdue"
    if days_until <= due_soon_days:
        return "due-soon"
    return "upcoming"


def compliance_calendar(
    reference: Optional[Union[date, datetime]] = None,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
) -> list[ComplianceItem]:
    """Return the compliance items with their countdown and status."""
    if reference is None:
        now = datetime.now()
    elif isinstance(reference, datetime):
        now = reference
    else:
        now = datetime.combine(reference, time.min)

    items = []
    for title, due, frequency in _obligations(now.year, now.month):
        delta = datetime.combine(due, time.min) - now
        days_until = math.ceil(delta.total_seconds() / 86400)
        items.append(
            ComplianceItem(
                title=title,
                due_date=due,
                frequency=frequency,
                days_until=days_until,
                status=_status(days_until, due_soon_days),
            )
        )
    return items
