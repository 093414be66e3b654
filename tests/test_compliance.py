from datetime import date, datetime

import pytest

from casense.compliance import compliance_calendar


def by_title(items):
    return {item.title: item for item in items}


def test_calendar_has_four_obligations_in_order() -> None:
    items = compliance_calendar(date(2025, 6, 10))

    assert [i.title for i in items] == [
        "GST Return Filing (GSTR-3B)",
        "TDS Return Filing (Form 26Q)",
        "Income Tax Return Filing",
        "Annual Compliance Certificate",
    ]
    assert [i.frequency for i in items] == ["Monthly", "Quarterly", "Annual", "Annual"]


def test_due_dates_follow_reference_month_and_year() -> None:
    items = by_title(compliance_calendar(date(2025, 6, 10)))

    assert items["GST Return Filing (GSTR-3B)"].due_date == date(2025, 6, 20)
    assert items["TDS Return Filing (Form 26Q)"].due_date == date(2025, 6, 15)
    assert items["Income Tax Return Filing"].due_date == date(2025, 7, 31)
    assert items["Annual Compliance Certificate"].due_date == date(2025, 9, 30)


def test_statuses() -> None:
    items = by_title(compliance_calendar(date(2025, 6, 10)))

    assert items["GST Return Filing (GSTR-3B)"].days_until == 10
    assert items["GST Return Filing (GSTR-3B)"].status == "upcoming"
    assert items["TDS Return Filing (Form 26Q)"].days_until == 5
    assert items["TDS Return Filing (Form 26Q)"].status == "due-soon"


def test_overdue_after_due_date() -> None:
    items = by_title(compliance_calendar(date(2025, 8, 25)))

    assert items["Income Tax Return Filing"].status == "overdue"
    assert items["GST Return Filing (GSTR-3B)"].days_until == -5
    assert items["GST Return Filing (GSTR-3B)"].status == "overdue"


def test_days_until_rounds_up_partial_days() -> None:
    items = by_title(compliance_calendar(datetime(2025, 6, 19, 15, 0)))

    assert items["GST Return Filing (GSTR-3B)"].days_until == 1
    assert items["GST Return Filing (GSTR-3B)"].status == "due-soon"


@pytest.mark.parametrize("due_soon_days, expected", [(7, "due-soon"), (4, "upcoming")])
def test_due_soon_window_is_configurable(due_soon_days, expected) -> None:
    items = by_title(compliance_calendar(date(2025, 6, 10), due_soon_days=due_soon_days))
    assert items["TDS Return Filing (Form 26Q)"].status == expected
