from datetime import datetime

import pytest

from casense.dashboard import compute_dashboard
from casense.models import RecordSnapshot
from casense.periods import period_from_dates, resolve_period


def make_snapshot() -> RecordSnapshot:
    return RecordSnapshot.from_records(
        clients=[{"id": "c1", "name": "Acme"}, {"id": "c2", "name": "Globex"}],
        transactions=[
            {"id": "1", "date": "2025-03-01", "type": "income", "amount": 1000},
            {"id": "2", "date": "2025-03-10", "type": "expense", "amount": 400},
            {"id": "3", "date": "2025-03-31", "type": "income", "amount": 500},
            {"id": "4", "date": "2025-01-15", "type": "income", "amount": 9999},
            {"id": "5", "date": "2025-03-05", "type": "asset", "amount": 7777},
        ],
        invoices=[
            {"id": "a", "date": "2025-03-02", "status": "pending", "total": 10},
            {"id": "b", "date": "2025-03-03", "status": "paid", "total": 10},
            {"id": "c", "date": "2025-02-01", "status": "pending", "total": 10},
        ],
    )


def test_dashboard_for_custom_period() -> None:
    summary = compute_dashboard(make_snapshot(), period_from_dates("2025-03-01", "2025-03-31"))

    assert summary.revenue == pytest.approx(1500)
    assert summary.expenses == pytest.approx(400)
    assert summary.profit == pytest.approx(1100)
    assert summary.active_clients == 2
    assert summary.pending_invoices == 1
    assert summary.tax_liability == pytest.approx(1500 * 0.18)


def test_dashboard_liability_rate_is_configurable() -> None:
    summary = compute_dashboard(
        make_snapshot(), period_from_dates("2025-03-01", "2025-03-31"), liability_rate=0.1
    )
    assert summary.tax_liability == pytest.approx(150)


def test_dashboard_for_named_period() -> None:
    period = resolve_period("month", datetime(2025, 3, 15))
    summary = compute_dashboard(make_snapshot(), period)

    # 2025-02-15 .. 2025-03-15: only the 2025-03-01 and 2025-03-10 rows.
    assert summary.revenue == pytest.approx(1000)
    assert summary.expenses == pytest.approx(400)


def test_dashboard_on_empty_snapshot() -> None:
    summary = compute_dashboard(RecordSnapshot(), resolve_period("year"))

    assert summary.revenue == 0
    assert summary.pending_invoices == 0
    assert summary.tax_liability == 0


def test_pending_invoices_count_only_pending_and_overdue_statuses() -> None:
    snapshot = RecordSnapshot.from_records(
        invoices=[
            {"id": "a", "date": "2025-03-02", "status": "pending", "total": 10},
            {"id": "b", "date": "2025-03-03", "status": "overdue", "total": 10},
            {"id": "c", "date": "2025-03-04", "status": "draft", "total": 10},
            {"id": "d", "date": "2025-03-05", "status": "paid", "total": 10},
        ]
    )
    summary = compute_dashboard(snapshot, period_from_dates("2025-03-01", "2025-03-31"))

    assert summary.pending_invoices == 2
