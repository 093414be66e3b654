import random
from datetime import date

import pytest

from casense.io import transactions_frame
from casense.models import Transaction
from casense.reports import (
    BalanceSheet,
    CashFlow,
    ProfitAndLoss,
    TrialBalance,
    generate_balance_sheet,
    generate_cash_flow,
    generate_profit_loss,
    generate_report,
    generate_trial_balance,
)


def tx(tx_type: str, category: str, amount: float, day: int = 1) -> Transaction:
    return Transaction(
        id=f"{tx_type}-{category}-{day}",
        date=date(2025, 1, day),
        client_id="c1",
        type=tx_type,
        category=category,
        description="",
        amount=amount,
    )


def sample_frame():
    return transactions_frame(
        [
            tx("income", "Service Revenue", 1000.0, 1),
            tx("expense", "Office Rent", 300.0, 2),
            tx("asset", "Equipment", 500.0, 3),
            tx("liability", "Loans", 200.0, 4),
            tx("expense", "Salaries", 150.0, 5),
            tx("income", "Service Revenue", 250.0, 6),
        ]
    )


def random_frame(seed: int):
    rng = random.Random(seed)
    types = ["income", "expense", "asset", "liability"]
    categories = ["A", "B", "C", "D", "E"]
    return transactions_frame(
        [
            tx(
                rng.choice(types),
                rng.choice(categories),
                round(rng.uniform(0, 10000), 2),
                rng.randint(1, 28),
            )
            for _ in range(rng.randint(0, 40))
        ]
    )


def test_profit_and_loss() -> None:
    pl = generate_profit_loss(sample_frame())

    assert pl.income == pytest.approx(1250.0)
    assert pl.expenses == pytest.approx(450.0)
    assert pl.profit == pytest.approx(800.0)
    assert pl.is_profitable is True


def test_profit_and_loss_loss_flag() -> None:
    pl = generate_profit_loss(transactions_frame([tx("expense", "Rent", 10.0)]))
    assert pl.profit == -10.0
    assert pl.is_profitable is False


def test_balance_sheet() -> None:
    bs = generate_balance_sheet(sample_frame())

    assert bs.assets == pytest.approx(500.0)
    assert bs.liabilities == pytest.approx(200.0)
    assert bs.retained_earnings == pytest.approx(800.0)
    assert bs.equity == pytest.approx(500.0 - 200.0 + 800.0)


def test_cash_flow_matches_profit_and_loss() -> None:
    cf = generate_cash_flow(sample_frame())

    assert cf.inflows == pytest.approx(1250.0)
    assert cf.outflows == pytest.approx(450.0)
    assert cf.net == pytest.approx(800.0)


def test_trial_balance_rows_in_first_seen_order() -> None:
    tb = generate_trial_balance(sample_frame())

    assert [r.account for r in tb.rows] == [
        "Service Revenue",
        "Office Rent",
        "Equipment",
        "Loans",
        "Salaries",
    ]
    by_account = {r.account: r for r in tb.rows}
    assert by_account["Service Revenue"].credit == pytest.approx(1250.0)
    assert by_account["Service Revenue"].debit == 0.0
    assert by_account["Office Rent"].debit == pytest.approx(300.0)
    assert by_account["Equipment"].debit == pytest.approx(500.0)
    assert by_account["Loans"].credit == pytest.approx(200.0)
    assert tb.total_debit == pytest.approx(950.0)
    assert tb.total_credit == pytest.approx(1450.0)


def test_trial_balance_mixed_category() -> None:
    """A category used by both sides accumulates in both columns."""
    tb = generate_trial_balance(
        transactions_frame([tx("income", "Misc", 10.0), tx("expense", "Misc", 4.0, 2)])
    )

    assert len(tb.rows) == 1
    assert tb.rows[0].debit == 4.0
    assert tb.rows[0].credit == 10.0


def test_reports_on_empty_set() -> None:
    empty = transactions_frame([])

    assert generate_profit_loss(empty) == ProfitAndLoss(0.0, 0.0, 0.0)
    assert generate_cash_flow(empty) == CashFlow(0.0, 0.0, 0.0)
    assert generate_balance_sheet(empty) == BalanceSheet(0.0, 0.0, 0.0, 0.0)
    assert generate_trial_balance(empty) == TrialBalance((), 0.0, 0.0)


@pytest.mark.parametrize("seed", range(20))
def test_report_identities_on_random_sets(seed: int) -> None:
    df = random_frame(seed)

    pl = generate_profit_loss(df)
    bs = generate_balance_sheet(df)
    cf = generate_cash_flow(df)
    tb = generate_trial_balance(df)

    assert pl.profit == pytest.approx(pl.income - pl.expenses)
    assert cf.net == pytest.approx(pl.income - pl.expenses)
    assert bs.total_assets == pytest.approx(bs.liabilities + bs.equity)
    assert bs.total_assets == pytest.approx(bs.total_liabilities_and_equity)
    assert tb.total_debit + tb.total_credit == pytest.approx(float(df["amount"].sum()))


@pytest.mark.parametrize("kind", ["pl", "balance-sheet", "cash-flow", "trial-balance"])
def test_generators_are_idempotent_and_pure(kind: str) -> None:
    df = random_frame(7)
    before = df.copy()

    first = generate_report(kind, df)
    second = generate_report(kind, df)

    assert first == second
    assert df.equals(before)


def test_generate_report_unknown_kind_returns_none() -> None:
    assert generate_report("gst-return", sample_frame()) is None
