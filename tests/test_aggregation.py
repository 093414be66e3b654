import pandas as pd
import pytest

from casense.aggregation import group_sum, sum_where, type_is


def make_records() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "type": ["income", "expense", "income", "expense", "asset"],
            "category": ["Fees", "Rent", "Fees", "Travel", "Cash"],
            "amount": [100.0, "40", None, "abc", 25.5],
        }
    )


def test_sum_where_without_predicate_sums_everything() -> None:
    assert sum_where(make_records()) == pytest.approx(165.5)


def test_sum_where_counts_missing_and_non_numeric_as_zero() -> None:
    records = make_records()

    assert sum_where(records, type_is("income")) == pytest.approx(100.0)
    assert sum_where(records, type_is("expense")) == pytest.approx(40.0)


def test_sum_where_accepts_boolean_series() -> None:
    records = make_records()
    mask = records["category"] == "Cash"

    assert sum_where(records, mask) == pytest.approx(25.5)


def test_sum_where_on_empty_frame_is_zero() -> None:
    empty = pd.DataFrame(columns=["type", "amount"])
    assert sum_where(empty, type_is("income")) == 0.0


def test_sum_where_other_field() -> None:
    invoices = pd.DataFrame({"status": ["paid", "pending"], "total": [10.0, 5.0]})
    assert sum_where(invoices, invoices["status"] != "paid", field="total") == 5.0


def test_group_sum_keeps_first_seen_order() -> None:
    totals = group_sum(make_records(), "category")

    assert list(totals) == ["Fees", "Rent", "Travel", "Cash"]
    assert totals["Fees"] == pytest.approx(100.0)
    assert totals["Travel"] == 0.0


def test_group_sum_with_predicate_and_callable_key() -> None:
    records = make_records()
    totals = group_sum(
        records,
        key=lambda df: df["category"].str.upper(),
        predicate=type_is("expense"),
    )

    assert totals == {"RENT": pytest.approx(40.0), "TRAVEL": 0.0}


def test_group_sum_on_empty_selection() -> None:
    assert group_sum(make_records(), "category", predicate=type_is("liability")) == {}
