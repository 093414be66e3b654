from datetime import date

import pandas as pd
import pytest

from casense.io import (
    INVOICE_COLUMNS,
    TRANSACTION_COLUMNS,
    invoices_frame,
    read_transactions_csv,
    transactions_frame,
)
from casense.models import Invoice, Transaction, to_amount, to_date


@pytest.mark.parametrize(
    "raw, expected",
    [(10, 10.0), ("12.5", 12.5), ("", 0.0), (None, 0.0), ("abc", 0.0), ("nan", 0.0), (True, 0.0)],
)
def test_to_amount_is_permissive(raw, expected) -> None:
    assert to_amount(raw) == expected


def test_to_date_parses_iso_values() -> None:
    assert to_date("2025-01-15") == date(2025, 1, 15)
    assert to_date("2025-01-15T08:30:00Z") == date(2025, 1, 15)
    assert to_date("15/01/2025") is None
    assert to_date(None) is None


def test_transactions_frame_has_fixed_columns_even_when_empty() -> None:
    df = transactions_frame([])

    assert list(df.columns) == TRANSACTION_COLUMNS
    assert df.empty


def test_transactions_frame_types() -> None:
    t = Transaction.from_record(
        {"id": "1", "date": "2025-02-01", "type": "income", "amount": "99.5", "clientId": "c1"}
    )
    broken = Transaction.from_record({"id": "2", "date": "garbage", "type": "expense"})

    df = transactions_frame([t, broken])

    assert pd.api.types.is_datetime64_any_dtype(df["date"])
    assert df.loc[0, "amount"] == 99.5
    assert df.loc[1, "amount"] == 0.0
    assert pd.isna(df.loc[1, "date"])
    assert df.loc[0, "client_id"] == "c1"


def test_invoices_frame() -> None:
    inv = Invoice.from_record(
        {"id": "i1", "number": "INV-0001", "date": "2025-01-01", "dueDate": "2025-01-31", "total": "118"}
    )
    df = invoices_frame([inv])

    assert list(df.columns) == INVOICE_COLUMNS
    assert df.loc[0, "total"] == 118.0
    assert df.loc[0, "status"] == "pending"
    assert df.loc[0, "due_date"] == pd.Timestamp("2025-01-31")


def test_read_transactions_csv(tmp_path) -> None:
    path = tmp_path / "tx.csv"
    path.write_text(
        " Date ,TYPE,Category,Description,Amount,Payment_Method,Reference\n"
        "2025-01-05,Income,Fees,Audit, 1000 ,bank,R-1\n"
        "2025-01-06,expense,Rent,Office,250.75,cash,\n",
        encoding="utf-8",
    )

    rows = read_transactions_csv(path)

    assert rows == [
        {
            "date": "2025-01-05",
            "type": "income",
            "category": "Fees",
            "description": "Audit",
            "amount": 1000.0,
            "paymentMethod": "bank",
            "reference": "R-1",
        },
        {
            "date": "2025-01-06",
            "type": "expense",
            "category": "Rent",
            "description": "Office",
            "amount": 250.75,
            "paymentMethod": "cash",
            "reference": "",
        },
    ]


def test_read_transactions_csv_missing_columns(tmp_path) -> None:
    path = tmp_path / "tx.csv"
    path.write_text("date,amount\n2025-01-01,10\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Missing column"):
        read_transactions_csv(path)


def test_read_transactions_csv_reports_bad_line(tmp_path) -> None:
    path = tmp_path / "tx.csv"
    path.write_text(
        "date,type,category,description,amount\n"
        "2025-01-01,income,Fees,A,10\n"
        "2025-01-02,income,Fees,B,ten\n",
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="line 3"):
        read_transactions_csv(path)
