# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for CAsense.

This module converts records into the simple, consistent tabular structure
used by the computation core, and reads transactions from CSV files.

Engine frames
-------------
``transactions_frame`` returns a pandas DataFrame with exactly these
columns, whatever the number of transactions (an empty snapshot yields an
empty frame with the same columns):

    - ``id``             (str)
    - ``date``           (datetime64[ns], NaT when unknown)
    - ``client_id``      (str)
    - ``type``           (str: income, expense, asset, liability)
    - ``category``       (str)
    - ``description``    (str)
    - ``amount``         (float)
    - ``payment_method`` (str)
    - ``reference``      (str)

``invoices_frame`` does the same for invoices:

    - ``id``, ``number``, ``client_id`` (str)
    - ``date``, ``due_date`` (datetime64[ns])
    - ``subtotal``, ``tax``, ``total`` (float)
    - ``status`` (str: pending, paid)

CSV import
----------
``read_transactions_csv`` accepts a CSV with the following columns
(case-insensitive, surrounding spaces ignored):

    date, type, category, description, amount             (required)
    client_id | clientid | client, payment_method | paymentmethod,
    reference                                             (optional)

It returns a list of raw records using the store's wire field names, ready
to be passed to ``records_service.create_transaction``. Invalid dates or
amounts raise a clear ValueError naming the offending line.
"""

import os
from collections.abc import Iterable
from typing import Any, Union

import pandas as pd

from .models import Invoice, Transaction

TRANSACTION_COLUMNS: list[str] = [
    "id",
    "date",
    "client_id",
    "type",
    "category",
    "description",
    "amount",
    "payment_method",
    "reference",
]

INVOICE_COLUMNS: list[str] = [
    "id",
    "number",
    "client_id",
    "date",
    "due_date",
    "subtotal",
    "tax",
    "total",
    "status",
]

_OPTIONAL_ALIASES: dict[str, tuple[str, ...]] = {
    "clientId": ("client_id", "clientid", "client"),
    "paymentMethod": ("payment_method", "paymentmethod"),
    "reference": ("reference", "ref"),
}


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Build the engine DataFrame from typed transactions."""
    rows = [
        {
            "id": t.id,
            "date": t.date,
            "client_id": t.client_id,
            "type": t.type,
            "category": t.category,
            "description": t.description,
            "amount": t.amount,
            "payment_method": t.payment_method,
            "reference": t.reference,
        }
        for t in transactions
    ]
    df = pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0)
    return df


def invoices_frame(invoices: Iterable[Invoice]) -> pd.DataFrame:
    """Build the engine DataFrame from typed invoices."""
    rows = [
        {
            "id": i.id,
            "number": i.number,
            "client_id": i.client_id,
            "date": i.date,
            "due_date": i.due_date,
            "subtotal": i.subtotal,
            "tax": i.tax,
            "total": i.total,
            "status": i.status,
        }
        for i in invoices
    ]
    df = pd.DataFrame(rows, columns=INVOICE_COLUMNS)
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df["due_date"] = pd.to_datetime(df["due_date"], errors="coerce")
    for col in ("subtotal", "tax", "total"):
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0)
    return df


def read_transactions_csv(path: Union[str, "os.PathLike[str]"]) -> list[dict[str, Any]]:
    """
    Read transactions from a CSV file and normalize them into raw records.

    Parameters
    ----------
    path:
        Path to the CSV file.

    Returns
    -------
    list of dict
        One raw record per CSV line with keys ``date`` (ISO string),
        ``type``, ``category``, ``description``, ``amount`` (float) and,
        when present in the file, ``clientId``, ``paymentMethod`` and
        ``reference``.

    Raises
    ------
    ValueError
        If required columns are missing or if a date/amount cannot be
        parsed.
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)

    # Normalize column names to lowercase (to make the check case-insensitive)
    df.columns = [str(c).lower().strip() for c in df.columns]
    cols = set(df.columns)

    required = {"date", "type", "category", "description", "amount"}
    missing = required.difference(cols)
    if missing:
        raise ValueError(
            "Invalid transactions CSV structure. Missing column(s): "
            f"{', '.join(sorted(missing))}. Expected at least: "
            "date, type, category, description, amount "
            "(column names are case-insensitive)."
        )

    dates = pd.to_datetime(df["date"].str.strip(), errors="coerce")
    amounts = pd.to_numeric(df["amount"].str.strip(), errors="coerce")

    bad_dates = dates.isna()
    if bad_dates.any():
        line = int(bad_dates[bad_dates].index[0]) + 2  # header is line 1
        raise ValueError(f"Invalid value in 'date' column at line {line}.")

    bad_amounts = amounts.isna()
    if bad_amounts.any():
        line = int(bad_amounts[bad_amounts].index[0]) + 2
        raise ValueError(f"Invalid numeric value in 'amount' column at line {line}.")

    optional_columns = {
        wire_name: next((alias for alias in aliases if alias in cols), None)
        for wire_name, aliases in _OPTIONAL_ALIASES.items()
    }

    records: list[dict[str, Any]] = []
    for idx, row in df.iterrows():
        record: dict[str, Any] = {
            "date": dates[idx].date().isoformat(),
            "type": row["type"].strip().lower(),
            "category": row["category"].strip(),
            "description": row["description"].strip(),
            "amount": float(amounts[idx]),
        }
        for wire_name, column in optional_columns.items():
            if column is not None:
                record[wire_name] = row[column].strip()
        records.append(record)

    return records
