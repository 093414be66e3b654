# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
High-level services for CRUD operations on clients, transactions and invoices.

This module sits between:
- the low-level JSON store helpers in `store.py`, and
- user-facing layers such as the CLI and the REST API.

Responsibilities
----------------
1) Input validation
   - Transactions: date, client and type are required, the type must be one
     of income / expense / asset / liability and the amount must parse to a
     finite number greater than 0.
   - Clients: a non-blank name and a known business type are required.
   - Invoices: line items are computed (quantity × rate, tax %), items
     without a description or with a rate <= 0 are dropped, and at least one
     item must remain. Subtotal, tax and total are the sums of the items.

   Failures raise ValidationError carrying every message, before anything is
   written to the store.

2) CRUD operations
   - create / edit / delete clients and transactions,
   - create invoices, mark them paid, delete them,
   - import transactions from a CSV file.

3) Snapshot and display helpers
   - load_snapshot(): typed, immutable snapshot of the whole store, the only
     input the computation modules ever receive.
   - client_name(), invoice_status(), next_invoice_number().

Design notes
------------
- The store itself stays permissive and never re-validates: all business
  rules live here.
- Deleting a client does not cascade. Transactions and invoices that refer
  to a deleted client keep their ``clientId`` and display as "Unknown".
"""

from collections.abc import Mapping
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Optional

from .config import AppConfig
from .io import read_transactions_csv
from .logging_config import get_logger
from .models import (
    BUSINESS_TYPES,
    TRANSACTION_TYPES,
    Invoice,
    InvoiceItem,
    RecordSnapshot,
    to_date,
)
from .store import (
    create_record,
    delete_record,
    get_record,
    list_clients,
    list_invoices,
    list_transactions,
    update_record,
)

logger = get_logger(__name__)

DEFAULT_PAYMENT_TERMS_DAYS = 30

CATEGORY_SUGGESTIONS: dict[str, tuple[str, ...]] = {
    "income": ("Service Revenue", "Product Sales", "Interest Income", "Other Income"),
    "expense": (
        "Office Rent",
        "Salaries",
        "Utilities",
        "Marketing",
        "Travel",
        "Supplies",
        "Other Expenses",
    ),
    "asset": (
        "Cash",
        "Bank Account",
        "Accounts Receivable",
        "Inventory",
        "Equipment",
        "Property",
    ),
    "liability": ("Accounts Payable", "Loans", "Tax Payable", "Other Liabilities"),
}


class ValidationError(ValueError):
    """Raised when user input for a create/edit operation is invalid."""

    def __init__(self, messages: list[str]) -> None:
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _parse_positive_amount(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    # NaN fails the comparison, infinity is rejected explicitly.
    if not amount > 0 or amount == float("inf"):
        return None
    return amount


def validate_transaction_input(payload: Mapping[str, Any]) -> dict[str, Any]:
    """
    Validate and normalize a transaction payload.

    Returns
    -------
    dict
        A copy of the payload with ``date`` as an ISO string, ``type``
        lower-cased and ``amount`` as a float.

    Raises
    ------
    ValidationError
        With one message per failed check.
    """
    errors: list[str] = []
    record = dict(payload)

    parsed_date = to_date(record.get("date"))
    if parsed_date is None:
        errors.append("Please select a date")
    else:
        record["date"] = parsed_date.isoformat()

    if not str(record.get("clientId") or "").strip():
        errors.append("Please select a client")

    tx_type = str(record.get("type") or "").strip().lower()
    if not tx_type:
        errors.append("Please select a transaction type")
    elif tx_type not in TRANSACTION_TYPES:
        errors.append(
            f"Invalid transaction type '{tx_type}'. Expected one of: "
            f"{', '.join(TRANSACTION_TYPES)}."
        )
    else:
        record["type"] = tx_type

    amount = _parse_positive_amount(record.get("amount"))
    if amount is None:
        errors.append("Please enter a valid amount")
    else:
        record["amount"] = amount

    if errors:
        raise ValidationError(errors)
    return record


def validate_client_input(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a client payload (name required, known business type)."""
    errors: list[str] = []
    record = dict(payload)

    name = str(record.get("name") or "").strip()
    if not name:
        errors.append("Please enter client name")
    else:
        record["name"] = name

    business_type = str(record.get("businessType") or "").strip().lower()
    if business_type not in BUSINESS_TYPES:
        errors.append(
            f"Invalid business type '{business_type}'. Expected one of: "
            f"{', '.join(BUSINESS_TYPES)}."
        )
    else:
        record["businessType"] = business_type

    if errors:
        raise ValidationError(errors)
    return record


def build_invoice(payload: Mapping[str, Any], today: Optional[date] = None) -> dict[str, Any]:
    """
    Build a complete invoice record from user input.

    Line items are recomputed from quantity, rate and tax %. Items without a
    description or with a rate <= 0 are dropped. The issue date defaults to
    today and the due date to 30 days after the issue date. The status is
    always 'pending'.

    Raises
    ------
    ValidationError
        If no valid item remains or if a date cannot be parsed.
    """
    today = today or date.today()
    errors: list[str] = []

    items = []
    for raw in payload.get("items") or []:
        if not isinstance(raw, Mapping):
            continue
        item = InvoiceItem.compute(
            raw.get("description") or "",
            raw.get("quantity"),
            raw.get("rate"),
            raw.get("tax"),
        )
        if item.description and item.rate > 0:
            items.append(item)
    if not items:
        errors.append("Please add at least one invoice item")

    issue_date = today if not payload.get("date") else to_date(payload.get("date"))
    if issue_date is None:
        errors.append("Invalid invoice date, expected YYYY-MM-DD format.")

    due_date: Optional[date]
    if payload.get("dueDate"):
        due_date = to_date(payload.get("dueDate"))
        if due_date is None:
            errors.append("Invalid due date, expected YYYY-MM-DD format.")
    elif issue_date is not None:
        due_date = issue_date + timedelta(days=DEFAULT_PAYMENT_TERMS_DAYS)
    else:
        due_date = None

    if errors:
        raise ValidationError(errors)

    subtotal = sum(i.subtotal for i in items)
    tax = sum(i.tax_amount for i in items)
    return {
        "number": str(payload.get("number") or ""),
        "clientId": str(payload.get("clientId") or ""),
        "date": issue_date.isoformat(),
        "dueDate": due_date.isoformat(),
        "items": [i.to_record() for i in items],
        "subtotal": subtotal,
        "tax": tax,
        "total": subtotal + tax,
        "status": "pending",
    }


# ---------------------------------------------------------------------------
# Snapshot & display helpers
# ---------------------------------------------------------------------------


def load_snapshot(app_config: AppConfig) -> RecordSnapshot:
    """Load the whole store into an immutable, typed snapshot."""
    cfg = app_config.store
    return RecordSnapshot.from_records(
        clients=list_clients(cfg),
        transactions=list_transactions(cfg),
        invoices=list_invoices(cfg),
    )


def client_name(snapshot: RecordSnapshot, client_id: Optional[str]) -> str:
    """Resolve a client id for display: 'N/A' without id, 'Unknown' if absent."""
    if not client_id:
        return "N/A"
    for client in snapshot.clients:
        if client.id == client_id:
            return client.name
    return "Unknown"


def invoice_status(invoice: Invoice, today: Optional[date] = None) -> str:
    """Display status of an invoice: 'paid', 'overdue' or 'pending'."""
    if invoice.is_paid:
        return "paid"
    if invoice.is_overdue(today or date.today()):
        return "overdue"
    return "pending"


def next_invoice_number(snapshot: RecordSnapshot) -> str:
    """Suggested label for the next invoice (INV-0001, INV-0002, ...)."""
    return f"INV-{len(snapshot.invoices) + 1:04d}"


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


def create_client(app_config: AppConfig, payload: Mapping[str, Any]) -> dict[str, Any]:
    record = validate_client_input(payload)
    return create_record(app_config.store, "clients", record)


def edit_client(
    app_config: AppConfig, client_id: str, changes: Mapping[str, Any]
) -> dict[str, Any]:
    """Validate the merged client, then apply `changes` to the stored record."""
    existing = get_record(app_config.store, "clients", client_id)
    merged = validate_client_input({**existing, **dict(changes)})
    normalized = {key: merged[key] for key in changes if key in merged}
    return update_record(app_config.store, "clients", client_id, normalized)


def delete_client(app_config: AppConfig, client_id: str) -> None:
    delete_record(app_config.store, "clients", client_id)


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def create_transaction(
    app_config: AppConfig, payload: Mapping[str, Any]
) -> dict[str, Any]:
    record = validate_transaction_input(payload)
    return create_record(app_config.store, "transactions", record)


def edit_transaction(
    app_config: AppConfig, transaction_id: str, changes: Mapping[str, Any]
) -> dict[str, Any]:
    """Validate the merged transaction, then apply `changes`."""
    existing = get_record(app_config.store, "transactions", transaction_id)
    merged = validate_transaction_input({**existing, **dict(changes)})
    normalized = {key: merged[key] for key in changes if key in merged}
    return update_record(app_config.store, "transactions", transaction_id, normalized)


def delete_transaction(app_config: AppConfig, transaction_id: str) -> None:
    delete_record(app_config.store, "transactions", transaction_id)


def import_transactions(
    app_config: AppConfig,
    csv_path: Path,
    default_client_id: Optional[str] = None,
) -> tuple[list[dict[str, Any]], int]:
    """
    Import transactions from a CSV file.

    Rows without a client use `default_client_id`. Rows failing validation
    are skipped and logged.

    Returns
    -------
    (created, skipped)
        The stored records and the number of skipped rows.

    Raises
    ------
    ValueError
        If the CSV structure or a date/amount cell is invalid.
    """
    rows = read_transactions_csv(csv_path)
    created: list[dict[str, Any]] = []
    skipped = 0

    for line, row in enumerate(rows, start=2):
        if not row.get("clientId") and default_client_id:
            row["clientId"] = default_client_id
        try:
            created.append(create_transaction(app_config, row))
        except ValidationError as exc:
            skipped += 1
            logger.warning(
                "transaction_import_row_skipped",
                path=str(csv_path),
                line=line,
                errors=exc.messages,
            )

    logger.info(
        "transactions_imported",
        path=str(csv_path),
        created=len(created),
        skipped=skipped,
    )
    return created, skipped


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------


def create_invoice(app_config: AppConfig, payload: Mapping[str, Any]) -> dict[str, Any]:
    """Build and store an invoice. A missing number gets the next INV-xxxx label."""
    record = build_invoice(payload)
    if not record["number"]:
        record["number"] = next_invoice_number(load_snapshot(app_config))
    return create_record(app_config.store, "invoices", record)


def get_invoice(app_config: AppConfig, invoice_id: str) -> Invoice:
    return Invoice.from_record(get_record(app_config.store, "invoices", invoice_id))


def mark_invoice_paid(app_config: AppConfig, invoice_id: str) -> dict[str, Any]:
    return update_record(app_config.store, "invoices", invoice_id, {"status": "paid"})


def delete_invoice(app_config: AppConfig, invoice_id: str) -> None:
    delete_record(app_config.store, "invoices", invoice_id)
