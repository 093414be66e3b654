# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Typed records for CAsense.

The record store keeps plain JSON dictionaries. Before any computation
takes place, those dictionaries are converted into the frozen dataclasses
defined here. The conversion is the single place where raw values are
coerced and defaulted:

- amounts, quantities and rates become floats (non-numeric → 0.0),
- dates become ``datetime.date`` (unparseable → None),
- missing strings become "".

Everything downstream (periods, aggregation, reports, insights) works on
these types and never inspects raw store dictionaries.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal, Optional

BusinessType = Literal[
    "sole-proprietor",
    "partnership",
    "llp",
    "private-limited",
    "public-limited",
]
TransactionType = Literal["income", "expense", "asset", "liability"]
InvoiceStatus = Literal["pending", "paid"]

BUSINESS_TYPES: tuple[str, ...] = (
    "sole-proprietor",
    "partnership",
    "llp",
    "private-limited",
    "public-limited",
)
TRANSACTION_TYPES: tuple[str, ...] = ("income", "expense", "asset", "liability")
INVOICE_STATUSES: tuple[str, ...] = ("pending", "paid")


def to_amount(value: Any) -> float:
    """
    Permissive numeric parse: return a finite float, or 0.0.

    Accepts ints, floats and numeric strings. None, empty strings,
    non-numeric text, NaN and infinities all yield 0.0.
    """
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def to_date(value: Any) -> Optional[date]:
    """Parse an ISO date or datetime string (or date object) into a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class Client:
    """A client of the practice."""

    id: str
    name: str
    business_type: str
    gstin: str = ""
    pan: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""

    @classmethod
    def from_record(cls, raw: Mapping[str, Any]) -> "Client":
        return cls(
            id=_text(raw.get("id")),
            name=_text(raw.get("name")),
            business_type=_text(raw.get("businessType")),
            gstin=_text(raw.get("gstin")),
            pan=_text(raw.get("pan")),
            email=_text(raw.get("email")),
            phone=_text(raw.get("phone")),
            address=_text(raw.get("address")),
        )


@dataclass(frozen=True)
class Transaction:
    """
    A financial transaction.

    ``date`` may be None when the stored value cannot be parsed; such
    transactions never fall inside a reporting period but still count in
    whole-dataset figures (insights).
    """

    id: str
    date: Optional[date]
    client_id: str
    type: str
    category: str
    description: str
    amount: float
    payment_method: str = ""
    reference: str = ""

    @classmethod
    def from_record(cls, raw: Mapping[str, Any]) -> "Transaction":
        return cls(
            id=_text(raw.get("id")),
            date=to_date(raw.get("date")),
            client_id=_text(raw.get("clientId")),
            type=_text(raw.get("type")),
            category=_text(raw.get("category")),
            description=_text(raw.get("description")),
            amount=to_amount(raw.get("amount")),
            payment_method=_text(raw.get("paymentMethod")),
            reference=_text(raw.get("reference")),
        )


@dataclass(frozen=True)
class InvoiceItem:
    """One invoice line: quantity × rate plus a tax percentage."""

    description: str
    quantity: float
    rate: float
    tax: float
    subtotal: float
    tax_amount: float
    total: float

    @classmethod
    def compute(
        cls, description: str, quantity: Any, rate: Any, tax: Any
    ) -> "InvoiceItem":
        """Build a line item and derive its subtotal, tax amount and total."""
        qty = to_amount(quantity)
        unit_rate = to_amount(rate)
        tax_pct = to_amount(tax)
        subtotal = qty * unit_rate
        tax_amount = subtotal * (tax_pct / 100)
        return cls(
            description=_text(description),
            quantity=qty,
            rate=unit_rate,
            tax=tax_pct,
            subtotal=subtotal,
            tax_amount=tax_amount,
            total=subtotal + tax_amount,
        )

    @classmethod
    def from_record(cls, raw: Mapping[str, Any]) -> "InvoiceItem":
        return cls(
            description=_text(raw.get("description")),
            quantity=to_amount(raw.get("quantity")),
            rate=to_amount(raw.get("rate")),
            tax=to_amount(raw.get("tax")),
            subtotal=to_amount(raw.get("subtotal")),
            tax_amount=to_amount(raw.get("taxAmount")),
            total=to_amount(raw.get("total")),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "quantity": self.quantity,
            "rate": self.rate,
            "tax": self.tax,
            "subtotal": self.subtotal,
            "taxAmount": self.tax_amount,
            "total": self.total,
        }


@dataclass(frozen=True)
class Invoice:
    """An invoice issued to a client."""

    id: str
    number: str
    client_id: str
    date: Optional[date]
    due_date: Optional[date]
    items: tuple[InvoiceItem, ...]
    subtotal: float
    tax: float
    total: float
    status: str

    @classmethod
    def from_record(cls, raw: Mapping[str, Any]) -> "Invoice":
        raw_items = raw.get("items") or []
        items = tuple(
            InvoiceItem.from_record(item)
            for item in raw_items
            if isinstance(item, Mapping)
        )
        return cls(
            id=_text(raw.get("id")),
            number=_text(raw.get("number")),
            client_id=_text(raw.get("clientId")),
            date=to_date(raw.get("date")),
            due_date=to_date(raw.get("dueDate")),
            items=items,
            subtotal=to_amount(raw.get("subtotal")),
            tax=to_amount(raw.get("tax")),
            total=to_amount(raw.get("total")),
            status=_text(raw.get("status")) or "pending",
        )

    @property
    def is_paid(self) -> bool:
        return self.status == "paid"

    def is_overdue(self, today: date) -> bool:
        """Derived state: due date strictly before today and not paid."""
        if self.is_paid or self.due_date is None:
            return False
        return self.due_date < today


@dataclass(frozen=True)
class RecordSnapshot:
    """
    Immutable snapshot of the store contents handed to the computation core.

    The core never reads the store directly: callers build a snapshot
    (see records_service.load_snapshot) and pass it in.
    """

    clients: tuple[Client, ...] = field(default_factory=tuple)
    transactions: tuple[Transaction, ...] = field(default_factory=tuple)
    invoices: tuple[Invoice, ...] = field(default_factory=tuple)

    @classmethod
    def from_records(
        cls,
        clients: Iterable[Mapping[str, Any]] = (),
        transactions: Iterable[Mapping[str, Any]] = (),
        invoices: Iterable[Mapping[str, Any]] = (),
    ) -> "RecordSnapshot":
        return cls(
            clients=tuple(Client.from_record(c) for c in clients),
            transactions=tuple(Transaction.from_record(t) for t in transactions),
            invoices=tuple(Invoice.from_record(i) for i in invoices),
        )
