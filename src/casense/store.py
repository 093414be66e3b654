# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Record store for CAsense.

This module provides all low-level accessors for the flat JSON document
that holds the application's records. It is responsible for:

- Initializing the document on disk when it does not exist yet.
- Listing the full current snapshot of each record kind.
- Creating records and assigning their identifiers.
- Updating records through a shallow merge of the supplied fields.
- Deleting records by identifier.

The store is the single source of truth for clients, transactions and
invoices. It is intentionally permissive: it stores records exactly as it
receives them and never re-validates business fields. Validation is the
job of `records_service.py`.

------------------------------------------------------------------------------
Document layout
------------------------------------------------------------------------------

    {
        "clients":      [ {...}, ... ],
        "transactions": [ {...}, ... ],
        "invoices":     [ {...}, ... ]
    }

Records keep the wire field names used by the REST API (camelCase, e.g.
``clientId``, ``businessType``, ``dueDate``, ``paymentMethod``).

Every record carries an ``id``: an opaque string derived from the creation
timestamp in milliseconds, unique within its kind. The ``id`` is immutable:
updates never change it, even when the payload carries another value.

Kind-specific defaults applied on create:
- transactions: ``date`` defaults to today's ISO date when missing.
- invoices: ``createdAt`` is set to the current UTC timestamp.

------------------------------------------------------------------------------
Storage notes
------------------------------------------------------------------------------

- A missing or unreadable document is treated as an empty document, so a
  fresh installation starts with no records instead of failing.
- Writes go to a temporary file that then replaces the document, so a
  crash never leaves a half-written file behind.
- The store is single-writer; no locking is performed.
"""

from __future__ import annotations

import json
import os
import tempfile
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Literal

from .logging_config import get_logger

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Dataclasses and type aliases
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StoreConfig:
    """
    Record store configuration for CAsense.

    Attributes
    ----------
    engine:
        Store engine identifier. Only "json" is supported.
    path:
        Path to the JSON document.
    """

    engine: str
    path: Path


RecordKind = Literal["clients", "transactions", "invoices"]
"""
Type alias for the three kinds of persisted records.
"""

RECORD_KINDS: tuple[str, ...] = ("clients", "transactions", "invoices")


class UnsupportedStoreError(ValueError):
    """Raised when the configuration refers to an unknown store engine."""


class RecordNotFoundError(KeyError):
    """Raised when a record id does not exist for the requested kind."""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(record_id)
        self.kind = kind
        self.record_id = record_id

    def __str__(self) -> str:
        label = _singular(self.kind).capitalize()
        return f"{label} not found"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _singular(kind: str) -> str:
    return kind[:-1] if kind.endswith("s") else kind


def _ensure_json(cfg: StoreConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "json":
        msg = (
            f"Unsupported store engine: {cfg.engine!r}. "
            "Only 'json' is supported for now."
        )
        raise UnsupportedStoreError(msg)


def _ensure_kind(kind: str) -> None:
    if kind not in RECORD_KINDS:
        raise ValueError(
            f"Unknown record kind: {kind!r}. Expected one of: "
            f"{', '.join(RECORD_KINDS)}."
        )


def _empty_document() -> dict[str, list[dict[str, Any]]]:
    return {kind: [] for kind in RECORD_KINDS}


def _load_document(cfg: StoreConfig) -> dict[str, list[dict[str, Any]]]:
    """
    Read the JSON document from disk.

    Missing kinds are added as empty lists. A missing, unreadable or
    malformed file yields an empty document.
    """
    _ensure_json(cfg)

    try:
        raw = json.loads(cfg.path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return _empty_document()
    except (OSError, ValueError) as exc:
        logger.warning("store_document_unreadable", path=str(cfg.path), error=str(exc))
        return _empty_document()

    if not isinstance(raw, Mapping):
        logger.warning("store_document_invalid_root", path=str(cfg.path))
        return _empty_document()

    document = _empty_document()
    for kind in RECORD_KINDS:
        records = raw.get(kind) or []
        if isinstance(records, list):
            document[kind] = [dict(r) for r in records if isinstance(r, Mapping)]
    return document


def _save_document(cfg: StoreConfig, document: Mapping[str, Any]) -> None:
    """Write the document atomically (temporary file + replace)."""
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{cfg.path.name}.", suffix=".tmp", dir=cfg.path.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(document, fh, indent=2, ensure_ascii=False)
        os.replace(tmp_name, cfg.path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _now_utc_iso() -> str:
    """Return the current UTC datetime as ISO string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _new_record_id(existing: list[dict[str, Any]]) -> str:
    """
    Return a millisecond-timestamp id that is not used yet in `existing`.

    Two records created within the same millisecond get consecutive ids.
    """
    used = {str(r.get("id")) for r in existing}
    candidate = int(time.time() * 1000)
    while str(candidate) in used:
        candidate += 1
    return str(candidate)


def _find_index(records: list[dict[str, Any]], record_id: str) -> int:
    for index, record in enumerate(records):
        if str(record.get("id")) == str(record_id):
            return index
    return -1


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def init_store(cfg: StoreConfig) -> None:
    """
    Initialize the JSON document if needed.

    - Creates the parent directory and an empty document when the file does
      not exist.
    - This function is idempotent: calling it multiple times is safe and
      never overwrites existing records.

    Raises
    ------
    UnsupportedStoreError
        If cfg.engine is not supported.
    """
    _ensure_json(cfg)
    if cfg.path.exists():
        return
    _save_document(cfg, _empty_document())
    logger.info("store_initialized", path=str(cfg.path))


def list_records(cfg: StoreConfig, kind: RecordKind) -> list[dict[str, Any]]:
    """
    Return the full current snapshot of one record kind.

    The returned dictionaries are copies; mutating them does not affect
    the stored document.
    """
    _ensure_kind(kind)
    document = _load_document(cfg)
    return [dict(r) for r in document[kind]]


def list_clients(cfg: StoreConfig) -> list[dict[str, Any]]:
    return list_records(cfg, "clients")


def list_transactions(cfg: StoreConfig) -> list[dict[str, Any]]:
    return list_records(cfg, "transactions")


def list_invoices(cfg: StoreConfig) -> list[dict[str, Any]]:
    return list_records(cfg, "invoices")


def has_records(cfg: StoreConfig) -> bool:
    """
    Return True if the store contains at least one record of any kind.

    Useful to warn the user when the dashboard is requested on an empty store.
    """
    document = _load_document(cfg)
    return any(document[kind] for kind in RECORD_KINDS)


def get_record(cfg: StoreConfig, kind: RecordKind, record_id: str) -> dict[str, Any]:
    """
    Return a single record by id.

    Raises
    ------
    RecordNotFoundError
        If no record of this kind has the given id.
    """
    _ensure_kind(kind)
    records = _load_document(cfg)[kind]
    index = _find_index(records, record_id)
    if index == -1:
        raise RecordNotFoundError(kind, record_id)
    return dict(records[index])


def create_record(
    cfg: StoreConfig,
    kind: RecordKind,
    payload: Mapping[str, Any],
) -> dict[str, Any]:
    """
    Create a new record and return it with its assigned id.

    Parameters
    ----------
    cfg:
        Store configuration.
    kind:
        Record kind ("clients", "transactions" or "invoices").
    payload:
        Record fields. Any ``id`` in the payload is replaced by the
        store-assigned id.

    Returns
    -------
    dict
        The stored record.
    """
    _ensure_kind(kind)
    document = _load_document(cfg)
    records = document[kind]

    record = dict(payload)
    record["id"] = _new_record_id(records)

    if kind == "transactions" and not record.get("date"):
        record["date"] = date.today().isoformat()
    if kind == "invoices":
        record["createdAt"] = _now_utc_iso()

    records.append(record)
    _save_document(cfg, document)

    logger.info("store_record_created", kind=kind, record_id=record["id"])
    return dict(record)


def update_record(
    cfg: StoreConfig,
    kind: RecordKind,
    record_id: str,
    changes: Mapping[str, Any],
) -> dict[str, Any]:
    """
    Apply a shallow merge to an existing record.

    Fields present in `changes` overwrite the stored ones; absent fields are
    retained. The ``id`` field is never changed.

    Raises
    ------
    RecordNotFoundError
        If no record of this kind has the given id.
    """
    _ensure_kind(kind)
    document = _load_document(cfg)
    records = document[kind]

    index = _find_index(records, record_id)
    if index == -1:
        raise RecordNotFoundError(kind, record_id)

    updated = {**records[index], **dict(changes)}
    updated["id"] = records[index]["id"]
    records[index] = updated
    _save_document(cfg, document)

    logger.info("store_record_updated", kind=kind, record_id=updated["id"])
    return dict(updated)


def delete_record(cfg: StoreConfig, kind: RecordKind, record_id: str) -> None:
    """
    Delete a record by id.

    Deleting a client does not cascade to its transactions or invoices.

    Raises
    ------
    RecordNotFoundError
        If no record of this kind has the given id.
    """
    _ensure_kind(kind)
    document = _load_document(cfg)
    records = document[kind]

    index = _find_index(records, record_id)
    if index == -1:
        raise RecordNotFoundError(kind, record_id)

    del records[index]
    _save_document(cfg, document)

    logger.info("store_record_deleted", kind=kind, record_id=str(record_id))
