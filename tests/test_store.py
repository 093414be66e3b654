import json
from datetime import date

import pytest

from casense.store import (
    RecordNotFoundError,
    StoreConfig,
    UnsupportedStoreError,
    create_record,
    delete_record,
    get_record,
    has_records,
    init_store,
    list_clients,
    list_invoices,
    list_records,
    list_transactions,
    update_record,
)


def make_tmp_store_cfg(tmp_path) -> StoreConfig:
    """Helper to build a StoreConfig pointing to a temporary JSON file."""
    return StoreConfig(engine="json", path=tmp_path / "data" / "casense.json")


def test_init_store_creates_empty_document(tmp_path):
    cfg = make_tmp_store_cfg(tmp_path)

    assert not cfg.path.exists()
    init_store(cfg)
    assert cfg.path.exists()

    document = json.loads(cfg.path.read_text(encoding="utf-8"))
    assert document == {"clients": [], "transactions": [], "invoices": []}
    assert has_records(cfg) is False


def test_init_store_is_idempotent(tmp_path):
    cfg = make_tmp_store_cfg(tmp_path)
    init_store(cfg)
    create_record(cfg, "clients", {"name": "Acme"})

    init_store(cfg)

    assert len(list_clients(cfg)) == 1


def test_unsupported_engine(tmp_path):
    cfg = StoreConfig(engine="sqlite", path=tmp_path / "x.db")
    with pytest.raises(UnsupportedStoreError):
        init_store(cfg)


def test_create_assigns_unique_ids(tmp_path):
    cfg = make_tmp_store_cfg(tmp_path)
    init_store(cfg)

    ids = {create_record(cfg, "clients", {"name": f"C{i}", "id": "forced"})["id"] for i in range(5)}

    assert len(ids) == 5
    assert "forced" not in ids
    assert all(i.isdigit() for i in ids)


def test_create_transaction_defaults_date_to_today(tmp_path):
    cfg = make_tmp_store_cfg(tmp_path)
    record = create_record(cfg, "transactions", {"type": "income", "amount": 10})

    assert record["date"] == date.today().isoformat()
    assert list_transactions(cfg) == [record]


def test_create_invoice_sets_created_at(tmp_path):
    cfg = make_tmp_store_cfg(tmp_path)
    record = create_record(cfg, "invoices", {"number": "INV-0001"})

    assert "createdAt" in record
    assert list_invoices(cfg)[0]["createdAt"] == record["createdAt"]


def test_update_is_shallow_merge_and_keeps_id(tmp_path):
    cfg = make_tmp_store_cfg(tmp_path)
    created = create_record(cfg, "clients", {"name": "Acme", "email": "a@acme.test"})

    updated = update_record(cfg, "clients", created["id"], {"name": "Acme Ltd", "id": "other"})

    assert updated["id"] == created["id"]
    assert updated["name"] == "Acme Ltd"
    assert updated["email"] == "a@acme.test"
    assert get_record(cfg, "clients", created["id"]) == updated


def test_update_and_delete_unknown_id(tmp_path):
    cfg = make_tmp_store_cfg(tmp_path)
    init_store(cfg)

    with pytest.raises(RecordNotFoundError) as excinfo:
        update_record(cfg, "clients", "nope", {"name": "X"})
    assert str(excinfo.value) == "Client not found"

    with pytest.raises(RecordNotFoundError):
        delete_record(cfg, "invoices", "nope")


def test_delete_removes_only_that_record(tmp_path):
    cfg = make_tmp_store_cfg(tmp_path)
    a = create_record(cfg, "clients", {"name": "A"})
    b = create_record(cfg, "clients", {"name": "B"})
    create_record(cfg, "transactions", {"clientId": a["id"], "amount": 5})

    delete_record(cfg, "clients", a["id"])

    assert [c["id"] for c in list_clients(cfg)] == [b["id"]]
    # No cascade to dependent records.
    assert list_transactions(cfg)[0]["clientId"] == a["id"]


def test_corrupt_document_reads_as_empty(tmp_path):
    cfg = make_tmp_store_cfg(tmp_path)
    cfg.path.parent.mkdir(parents=True)
    cfg.path.write_text("{not json", encoding="utf-8")

    assert list_records(cfg, "clients") == []
    assert has_records(cfg) is False


def test_unknown_kind_is_rejected(tmp_path):
    cfg = make_tmp_store_cfg(tmp_path)
    with pytest.raises(ValueError):
        list_records(cfg, "payments")
