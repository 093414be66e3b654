import json

import pytest

from casense import __version__
from casense.cli import main
from casense.config import default_app_config
from casense.records_service import load_snapshot


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Run the CLI from an empty directory so built-in defaults apply."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def snapshot(workspace):
    return load_snapshot(default_app_config(workspace))


def test_version(capsys):
    main(["--version"])
    assert capsys.readouterr().out.strip() == f"casense version {__version__}"


def test_no_command_prints_help(workspace, capsys):
    main([])
    assert "usage:" in capsys.readouterr().out


def test_missing_explicit_config_exits(workspace):
    with pytest.raises(SystemExit, match="Configuration error"):
        main(["--config", "missing.toml", "compliance"])


def test_clients_add_list_delete(workspace, capsys):
    main(["clients", "add", "--name", "Acme", "--business-type", "llp"])
    out = capsys.readouterr().out
    assert out.startswith("Client created:")

    record = json.loads(out.split(":", 1)[1])
    assert record["name"] == "Acme"

    main(["clients", "list"])
    assert "Acme" in capsys.readouterr().out

    main(["clients", "delete", record["id"]])
    assert snapshot(workspace).clients == ()


def test_unknown_client_exits_with_error(workspace):
    with pytest.raises(SystemExit, match="Error: Client not found"):
        main(["clients", "delete", "nope"])


def test_invalid_transaction_exits_with_messages(workspace):
    with pytest.raises(SystemExit, match="Please enter a valid amount"):
        main(
            [
                "transactions", "add",
                "--date", "2025-01-01",
                "--client-id", "c1",
                "--type", "income",
                "--amount", "0",
            ]
        )
    assert snapshot(workspace).transactions == ()


def test_transactions_add_and_report(workspace, capsys):
    for tx_type, category, amount in [("income", "Fees", "1000"), ("expense", "Rent", "400")]:
        main(
            [
                "transactions", "add",
                "--date", "2025-01-10",
                "--client-id", "c1",
                "--type", tx_type,
                "--category", category,
                "--amount", amount,
            ]
        )
    capsys.readouterr()

    main(["report", "pl", "--from-date", "2025-01-01", "--to-date", "2025-01-31"])
    out = capsys.readouterr().out

    assert "Profit & Loss Statement" in out
    assert "Net Profit" in out
    assert "600.0" in out


def test_report_requires_both_dates(workspace):
    with pytest.raises(SystemExit, match="Please select a date range"):
        main(["report", "trial-balance", "--from-date", "2025-01-01"])


def test_report_without_records_warns(workspace, capsys):
    main(["report", "cash-flow", "--from-date", "2025-01-01", "--to-date", "2025-01-31"])
    assert "Warning: no records yet" in capsys.readouterr().out


def test_transactions_import(workspace, capsys):
    csv_path = workspace / "tx.csv"
    csv_path.write_text(
        "date,type,category,description,amount\n"
        "2025-01-01,income,Fees,Audit,1000\n"
        "2025-01-02,expense,Rent,Office,0\n",
        encoding="utf-8",
    )

    main(["transactions", "import", str(csv_path), "--client-id", "c1"])

    assert "Imported 1 transactions, skipped 1 invalid rows." in capsys.readouterr().out
    assert len(snapshot(workspace).transactions) == 1


def test_invoices_add_and_pay(workspace, capsys):
    main(
        [
            "invoices", "add",
            "--client-id", "c1",
            "--item", "Audit:1:1000:18",
            "--item", "Filing:2:250",
        ]
    )
    capsys.readouterr()

    invoice = snapshot(workspace).invoices[0]
    assert invoice.number == "INV-0001"
    assert invoice.total == pytest.approx(1680)

    main(["invoices", "pay", invoice.id])
    assert "INV-0001 marked as paid" in capsys.readouterr().out
    assert snapshot(workspace).invoices[0].is_paid


def test_invalid_invoice_item_exits(workspace):
    with pytest.raises(SystemExit, match="Invalid item"):
        main(["invoices", "add", "--client-id", "c1", "--item", "Audit-1000"])


def test_tax_gst(workspace, capsys):
    main(["tax", "gst", "--base", "1000"])
    out = capsys.readouterr().out

    assert "GST (18%)" in out
    assert "₹1,180" in out


def test_tax_income_old_regime(workspace, capsys):
    main(["tax", "income", "--income", "250000", "--regime", "old"])
    out = capsys.readouterr().out

    assert "Regime:          old" in out
    assert "Total tax:       ₹0" in out


def test_insights_and_compliance_tables(workspace, capsys):
    main(["insights"])
    assert "Getting Started" in capsys.readouterr().out

    main(["compliance"])
    assert "GST Return Filing (GSTR-3B)" in capsys.readouterr().out


def test_csv_display_mode_writes_files(workspace, capsys):
    out_dir = workspace / "exports"

    main(["--display-mode", "csv", "--output", str(out_dir), "dashboard", "--period", "month"])

    files = list(out_dir.glob("dashboard_*.csv"))
    assert len(files) == 1
    assert "=== Dashboard ===" not in capsys.readouterr().out


def test_invoices_show_prints_header_and_items(workspace, capsys):
    main(["clients", "add", "--name", "Acme", "--business-type", "llp", "--email", "a@acme.test"])
    client_id = snapshot(workspace).clients[0].id
    main(
        [
            "invoices", "add",
            "--client-id", client_id,
            "--date", "2025-01-10",
            "--item", "Audit:1:1000:18",
        ]
    )
    capsys.readouterr()

    invoice = snapshot(workspace).invoices[0]
    main(["invoices", "show", invoice.id])
    out = capsys.readouterr().out

    assert "Invoice #INV-0001" in out
    assert "Bill to:   Acme" in out
    assert "a@acme.test" in out
    assert "Due date:  2025-02-09" in out
    assert "Audit" in out
    assert "₹1,180" in out


def test_invoices_show_unknown_id(workspace):
    with pytest.raises(SystemExit, match="Error: Invoice not found"):
        main(["invoices", "show", "nope"])
