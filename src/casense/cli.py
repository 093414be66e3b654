# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for CAsense.

This module wires together the main building blocks of CAsense:

- global configuration (store, business defaults, tax, display, logging),
- the JSON record store and the records service (validation & CRUD),
- the computation core (periods, reports, tax, insights, dashboard),
- view helpers (tabular rendering and CSV export).

The CLI is intentionally thin: it does not implement accounting or
financial logic itself. It orchestrates the underlying modules based on
command-line arguments and configuration files.


Configuration and overrides
---------------------------

By default, the CLI reads the main configuration from a TOML file named
``casense_config.toml`` in the current working directory, and falls back
to built-in defaults when that file does not exist. You can override this
path using:

    --config PATH

Display options can be overridden without editing the configuration:

    --display-mode {table,csv,both}
    --output DIR


Commands
--------

dashboard
    Revenue, expenses, profit, active clients, pending invoices and the
    estimated tax liability for a named period:

        python -m casense.cli dashboard --period quarter

report KIND --from-date YYYY-MM-DD --to-date YYYY-MM-DD
    One of: pl, balance-sheet, cash-flow, trial-balance. Both dates are
    required and inclusive:

        python -m casense.cli report trial-balance \\
            --from-date 2024-04-01 --to-date 2025-03-31

tax gst --base AMOUNT [--rate PCT]
tax income --income AMOUNT [--regime old|new]
    GST and income tax calculators.

insights [--category profit|cost|growth|risk|cash-flow]
    Rule-based insights over the whole record set.

compliance
    Statutory compliance calendar with countdowns.

clients list | add | update ID | delete ID
transactions list | add | update ID | delete ID | import CSV_PATH
invoices list | add | show ID | pay ID | delete ID
    Record management. Validation errors and unknown ids are reported on
    stderr with exit code 1.

serve [--host HOST] [--port PORT]
    Run the REST API with uvicorn.


Output
------

Tabular results are printed to stdout in 'table' mode and written as
``<name>_YYYY-MM-DD-HH-MM-SS.csv`` files under the output directory in
'csv' mode ('both' does both).
"""

import argparse
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from . import __version__
from .compliance import compliance_calendar
from .config import AppConfig, load_app_config
from .dashboard import compute_dashboard
from .formatting import format_currency
from .insights import INSIGHT_CATEGORIES, insights_for_snapshot
from .io import transactions_frame
from .logging_config import configure_logging
from .models import BUSINESS_TYPES, TRANSACTION_TYPES
from .periods import (
    PERIOD_NAMES,
    filter_transactions_by_period,
    period_from_dates,
    resolve_period,
)
from .records_service import (
    ValidationError,
    create_client,
    create_invoice,
    create_transaction,
    delete_client,
    delete_invoice,
    delete_transaction,
    edit_client,
    edit_transaction,
    get_invoice,
    import_transactions,
    invoice_status,
    load_snapshot,
    mark_invoice_paid,
)
from .reports import REPORT_KINDS, generate_report
from .store import RecordNotFoundError, has_records, init_store
from .tax import REGIMES, calculate_gst, calculate_income_tax
from .views import (
    compliance_to_dataframe,
    dashboard_to_dataframe,
    insights_to_dataframe,
    invoice_items_to_dataframe,
    invoices_to_display_frame,
    report_to_dataframe,
    transactions_to_display_frame,
)


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m casense.cli",
        description=(
            "CAsense - Practice management & financial insights for accounting "
            "professionals. Manages clients, transactions and invoices and "
            "derives dashboards, financial reports, tax estimates and insights."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of casense and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the main TOML configuration file. "
            "If omitted, 'casense_config.toml' in the current directory is used."
        ),
    )
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "both"],
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, "
            "'csv' writes CSV files only, "
            "'both' does both."
        ),
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help=(
            "Output directory where CSV files will be written when display "
            "mode includes 'csv'. If omitted, display.output_dir is used."
        ),
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    # dashboard ---------------------------------------------------------
    dashboard = subparsers.add_parser("dashboard", help="Show dashboard figures.")
    dashboard.add_argument(
        "--period",
        choices=list(PERIOD_NAMES),
        help="Named period. If omitted, business.default_period is used.",
    )

    # report ------------------------------------------------------------
    report = subparsers.add_parser("report", help="Generate a financial report.")
    report.add_argument("kind", choices=list(REPORT_KINDS))
    report.add_argument("--from-date", dest="from_date", help="Start date (YYYY-MM-DD).")
    report.add_argument("--to-date", dest="to_date", help="End date (YYYY-MM-DD).")

    # tax ---------------------------------------------------------------
    tax = subparsers.add_parser("tax", help="GST and income tax calculators.")
    tax_sub = tax.add_subparsers(dest="tax_command", metavar="tax-command")

    tax_gst = tax_sub.add_parser("gst", help="Compute GST on a base amount.")
    tax_gst.add_argument("--base", type=float, required=True)
    tax_gst.add_argument("--rate", type=float, help="GST rate in percent.")

    tax_income = tax_sub.add_parser("income", help="Compute annual income tax.")
    tax_income.add_argument("--income", type=float, required=True)
    tax_income.add_argument("--regime", choices=list(REGIMES))

    # insights ----------------------------------------------------------
    insights = subparsers.add_parser("insights", help="Show business insights.")
    insights.add_argument(
        "--category",
        choices=list(INSIGHT_CATEGORIES),
        help="Insight category (default: profit).",
    )

    # compliance --------------------------------------------------------
    subparsers.add_parser("compliance", help="Show the compliance calendar.")

    # clients -----------------------------------------------------------
    clients = subparsers.add_parser("clients", help="Manage clients.")
    clients_sub = clients.add_subparsers(dest="clients_command", metavar="clients-command")
    clients_sub.add_parser("list", help="List clients.")

    clients_add = clients_sub.add_parser("add", help="Add a client.")
    _add_client_arguments(clients_add, required=True)

    clients_update = clients_sub.add_parser("update", help="Update a client.")
    clients_update.add_argument("record_id")
    _add_client_arguments(clients_update, required=False)

    clients_delete = clients_sub.add_parser("delete", help="Delete a client.")
    clients_delete.add_argument("record_id")

    # transactions ------------------------------------------------------
    transactions = subparsers.add_parser("transactions", help="Manage transactions.")
    tx_sub = transactions.add_subparsers(
        dest="transactions_command", metavar="transactions-command"
    )
    tx_sub.add_parser("list", help="List transactions.")

    tx_add = tx_sub.add_parser("add", help="Add a transaction.")
    _add_transaction_arguments(tx_add, required=True)

    tx_update = tx_sub.add_parser("update", help="Update a transaction.")
    tx_update.add_argument("record_id")
    _add_transaction_arguments(tx_update, required=False)

    tx_delete = tx_sub.add_parser("delete", help="Delete a transaction.")
    tx_delete.add_argument("record_id")

    tx_import = tx_sub.add_parser("import", help="Import transactions from CSV.")
    tx_import.add_argument("csv_path")
    tx_import.add_argument(
        "--client-id",
        dest="client_id",
        help="Client id used for rows without a client column.",
    )

    # invoices ----------------------------------------------------------
    invoices = subparsers.add_parser("invoices", help="Manage invoices.")
    inv_sub = invoices.add_subparsers(dest="invoices_command", metavar="invoices-command")
    inv_sub.add_parser("list", help="List invoices.")

    inv_add = inv_sub.add_parser("add", help="Create an invoice.")
    inv_add.add_argument("--client-id", dest="client_id", required=True)
    inv_add.add_argument("--number", help="Invoice number (default: next INV-xxxx).")
    inv_add.add_argument("--date", help="Issue date (YYYY-MM-DD, default: today).")
    inv_add.add_argument("--due-date", dest="due_date", help="Due date (YYYY-MM-DD).")
    inv_add.add_argument(
        "--item",
        dest="items",
        action="append",
        default=[],
        metavar="DESCRIPTION:QUANTITY:RATE[:TAX]",
        help="Line item; can be repeated.",
    )

    inv_show = inv_sub.add_parser("show", help="Show an invoice with its line items.")
    inv_show.add_argument("record_id")

    inv_pay = inv_sub.add_parser("pay", help="Mark an invoice as paid.")
    inv_pay.add_argument("record_id")

    inv_delete = inv_sub.add_parser("delete", help="Delete an invoice.")
    inv_delete.add_argument("record_id")

    # serve -------------------------------------------------------------
    serve = subparsers.add_parser("serve", help="Run the REST API.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=3000)

    return ap


def _add_client_arguments(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--name", required=required)
    parser.add_argument(
        "--business-type",
        dest="businessType",
        choices=list(BUSINESS_TYPES),
        required=required,
    )
    for option in ("gstin", "pan", "email", "phone", "address"):
        parser.add_argument(f"--{option}")


def _add_transaction_arguments(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--date", help="Transaction date (YYYY-MM-DD).")
    parser.add_argument("--client-id", dest="clientId", required=required)
    parser.add_argument("--type", choices=list(TRANSACTION_TYPES), required=required)
    parser.add_argument("--category")
    parser.add_argument("--description")
    parser.add_argument("--amount", required=required)
    parser.add_argument("--payment-method", dest="paymentMethod")
    parser.add_argument("--reference")


_CLIENT_FIELDS = ("name", "businessType", "gstin", "pan", "email", "phone", "address")
_TRANSACTION_FIELDS = (
    "date",
    "clientId",
    "type",
    "category",
    "description",
    "amount",
    "paymentMethod",
    "reference",
)


def _payload_from_args(args: argparse.Namespace, fields: tuple[str, ...]) -> dict[str, Any]:
    """Collect the record fields actually supplied on the command line."""
    return {
        name: getattr(args, name)
        for name in fields
        if getattr(args, name, None) is not None
    }


def _parse_item(raw: str) -> dict[str, Any]:
    """
    Parse a DESCRIPTION:QUANTITY:RATE[:TAX] line item.

    Raises
    ------
    SystemExit
        If the item does not have 3 or 4 fields.
    """
    parts = raw.split(":")
    if len(parts) not in (3, 4):
        msg = f"Invalid item: {raw!r}. Expected DESCRIPTION:QUANTITY:RATE[:TAX]."
        raise SystemExit(msg)
    item = {"description": parts[0], "quantity": parts[1], "rate": parts[2]}
    item["tax"] = parts[3] if len(parts) == 4 else 0
    return item


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _render(
    frames: list[tuple[str, str, pd.DataFrame]],
    display_mode: str,
    output_dir: Path,
) -> None:
    """
    Render (title, file stem, frame) triples as console tables and/or CSV.
    """
    if display_mode in {"table", "both"}:
        for title, _, df in frames:
            print()
            print(f"=== {title} ===")
            if df.empty:
                print("(no rows)")
            else:
                print(df.to_string(index=False))

    if display_mode in {"csv", "both"}:
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        for _, stem, df in frames:
            path = output_dir / f"{stem}_{timestamp}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


def _print_record(label: str, record: dict[str, Any]) -> None:
    print(f"{label}:")
    print(json.dumps(record, indent=2, ensure_ascii=False))


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _handle_dashboard(args: argparse.Namespace, config: AppConfig, render) -> None:
    period = resolve_period(args.period or config.default_period)
    summary = compute_dashboard(load_snapshot(config), period, config.tax.liability_rate)

    print(
        f"Applied period: {period.label} "
        f"({period.start.date().isoformat()} → {period.end.date().isoformat()})"
    )
    render([("Dashboard", "dashboard", dashboard_to_dataframe(summary, config.currency))])


def _handle_report(args: argparse.Namespace, config: AppConfig, render) -> None:
    try:
        period = period_from_dates(args.from_date, args.to_date)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    tx = filter_transactions_by_period(
        transactions_frame(load_snapshot(config).transactions), period
    )
    report = generate_report(args.kind, tx)
    if report is None:
        print("Report type not implemented yet.")
        return

    print(f"Applied period: {period.label}")
    stem = args.kind.replace("-", "_")
    render([(report.title, stem, report_to_dataframe(report))])


def _handle_tax(args: argparse.Namespace, config: AppConfig) -> None:
    currency = config.currency
    if args.tax_command == "gst":
        rate = args.rate if args.rate is not None else config.tax.gst_rate
        result = calculate_gst(args.base, rate)
        print(f"Base amount:  {format_currency(result.base, currency)}")
        print(f"GST ({result.rate:g}%):    {format_currency(result.gst_amount, currency)}")
        print(f"Total:        {format_currency(result.total, currency)}")
    elif args.tax_command == "income":
        regime = args.regime or config.tax.default_regime
        result = calculate_income_tax(args.income, regime)
        print(f"Regime:          {result.regime}")
        print(f"Taxable income:  {format_currency(result.taxable_income, currency)}")
        print(f"Tax payable:     {format_currency(result.tax, currency)}")
        print(f"Cess (4%):       {format_currency(result.cess, currency)}")
        print(f"Total tax:       {format_currency(result.total_tax, currency)}")
    else:
        print("No tax subcommand specified. Available subcommands are: 'gst', 'income'.")


def _handle_insights(args: argparse.Namespace, config: AppConfig, render) -> None:
    insights = insights_for_snapshot(
        load_snapshot(config), args.category, currency=config.currency
    )
    render([("Insights", "insights", insights_to_dataframe(insights))])


def _handle_compliance(config: AppConfig, render) -> None:
    items = compliance_calendar(due_soon_days=config.due_soon_days)
    render([("Compliance calendar", "compliance", compliance_to_dataframe(items))])


def _handle_clients(args: argparse.Namespace, config: AppConfig, render) -> None:
    subcmd = args.clients_command
    if subcmd == "list":
        snapshot = load_snapshot(config)
        df = pd.DataFrame(
            [
                {
                    "id": c.id,
                    "name": c.name,
                    "business_type": c.business_type,
                    "gstin": c.gstin,
                    "email": c.email,
                    "phone": c.phone,
                }
                for c in snapshot.clients
            ],
            columns=["id", "name", "business_type", "gstin", "email", "phone"],
        )
        render([("Clients", "clients", df)])
    elif subcmd == "add":
        payload = _payload_from_args(args, _CLIENT_FIELDS)
        _print_record("Client created", create_client(config, payload))
    elif subcmd == "update":
        changes = _payload_from_args(args, _CLIENT_FIELDS)
        _print_record("Client updated", edit_client(config, args.record_id, changes))
    elif subcmd == "delete":
        delete_client(config, args.record_id)
        print(f"Client {args.record_id} deleted.")
    else:
        print(
            "No clients subcommand specified. "
            "Available subcommands are: 'list', 'add', 'update', 'delete'."
        )


def _handle_transactions(args: argparse.Namespace, config: AppConfig, render) -> None:
    subcmd = args.transactions_command
    if subcmd == "list":
        df = transactions_to_display_frame(load_snapshot(config), config.currency)
        render([("Transactions", "transactions", df)])
    elif subcmd == "add":
        payload = _payload_from_args(args, _TRANSACTION_FIELDS)
        _print_record("Transaction created", create_transaction(config, payload))
    elif subcmd == "update":
        changes = _payload_from_args(args, _TRANSACTION_FIELDS)
        _print_record(
            "Transaction updated", edit_transaction(config, args.record_id, changes)
        )
    elif subcmd == "delete":
        delete_transaction(config, args.record_id)
        print(f"Transaction {args.record_id} deleted.")
    elif subcmd == "import":
        csv_path = Path(args.csv_path)
        if not csv_path.is_file():
            raise SystemExit(f"CSV file not found: {csv_path}")
        print(f"Importing transactions from {csv_path}...")
        try:
            created, skipped = import_transactions(config, csv_path, args.client_id)
        except ValueError as exc:
            raise SystemExit(str(exc)) from exc
        print(f"Imported {len(created)} transactions, skipped {skipped} invalid rows.")
    else:
        print(
            "No transactions subcommand specified. Available subcommands are: "
            "'list', 'add', 'update', 'delete', 'import'."
        )


def _show_invoice(invoice_id: str, config: AppConfig, render) -> None:
    invoice = get_invoice(config, invoice_id)
    snapshot = load_snapshot(config)
    client = next((c for c in snapshot.clients if c.id == invoice.client_id), None)

    print(f"Invoice #{invoice.number}")
    print(f"Bill to:   {client.name if client else 'N/A'}")
    if client is not None:
        for line in (client.address, client.email, client.phone):
            if line:
                print(f"           {line}")
    print(f"Date:      {invoice.date.isoformat() if invoice.date else ''}")
    print(f"Due date:  {invoice.due_date.isoformat() if invoice.due_date else ''}")
    print(f"Status:    {invoice_status(invoice).upper()}")

    stem = f"invoice_{invoice.number or invoice.id}"
    render([("Items", stem, invoice_items_to_dataframe(invoice, config.currency))])


def _handle_invoices(args: argparse.Namespace, config: AppConfig, render) -> None:
    subcmd = args.invoices_command
    if subcmd == "list":
        df = invoices_to_display_frame(load_snapshot(config), currency=config.currency)
        render([("Invoices", "invoices", df)])
    elif subcmd == "add":
        payload = {
            "clientId": args.client_id,
            "number": args.number,
            "date": args.date,
            "dueDate": args.due_date,
            "items": [_parse_item(raw) for raw in args.items],
        }
        _print_record("Invoice created", create_invoice(config, payload))
    elif subcmd == "show":
        _show_invoice(args.record_id, config, render)
    elif subcmd == "pay":
        invoice = mark_invoice_paid(config, args.record_id)
        print(f"Invoice {invoice.get('number') or invoice['id']} marked as paid.")
    elif subcmd == "delete":
        delete_invoice(config, args.record_id)
        print(f"Invoice {args.record_id} deleted.")
    else:
        print(
            "No invoices subcommand specified. "
            "Available subcommands are: 'list', 'add', 'show', 'pay', 'delete'."
        )


def _handle_serve(args: argparse.Namespace, config: AppConfig) -> None:
    import uvicorn

    from .api import create_app

    uvicorn.run(create_app(config), host=args.host, port=args.port)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the CAsense CLI.

    This function parses command-line arguments, loads the application
    configuration, configures logging, initializes the record store and
    dispatches to the requested command. Validation errors and unknown
    record ids terminate the program with exit code 1.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"casense version {__version__}")
        return

    # 1) Load application configuration.
    try:
        if args.config_path:
            config = load_app_config(args.config_path)
        else:
            config = load_app_config()
    except (FileNotFoundError, ValueError) as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc

    configure_logging(config.logging.level, config.logging.format)

    # 2) Initialize the record store (create the JSON document if needed).
    init_store(config.store)

    command = args.command
    if command is None:
        parser.print_help()
        return

    if command in {"dashboard", "report", "insights"} and not has_records(config.store):
        print("Warning: no records yet. Add clients and transactions first.")

    # 3) Resolve display options: config values overridden by CLI if provided.
    display_mode = args.display_mode or config.display_mode
    output_dir = Path(args.output_dir) if args.output_dir else config.output_dir

    def render(frames: list[tuple[str, str, pd.DataFrame]]) -> None:
        _render(frames, display_mode, output_dir)

    try:
        if command == "dashboard":
            _handle_dashboard(args, config, render)
        elif command == "report":
            _handle_report(args, config, render)
        elif command == "tax":
            _handle_tax(args, config)
        elif command == "insights":
            _handle_insights(args, config, render)
        elif command == "compliance":
            _handle_compliance(config, render)
        elif command == "clients":
            _handle_clients(args, config, render)
        elif command == "transactions":
            _handle_transactions(args, config, render)
        elif command == "invoices":
            _handle_invoices(args, config, render)
        elif command == "serve":
            _handle_serve(args, config)
    except ValidationError as exc:
        raise SystemExit("Error: " + "; ".join(exc.messages)) from exc
    except RecordNotFoundError as exc:
        raise SystemExit(f"Error: {exc}") from exc


if __name__ == "__main__":
    main()
