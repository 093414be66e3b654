# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
REST API for CAsense (FastAPI).

``create_app(config)`` builds the application. Every response is a JSON
envelope ``{"success": bool, <entity or payload>, "message"?: str}``.

Records
-------
    GET    /api/clients              -> {success, clients}
    POST   /api/clients              -> 201 {success, client}
    PUT    /api/clients/{id}         -> {success, client}      404 if unknown
    DELETE /api/clients/{id}         -> {success}              404 if unknown

The same four routes exist for ``transactions`` and ``invoices``. Creates
and client/transaction updates are validated (400 with the messages on
failure). Invoice updates are a plain shallow merge, which is how an
invoice is marked paid (``{"status": "paid"}``).

Analysis
--------
    GET /api/health
    GET /api/ai-insights                       totals over all records
    GET /api/insights?category=
    GET /api/dashboard?period=
    GET /api/reports/{kind}?from_date=&to_date=
    GET /api/tax/gst?base=&rate=
    GET /api/tax/income?income=&regime=

Any other route answers 404 ``{"success": false, "message": "Not found"}``.
"""

from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .aggregation import sum_where, type_is
from .config import AppConfig, load_app_config
from .dashboard import compute_dashboard
from .insights import Insight, insights_for_snapshot
from .io import transactions_frame
from .logging_config import get_logger
from .models import INVOICE_STATUSES
from .periods import filter_transactions_by_period, period_from_dates, resolve_period
from .records_service import (
    ValidationError,
    create_client,
    create_invoice,
    create_transaction,
    edit_client,
    edit_transaction,
    load_snapshot,
)
from .reports import BalanceSheet, Report, TrialBalance, generate_report
from .store import (
    RecordNotFoundError,
    delete_record,
    init_store,
    list_records,
    update_record,
)
from .tax import calculate_gst, calculate_income_tax
from .views import ACTION_TARGETS

logger = get_logger(__name__)


def _insight_to_dict(insight: Insight) -> dict[str, Any]:
    data = asdict(insight)
    data["action_kind"] = insight.action_kind.value
    data["target"] = ACTION_TARGETS[insight.action_kind]
    return data


def _report_to_dict(report: Report) -> dict[str, Any]:
    data = asdict(report)
    data["title"] = report.title
    if isinstance(report, BalanceSheet):
        data["total_assets"] = report.total_assets
        data["total_liabilities_and_equity"] = report.total_liabilities_and_equity
    elif isinstance(report, TrialBalance):
        data["rows"] = [asdict(r) for r in report.rows]
    return data


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Build the FastAPI application bound to one configuration and store."""
    config = config or load_app_config()
    init_store(config.store)
    store_cfg = config.store

    app = FastAPI(title="CAsense API", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ============ Error handlers ============

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        return _error(400, "; ".join(exc.messages), errors=exc.messages)

    @app.exception_handler(RecordNotFoundError)
    async def _not_found(request: Request, exc: RecordNotFoundError):
        return _error(404, str(exc))

    @app.exception_handler(RequestValidationError)
    async def _bad_request(request: Request, exc: RequestValidationError):
        return _error(400, "Invalid request parameters")

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return _error(404, "Not found")
        return _error(exc.status_code, str(exc.detail))

    # ============ Health ============

    @app.get("/api/health")
    def health_check():
        return {
            "success": True,
            "service": "CAsense backend",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # ============ Clients ============

    @app.get("/api/clients")
    def get_clients():
        return {"success": True, "clients": list_records(store_cfg, "clients")}

    @app.post("/api/clients", status_code=201)
    def post_client(payload: dict[str, Any] = Body(...)):
        return {"success": True, "client": create_client(config, payload)}

    @app.put("/api/clients/{client_id}")
    def put_client(client_id: str, payload: dict[str, Any] = Body(...)):
        return {"success": True, "client": edit_client(config, client_id, payload)}

    @app.delete("/api/clients/{client_id}")
    def remove_client(client_id: str):
        delete_record(store_cfg, "clients", client_id)
        return {"success": True}

    # ============ Transactions ============

    @app.get("/api/transactions")
    def get_transactions():
        return {"success": True, "transactions": list_records(store_cfg, "transactions")}

    @app.post("/api/transactions", status_code=201)
    def post_transaction(payload: dict[str, Any] = Body(...)):
        return {"success": True, "transaction": create_transaction(config, payload)}

    @app.put("/api/transactions/{transaction_id}")
    def put_transaction(transaction_id: str, payload: dict[str, Any] = Body(...)):
        updated = edit_transaction(config, transaction_id, payload)
        return {"success": True, "transaction": updated}

    @app.delete("/api/transactions/{transaction_id}")
    def remove_transaction(transaction_id: str):
        delete_record(store_cfg, "transactions", transaction_id)
        return {"success": True}

    # ============ Invoices ============

    @app.get("/api/invoices")
    def get_invoices():
        return {"success": True, "invoices": list_records(store_cfg, "invoices")}

    @app.post("/api/invoices", status_code=201)
    def post_invoice(payload: dict[str, Any] = Body(...)):
        return {"success": True, "invoice": create_invoice(config, payload)}

    @app.put("/api/invoices/{invoice_id}")
    def put_invoice(invoice_id: str, payload: dict[str, Any] = Body(...)):
        status = payload.get("status")
        if status is not None and status not in INVOICE_STATUSES:
            raise ValidationError([f"Invalid invoice status '{status}'."])
        updated = update_record(store_cfg, "invoices", invoice_id, payload)
        return {"success": True, "invoice": updated}

    @app.delete("/api/invoices/{invoice_id}")
    def remove_invoice(invoice_id: str):
        delete_record(store_cfg, "invoices", invoice_id)
        return {"success": True}

    # ============ Analysis ============

    @app.get("/api/ai-insights")
    def get_ai_insights():
        snapshot = load_snapshot(config)
        tx = transactions_frame(snapshot.transactions)
        revenue = sum_where(tx, type_is("income"))
        expenses = sum_where(tx, type_is("expense"))
        return {
            "success": True,
            "insights": {
                "totalRevenue": revenue,
                "totalExpenses": expenses,
                "netProfit": revenue - expenses,
                "activeClients": len(snapshot.clients),
                "invoiceCount": len(snapshot.invoices),
            },
        }

    @app.get("/api/insights")
    def get_insights(category: Optional[str] = None):
        insights = insights_for_snapshot(
            load_snapshot(config), category, currency=config.currency
        )
        return {"success": True, "insights": [_insight_to_dict(i) for i in insights]}

    @app.get("/api/dashboard")
    def get_dashboard(period: Optional[str] = None):
        resolved = resolve_period(period or config.default_period)
        summary = compute_dashboard(
            load_snapshot(config), resolved, config.tax.liability_rate
        )
        data = asdict(summary)
        data["period"] = {
            "label": resolved.label,
            "start": resolved.start.isoformat(),
            "end": resolved.end.isoformat(),
        }
        return {"success": True, "dashboard": data}

    @app.get("/api/reports/{kind}")
    def get_report(kind: str, from_date: Optional[str] = None, to_date: Optional[str] = None):
        try:
            period = period_from_dates(from_date, to_date)
        except ValueError as exc:
            raise ValidationError([str(exc)]) from exc

        tx = filter_transactions_by_period(
            transactions_frame(load_snapshot(config).transactions), period
        )
        report = generate_report(kind, tx)
        if report is None:
            return _error(404, "Report type not implemented yet.")
        return {"success": True, "report": _report_to_dict(report)}

    @app.get("/api/tax/gst")
    def get_gst(base: float, rate: Optional[float] = None):
        result = calculate_gst(base, rate if rate is not None else config.tax.gst_rate)
        return {"success": True, "gst": asdict(result)}

    @app.get("/api/tax/income")
    def get_income_tax(income: float, regime: Optional[str] = None):
        result = calculate_income_tax(income, regime or config.tax.default_regime)
        return {"success": True, "tax": asdict(result)}

    logger.info("api_created", store=str(store_cfg.path))
    return app
