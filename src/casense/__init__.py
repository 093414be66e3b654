# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
CAsense
-------

A Python-based practice-management and analysis toolkit for accounting
professionals. CAsense keeps track of clients, financial transactions and
invoices, and derives figures from them through a small, pure computation
core.

Main capabilities:
- a file-backed JSON record store for clients, transactions and invoices,
- validated create/edit services on top of the store,
- named reporting periods (today, week, month, quarter, year),
- four financial reports (profit & loss, balance sheet, cash flow,
  trial balance),
- GST and progressive income-tax calculators (old and new regimes),
- a rule-based insight engine producing prioritized recommendations,
- a statutory compliance calendar,
- a command-line interface and a JSON REST API.

CAsense separates computation (periods, aggregation, reports, tax,
insights), storage (store, records_service) and presentation (views, CLI,
API), so that every figure can be recomputed from a plain record snapshot.

Version: 0.1.0

Usage:
    python -m casense.cli --help
"""

__all__ = ["aggregation", "periods", "reports", "tax", "insights"]

__version__ = "0.1.0"
