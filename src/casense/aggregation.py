# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Aggregation primitives for CAsense.

Every report and every insight is expressed in terms of two primitives:

- ``sum_where(records, predicate)``: total of a numeric column over the
  rows matching a predicate,
- ``group_sum(records, key)``: running total per key, in first-seen key
  order.

Both work on the DataFrames produced by ``io.transactions_frame`` and
``io.invoices_frame``. Values that are missing or not numeric count as 0,
so neither function ever fails on dirty amounts.
"""

from collections.abc import Callable
from typing import Optional, Union

import pandas as pd

Predicate = Union[Callable[[pd.DataFrame], pd.Series], pd.Series, None]
KeyFn = Union[str, Callable[[pd.DataFrame], pd.Series]]


def _numeric(values: pd.Series) -> pd.Series:
    return pd.to_numeric(values, errors="coerce").fillna(0.0)


def _resolve_mask(records: pd.DataFrame, predicate: Predicate) -> pd.Series:
    if predicate is None:
        return pd.Series(True, index=records.index)
    if callable(predicate):
        mask = predicate(records)
    else:
        mask = predicate
    return mask.reindex(records.index, fill_value=False).astype(bool)


def sum_where(
    records: pd.DataFrame,
    predicate: Predicate = None,
    field: str = "amount",
) -> float:
    """
    Sum a numeric column over the records matching a predicate.

    Args:
        records: DataFrame holding at least the `field` column.
        predicate: Boolean Series aligned on `records`, a callable returning
            one, or None to sum every row.
        field: Column to sum (default: 'amount').

    Returns:
        The total as a float (0.0 for an empty selection).
    """
    if records.empty:
        return 0.0
    mask = _resolve_mask(records, predicate)
    return float(_numeric(records.loc[mask, field]).sum())


def type_is(kind: str) -> Callable[[pd.DataFrame], pd.Series]:
    """Predicate factory: rows whose 'type' column equals `kind`."""

    def _predicate(records: pd.DataFrame) -> pd.Series:
        return records["type"] == kind

    return _predicate


def group_sum(
    records: pd.DataFrame,
    key: KeyFn,
    field: str = "amount",
    predicate: Optional[Predicate] = None,
) -> dict[str, float]:
    """
    Total a numeric column per key.

    Args:
        records: DataFrame holding at least the `field` column.
        key: Column name, or a callable returning one key per row.
        field: Column to sum (default: 'amount').
        predicate: Optional row filter applied before grouping.

    Returns:
        A dictionary {key -> total}, keys in order of first occurrence.
    """
    if records.empty:
        return {}

    selected = records.loc[_resolve_mask(records, predicate)]
    if selected.empty:
        return {}

    keys = selected[key] if isinstance(key, str) else key(selected)
    values = _numeric(selected[field])
    totals = values.groupby(keys.fillna("").astype(str), sort=False).sum()
    return {str(k): float(v) for k, v in totals.items()}
