"""
Reference-data cache read once per processing session.

Holds the base-rate history the mappers need to price floating instruments.
The connection is a mapping of table name -> DataFrame; the base-rate table
has one row per (index, month):

    RATE_INDEX   RATE_MONTH   RATE
    EURIBOR_3M   2026-01-01   0.0215
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from datetime import date
from typing import Any

import pandas as pd

from almproc.config import BASE_RATE_COLUMNS
from almproc.core.months import first_of_month
from almproc.io._utils import table_from_connection
from almproc.io.context import LookUpContext

_log = logging.getLogger(__name__)


class FrameLookUpCache:
    def __init__(self) -> None:
        self.processing_date: date | None = None
        self.context: LookUpContext | None = None
        self._months: dict[str, list[date]] = {}
        self._rates: dict[str, list[float]] = {}

    @property
    def is_initialised(self) -> bool:
        return self.processing_date is not None

    @property
    def available_indices(self) -> list[str]:
        return sorted(self._months.keys())

    def init(self, connection: Any, processing_date: date, context: LookUpContext | None) -> None:
        ctx = context if context is not None else LookUpContext()
        self.reset()
        self.processing_date = first_of_month(processing_date)
        self.context = ctx

        table = table_from_connection(connection, ctx.base_rate_table)
        missing = [c for c in BASE_RATE_COLUMNS.values() if c not in table.columns]
        if missing:
            raise ValueError(f"{ctx.base_rate_table} sin columnas requeridas: {missing}")

        rates = pd.DataFrame(
            {
                "index": table[BASE_RATE_COLUMNS["index"]].astype("string").str.strip().str.upper(),
                "month": pd.to_datetime(table[BASE_RATE_COLUMNS["month"]], errors="coerce"),
                "rate": pd.to_numeric(table[BASE_RATE_COLUMNS["rate"]], errors="coerce"),
            }
        ).dropna()
        rates["month"] = rates["month"].dt.to_period("M").dt.to_timestamp()

        if ctx.base_rate_start_month is not None:
            rates = rates[rates["month"] >= pd.Timestamp(first_of_month(ctx.base_rate_start_month))]
        if ctx.base_rate_end_month is not None:
            rates = rates[rates["month"] <= pd.Timestamp(first_of_month(ctx.base_rate_end_month))]

        rates = rates.sort_values(["index", "month"]).drop_duplicates(["index", "month"], keep="last")
        for index_name, grp in rates.groupby("index", sort=True):
            self._months[str(index_name)] = [ts.date() for ts in grp["month"]]
            self._rates[str(index_name)] = [float(r) for r in grp["rate"]]

        _log.info(
            "Lookup cache loaded: %d base-rate indices for %s",
            len(self._months), self.processing_date,
        )

    def base_rate(self, index_name: str, month: date) -> float | None:
        """Latest rate for *index_name* at or before *month*; None if there is none."""
        key = str(index_name).strip().upper()
        months = self._months.get(key)
        if not months:
            return None
        pos = bisect_right(months, first_of_month(month))
        if pos == 0:
            return None
        return self._rates[key][pos - 1]

    def reset(self) -> None:
        self.processing_date = None
        self.context = None
        self._months.clear()
        self._rates.clear()
