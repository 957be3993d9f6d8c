"""
Instrument-table mapper: store row -> shape record.

One mapper per shape.  ``init`` keeps the instrument-history rows of the
processing month (``date_field`` in that month), indexed by instrument key;
``populate`` fills a record from a key lookup or from a row the caller already
fetched.

Data-quality findings are reported through the ``on_error`` sink and repaired
in place; only a missing instrument or an unreadable mandatory date raises.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import fields
from datetime import date
from typing import TYPE_CHECKING, Any

import pandas as pd

from almproc import config
from almproc.core.errors import DataErrorKind, ErrorSink, InvalidDataEvent
from almproc.core.months import add_months, first_of_month
from almproc.core.shapes import BulletRecord, ShapeCategory, ShapeRecord
from almproc.io._utils import (
    norm_token,
    parse_date,
    parse_int,
    parse_number,
    table_from_connection,
)

if TYPE_CHECKING:
    from almproc.services.collaborators import LookUpCache

_log = logging.getLogger(__name__)

_INT_FIELDS = {
    "instrument_key",
    "payment_frequency_months",
    "call_put_frequency_months",
    "economic_value_discount_method",
}
_FLOAT_FIELDS = {"balance", "interest_rate"}
_TEXT_FIELDS = {"rate_index"}


def _key_column(columns_map: Mapping[str, str]) -> str:
    for source_col, field_name in columns_map.items():
        if field_name == "instrument_key":
            return source_col
    raise ValueError("columns_map sin columna origen para instrument_key")


class FrameInstrumentMapper:
    def __init__(
        self,
        shape: ShapeCategory,
        columns_map: Mapping[str, str] | None = None,
        *,
        dayfirst: bool = config.DATE_DAYFIRST,
    ) -> None:
        if shape is ShapeCategory.NONE:
            raise ValueError("A mapper needs a concrete shape")
        self.shape = shape
        self.columns_map = dict(columns_map or config.INSTRUMENT_COLUMNS_MAP)
        self.dayfirst = dayfirst
        self.call_put_frequency: int = 0
        self.instrument_table: str | None = None
        self._key_col = _key_column(self.columns_map)
        self._processing_month: date | None = None
        self._rows: pd.DataFrame | None = None

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def init(
        self,
        connection: Any,
        processing_date: date,
        instrument_table: str,
        date_field: str,
    ) -> None:
        table = table_from_connection(connection, instrument_table)
        for col in (date_field, self._key_col):
            if col not in table.columns:
                raise ValueError(f"{instrument_table} no contiene columna requerida: {col!r}")

        month = first_of_month(processing_date)
        as_of = pd.to_datetime(table[date_field], errors="coerce", dayfirst=self.dayfirst)
        in_month = (as_of.dt.year == month.year) & (as_of.dt.month == month.month)

        rows = table.loc[in_month].copy()
        rows["_key"] = pd.to_numeric(rows[self._key_col], errors="coerce")
        rows = rows.dropna(subset=["_key"])
        rows["_key"] = rows["_key"].astype("int64")
        rows = rows.drop_duplicates(subset=["_key"], keep="last").set_index("_key")

        self.instrument_table = instrument_table
        self._processing_month = month
        self._rows = rows
        _log.debug(
            "%s mapper: %d rows from %s for %s",
            self.shape.value, len(rows), instrument_table, month,
        )

    def dispose(self) -> None:
        self._rows = None
        self._processing_month = None

    # ── Population ────────────────────────────────────────────────────────

    def _row_for(self, source: int | Mapping[str, Any]) -> Mapping[str, Any]:
        if isinstance(source, Mapping) or isinstance(source, pd.Series):
            return source
        if self._rows is None:
            raise RuntimeError(f"{self.shape.value} mapper used before init")
        key = int(source)
        if key not in self._rows.index:
            raise KeyError(
                f"Instrument {key} not found in {self.instrument_table} for {self._processing_month}"
            )
        return self._rows.loc[key]

    def _convert(self, field_name: str, value: Any) -> Any:
        if field_name in _INT_FIELDS:
            return parse_int(value)
        if field_name in _FLOAT_FIELDS:
            return parse_number(value)
        if field_name in _TEXT_FIELDS:
            return norm_token(value)
        return parse_date(value, dayfirst=self.dayfirst)

    def populate(
        self,
        record: ShapeRecord,
        source: int | Mapping[str, Any],
        lookup_cache: LookUpCache,
        on_error: ErrorSink,
    ) -> None:
        if record.SHAPE is not self.shape:
            raise ValueError(f"{self.shape.value} mapper cannot fill a {record.SHAPE.value} record")
        if self._processing_month is None:
            raise RuntimeError(f"{self.shape.value} mapper used before init")

        row = self._row_for(source)
        record_fields = {f.name for f in fields(record)}
        for source_col, field_name in self.columns_map.items():
            if field_name not in record_fields or source_col not in row:
                continue
            value = self._convert(field_name, row[source_col])
            if value is not None:
                setattr(record, field_name, value)

        if record.current_date is None or record.maturity_date is None:
            raise ValueError(
                f"Instrument {record.instrument_key}: fila sin current_date/maturity_date válidos"
            )

        self._check_payment_frequency(record, on_error)
        self._check_repricing_date(record, on_error)
        self._attach_base_rate(record, lookup_cache, on_error)

        if isinstance(record, BulletRecord):
            self.call_put_frequency = record.call_put_frequency_months

    # ── Data-quality checks ───────────────────────────────────────────────

    def _notify(self, record: ShapeRecord, kind: DataErrorKind, on_error: ErrorSink) -> None:
        on_error(InvalidDataEvent(record.instrument_key, self._processing_month, kind))

    def _check_payment_frequency(self, record: ShapeRecord, on_error: ErrorSink) -> None:
        if record.payment_frequency_months and record.payment_frequency_months > 0:
            return
        self._notify(record, DataErrorKind.MISSING_PAYMENT_FREQUENCY, on_error)
        record.payment_frequency_months = config.DEFAULT_PAYMENT_FREQUENCY_MONTHS

    def _check_repricing_date(self, record: ShapeRecord, on_error: ErrorSink) -> None:
        repricing = record.next_repricing_date
        if repricing is None:
            return
        latest = add_months(self._processing_month, 12 * config.REPRICING_DATE_MAX_YEARS_AHEAD)
        if repricing.year >= config.REPRICING_DATE_MIN_YEAR and repricing <= latest:
            return
        self._notify(record, DataErrorKind.REPRICING_DATE_OUT_OF_RANGE, on_error)
        record.next_repricing_date = record.current_date

    def _attach_base_rate(
        self,
        record: ShapeRecord,
        lookup_cache: LookUpCache,
        on_error: ErrorSink,
    ) -> None:
        if record.rate_index is None:
            return
        rate = lookup_cache.base_rate(record.rate_index, self._processing_month)
        if rate is None:
            self._notify(record, DataErrorKind.MISSING_BASE_RATE, on_error)
            return
        record.base_rate = rate
