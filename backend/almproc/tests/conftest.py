"""Shared fakes and table builders for the processor tests.

Provides:
- RecordingEngine: projection engine stand-in that keeps every call
- StubMapper / StubLookUpCache: in-memory collaborators with call logs
- make_tables: connection mapping with an instrument-history and a base-rate table
- make_processor: processor wired to recording engines
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from datetime import date
from typing import Any

import pandas as pd
import pytest

from almproc.core.errors import DataErrorKind, InvalidDataEvent
from almproc.core.shapes import ShapeCategory
from almproc.io.context import LookUpContext
from almproc.services.processor import InstrumentProcessor

PROCESSING_DATE = date(2026, 3, 17)
PROCESSING_MONTH = date(2026, 3, 1)

SHAPES = (ShapeCategory.BULLET, ShapeCategory.AMORTIZING, ShapeCategory.SPREAD_EVENLY)


# ── Collaborator fakes ─────────────────────────────────────────────────────

class RecordingEngine:
    def __init__(self) -> None:
        self.resets = 0
        self.calls: list[dict[str, Any]] = []

    def reset(self) -> None:
        self.resets += 1

    def process(self, flags, record, cash_flow=None, income_accrual=None, economic_value=None) -> None:
        self.calls.append(
            {
                "flags": copy.deepcopy(flags),
                "record": copy.deepcopy(record),
                "cash_flow": cash_flow,
                "income_accrual": income_accrual,
                "economic_value": economic_value,
            }
        )


class StubLookUpCache:
    """Fixed base rates by upper-cased index name, whatever the month."""

    def __init__(self, rates: Mapping[str, float] | None = None) -> None:
        self.rates = {k.upper(): v for k, v in (rates or {}).items()}
        self.inits: list[tuple[Any, date, LookUpContext | None]] = []
        self.lookups: list[tuple[str, date]] = []
        self.resets = 0

    def init(self, connection, processing_date, context) -> None:
        self.inits.append((connection, processing_date, context))

    def base_rate(self, index_name, month) -> float | None:
        self.lookups.append((index_name, month))
        return self.rates.get(str(index_name).upper())

    def reset(self) -> None:
        self.resets += 1


class StubMapper:
    """Fills records from ``data[key]``; ``errors[key]`` kinds are notified first."""

    def __init__(
        self,
        data: Mapping[int, Mapping[str, Any]] | None = None,
        errors: Mapping[int, list[DataErrorKind]] | None = None,
        log: list[str] | None = None,
    ) -> None:
        self.data = dict(data or {})
        self.errors = dict(errors or {})
        self.log = log if log is not None else []
        self.call_put_frequency = 0
        self.inits: list[tuple[Any, date, str, str]] = []
        self.populated: list[Any] = []
        self.disposed = 0

    def init(self, connection, processing_date, instrument_table, date_field) -> None:
        self.inits.append((connection, processing_date, instrument_table, date_field))

    def populate(self, record, source, lookup_cache, on_error) -> None:
        key = int(source["INSTRUMENT_K"]) if isinstance(source, Mapping) else int(source)
        self.populated.append(source)
        for kind in self.errors.get(key, []):
            on_error(InvalidDataEvent(key, PROCESSING_MONTH, kind))
        if key not in self.data:
            raise KeyError(f"Instrument {key} not found")
        record.instrument_key = key
        for name, value in self.data[key].items():
            setattr(record, name, value)
        if record.SHAPE is ShapeCategory.BULLET:
            self.call_put_frequency = record.call_put_frequency_months

    def dispose(self) -> None:
        self.disposed += 1
        self.log.append("mapper.dispose")


def make_processor(
    data: Mapping[int, Mapping[str, Any]] | None = None,
    errors: Mapping[int, list[DataErrorKind]] | None = None,
    *,
    sink=None,
    init: bool = True,
) -> tuple[InstrumentProcessor, dict[ShapeCategory, RecordingEngine], dict[ShapeCategory, StubMapper], StubLookUpCache]:
    engines = {shape: RecordingEngine() for shape in SHAPES}
    mappers = {shape: StubMapper(data, errors) for shape in SHAPES}
    cache = StubLookUpCache()
    processor = InstrumentProcessor(engines, mappers=mappers, lookup_cache=cache)
    if init:
        processor.init({}, PROCESSING_DATE, on_data_error=sink)
    return processor, engines, mappers, cache


# ── Store tables ───────────────────────────────────────────────────────────

def instrument_rows() -> list[dict[str, Any]]:
    return [
        {
            "INSTRUMENT_K": 101,
            "INSTRUMENT_HISTORY_D": "2026-03-31",
            "INSTRUMENT_TYPE": 1,
            "CURRENT_D": "2026-03-01",
            "MATURITY_D": "2029-03-01",
            "NEXT_INTEREST_PAYMENT_D": "2025-09-01",
            "NEXT_REPRICING_D": "2026-06-01",
            "NEXT_PREPAYMENT_D": "2026-04-01",
            "PAYMENT_FREQ_M": 3,
            "CALL_PUT_FREQ_M": 6,
            "EV_DISC_METHOD": 1,
            "BALANCE": 250000.0,
            "INTEREST_RATE": 0.041,
            "RATE_INDEX": None,
        },
        {
            "INSTRUMENT_K": 202,
            "INSTRUMENT_HISTORY_D": "2026-03-31",
            "INSTRUMENT_TYPE": 2,
            "CURRENT_D": "2026-03-01",
            "MATURITY_D": "2068-01-01",
            "NEXT_PRIN_INTR_PAYMENT_D": "2026-04-01",
            "NEXT_REPRICING_D": "2026-04-01",
            "NEXT_PREPAYMENT_D": "2026-04-01",
            "BALLOON_D": "2068-01-01",
            "PAYMENT_FREQ_M": 1,
            "EV_DISC_METHOD": 2,
            "BALANCE": 180000.0,
            "INTEREST_RATE": 0.035,
            "RATE_INDEX": "euribor_3m",
        },
        {
            "INSTRUMENT_K": 303,
            "INSTRUMENT_HISTORY_D": "2026-03-31",
            "INSTRUMENT_TYPE": 5,
            "CURRENT_D": "2026-03-01",
            "MATURITY_D": "2031-03-01",
            "NEXT_INTEREST_PAYMENT_D": "2025-06-01",
            "NEXT_PRINCIPAL_PAYMENT_D": "2025-07-15",
            "NEXT_REPRICING_D": "1801-01-01",
            "NEXT_PREPAYMENT_D": "2026-05-01",
            "BALLOON_D": "2031-03-01",
            "PAYMENT_FREQ_M": None,
            "EV_DISC_METHOD": 1,
            "BALANCE": 90000.0,
            "INTEREST_RATE": 0.05,
            "RATE_INDEX": "SOFR",
        },
        # Previous month's snapshot of 101; must not be picked up.
        {
            "INSTRUMENT_K": 101,
            "INSTRUMENT_HISTORY_D": "2026-02-28",
            "INSTRUMENT_TYPE": 1,
            "CURRENT_D": "2026-02-01",
            "MATURITY_D": "2027-01-01",
            "NEXT_INTEREST_PAYMENT_D": "2026-02-01",
            "PAYMENT_FREQ_M": 1,
        },
    ]


def base_rate_rows() -> list[dict[str, Any]]:
    return [
        {"RATE_INDEX": "EURIBOR_3M", "RATE_MONTH": "2026-01-01", "RATE": 0.021},
        {"RATE_INDEX": "EURIBOR_3M", "RATE_MONTH": "2026-02-01", "RATE": 0.0225},
        {"RATE_INDEX": "EURIBOR_3M", "RATE_MONTH": "2026-04-01", "RATE": 0.024},
        {"RATE_INDEX": "ESTR", "RATE_MONTH": "2025-06-01", "RATE": 0.019},
    ]


def make_tables(
    instruments: list[dict[str, Any]] | None = None,
    base_rates: list[dict[str, Any]] | None = None,
    *,
    instrument_table: str = "BP_INSTRUMENT_HISTORY",
    base_rate_table: str = "BP_BASE_RATE",
) -> dict[str, pd.DataFrame]:
    return {
        instrument_table: pd.DataFrame(instruments if instruments is not None else instrument_rows()),
        base_rate_table: pd.DataFrame(base_rates if base_rates is not None else base_rate_rows()),
    }


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture()
def tables() -> dict[str, pd.DataFrame]:
    return make_tables()


@pytest.fixture()
def recorded_errors() -> list[InvalidDataEvent]:
    return []
