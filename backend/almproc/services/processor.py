"""
Instrument processor: classify, load, repair and project one instrument at a time.

Typical batch use::

    processor = InstrumentProcessor(engines={...})
    processor.init(connection, date(2026, 3, 17), on_data_error=errors.append)
    for key, type_code in instruments:
        if processor.select_instrument(key, type_code) is ShapeCategory.NONE:
            continue
        processor.invoke_projection(cash_flow=cf_buffer)
    processor.dispose()

A processor is not thread-safe: records, control flags and the lookup cache are
reused in place across instruments.  Use one instance per worker.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from almproc import config
from almproc.core.classifier import classify
from almproc.core.errors import ErrorSink, InvalidDataEvent, ProcessorStateError
from almproc.core.months import first_of_month
from almproc.core.shapes import ActiveInstrument, ShapeCategory, ShapeRecord
from almproc.io.context import MappingContext
from almproc.io.instrument_mapper import FrameInstrumentMapper
from almproc.io.lookup_cache import FrameLookUpCache
from almproc.services.business_rules import apply_business_rules
from almproc.services.collaborators import InstrumentMapper, LookUpCache, ProjectionEngine
from almproc.services.control import ControlFlags, build_control_flags, new_control_flags

_log = logging.getLogger(__name__)

_SHAPES = (ShapeCategory.BULLET, ShapeCategory.AMORTIZING, ShapeCategory.SPREAD_EVENLY)


class InstrumentProcessor:
    def __init__(
        self,
        engines: Mapping[ShapeCategory, ProjectionEngine],
        *,
        mappers: Mapping[ShapeCategory, InstrumentMapper] | None = None,
        lookup_cache: LookUpCache | None = None,
    ) -> None:
        missing = [s.value for s in _SHAPES if s not in engines]
        if missing:
            raise ValueError(f"Missing projection engines for shapes: {missing}")
        self._engines = dict(engines)

        if mappers is None:
            mappers = {shape: FrameInstrumentMapper(shape) for shape in _SHAPES}
        missing = [s.value for s in _SHAPES if s not in mappers]
        if missing:
            raise ValueError(f"Missing mappers for shapes: {missing}")
        self._mappers = dict(mappers)
        self._lookup_cache = lookup_cache if lookup_cache is not None else FrameLookUpCache()

        self._active = ActiveInstrument()
        self._flags: ControlFlags | None = None
        self._connection: Any = None
        self._processing_month: date | None = None
        self._sink: ErrorSink | None = None
        self._initialised = False
        self._disposed = False

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def init(
        self,
        connection: Any,
        processing_date: date,
        mapping_context: MappingContext | None = None,
        *,
        on_data_error: ErrorSink | None = None,
    ) -> None:
        """
        Open a processing session.

        *processing_date* is truncated to the first of its month before any use.
        Without *mapping_context* the mappers read ``config.DEFAULT_INSTRUMENT_TABLE``
        keyed on ``config.DEFAULT_INSTRUMENT_DATE_FIELD`` and the lookup cache uses
        its own defaults.
        """
        if self._disposed:
            raise ProcessorStateError("Processor already disposed")

        self._connection = connection
        self._processing_month = first_of_month(processing_date)
        self._sink = on_data_error
        self._flags = new_control_flags(self._processing_month)

        lookup_context = mapping_context.lookup_context() if mapping_context is not None else None
        self._lookup_cache.init(connection, self._processing_month, lookup_context)
        self._init_mappers(mapping_context)

        self._active.reset()
        self._initialised = True
        _log.info("Instrument processor initialised for %s", self._processing_month)

    def _init_mappers(self, mapping_context: MappingContext | None) -> None:
        if mapping_context is not None:
            table = mapping_context.instrument_table
            date_field = mapping_context.instrument_date_field
        else:
            table = config.DEFAULT_INSTRUMENT_TABLE
            date_field = config.DEFAULT_INSTRUMENT_DATE_FIELD
        for shape in _SHAPES:
            self._mappers[shape].init(self._connection, self._processing_month, table, date_field)

    def dispose(self) -> None:
        """Detach the error relay, release mappers, then the lookup cache. Idempotent."""
        if self._disposed:
            return
        self._disposed = True
        self._sink = None
        if self._initialised:
            for shape in _SHAPES:
                self._mappers[shape].dispose()
            self._lookup_cache.reset()
        self._active.reset()
        _log.info("Instrument processor disposed")

    def __enter__(self) -> "InstrumentProcessor":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.dispose()

    def _require_session(self) -> None:
        if self._disposed:
            raise ProcessorStateError("Processor already disposed")
        if not self._initialised:
            raise ProcessorStateError("Processor used before init()")

    # ── Accessors ─────────────────────────────────────────────────────────

    @property
    def processing_month(self) -> date | None:
        return self._processing_month

    @property
    def instrument_key(self) -> int:
        return self._active.instrument_key

    @property
    def shape(self) -> ShapeCategory:
        return self._active.shape

    @property
    def record(self) -> ShapeRecord | None:
        """Record of the selected instrument, None when nothing is selected."""
        return self._active.record

    @property
    def control_flags(self) -> ControlFlags | None:
        return self._flags

    @property
    def call_put_frequency(self) -> int:
        """Call/put frequency the bullet mapper read for the last bullet instrument."""
        return self._mappers[ShapeCategory.BULLET].call_put_frequency

    # ── Error relay ───────────────────────────────────────────────────────

    def _on_instrument_error(self, event: InvalidDataEvent) -> None:
        if self._disposed:
            raise ProcessorStateError(
                f"Data error for instrument {event.instrument_key} notified after dispose"
            )
        if self._sink is None:
            _log.warning(
                "Unhandled data error for instrument %s (%s, %s)",
                event.instrument_key, event.kind.value, event.month,
            )
            return
        self._sink(event)

    # ── Dispatch ──────────────────────────────────────────────────────────

    def select_instrument(self, instrument_key: int, raw_type_code: int) -> ShapeCategory:
        """Load and repair *instrument_key*; returns its shape (NONE: nothing loaded)."""
        self._require_session()
        self._active.reset()
        self._active.instrument_key = int(instrument_key)
        return self._load(classify(raw_type_code), instrument_key)

    def select_instrument_row(self, row: Mapping[str, Any]) -> ShapeCategory:
        """Same as ``select_instrument`` for a row already read from the store."""
        if row is None:
            raise ValueError("row is required")
        self._require_session()
        self._active.reset()
        self._active.instrument_key = int(row[config.ROW_KEY_FIELD])
        return self._load(classify(row[config.ROW_TYPE_FIELD]), row)

    def _load(self, shape: ShapeCategory, source: int | Mapping[str, Any]) -> ShapeCategory:
        _log.debug("Instrument %s classified as %s", self._active.instrument_key, shape.value)
        if shape is ShapeCategory.NONE:
            return shape

        record = self._active.activate(shape)
        try:
            self._mappers[shape].populate(
                record, source, self._lookup_cache, self._on_instrument_error,
            )
            resolved = apply_business_rules(shape, record, self._processing_month)
        except Exception:
            # Nothing half-loaded may reach invoke_projection.
            self._active.reset()
            raise

        if resolved is ShapeCategory.NONE:
            self._active.reset()
        return resolved

    def set_economic_value_discount_method(self, method: int) -> None:
        record = self._active.record
        if record is None:
            return
        record.economic_value_discount_method = int(method)

    def invoke_projection(
        self,
        cash_flow: Any = None,
        income_accrual: Any = None,
        economic_value: Sequence[Any] | None = None,
    ) -> None:
        """
        Run the shape's projection engine on the selected instrument.

        A sink that is None is not computed; economic value also needs a non-empty
        first slot.  No-op when no instrument is selected.
        """
        self._require_session()
        record = self._active.record
        if record is None:
            return

        flags = build_control_flags(
            self._flags,
            self._processing_month,
            cash_flow=cash_flow,
            income_accrual=income_accrual,
            economic_value=economic_value,
        )
        engine = self._engines[self._active.shape]
        engine.reset()
        engine.process(flags, record, cash_flow, income_accrual, economic_value)
