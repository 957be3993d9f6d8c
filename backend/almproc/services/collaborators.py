"""
Contracts of the collaborators the processor drives.

Store access, reference data and the numerical engine live outside this
package; anything matching these protocols can be plugged into
``InstrumentProcessor``.  ``almproc.io`` ships pandas-backed store
collaborators; engines are always supplied by the caller.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any, Protocol

from almproc.core.errors import ErrorSink
from almproc.core.shapes import ShapeRecord
from almproc.io.context import LookUpContext
from almproc.services.control import ControlFlags


class LookUpCache(Protocol):
    def init(self, connection: Any, processing_date: date, context: LookUpContext | None) -> None:
        ...

    def base_rate(self, index_name: str, month: date) -> float | None:
        """Latest rate of *index_name* at or before *month*, None when unknown."""
        ...

    def reset(self) -> None:
        ...


class InstrumentMapper(Protocol):
    """Populates one shape of record from the store."""

    call_put_frequency: int

    def init(
        self,
        connection: Any,
        processing_date: date,
        instrument_table: str,
        date_field: str,
    ) -> None:
        ...

    def populate(
        self,
        record: ShapeRecord,
        source: int | Mapping[str, Any],
        lookup_cache: LookUpCache,
        on_error: ErrorSink,
    ) -> None:
        """
        Fill *record* for an instrument key or a pre-fetched row.

        Data-quality findings go to *on_error*; only hard I/O or missing-row
        failures raise.
        """
        ...

    def dispose(self) -> None:
        ...


class ProjectionEngine(Protocol):
    def reset(self) -> None:
        ...

    def process(
        self,
        flags: ControlFlags,
        record: ShapeRecord,
        cash_flow: Any = None,
        income_accrual: Any = None,
        economic_value: Sequence[Any] | None = None,
    ) -> None:
        ...
