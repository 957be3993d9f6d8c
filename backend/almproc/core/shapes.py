"""
Shape records handed to the projection engine.

One record type per repayment shape.  Records are mutable and reused across
instruments: ``reset()`` puts every field back to its default so nothing read
for one instrument can leak into the next.

The class-level field tuples drive the business rules:
  FORWARD_DATE_FIELDS    reset to current_date when the record is stale
  RECURRING_DATE_FIELDS  advanced by payment_frequency_months
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from enum import Enum
from typing import ClassVar, Union


class ShapeCategory(str, Enum):
    BULLET = "bullet"
    AMORTIZING = "amortizing"
    SPREAD_EVENLY = "spread_evenly"
    NONE = "none"


@dataclass
class _ShapeRecord:
    instrument_key: int = -1
    current_date: date | None = None
    maturity_date: date | None = None
    next_repricing_date: date | None = None
    next_prepayment_date: date | None = None
    payment_frequency_months: int = 0
    economic_value_discount_method: int = 0
    balance: float = 0.0
    interest_rate: float = 0.0
    rate_index: str | None = None
    base_rate: float | None = None

    SHAPE: ClassVar[ShapeCategory] = ShapeCategory.NONE
    FORWARD_DATE_FIELDS: ClassVar[tuple[str, ...]] = ()
    RECURRING_DATE_FIELDS: ClassVar[tuple[str, ...]] = ()
    HAS_BALLOON: ClassVar[bool] = False

    def reset(self) -> None:
        for f in fields(self):
            setattr(self, f.name, f.default)


@dataclass
class BulletRecord(_ShapeRecord):
    """At-maturity, call and put instruments."""
    next_interest_payment_date: date | None = None
    call_put_frequency_months: int = 0

    SHAPE: ClassVar[ShapeCategory] = ShapeCategory.BULLET
    FORWARD_DATE_FIELDS: ClassVar[tuple[str, ...]] = (
        "next_interest_payment_date",
        "next_repricing_date",
        "next_prepayment_date",
    )
    RECURRING_DATE_FIELDS: ClassVar[tuple[str, ...]] = ("next_interest_payment_date",)


@dataclass
class AmortizingRecord(_ShapeRecord):
    # Principal and interest are paid together on next_payment_date.
    next_payment_date: date | None = None
    balloon_date: date | None = None

    SHAPE: ClassVar[ShapeCategory] = ShapeCategory.AMORTIZING
    FORWARD_DATE_FIELDS: ClassVar[tuple[str, ...]] = (
        "next_payment_date",
        "balloon_date",
        "next_repricing_date",
        "next_prepayment_date",
    )
    RECURRING_DATE_FIELDS: ClassVar[tuple[str, ...]] = ("next_payment_date",)
    HAS_BALLOON: ClassVar[bool] = True


@dataclass
class SpreadEvenlyRecord(_ShapeRecord):
    next_interest_payment_date: date | None = None
    next_principal_payment_date: date | None = None
    balloon_date: date | None = None

    SHAPE: ClassVar[ShapeCategory] = ShapeCategory.SPREAD_EVENLY
    FORWARD_DATE_FIELDS: ClassVar[tuple[str, ...]] = (
        "next_interest_payment_date",
        "next_principal_payment_date",
        "balloon_date",
        "next_repricing_date",
        "next_prepayment_date",
    )
    # Principal dates step with the interest frequency; there is no separate
    # principal frequency on this shape.
    RECURRING_DATE_FIELDS: ClassVar[tuple[str, ...]] = (
        "next_interest_payment_date",
        "next_principal_payment_date",
    )
    HAS_BALLOON: ClassVar[bool] = True


ShapeRecord = Union[BulletRecord, AmortizingRecord, SpreadEvenlyRecord]

_RECORD_TYPES: dict[ShapeCategory, type] = {
    ShapeCategory.BULLET: BulletRecord,
    ShapeCategory.AMORTIZING: AmortizingRecord,
    ShapeCategory.SPREAD_EVENLY: SpreadEvenlyRecord,
}


def new_record(shape: ShapeCategory) -> ShapeRecord:
    """Fresh, default-valued record for *shape*; ``ValueError`` for NONE."""
    try:
        return _RECORD_TYPES[shape]()
    except KeyError:
        raise ValueError(f"No record type for shape {shape!r}") from None


class ActiveInstrument:
    """
    Holder for the instrument currently loaded in a processor.

    One record per shape is allocated up front and reused; only the slot
    matching ``shape`` is visible through ``record``.
    """

    def __init__(self) -> None:
        self._slots: dict[ShapeCategory, ShapeRecord] = {
            shape: new_record(shape) for shape in _RECORD_TYPES
        }
        self.instrument_key: int = -1
        self.shape: ShapeCategory = ShapeCategory.NONE

    @property
    def record(self) -> ShapeRecord | None:
        if self.shape is ShapeCategory.NONE:
            return None
        return self._slots[self.shape]

    def activate(self, shape: ShapeCategory) -> ShapeRecord:
        """Make *shape* the visible slot and return its record."""
        record = self._slots.get(shape)
        if record is None:
            raise ValueError(f"Cannot activate shape {shape!r}")
        self.shape = shape
        return record

    def reset(self) -> None:
        """Zero every slot, not only the active one."""
        self.instrument_key = -1
        self.shape = ShapeCategory.NONE
        for record in self._slots.values():
            record.reset()
