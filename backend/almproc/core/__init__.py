"""Core domain objects: shape records, classification, month arithmetic."""

from almproc.core.classifier import classify
from almproc.core.errors import (
    DataErrorKind,
    ErrorSink,
    InvalidDataEvent,
    ProcessorStateError,
)
from almproc.core.months import add_months, first_of_month
from almproc.core.shapes import (
    ActiveInstrument,
    AmortizingRecord,
    BulletRecord,
    ShapeCategory,
    ShapeRecord,
    SpreadEvenlyRecord,
    new_record,
)

__all__ = [
    "ActiveInstrument",
    "AmortizingRecord",
    "BulletRecord",
    "DataErrorKind",
    "ErrorSink",
    "InvalidDataEvent",
    "ProcessorStateError",
    "ShapeCategory",
    "ShapeRecord",
    "SpreadEvenlyRecord",
    "add_months",
    "classify",
    "first_of_month",
    "new_record",
]
