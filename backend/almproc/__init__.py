"""
almproc – instrument classification, normalization and projection dispatch.

Quick start::

    from almproc import InstrumentProcessor, ShapeCategory

    processor = InstrumentProcessor(engines=my_engines)
    processor.init(tables, date(2026, 3, 1), on_data_error=report)
    if processor.select_instrument(1042, 2) is not ShapeCategory.NONE:
        processor.invoke_projection(cash_flow=cf)
    processor.dispose()
"""

from almproc.core import (
    AmortizingRecord,
    BulletRecord,
    DataErrorKind,
    InvalidDataEvent,
    ProcessorStateError,
    ShapeCategory,
    SpreadEvenlyRecord,
    classify,
)
from almproc.io import FrameInstrumentMapper, FrameLookUpCache, LookUpContext, MappingContext
from almproc.services import ControlFlags, InstrumentProcessor, apply_business_rules

__all__ = [
    "AmortizingRecord",
    "BulletRecord",
    "ControlFlags",
    "DataErrorKind",
    "FrameInstrumentMapper",
    "FrameLookUpCache",
    "InstrumentProcessor",
    "InvalidDataEvent",
    "LookUpContext",
    "MappingContext",
    "ProcessorStateError",
    "ShapeCategory",
    "SpreadEvenlyRecord",
    "apply_business_rules",
    "classify",
]
