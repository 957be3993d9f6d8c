"""Data-quality notifications and processor state errors."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable


class DataErrorKind(str, Enum):
    REPRICING_DATE_OUT_OF_RANGE = "repricing_date_out_of_range"
    MISSING_BASE_RATE = "missing_base_rate"
    MISSING_PAYMENT_FREQUENCY = "missing_payment_frequency"


@dataclass(frozen=True)
class InvalidDataEvent:
    """One malformed-data finding for one instrument; never raised, only notified."""
    instrument_key: int
    month: date
    kind: DataErrorKind


# notify(event); must not raise.
ErrorSink = Callable[[InvalidDataEvent], None]


class ProcessorStateError(RuntimeError):
    """Processor used outside its init/dispose lifecycle."""
