"""
Data-quality business rules applied to a freshly populated shape record.

Rules run once per instrument, right after the mapper fills the record and
before any projection:

  1. Maturity floor/cap.  A maturity before the record's current date pulls
     maturity and every forward schedule date back to current date.  A maturity
     at or beyond processing month + 480M is capped at processing month + 479M.
  2. Balloon floor (amortizing, spread evenly).  A balloon before current date
     resets payment, balloon, repricing and prepayment dates to current date.
  3. Schedule advancement.  Each recurring payment date is stepped forward by
     the payment frequency until it reaches current date, clamped to maturity.
     A recurring date already past maturity is pulled back to maturity.

The horizon is measured from the *processor's* processing month, never from the
record's own current_date; the two can differ and both are inputs here.
"""

from __future__ import annotations

import logging
from datetime import date

from almproc.config import HORIZON_CEILING_MONTHS, HORIZON_FLOOR_MONTHS
from almproc.core.months import add_months, first_of_month
from almproc.core.shapes import ShapeCategory, ShapeRecord

_log = logging.getLogger(__name__)


# ── Individual rules ──────────────────────────────────────────────────────

def _require_dates(record: ShapeRecord) -> tuple[date, date]:
    if record.current_date is None or record.maturity_date is None:
        raise ValueError(
            f"Instrument {record.instrument_key}: current_date and maturity_date are required "
            f"(got {record.current_date!r}, {record.maturity_date!r})"
        )
    return record.current_date, record.maturity_date


def apply_maturity_floor_cap(record: ShapeRecord, processing_month: date) -> None:
    current, maturity = _require_dates(record)
    month = first_of_month(processing_month)
    horizon_ceiling = add_months(month, HORIZON_CEILING_MONTHS)
    horizon_floor = add_months(month, HORIZON_FLOOR_MONTHS)

    if maturity < current:
        _log.debug(
            "Instrument %s: maturity %s before current date %s, rolling schedule to current date",
            record.instrument_key, maturity, current,
        )
        record.maturity_date = current
        for name in record.FORWARD_DATE_FIELDS:
            setattr(record, name, current)
    elif maturity >= horizon_ceiling:
        _log.debug(
            "Instrument %s: maturity %s beyond horizon, capped at %s",
            record.instrument_key, maturity, horizon_floor,
        )
        record.maturity_date = horizon_floor


def apply_balloon_floor(record: ShapeRecord) -> None:
    if not record.HAS_BALLOON:
        return
    balloon = record.balloon_date  # type: ignore[union-attr]
    current = record.current_date
    if balloon is None or current is None or balloon >= current:
        return

    _log.debug(
        "Instrument %s: balloon %s before current date %s, rolling schedule to current date",
        record.instrument_key, balloon, current,
    )
    for name in record.FORWARD_DATE_FIELDS:
        setattr(record, name, current)


def advance_schedule_date(
    value: date,
    current: date,
    maturity: date,
    frequency_months: int,
) -> date:
    """
    Step *value* forward by *frequency_months* until it is >= *current*.

    Each step starts from the previous result (month-end drift included).
    If a step lands past *maturity* the result is *maturity*.
    """
    while value < current:
        value = add_months(value, frequency_months)
        if value > maturity:
            return maturity
    return value


def apply_schedule_advancement(record: ShapeRecord) -> None:
    current, maturity = _require_dates(record)
    frequency = int(record.payment_frequency_months or 0)

    for name in record.RECURRING_DATE_FIELDS:
        value = getattr(record, name)
        if value is None:
            continue
        if value > maturity:
            setattr(record, name, maturity)
            continue
        if value >= current:
            continue
        if frequency <= 0:
            _log.warning(
                "Instrument %s: cannot advance %s with payment frequency %s, set to current date",
                record.instrument_key, name, frequency,
            )
            setattr(record, name, current)
            continue
        setattr(record, name, advance_schedule_date(value, current, maturity, frequency))


# ── Entry point ───────────────────────────────────────────────────────────

def apply_business_rules(
    shape: ShapeCategory,
    record: ShapeRecord | None,
    processing_month: date,
) -> ShapeCategory:
    """
    Repair *record* in place and return the effective shape.

    ``ShapeCategory.NONE`` (or no record) returns NONE untouched.  A record whose
    own shape disagrees with *shape* is treated as unmatched as well.
    """
    if shape is ShapeCategory.NONE or record is None or record.SHAPE is not shape:
        return ShapeCategory.NONE

    apply_maturity_floor_cap(record, processing_month)
    apply_balloon_floor(record)
    apply_schedule_advancement(record)
    return shape
