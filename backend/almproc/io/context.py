"""Store table/field names handed to the processor at Init."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date

from almproc import config


@dataclass
class LookUpContext:
    """Reference-data tables read by the lookup cache."""
    base_rate_table: str = config.DEFAULT_BASE_RATE_TABLE
    yield_curve_rate_table: str = config.DEFAULT_YIELD_CURVE_RATE_TABLE
    yield_curve_table: str = config.DEFAULT_YIELD_CURVE_TABLE
    prepayment_speed_table: str = config.DEFAULT_PREPAYMENT_SPEED_TABLE
    prepayment_speed_detail_table: str = config.DEFAULT_PREPAYMENT_SPEED_DETAIL_TABLE
    speed_percentage_table: str = config.DEFAULT_SPEED_PERCENTAGE_TABLE
    base_rate_start_month: date | None = None
    base_rate_end_month: date | None = None


@dataclass
class MappingContext(LookUpContext):
    """Lookup tables plus the instrument table and its as-of date column."""
    instrument_table: str = config.DEFAULT_INSTRUMENT_TABLE
    instrument_date_field: str = config.DEFAULT_INSTRUMENT_DATE_FIELD

    def lookup_context(self) -> LookUpContext:
        """The reference-data subset, as the lookup cache expects it."""
        return LookUpContext(
            **{f.name: getattr(self, f.name) for f in fields(LookUpContext)}
        )
