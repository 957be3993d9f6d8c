"""Defaults for the instrument processor: store names, horizons, engine knobs."""

from __future__ import annotations

import os
from pathlib import Path

# Fallback table/field pairing when Init receives no MappingContext.
DEFAULT_INSTRUMENT_TABLE = "BP_INSTRUMENT_HISTORY"
DEFAULT_INSTRUMENT_DATE_FIELD = "INSTRUMENT_HISTORY_D"

# Reference-data tables read by the lookup cache.
DEFAULT_BASE_RATE_TABLE = "BP_BASE_RATE"
DEFAULT_YIELD_CURVE_RATE_TABLE = "BP_YIELD_CURVE_RATE"
DEFAULT_YIELD_CURVE_TABLE = "BP_YIELD_CURVE"
DEFAULT_PREPAYMENT_SPEED_TABLE = "BP_PREPAYMENT_SPEED"
DEFAULT_PREPAYMENT_SPEED_DETAIL_TABLE = "BP_PREPAYMENT_SPEED_DETAIL"
DEFAULT_SPEED_PERCENTAGE_TABLE = "BP_SPEED_PERCENTAGE"

BASE_RATE_COLUMNS = {
    "index": "RATE_INDEX",
    "month": "RATE_MONTH",
    "rate": "RATE",
}

# Maturity horizon, counted from the processor's processing month.
HORIZON_CEILING_MONTHS: int = 480
HORIZON_FLOOR_MONTHS: int = 479

# Projection-engine control knobs.
INCOME_ACCRUAL_PERIODS: int = 120
ECONOMIC_VALUE_POINTS: int = 1

# Plausible range for repricing dates read from the store.
REPRICING_DATE_MIN_YEAR: int = 1900
REPRICING_DATE_MAX_YEARS_AHEAD: int = 100

# Used when the store has no payment frequency for an instrument.
DEFAULT_PAYMENT_FREQUENCY_MONTHS: int = 1

# Pre-fetched row overload: where the key and the raw type code live.
ROW_KEY_FIELD = "INSTRUMENT_K"
ROW_TYPE_FIELD = "INSTRUMENT_TYPE"

# Store column -> record field.  Columns absent from a shape's record are ignored.
INSTRUMENT_COLUMNS_MAP = {
    "INSTRUMENT_K": "instrument_key",
    "CURRENT_D": "current_date",
    "MATURITY_D": "maturity_date",
    "NEXT_INTEREST_PAYMENT_D": "next_interest_payment_date",
    "NEXT_PRINCIPAL_PAYMENT_D": "next_principal_payment_date",
    "NEXT_PRIN_INTR_PAYMENT_D": "next_payment_date",
    "NEXT_REPRICING_D": "next_repricing_date",
    "NEXT_PREPAYMENT_D": "next_prepayment_date",
    "BALLOON_D": "balloon_date",
    "PAYMENT_FREQ_M": "payment_frequency_months",
    "CALL_PUT_FREQ_M": "call_put_frequency_months",
    "EV_DISC_METHOD": "economic_value_discount_method",
    "BALANCE": "balance",
    "INTEREST_RATE": "interest_rate",
    "RATE_INDEX": "rate_index",
}

# Store dates are ISO or day-first strings; day-first parsing only for text.
DATE_DAYFIRST: bool = False

# Diagnostic dumps.  The engine writes them; the core only supplies the paths.
# In dev the folder defaults to backend/almproc/data_dump/.
DATA_DUMP_ENABLED: bool = os.environ.get("ALMPROC_DATA_DUMP", "").strip().lower() == "true"
_dump_root = os.environ.get("ALMPROC_DUMP_DIR")
DATA_DUMP_DIR = Path(_dump_root) if _dump_root else Path(__file__).resolve().parent.parent / "data_dump"
