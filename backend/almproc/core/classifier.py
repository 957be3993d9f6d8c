"""
Raw instrument type code -> repayment shape.

Source codes (store column INSTRUMENT_TYPE):
  1  At maturity      -> Bullet
  2  Amortized        -> Amortizing
  3  Call             -> Bullet
  4  Put              -> Bullet
  5  Spread evenly    -> SpreadEvenly

Call and put instruments share the bullet data shape; anything else is
``ShapeCategory.NONE`` (nothing to project, not an error).
"""

from __future__ import annotations

from almproc.core.shapes import ShapeCategory

_TYPE_CODE_SHAPE: dict[int, ShapeCategory] = {
    1: ShapeCategory.BULLET,
    2: ShapeCategory.AMORTIZING,
    3: ShapeCategory.BULLET,
    4: ShapeCategory.BULLET,
    5: ShapeCategory.SPREAD_EVENLY,
}


def classify(raw_type_code: int) -> ShapeCategory:
    """Map a raw instrument type code to its shape category. Never raises."""
    if isinstance(raw_type_code, bool):
        return ShapeCategory.NONE
    try:
        value = float(raw_type_code)
    except (TypeError, ValueError, OverflowError):
        return ShapeCategory.NONE
    # Only integral codes; 2.7 is not a type code.
    if not value.is_integer():
        return ShapeCategory.NONE
    return _TYPE_CODE_SHAPE.get(int(value), ShapeCategory.NONE)
