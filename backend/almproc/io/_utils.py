"""Shared IO utilities: table access and cell parsing."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

import numpy as np
import pandas as pd


def table_from_connection(connection: Any, table_name: str) -> pd.DataFrame:
    """Fetch *table_name* from a connection mapping (table name -> DataFrame)."""
    if not isinstance(connection, Mapping):
        raise TypeError(
            f"connection debe ser Mapping[str, DataFrame], recibido {type(connection).__name__}"
        )
    if table_name not in connection:
        raise KeyError(
            f"Tabla no encontrada: {table_name!r}. Disponibles: {sorted(connection.keys())}"
        )
    table = connection[table_name]
    if not isinstance(table, pd.DataFrame):
        raise TypeError(f"Tabla {table_name!r} no es un DataFrame")
    return table


def norm_token(value: Any) -> str | None:
    """Normalise a cell value to a stripped string, or None if blank/NaN."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    s = str(value).strip()
    return s if s else None


def parse_number(value: Any) -> float | None:
    """Parse a numeric value with flexible decimal/thousand separators."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        return float(value)

    s = str(value).strip().replace(" ", "")
    if s == "":
        return None

    if "," in s and "." in s:
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif "," in s:
        s = s.replace(",", ".")

    try:
        return float(s)
    except ValueError:
        return None


def parse_int(value: Any) -> int | None:
    """Integer cell (month counts, codes); floats from NaN-padded columns are accepted."""
    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        return int(value)
    v = parse_number(value)
    if v is None:
        return None
    return int(round(v))


def parse_date(value: Any, *, dayfirst: bool) -> date | None:
    """Parse a date value; returns datetime.date or None."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    dt = pd.to_datetime(value, errors="coerce", dayfirst=dayfirst)
    if pd.isna(dt):
        return None
    return dt.date()
