"""Control flags passed to the projection engine on every call."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from almproc import config
from almproc.core.months import first_of_month


@dataclass
class DumpPaths:
    input: Path
    cash_flow: Path
    income_accrual: Path
    economic_value: Path
    gap: Path


@dataclass
class ControlFlags:
    calc_cash_flow: bool = False
    calc_income_accrual: bool = False
    income_accrual_start_date: date | None = None
    num_income_accrual_periods: int = 0
    calc_economic_value: bool = False
    num_economic_value_points: int = 0
    economic_value_points: list[date] = field(default_factory=list)
    calc_gap: bool = False
    log_flag: bool = False
    dump_paths: DumpPaths | None = None


def dump_paths_for(processing_month: date, dump_dir: Path) -> DumpPaths:
    """Diagnostic spreadsheet paths for one processing month (``INPDump_1_2026.xls``…)."""
    suffix = f"_{processing_month.month}_{processing_month.year}.xls"
    return DumpPaths(
        input=dump_dir / f"INPDump{suffix}",
        cash_flow=dump_dir / f"CFDump{suffix}",
        income_accrual=dump_dir / f"IADump{suffix}",
        economic_value=dump_dir / f"EVDump{suffix}",
        gap=dump_dir / f"GAPDump{suffix}",
    )


def new_control_flags(
    processing_month: date,
    *,
    dump_enabled: bool | None = None,
    dump_dir: Path | None = None,
) -> ControlFlags:
    """Session-level flags: logging/dump settings only, nothing requested yet."""
    enabled = config.DATA_DUMP_ENABLED if dump_enabled is None else dump_enabled
    flags = ControlFlags()
    if enabled:
        flags.log_flag = True
        flags.dump_paths = dump_paths_for(
            first_of_month(processing_month),
            dump_dir if dump_dir is not None else config.DATA_DUMP_DIR,
        )
    return flags


def _has_first_slot(economic_value: Sequence[Any] | None) -> bool:
    return economic_value is not None and len(economic_value) > 0 and economic_value[0] is not None


def build_control_flags(
    flags: ControlFlags,
    processing_month: date,
    *,
    cash_flow: Any = None,
    income_accrual: Any = None,
    economic_value: Sequence[Any] | None = None,
) -> ControlFlags:
    """
    Set the calculation switches on *flags* from which sinks the caller supplied.

    Mutates and returns *flags* (the processor keeps one instance per session).
    Gap is never requested.
    """
    flags.calc_cash_flow = cash_flow is not None

    if income_accrual is not None:
        flags.calc_income_accrual = True
        flags.income_accrual_start_date = processing_month
        flags.num_income_accrual_periods = config.INCOME_ACCRUAL_PERIODS
    else:
        flags.calc_income_accrual = False

    if _has_first_slot(economic_value):
        flags.calc_economic_value = True
        flags.num_economic_value_points = config.ECONOMIC_VALUE_POINTS
        flags.economic_value_points = [processing_month]
    else:
        flags.calc_economic_value = False

    flags.calc_gap = False
    return flags
