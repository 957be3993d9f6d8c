from .business_rules import (
    advance_schedule_date,
    apply_balloon_floor,
    apply_business_rules,
    apply_maturity_floor_cap,
    apply_schedule_advancement,
)
from .collaborators import InstrumentMapper, LookUpCache, ProjectionEngine
from .control import ControlFlags, DumpPaths, build_control_flags, new_control_flags
from .processor import InstrumentProcessor

__all__ = [
    "advance_schedule_date",
    "apply_balloon_floor",
    "apply_business_rules",
    "apply_maturity_floor_cap",
    "apply_schedule_advancement",
    "InstrumentMapper",
    "LookUpCache",
    "ProjectionEngine",
    "ControlFlags",
    "DumpPaths",
    "build_control_flags",
    "new_control_flags",
    "InstrumentProcessor",
]
