from .context import LookUpContext, MappingContext
from .instrument_mapper import FrameInstrumentMapper
from .lookup_cache import FrameLookUpCache

__all__ = [
    "LookUpContext",
    "MappingContext",
    "FrameInstrumentMapper",
    "FrameLookUpCache",
]
