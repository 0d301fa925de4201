"""dosestack: beam dose volume assembly and summation for RTDOSE data."""

from dosestack.array_tools import expand_vector, indgen, is_segmented, zeros
from dosestack.arrays import (
    DoseAggregate,
    DoseSlice,
    DoseVolume,
    FrameReference,
    PlanReference,
)
from dosestack.config import SeriesInfo, SummationConfig

__version__ = "0.1.0"

__all__ = [
    "DoseAggregate",
    "DoseSlice",
    "DoseVolume",
    "FrameReference",
    "PlanReference",
    "SeriesInfo",
    "SummationConfig",
    "expand_vector",
    "indgen",
    "is_segmented",
    "zeros",
]
