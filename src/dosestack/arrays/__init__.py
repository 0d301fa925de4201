"""Arrays subpackage for dosestack.

This module provides classes for assembling and combining dose grids:
- DoseSlice: A single 2D dose plane
- DoseVolume: An ordered stack of slices with a dose scaling
- DoseAggregate: All beam dose volumes of one RTDOSE series

Also provides reference types, protocols and exceptions.
"""

from dosestack.arrays.aggregate import DoseAggregate
from dosestack.arrays.exceptions import (
    ArrayError,
    DoseTypeError,
    EmptyAggregateError,
    EmptyVolumeError,
    InvalidArgumentError,
    InvalidScalingError,
    InvalidStateError,
    MetadataMismatchError,
    ShapeMismatchError,
    VolumeNotFoundError,
)
from dosestack.arrays.protocols import DoseGrid, FrameReference, PlanReference
from dosestack.arrays.slices import DoseSlice
from dosestack.arrays.volume import DoseVolume

__all__ = [
    # Dose classes
    "DoseSlice",
    "DoseVolume",
    "DoseAggregate",
    # References and protocols
    "FrameReference",
    "PlanReference",
    "DoseGrid",
    # Exceptions
    "ArrayError",
    "InvalidArgumentError",
    "ShapeMismatchError",
    "EmptyVolumeError",
    "EmptyAggregateError",
    "VolumeNotFoundError",
    "InvalidScalingError",
    "InvalidStateError",
    "MetadataMismatchError",
    "DoseTypeError",
]
