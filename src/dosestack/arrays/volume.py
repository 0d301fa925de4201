"""DoseVolume class for stacked beam dose grids."""

from __future__ import annotations

import bisect
from numbers import Real
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray
from pydicom.uid import generate_uid

from dosestack.arrays.exceptions import (
    EmptyVolumeError,
    InvalidArgumentError,
    InvalidScalingError,
    InvalidStateError,
    MetadataMismatchError,
    ShapeMismatchError,
)
from dosestack.arrays.protocols import FrameReference
from dosestack.arrays.slices import DoseSlice
from dosestack.log_util import get_logger

if TYPE_CHECKING:
    from pydicom.dataset import Dataset

    from dosestack.arrays.aggregate import DoseAggregate

logger = get_logger("arrays.volume")


class DoseVolume:
    """Dose volume assembled from an ordered stack of DoseSlices.

    Slices are kept sorted by ascending position. The stacked array is
    stored as (Z, Y, X) with the stored (usually integer) values; the
    physical dose is obtained by multiplying with ``scaling``.

    Attributes:
        uid: SOP Instance UID (or any identifier) of the volume.
        frame: Spatial frame the volume is defined in.
    """

    uid: str
    frame: FrameReference
    _scaling: float | None
    _slices: list[DoseSlice]
    _raw_cache: NDArray[np.number] | None

    def __init__(
        self,
        uid: str,
        frame: FrameReference,
        aggregate: DoseAggregate | None = None,
        scaling: float | None = None,
    ) -> None:
        """Initialize an empty DoseVolume.

        Args:
            uid: Volume identifier.
            frame: Frame of reference of the volume.
            aggregate: Optional dose aggregate to register this volume with.
            scaling: Optional factor converting stored values to dose.

        Raises:
            InvalidArgumentError: If uid is not a string or frame is not a
                FrameReference.
        """
        if not isinstance(uid, str):
            raise InvalidArgumentError(
                f"Expected a string 'uid', got {type(uid).__name__}"
            )
        if not isinstance(frame, FrameReference):
            raise InvalidArgumentError(
                f"Expected a FrameReference 'frame', got {type(frame).__name__}"
            )
        self.uid = uid
        self.frame = frame
        self._scaling = None
        self._slices = []
        self._raw_cache = None
        if scaling is not None:
            self.scaling = scaling
        if aggregate is not None:
            aggregate.add_volume(self)

    @classmethod
    def from_dicom(
        cls,
        ds: Dataset,
        aggregate: DoseAggregate | None = None,
    ) -> DoseVolume:
        """Create a DoseVolume from a multi-frame RTDOSE dataset.

        Slice positions are ImagePositionPatient[2] plus the entries of
        GridFrameOffsetVector.

        Args:
            ds: pydicom Dataset with dose grid pixel data.
            aggregate: Optional dose aggregate to register the volume with.

        Returns:
            New DoseVolume with one slice per frame.

        Raises:
            ShapeMismatchError: If the number of frames and offsets differ.
        """
        pixels = np.asarray(ds.pixel_array)
        if pixels.ndim == 2:
            pixels = pixels[np.newaxis, ...]

        offsets = [float(z) for z in ds.GridFrameOffsetVector]
        if len(offsets) != pixels.shape[0]:
            raise ShapeMismatchError(
                f"GridFrameOffsetVector has {len(offsets)} entries "
                f"but pixel data has {pixels.shape[0]} frames",
                expected=(len(offsets),),
                actual=(pixels.shape[0],),
            )

        sop_uid = str(ds.SOPInstanceUID)
        origin = float(ds.ImagePositionPatient[2])
        volume = cls(
            uid=sop_uid,
            frame=FrameReference.from_dicom(ds),
            scaling=float(ds.DoseGridScaling),
        )
        for i, offset in enumerate(offsets):
            volume.append(
                DoseSlice.from_frame(
                    uid=generate_uid(entropy_srcs=[sop_uid, str(i)]),
                    position=origin + offset,
                    frame=pixels[i],
                )
            )
        logger.debug(f"Loaded dose volume {sop_uid} with {len(volume)} slices")

        if aggregate is not None:
            aggregate.add_volume(volume)
        return volume

    @property
    def scaling(self) -> float | None:
        """Return the dose grid scaling, None if never set."""
        return self._scaling

    @scaling.setter
    def scaling(self, value: float) -> None:
        """Set the dose grid scaling; must be a positive number."""
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidArgumentError(
                f"Expected a number for 'scaling', got {type(value).__name__}"
            )
        if value <= 0:
            raise InvalidScalingError(value)
        self._scaling = float(value)

    @property
    def slices(self) -> tuple[DoseSlice, ...]:
        """Return the slices ordered by position."""
        return tuple(self._slices)

    @property
    def slice_positions(self) -> tuple[float, ...]:
        """Return the position of each slice."""
        return tuple(s.position for s in self._slices)

    @property
    def rows(self) -> int | None:
        """Return number of rows (Y dimension), None when empty."""
        return self._slices[0].rows if self._slices else None

    @property
    def columns(self) -> int | None:
        """Return number of columns (X dimension), None when empty."""
        return self._slices[0].columns if self._slices else None

    @property
    def shape(self) -> tuple[int, int, int]:
        """Return (Z, Y, X) shape of the stacked array."""
        if not self._slices:
            return (0, 0, 0)
        return (len(self._slices), self._slices[0].rows, self._slices[0].columns)

    @property
    def is_empty(self) -> bool:
        """Return whether the volume holds no slices or only zero values.

        Loading a series uses this to drop volumes that carry no dose.
        """
        return all(s.is_zero for s in self._slices)

    def __len__(self) -> int:
        return len(self._slices)

    def append(self, dose_slice: DoseSlice) -> None:
        """Insert a slice keeping the stack ordered by position.

        Appending a slice instance that is already part of the volume has no
        effect.

        Args:
            dose_slice: Slice to insert.

        Raises:
            InvalidArgumentError: If dose_slice is not a DoseSlice.
            ShapeMismatchError: If its columns/rows differ from existing slices.
            MetadataMismatchError: If another slice already occupies its position.
        """
        if not isinstance(dose_slice, DoseSlice):
            raise InvalidArgumentError(
                f"Expected a DoseSlice, got {type(dose_slice).__name__}"
            )
        if any(s is dose_slice for s in self._slices):
            return
        if self._slices:
            reference = self._slices[0]
            expected = (reference.rows, reference.columns)
            actual = (dose_slice.rows, dose_slice.columns)
            if expected != actual:
                raise ShapeMismatchError(
                    f"Slice {dose_slice.uid} has (rows, columns) {actual}, "
                    f"volume {self.uid} expects {expected}",
                    expected=expected,
                    actual=actual,
                )

        index = bisect.bisect_left(self.slice_positions, dose_slice.position)
        if (
            index < len(self._slices)
            and self._slices[index].position == dose_slice.position
        ):
            raise MetadataMismatchError(
                attribute="position",
                message=(
                    f"Volume {self.uid} already has a slice at position "
                    f"{dose_slice.position}"
                ),
            )
        self._slices.insert(index, dose_slice)
        self._raw_cache = None

    @property
    def raw_array(self) -> NDArray[np.number]:
        """Return the stacked (Z, Y, X) array of stored values.

        The array is built once and cached until the next append. It is
        read-only so consumers cannot alter the volume through it.

        Raises:
            EmptyVolumeError: If the volume has no slices.
        """
        if not self._slices:
            raise EmptyVolumeError(self.uid)
        if self._raw_cache is None:
            stacked = np.stack([s.pixel_array for s in self._slices], axis=0)
            stacked.flags.writeable = False
            self._raw_cache = stacked
        return self._raw_cache

    @property
    def dose_array(self) -> NDArray[np.floating]:
        """Return the (Z, Y, X) array in physical dose units.

        Raises:
            EmptyVolumeError: If the volume has no slices.
            InvalidStateError: If scaling has not been set.
        """
        if self._scaling is None:
            raise InvalidStateError(f"Scaling of dose volume {self.uid} is not set")
        return self.raw_array.astype(np.float64) * self._scaling

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DoseVolume):
            return NotImplemented
        return (
            self.uid == other.uid
            and self.frame == other.frame
            and self._scaling == other._scaling
            and self._slices == other._slices
        )

    def __hash__(self) -> int:
        return hash(
            (self.uid, self.frame, self._scaling, tuple(s.uid for s in self._slices))
        )

    def __repr__(self) -> str:
        return (
            f"DoseVolume(uid={self.uid!r}, frame={self.frame.uid!r}, "
            f"scaling={self._scaling}, slices={len(self._slices)})"
        )
