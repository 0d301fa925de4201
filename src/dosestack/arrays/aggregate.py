"""DoseAggregate class holding the beam dose volumes of one RTDOSE series."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from pydicom.uid import generate_uid

from dosestack.arrays.exceptions import (
    DoseTypeError,
    EmptyAggregateError,
    InvalidArgumentError,
    MetadataMismatchError,
    ShapeMismatchError,
    VolumeNotFoundError,
)
from dosestack.arrays.protocols import PlanReference
from dosestack.arrays.slices import DoseSlice
from dosestack.arrays.volume import DoseVolume
from dosestack.config import SeriesInfo, SummationConfig
from dosestack.dicom_utils import attr_shared, is_empty_dose, validate_fields
from dosestack.log_util import get_logger

if TYPE_CHECKING:
    from pydicom.dataset import Dataset

logger = get_logger("arrays.aggregate")

RTDOSE_MODALITY = "RTDOSE"
RTDOSE_STORAGE_CLASS_UID = "1.2.840.10008.5.1.4.1.1.481.2"

# attributes every beam dose grid of one series must agree on
GRID_FIELDS = ["FrameOfReferenceUID", "Rows", "Columns"]


class DoseAggregate:
    """All beam dose volumes of one RTDOSE series.

    Volumes are kept in insertion order and are never removed. The
    aggregate can combine its volumes into a single total dose volume
    with ``sum``.

    Attributes:
        series_uid: Series Instance UID of the dose series.
        plan: Reference to the plan the dose was computed for.
        info: Optional series date, time and description.
        modality: Always 'RTDOSE'.
        class_uid: RT Dose Storage SOP Class UID.
    """

    modality: str = RTDOSE_MODALITY
    class_uid: str = RTDOSE_STORAGE_CLASS_UID

    def __init__(
        self,
        series_uid: str,
        plan: PlanReference,
        info: SeriesInfo | None = None,
    ) -> None:
        """Initialize an empty DoseAggregate.

        Args:
            series_uid: Series Instance UID.
            plan: Reference to the owning plan.
            info: Optional descriptive series metadata.

        Raises:
            InvalidArgumentError: If series_uid is not a string, plan is not a
                PlanReference or info is not a SeriesInfo.
        """
        if not isinstance(series_uid, str):
            raise InvalidArgumentError(
                f"Expected a string 'series_uid', got {type(series_uid).__name__}"
            )
        if not isinstance(plan, PlanReference):
            raise InvalidArgumentError(
                f"Expected a PlanReference 'plan', got {type(plan).__name__}"
            )
        if info is None:
            info = SeriesInfo()
        elif not isinstance(info, SeriesInfo):
            raise InvalidArgumentError(
                f"Expected a SeriesInfo 'info', got {type(info).__name__}"
            )
        self.series_uid = series_uid
        self.plan = plan
        self.info = info
        self._volumes: list[DoseVolume] = []

    @classmethod
    def from_dicom(
        cls,
        dcms: Dataset | list[Dataset],
        plan: PlanReference | None = None,
    ) -> DoseAggregate:
        """Create a DoseAggregate from the RTDOSE files of one series.

        Files whose dose grid is degenerate (zero frames, no pixel data or
        only zero values) are skipped; planning systems may export such a
        file next to the real beam doses.

        Args:
            dcms: A single pydicom Dataset or a list of Datasets.
            plan: Plan reference; read from ReferencedRTPlanSequence when None.

        Returns:
            New DoseAggregate holding one volume per non-empty file.

        Raises:
            ValueError: If dcms is empty.
            DoseTypeError: If a file is not of modality RTDOSE.
            MetadataMismatchError: If files belong to different series or
                their dose grids differ in frame of reference, rows or columns.
        """
        if not isinstance(dcms, list):
            dcms = [dcms]
        if not dcms:
            raise ValueError("dcms cannot be empty")

        for dcm in dcms:
            modality = str(getattr(dcm, "Modality", ""))
            if modality != RTDOSE_MODALITY:
                raise DoseTypeError(expected=RTDOSE_MODALITY, actual=modality)

        if not attr_shared(dcms, "SeriesInstanceUID"):
            raise MetadataMismatchError(
                attribute="SeriesInstanceUID",
                message="Dose files belong to more than one series",
            )

        ref_file = dcms[0]
        if plan is None:
            plan = PlanReference.from_dicom(ref_file)
        aggregate = cls(
            series_uid=str(ref_file.SeriesInstanceUID),
            plan=plan,
            info=SeriesInfo.from_dicom(ref_file),
        )

        candidates = []
        for dcm in dcms:
            if is_empty_dose(dcm):
                logger.info(
                    f"Skipping dose file without a dose grid {getattr(dcm, 'SOPInstanceUID', '?')}"
                )
                continue
            candidates.append(dcm)
        validate_fields(candidates, GRID_FIELDS)

        for dcm in candidates:
            volume = DoseVolume.from_dicom(dcm)
            if volume.is_empty:
                logger.info(f"Skipping all-zero dose volume {volume.uid}")
                continue
            aggregate.add_volume(volume)

        logger.debug(
            f"Loaded dose series {aggregate.series_uid} with "
            f"{len(aggregate.volumes)} of {len(dcms)} volumes"
        )
        return aggregate

    @property
    def volumes(self) -> tuple[DoseVolume, ...]:
        """Return the dose volumes in insertion order."""
        return tuple(self._volumes)

    @property
    def date(self) -> str | None:
        return self.info.date

    @property
    def time(self) -> str | None:
        return self.info.time

    @property
    def description(self) -> str | None:
        return self.info.description

    def add_volume(self, volume: DoseVolume) -> None:
        """Add a dose volume, ignoring a volume instance already present.

        Args:
            volume: Dose volume to add.

        Raises:
            InvalidArgumentError: If volume is not a DoseVolume.
        """
        if not isinstance(volume, DoseVolume):
            raise InvalidArgumentError(
                f"Expected a DoseVolume 'volume', got {type(volume).__name__}"
            )
        if any(v is volume for v in self._volumes):
            return
        self._volumes.append(volume)

    def volume(self, uid: str | None = None) -> DoseVolume:
        """Return a dose volume by UID, or the first volume when uid is None.

        Args:
            uid: SOP Instance UID of the wanted volume.

        Returns:
            The first matching DoseVolume.

        Raises:
            InvalidArgumentError: If uid is given but is not a string.
            VolumeNotFoundError: If no volume matches.
        """
        if uid is None:
            if not self._volumes:
                raise VolumeNotFoundError(None)
            return self._volumes[0]
        if not isinstance(uid, str):
            raise InvalidArgumentError(
                f"Expected a String volume UID, got {type(uid).__name__}"
            )
        for vol in self._volumes:
            if vol.uid == uid:
                return vol
        raise VolumeNotFoundError(uid, available=[v.uid for v in self._volumes])

    def sum(self, config: SummationConfig | None = None) -> DoseVolume:
        """Sum all beam dose volumes into one total dose volume.

        The physical doses of all volumes are added voxel by voxel. The
        total is stored as an unsigned integer array together with a new
        scaling, chosen so that the maximum total dose maps to the largest
        value representable with ``config.bits_allocated`` bits. The error
        per voxel is therefore at most half the resulting scaling.

        The result takes its slice positions from the first volume, gets a
        newly generated UID and is not added to the aggregate. Volumes
        without slices are ignored and source volumes are left untouched.

        Args:
            config: Summation options, defaults to SummationConfig().

        Returns:
            New DoseVolume holding the total dose.

        Raises:
            EmptyAggregateError: If the aggregate has no volume with slices.
            ShapeMismatchError: If the volumes do not share one grid shape.
            ValueError: If the total dose contains negative values.
        """
        if config is None:
            config = SummationConfig()
        # volumes without slices contribute nothing
        volumes = [v for v in self._volumes if len(v) > 0]
        if not volumes:
            raise EmptyAggregateError(self.series_uid)

        reference = volumes[0]
        total = reference.dose_array
        for vol in volumes[1:]:
            dose = vol.dose_array
            if dose.shape != total.shape:
                raise ShapeMismatchError(
                    f"Dose volume {vol.uid} has shape {dose.shape}, "
                    f"expected {total.shape} as in {reference.uid}",
                    expected=total.shape,
                    actual=dose.shape,
                )
            if vol.slice_positions != reference.slice_positions:
                logger.warning(
                    f"Dose volume {vol.uid} has different slice positions than "
                    f"{reference.uid}; using the positions of {reference.uid}"
                )
            total += dose

        if total.min() < 0:
            raise ValueError("Cannot store a total dose with negative values")

        max_dose = float(total.max())
        scaling = max_dose / config.max_pixel_value if max_dose > 0 else 1.0
        dtype = np.uint32 if config.bits_allocated == 32 else np.uint16
        pixels = np.clip(np.rint(total / scaling), 0, config.max_pixel_value).astype(dtype)

        summed = DoseVolume(uid=generate_uid(), frame=reference.frame, scaling=scaling)
        for position, frame in zip(reference.slice_positions, pixels, strict=True):
            summed.append(
                DoseSlice(uid=generate_uid(), position=position, pixel_array=frame)
            )
        logger.debug(
            f"Summed {len(volumes)} dose volumes of series {self.series_uid}, "
            f"max dose {max_dose:.4f}"
        )
        return summed

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DoseAggregate):
            return NotImplemented
        return self._state() == other._state()

    def __hash__(self) -> int:
        return hash(self._state())

    def _state(self) -> tuple:
        return (
            self.series_uid,
            self.plan,
            self.info,
            self.modality,
            self.class_uid,
        )

    def __repr__(self) -> str:
        return (
            f"DoseAggregate(series_uid={self.series_uid!r}, "
            f"volumes={len(self._volumes)})"
        )
