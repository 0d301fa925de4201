"""Protocols and reference types for the arrays module."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from pydicom.dataset import Dataset


@dataclass(frozen=True)
class FrameReference:
    """Opaque reference to the spatial frame a dose volume is defined in.

    Attributes:
        uid: Frame of Reference UID.
    """

    uid: str

    @classmethod
    def from_dicom(cls, ds: Dataset) -> FrameReference:
        """Create a FrameReference from a dataset's FrameOfReferenceUID."""
        return cls(uid=str(ds.FrameOfReferenceUID))


@dataclass(frozen=True)
class PlanReference:
    """Opaque reference to the treatment plan a dose series belongs to.

    Attributes:
        uid: SOP Instance UID of the referenced RTPLAN, None if unknown.
        label: Optional human readable plan label.
    """

    uid: str | None
    label: str | None = None

    @classmethod
    def from_dicom(cls, ds: Dataset) -> PlanReference:
        """Create a PlanReference from a dose dataset's ReferencedRTPlanSequence.

        Dose files exported without a plan reference yield a reference with
        ``uid`` set to None.
        """
        sequence = getattr(ds, "ReferencedRTPlanSequence", None)
        if not sequence:
            return cls(uid=None)
        return cls(uid=str(sequence[0].ReferencedSOPInstanceUID))


@runtime_checkable
class DoseGrid(Protocol):
    """Protocol for objects exposing a stacked 3D dose grid."""

    @property
    def scaling(self) -> float | None:
        """Return the factor converting raw values to physical dose."""
        ...

    @property
    def slice_positions(self) -> tuple[float, ...]:
        """Return the position of each slice along the stacking axis."""
        ...

    @property
    def raw_array(self) -> NDArray[np.number]:
        """Return the stored (Z, Y, X) array."""
        ...

    @property
    def dose_array(self) -> NDArray[np.floating]:
        """Return the (Z, Y, X) array in physical dose units."""
        ...
