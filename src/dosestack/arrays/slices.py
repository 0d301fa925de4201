"""DoseSlice class for single axial dose planes."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from dosestack.arrays.exceptions import InvalidArgumentError, ShapeMismatchError


class DoseSlice:
    """One 2D cross-section of a dose volume.

    The pixel array is stored as (Y, X), i.e. (rows, columns).

    Attributes:
        uid: SOP Instance UID (or any identifier) of the slice.
        position: Position along the stacking axis in mm.
    """

    uid: str
    position: float
    _pixel_array: NDArray[np.number]

    def __init__(
        self,
        uid: str,
        position: float,
        pixel_array: NDArray[np.number],
        columns: int | None = None,
        rows: int | None = None,
    ) -> None:
        """Initialize DoseSlice.

        Args:
            uid: Slice identifier.
            position: Position along the stacking axis in mm.
            pixel_array: 2D array with shape (rows, columns).
            columns: Declared number of columns, checked against the array.
            rows: Declared number of rows, checked against the array.

        Raises:
            InvalidArgumentError: If uid is not a string or pixel_array is not
                an ndarray.
            ShapeMismatchError: If the array is not 2D or disagrees with the
                declared columns/rows.
        """
        if not isinstance(uid, str):
            raise InvalidArgumentError(
                f"Expected a string 'uid', got {type(uid).__name__}"
            )
        if not isinstance(pixel_array, np.ndarray):
            raise InvalidArgumentError(
                f"Expected an ndarray 'pixel_array', got {type(pixel_array).__name__}"
            )
        if pixel_array.ndim != 2:
            raise ShapeMismatchError(
                f"Slice pixel array must be 2D, got {pixel_array.ndim} dimensions",
                actual=pixel_array.shape,
            )
        declared = (
            pixel_array.shape[0] if rows is None else rows,
            pixel_array.shape[1] if columns is None else columns,
        )
        if declared != pixel_array.shape:
            raise ShapeMismatchError(expected=declared, actual=pixel_array.shape)

        self.uid = uid
        self.position = float(position)
        self._pixel_array = pixel_array

    @classmethod
    def from_frame(
        cls,
        uid: str,
        position: float,
        frame: NDArray[np.number],
    ) -> DoseSlice:
        """Create a DoseSlice from one frame of a multi-frame pixel array.

        The frame is copied so the slice does not keep the full parent
        buffer alive.
        """
        return cls(uid=uid, position=position, pixel_array=np.array(frame, copy=True))

    @property
    def pixel_array(self) -> NDArray[np.number]:
        """Return the (rows, columns) pixel array."""
        return self._pixel_array

    @property
    def rows(self) -> int:
        """Return number of rows (Y dimension)."""
        return self._pixel_array.shape[0]

    @property
    def columns(self) -> int:
        """Return number of columns (X dimension)."""
        return self._pixel_array.shape[1]

    @property
    def is_zero(self) -> bool:
        """Return whether every pixel value is zero."""
        return not np.any(self._pixel_array)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DoseSlice):
            return NotImplemented
        return (
            self.uid == other.uid
            and self.position == other.position
            and self._pixel_array.shape == other._pixel_array.shape
            and bool(np.array_equal(self._pixel_array, other._pixel_array))
        )

    def __hash__(self) -> int:
        return hash((self.uid, self.position, self.columns, self.rows))

    def __repr__(self) -> str:
        return (
            f"DoseSlice(uid={self.uid!r}, position={self.position}, "
            f"columns={self.columns}, rows={self.rows})"
        )
