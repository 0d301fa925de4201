import numpy as np
from numpy import ndarray
from numpy.typing import DTypeLike

from dosestack.arrays.exceptions import InvalidArgumentError, ShapeMismatchError

# masks with this many foreground pixels or fewer are treated as noise
SEGMENTATION_THRESHOLD = 2


def zeros(*shape: int, dtype: DTypeLike = int) -> ndarray:
    """Create a zero-filled array.

    Args:
        *shape: Length of each dimension.
        dtype: Element type of the array.

    Returns:
        ndarray: New array of the given shape.
    """
    return np.zeros(shape, dtype=dtype)


def indgen(*shape: int, dtype: DTypeLike = int) -> ndarray:
    """Create an array filled with its own flat indices (0, 1, 2, ...).

    Args:
        *shape: Length of each dimension.
        dtype: Element type of the array.

    Returns:
        ndarray: New array of the given shape.
    """
    return np.arange(int(np.prod(shape)), dtype=dtype).reshape(shape)


def expand_vector(vector: ndarray, other: ndarray) -> ndarray:
    """Concatenate two 1D arrays into a new vector.

    When both vectors hold elements the result has the element type of
    ``vector`` and values taken from ``other`` are cast to it. When one of
    them is empty the result is a copy of the other one, unchanged. Neither
    input is modified.

    Args:
        vector (ndarray): Leading vector, decides the element type.
        other (ndarray): Trailing vector.

    Returns:
        ndarray: New vector of length ``len(vector) + len(other)``.

    Raises:
        InvalidArgumentError: If either argument is not an ndarray.
        ShapeMismatchError: If either argument has more than one dimension.
    """
    if not isinstance(vector, ndarray):
        raise InvalidArgumentError(
            f"Expected an ndarray vector, got {type(vector).__name__}"
        )
    if not isinstance(other, ndarray):
        raise InvalidArgumentError(
            f"Expected an ndarray as 'other', got {type(other).__name__}"
        )
    if vector.ndim > 1:
        raise ShapeMismatchError(
            f"Expected self to be a vector, got {vector.ndim} dimensions",
            actual=vector.shape,
        )
    if other.ndim > 1:
        raise ShapeMismatchError(
            f"Expected 'other' to be a vector, got {other.ndim} dimensions",
            actual=other.shape,
        )
    if vector.size == 0:
        return other.ravel().copy()
    if other.size == 0:
        return vector.ravel().copy()
    # 0-d arrays hold a single element
    return np.concatenate([vector.ravel(), other.ravel().astype(vector.dtype)])


def is_segmented(mask: ndarray) -> bool:
    """Check whether a binary mask contains a genuine segmented region.

    Any non-zero element counts as foreground. One or two foreground
    pixels are considered noise.

    Args:
        mask (ndarray): Mask array of any shape.

    Returns:
        bool: True if more than two elements are non-zero.
    """
    return int(np.count_nonzero(mask)) > SEGMENTATION_THRESHOLD
