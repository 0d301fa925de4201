"""Custom exceptions for the arrays module."""

from __future__ import annotations


class ArrayError(Exception):
    """Base exception for all array-related errors."""

    pass


class InvalidArgumentError(ArrayError, TypeError):
    """Raised when an operation receives an argument of the wrong type."""

    pass


class ShapeMismatchError(ArrayError, ValueError):
    """Raised when array or volume dimensions do not line up."""

    def __init__(
        self,
        message: str | None = None,
        expected: tuple[int, ...] | None = None,
        actual: tuple[int, ...] | None = None,
    ):
        self.expected = expected
        self.actual = actual
        if message is None:
            message = f"Expected shape {expected}, got {actual}"
        super().__init__(message)


class EmptyVolumeError(ArrayError, ValueError):
    """Raised when a dose volume without slices is asked for its array."""

    def __init__(self, uid: str | None = None):
        self.uid = uid
        super().__init__(f"Dose volume '{uid}' contains no slices")


class EmptyAggregateError(ArrayError, ValueError):
    """Raised when summing a dose aggregate that holds no volumes."""

    def __init__(self, series_uid: str | None = None):
        self.series_uid = series_uid
        super().__init__(f"Dose series '{series_uid}' contains no dose volumes")


class VolumeNotFoundError(ArrayError, LookupError):
    """Raised when a requested dose volume is not part of the aggregate."""

    def __init__(self, uid: str | None, available: list[str] | None = None):
        self.uid = uid
        self.available = available
        if uid is None:
            message = "Dose series contains no dose volumes"
        else:
            message = f"Dose volume '{uid}' not found"
            if available:
                message += f". Available volumes: {available}"
        super().__init__(message)


class InvalidStateError(ArrayError, RuntimeError):
    """Raised when an operation's precondition has not been met."""

    pass


class MetadataMismatchError(ArrayError, ValueError):
    """Raised when DICOM metadata is incompatible across files."""

    def __init__(self, attribute: str, message: str | None = None):
        self.attribute = attribute
        if message is None:
            message = f"Incompatible metadata for attribute: {attribute}"
        super().__init__(message)


class InvalidScalingError(ArrayError, ValueError):
    """Raised when a dose grid scaling is zero or negative."""

    def __init__(self, value: float):
        self.value = value
        super().__init__(f"Scaling must be positive, got {value}")


class DoseTypeError(ArrayError):
    """Raised when an unexpected dose file type is encountered."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        message = f"Expected dose type '{expected}', got '{actual}'"
        super().__init__(message)
