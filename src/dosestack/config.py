"""Configuration dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


@dataclass(frozen=True)
class SeriesInfo:
    """Optional descriptive metadata of a dose series.

    All fields are opaque strings as found in the DICOM header.

    Attributes:
        date: Series date (DA, e.g. '20050523').
        time: Series time (TM, e.g. '102219').
        description: Free-text series description.
    """

    date: str | None = None
    time: str | None = None
    description: str | None = None

    @classmethod
    def from_dicom(cls, ds: Any) -> SeriesInfo:
        """Read SeriesDate, SeriesTime and SeriesDescription from a dataset."""

        def _value(attr: str) -> str | None:
            value = getattr(ds, attr, None)
            if value is None or value == "":
                return None
            return str(value)

        return cls(
            date=_value("SeriesDate"),
            time=_value("SeriesTime"),
            description=_value("SeriesDescription"),
        )


@dataclass(frozen=True)
class SummationConfig:
    """Configuration for summing beam dose volumes.

    Attributes:
        bits_allocated: Bit depth of the unsigned integer raw array that
            stores the summed dose. The scaling of the result is chosen so
            the maximum summed dose maps to the largest representable value.
            - 32: quantisation error far below float32 precision
            - 16: matches the most common RTDOSE export depth
    """

    bits_allocated: Literal[16, 32] = field(default=32)

    def __post_init__(self) -> None:
        if self.bits_allocated not in (16, 32):
            raise ValueError(
                f"bits_allocated must be 16 or 32, got {self.bits_allocated}"
            )

    @property
    def max_pixel_value(self) -> int:
        """Return the largest value the raw array can hold."""
        return 2**self.bits_allocated - 1

    @classmethod
    def from_dict(cls, options: dict[str, Any]) -> SummationConfig:
        """Create SummationConfig from a plain dictionary.

        Unknown keys are rejected so misspelled options do not pass silently.

        Args:
            options: Mapping of field names to values.

        Returns:
            SummationConfig with the given values.
        """
        unknown = set(options) - {"bits_allocated"}
        if unknown:
            raise ValueError(f"Unknown summation options: {sorted(unknown)}")
        return cls(**options)
