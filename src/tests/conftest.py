"""Shared fixtures for dosestack tests."""

from __future__ import annotations

from typing import Any

import numpy as np
import pytest


class MockDicomDataset:
    """Mock pydicom Dataset for testing."""

    def __init__(self, **kwargs: Any):
        for key, value in kwargs.items():
            setattr(self, key, value)


def make_dose_file(
    sop_uid: str,
    pixels: np.ndarray,
    series_uid: str = "1.2.3.4.7",
    scaling: float = 0.001,
    **overrides: Any,
) -> MockDicomDataset:
    """Create a mock multi-frame RTDOSE file."""
    frames = pixels.shape[0]
    attrs: dict[str, Any] = {
        "StudyInstanceUID": "1.2.3.4.5",
        "SeriesInstanceUID": series_uid,
        "SOPInstanceUID": sop_uid,
        "FrameOfReferenceUID": "1.2.3.4.6",
        "PatientID": "TEST001",
        "Modality": "RTDOSE",
        "DoseSummationType": "BEAM",
        "DoseUnits": "GY",
        "DoseGridScaling": scaling,
        "NumberOfFrames": frames,
        "Rows": pixels.shape[1],
        "Columns": pixels.shape[2],
        "PixelSpacing": [2.5, 2.5],
        "ImagePositionPatient": [-125.0, -125.0, -5.0],
        "GridFrameOffsetVector": [2.5 * i for i in range(frames)],
        "SeriesDate": "20050523",
        "SeriesTime": "102219",
        "SeriesDescription": "MC",
        "ReferencedRTPlanSequence": [
            MockDicomDataset(ReferencedSOPInstanceUID="1.2.3.4.8")
        ],
        "pixel_array": pixels,
    }
    attrs.update(overrides)
    return MockDicomDataset(**attrs)


@pytest.fixture
def mock_beam_dose_files() -> list[MockDicomDataset]:
    """Three beam dose files plus one all-zero file of the same series."""
    rng = np.random.default_rng(0)
    files = [
        make_dose_file(
            f"1.2.3.4.10.{i}",
            rng.integers(1, 1000, size=(4, 6, 5), dtype=np.uint32),
        )
        for i in range(1, 4)
    ]
    files.append(
        make_dose_file("1.2.3.4.10.9", np.zeros((4, 6, 5), dtype=np.uint32))
    )
    return files


@pytest.fixture
def mock_empty_dose_file() -> MockDicomDataset:
    """An RTDOSE file declaring zero frames."""
    return make_dose_file(
        "1.2.3.4.11.1",
        np.zeros((0, 6, 5), dtype=np.uint32),
        NumberOfFrames=0,
        GridFrameOffsetVector=[],
    )


@pytest.fixture
def mock_ct_file() -> MockDicomDataset:
    """A single non-dose file."""
    return MockDicomDataset(
        StudyInstanceUID="1.2.3.4.5",
        SeriesInstanceUID="1.2.3.4.9",
        SOPInstanceUID="1.2.3.4.9.1",
        FrameOfReferenceUID="1.2.3.4.6",
        PatientID="TEST001",
        Modality="CT",
        pixel_array=np.zeros((8, 8), dtype=np.int16),
    )


@pytest.fixture
def dose_file_factory():
    """Return the mock RTDOSE file factory."""
    return make_dose_file
