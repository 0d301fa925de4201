"""Tests for DoseAggregate class."""

import logging

import numpy as np
import pytest

from dosestack.array_tools import indgen
from dosestack.arrays import (
    DoseAggregate,
    DoseSlice,
    DoseTypeError,
    DoseVolume,
    EmptyAggregateError,
    FrameReference,
    InvalidArgumentError,
    MetadataMismatchError,
    PlanReference,
    ShapeMismatchError,
    VolumeNotFoundError,
)
from dosestack.config import SeriesInfo, SummationConfig

SERIES_UID = "1.345.789"


@pytest.fixture
def plan() -> PlanReference:
    return PlanReference("1.456.654")


@pytest.fixture
def frame() -> FrameReference:
    return FrameReference("1.4321")


@pytest.fixture
def dose(plan) -> DoseAggregate:
    return DoseAggregate(SERIES_UID, plan)


@pytest.fixture
def beam_volumes(dose, frame) -> tuple[DoseVolume, DoseVolume]:
    """Two 2-slice beam volumes on a 3 x 2 grid with different scalings."""
    cols, rows = 2, 3
    vol1 = DoseVolume("1.23.787", frame, dose, scaling=2.0)
    vol2 = DoseVolume("1.45.876", frame, dose, scaling=3.0)
    vol1.append(DoseSlice("1.67.11", 0.0, indgen(rows, cols), columns=cols, rows=rows))
    vol1.append(DoseSlice("1.67.12", 2.0, indgen(rows, cols), columns=cols, rows=rows))
    vol2.append(DoseSlice("1.67.21", 4.0, np.full((rows, cols), 1), columns=cols, rows=rows))
    vol2.append(DoseSlice("1.67.23", 6.0, np.full((rows, cols), 2), columns=cols, rows=rows))
    return vol1, vol2


class TestInit:
    """Tests for DoseAggregate construction."""

    def test_defaults(self, dose, plan):
        assert dose.series_uid == SERIES_UID
        assert dose.plan == plan
        assert dose.volumes == ()
        assert dose.modality == "RTDOSE"
        assert dose.class_uid == "1.2.840.10008.5.1.4.1.1.481.2"
        assert dose.date is None
        assert dose.time is None
        assert dose.description is None

    def test_series_info(self, plan):
        info = SeriesInfo(date="20050523", time="102219", description="MC")
        dose = DoseAggregate(SERIES_UID, plan, info)

        assert dose.date == "20050523"
        assert dose.time == "102219"
        assert dose.description == "MC"

    def test_non_string_series_uid(self, plan):
        with pytest.raises(InvalidArgumentError, match="series_uid"):
            DoseAggregate(42, plan)

    def test_non_plan(self):
        with pytest.raises(InvalidArgumentError, match="plan"):
            DoseAggregate(SERIES_UID, "not-a-plan")

    def test_non_series_info(self, plan):
        with pytest.raises(InvalidArgumentError, match="info"):
            DoseAggregate(SERIES_UID, plan, {"date": "20050523"})


class TestEquality:

    def test_same_attributes(self, dose, plan):
        other = DoseAggregate(SERIES_UID, plan)
        assert dose == other
        assert hash(dose) == hash(other)

    def test_different_attributes(self, dose, plan):
        other = DoseAggregate("1.7.99", plan)
        assert dose != other
        assert hash(dose) != hash(other)

    def test_incompatible_type(self, dose):
        assert dose != 42


class TestAddVolume:

    def test_non_volume(self, dose):
        with pytest.raises(InvalidArgumentError, match="'volume'"):
            dose.add_volume("not-a-dose-volume")

    def test_volume_from_other_aggregate(self, dose, plan, frame):
        other = DoseAggregate("1.23.787", plan)
        vol = DoseVolume("1.45.876", frame, other)

        dose.add_volume(vol)

        assert dose.volumes == (vol,)

    def test_appends_in_order(self, dose, frame):
        first = DoseVolume("1.1", frame, dose)
        second = DoseVolume("1.2", frame)

        dose.add_volume(second)

        assert dose.volumes == (first, second)
        assert dose.volumes[-1] is second

    def test_same_volume_once(self, dose, frame):
        vol = DoseVolume("1.45.876", frame, dose)
        dose.add_volume(vol)

        assert len(dose.volumes) == 1
        assert dose.volumes[0] is vol

    def test_equal_but_distinct_volumes(self, dose, frame):
        dose.add_volume(DoseVolume("1.45.876", frame))
        dose.add_volume(DoseVolume("1.45.876", frame))

        assert len(dose.volumes) == 2

    def test_volumes_is_snapshot(self, dose, frame):
        snapshot = dose.volumes
        DoseVolume("1.45.876", frame, dose)

        assert snapshot == ()


class TestVolume:

    @pytest.fixture
    def volumes(self, dose, frame):
        return (
            DoseVolume("1.23.787", frame, dose),
            DoseVolume("1.45.876", frame, dose),
        )

    def test_non_string(self, dose, volumes):
        with pytest.raises(InvalidArgumentError, match="String"):
            dose.volume(42)

    def test_multiple_arguments(self, dose, volumes):
        with pytest.raises(TypeError):
            dose.volume("1.23.787", "1.45.876")

    def test_first_without_arguments(self, dose, volumes):
        assert dose.volume() is volumes[0]

    def test_by_uid(self, dose, volumes):
        assert dose.volume("1.45.876").uid == "1.45.876"

    def test_unknown_uid(self, dose, volumes):
        with pytest.raises(VolumeNotFoundError) as exc_info:
            dose.volume("1.99")

        assert exc_info.value.uid == "1.99"
        assert exc_info.value.available == ["1.23.787", "1.45.876"]

    def test_empty_aggregate(self, dose):
        with pytest.raises(VolumeNotFoundError):
            dose.volume()


class TestSum:
    """Tests for summation of beam dose volumes."""

    def test_proper_sum(self, dose, beam_volumes):
        vol1, vol2 = beam_volumes

        total = dose.sum()

        assert isinstance(total, DoseVolume)
        assert len(total.slices) == 2
        assert isinstance(total.scaling, float)
        assert total.scaling > 0.0
        assert total.raw_array.shape == vol1.raw_array.shape
        assert np.abs(total.dose_array - (vol1.dose_array + vol2.dose_array)).max() < 0.001

    def test_16_bit(self, dose, beam_volumes):
        vol1, vol2 = beam_volumes

        total = dose.sum(SummationConfig(bits_allocated=16))

        assert total.raw_array.dtype == np.uint16
        assert total.raw_array.max() == 65535
        np.testing.assert_allclose(
            total.dose_array, vol1.dose_array + vol2.dose_array, atol=0.001
        )

    def test_geometry_from_first_volume(self, dose, beam_volumes, frame):
        total = dose.sum()

        assert total.slice_positions == (0.0, 2.0)
        assert total.frame == frame
        assert (total.rows, total.columns) == (3, 2)
        assert total.uid not in {"1.23.787", "1.45.876"}

    def test_not_attached_and_sources_untouched(self, dose, beam_volumes):
        vol1, vol2 = beam_volumes
        before = vol1.dose_array.copy()

        total = dose.sum()

        assert dose.volumes == (vol1, vol2)
        assert total not in dose.volumes
        assert vol1.scaling == 2.0
        assert vol2.scaling == 3.0
        np.testing.assert_array_equal(vol1.dose_array, before)

    def test_warns_on_different_positions(self, dose, beam_volumes, caplog):
        with caplog.at_level(logging.WARNING, logger="dosestack"):
            dose.sum()

        assert "different slice positions" in caplog.text

    def test_single_volume(self, plan, frame):
        dose = DoseAggregate(SERIES_UID, plan)
        vol = DoseVolume("1.1", frame, dose, scaling=0.01)
        vol.append(DoseSlice("a", 0.0, indgen(4, 4)))

        total = dose.sum()

        np.testing.assert_allclose(total.dose_array, vol.dose_array, atol=1e-6)

    def test_all_zero_total(self, dose, frame):
        vol = DoseVolume("1.1", frame, dose, scaling=0.5)
        vol.append(DoseSlice("a", 0.0, np.zeros((2, 2), dtype=np.uint16)))

        total = dose.sum()

        assert total.scaling == 1.0
        assert not total.dose_array.any()

    def test_empty_aggregate(self, dose):
        with pytest.raises(EmptyAggregateError):
            dose.sum()

    def test_volumes_without_slices_ignored(self, dose, beam_volumes, frame):
        vol1, vol2 = beam_volumes
        DoseVolume("1.99", frame, dose)

        total = dose.sum()

        np.testing.assert_allclose(
            total.dose_array, vol1.dose_array + vol2.dose_array, atol=0.001
        )

    def test_only_volumes_without_slices(self, dose, frame):
        DoseVolume("1.99", frame, dose, scaling=1.0)

        with pytest.raises(EmptyAggregateError):
            dose.sum()

    def test_shape_mismatch(self, dose, beam_volumes, frame):
        vol3 = DoseVolume("1.99", frame, dose, scaling=1.0)
        vol3.append(DoseSlice("a", 0.0, indgen(2, 2)))
        vol3.append(DoseSlice("b", 2.0, indgen(2, 2)))

        with pytest.raises(ShapeMismatchError) as exc_info:
            dose.sum()

        assert exc_info.value.expected == (2, 3, 2)
        assert exc_info.value.actual == (2, 2, 2)

    def test_negative_total(self, dose, frame):
        vol = DoseVolume("1.1", frame, dose, scaling=1.0)
        vol.append(DoseSlice("a", 0.0, np.array([[-1, 2], [3, 4]])))

        with pytest.raises(ValueError, match="negative"):
            dose.sum()


class TestFromDicom:
    """Tests for loading a dose series and filtering empty volumes."""

    def test_attributes(self, mock_beam_dose_files):
        dose = DoseAggregate.from_dicom(mock_beam_dose_files)

        assert dose.series_uid == "1.2.3.4.7"
        assert dose.date == "20050523"
        assert dose.time == "102219"
        assert dose.description == "MC"
        assert dose.plan == PlanReference("1.2.3.4.8")

    def test_ignores_empty_volume_amongst_real_ones(self, mock_beam_dose_files):
        dose = DoseAggregate.from_dicom(mock_beam_dose_files)

        assert len(dose.volumes) == 3
        assert "1.2.3.4.10.9" not in [v.uid for v in dose.volumes]

    def test_ignores_single_empty_volume(self, mock_empty_dose_file):
        dose = DoseAggregate.from_dicom(mock_empty_dose_file)

        assert len(dose.volumes) == 0

    def test_sum_of_loaded_series(self, mock_beam_dose_files):
        dose = DoseAggregate.from_dicom(mock_beam_dose_files)
        expected = sum(v.dose_array for v in dose.volumes)

        total = dose.sum()

        np.testing.assert_allclose(total.dose_array, expected, atol=0.001)

    def test_explicit_plan(self, mock_beam_dose_files, plan):
        dose = DoseAggregate.from_dicom(mock_beam_dose_files, plan=plan)

        assert dose.plan is plan

    def test_missing_plan_reference(self, dose_file_factory):
        ds = dose_file_factory("1.1", np.ones((1, 2, 2), dtype=np.uint16))
        del ds.ReferencedRTPlanSequence

        dose = DoseAggregate.from_dicom(ds)

        assert dose.plan == PlanReference(None)

    def test_non_dose_modality(self, mock_ct_file):
        with pytest.raises(DoseTypeError) as exc_info:
            DoseAggregate.from_dicom(mock_ct_file)

        assert exc_info.value.actual == "CT"

    def test_mixed_series(self, mock_beam_dose_files):
        mock_beam_dose_files[1].SeriesInstanceUID = "1.2.3.4.99"

        with pytest.raises(MetadataMismatchError):
            DoseAggregate.from_dicom(mock_beam_dose_files)

    def test_empty_list(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            DoseAggregate.from_dicom([])

    def test_all_zero_volume_logged(self, mock_beam_dose_files, caplog):
        with caplog.at_level(logging.INFO, logger="dosestack"):
            dose = DoseAggregate.from_dicom(mock_beam_dose_files[3])

        assert len(dose.volumes) == 0
        assert "all-zero dose volume 1.2.3.4.10.9" in caplog.text

    @pytest.mark.parametrize(
        "field, value",
        [("FrameOfReferenceUID", "1.2.3.4.66"), ("Rows", 7), ("Columns", 4)],
    )
    def test_mismatched_grid(self, mock_beam_dose_files, field, value):
        setattr(mock_beam_dose_files[2], field, value)

        with pytest.raises(MetadataMismatchError) as exc_info:
            DoseAggregate.from_dicom(mock_beam_dose_files)

        assert exc_info.value.attribute == field

    def test_grid_of_frameless_file_not_compared(
        self, mock_beam_dose_files, mock_empty_dose_file
    ):
        mock_empty_dose_file.FrameOfReferenceUID = "1.2.3.4.66"

        dose = DoseAggregate.from_dicom(mock_beam_dose_files + [mock_empty_dose_file])

        assert len(dose.volumes) == 3
