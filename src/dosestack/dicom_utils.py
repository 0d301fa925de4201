from typing import Any

from pydicom.dataset import Dataset

from dosestack.arrays.exceptions import MetadataMismatchError


def attr_shared(dcms: list[Dataset], attr: str) -> bool:
    """Check if all DICOM files share the same value for an attribute.

    A missing attribute is treated as None, so files that all lack it
    share it.
    """
    if not dcms:
        return True
    first_value = getattr(dcms[0], attr, None)
    return all(getattr(dcm, attr, None) == first_value for dcm in dcms[1:])


def validate_fields(dcms: list[Dataset], fields: list[str]):
    """
    Ensures that all DICOM files in the list share the same value for specified attributes.

    Raises:
        MetadataMismatchError: Listing every attribute that differs between
            files; ``attribute`` names the first of them.
    """
    mismatched = [field for field in fields if not attr_shared(dcms, field)]
    if mismatched:
        raise MetadataMismatchError(
            attribute=mismatched[0],
            message=" \n".join(
                f"DICOM files do not share the same value for attribute '{field}'."
                for field in mismatched
            ),
        )


def group_dcms_by_modality(dcms: list[Dataset]) -> dict[str, list[Dataset]]:
    """
    Sort DICOM files by their Modality attribute.

    Args:
        dcms (list): List of pydicom Dataset objects.
    Returns:
        dict: A dictionary mapping modality strings to lists of DICOM Dataset objects.
    """
    modality_dict = {}
    for dcm in dcms:
        modality = getattr(dcm, "Modality", "UNKNOWN")
        if modality not in modality_dict:
            modality_dict[modality] = []
        modality_dict[modality].append(dcm)
    return modality_dict


def group_dcms_by_series(dcms: list[Dataset]) -> dict[str, list[Dataset]]:
    """
    Group DICOM files by SeriesInstanceUID, keeping the input order within each group.
    """
    series_dict = {}
    for dcm in dcms:
        series_dict.setdefault(str(dcm.SeriesInstanceUID), []).append(dcm)
    return series_dict


def is_empty_dose(dcm: Any) -> bool:
    """
    Check whether an RTDOSE file declares no dose grid at all.

    Some planning systems export an extra volume next to the beam doses
    that declares zero frames. Only the header is inspected; a grid that
    is present but holds nothing but zeros is detected once it is loaded
    (see DoseVolume.is_empty).

    Args:
        dcm: pydicom Dataset of modality RTDOSE.
    Returns:
        bool: True if the file declares zero frames or has no pixel data.
    """
    if int(getattr(dcm, "NumberOfFrames", 1) or 0) == 0:
        return True
    return not hasattr(dcm, "pixel_array")
