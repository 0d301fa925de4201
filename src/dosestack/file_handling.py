import os
from typing import TYPE_CHECKING

import pydicom
from pydicom.errors import InvalidDicomError

from dosestack.arrays import DoseAggregate
from dosestack.dicom_utils import group_dcms_by_modality, group_dcms_by_series
from dosestack.log_util import get_logger

if TYPE_CHECKING:
    from pydicom.dataset import Dataset

logger = get_logger("file_handling")

def load_dicom_files_from_directory(directory: str, recursive: bool = False) -> list['Dataset']:
    """Read every DICOM file in a directory, skipping files that are not DICOM.

    Args:
        directory (str): Directory to read.
        recursive (bool): Whether to descend into subdirectories.

    Returns:
        list: pydicom Dataset objects in directory listing order.
    """
    logger.debug(f"Loading DICOM files from directory: {directory}")
    if recursive:
        walker = os.walk(directory)
    else:
        walker = [(directory, [], sorted(os.listdir(directory)))]

    dcms = []
    for root, _dirs, files in walker:
        for file in sorted(files):
            full_path = os.path.join(root, file)
            if not os.path.isfile(full_path):
                continue
            logger.debug(f"Attempting to load file: {file}")
            try:
                dcms.append(pydicom.dcmread(full_path))
            except InvalidDicomError:
                logger.debug("File is not a valid DICOM. Skipping.")
    return dcms

def load_dose_series(dcms: list['Dataset']) -> dict[str, DoseAggregate]:
    """Build one DoseAggregate per RTDOSE series found among the datasets.

    Args:
        dcms (list): pydicom Dataset objects of any modality.

    Returns:
        dict: Mapping of SeriesInstanceUID to DoseAggregate.
    """
    doses = group_dcms_by_modality(dcms).get("RTDOSE", [])
    return {
        series_uid: DoseAggregate.from_dicom(files)
        for series_uid, files in group_dcms_by_series(doses).items()
    }
