import csv
import logging
import os
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

from dtree.ml.dataset import AttributeTypes, Dataset
from dtree.ml.exceptions import DataConsistencyError

logger = logging.getLogger(__name__)

#: Marker for a missing value in delimited text files.
MISSING_VALUE = "?"


def dtree_data_dir() -> Path:
    try:
        data_dir = os.environ['DTREE_DATA_DIR']
    except KeyError:
        msg = """ Please make sure DTREE_DATA_DIR is in your system environment:
            add: 'export DTREE_DATA_DIR=/path/to/datasets' to your bashrc and source it."""
        raise RuntimeError(msg)
    return Path(data_dir)


def check_file_exists(path: Union[str, Path]) -> None:
    if not os.path.exists(path):
        raise FileNotFoundError(f"File not found: {path}")


def resolve_data_path(path: Union[str, Path]) -> Path:
    """Absolute paths are kept as is, relative ones are taken from DTREE_DATA_DIR."""
    path = Path(path)
    if path.is_absolute():
        return path
    return dtree_data_dir() / path


def parse_row(fields: Sequence[str]) -> np.ndarray:
    """
    Convert text fields to floats; the missing marker becomes NaN.

    Raises:
        DataConsistencyError: If a field is neither a number nor the missing marker.
    """
    values = []
    for field in fields:
        field = field.strip()
        if field == MISSING_VALUE:
            values.append(np.nan)
            continue
        try:
            values.append(float(field))
        except ValueError:
            raise DataConsistencyError(f"data must all be integers, doubles or {MISSING_VALUE}, not {field!r}")
    return np.array(values, dtype=float)


def load_dataset(
    path: Union[str, Path],
    attribute_types: AttributeTypes,
    delimiter: str = ",",
    name: Optional[str] = None,
) -> Dataset:
    """
    Load a delimited text file whose last column is the class label.

    Args:
        path: File to read; relative paths are resolved against DTREE_DATA_DIR.
        attribute_types: One AttributeType for every column, or a type per attribute.
        delimiter: Field separator.
        name: Dataset name, defaults to the file stem.

    Returns:
        Dataset: The loaded samples. Blank lines are skipped.
    """
    path = resolve_data_path(path)
    check_file_exists(path)

    with open(path, newline="") as f:
        rows = [parse_row(fields) for fields in csv.reader(f, delimiter=delimiter) if any(s.strip() for s in fields)]

    dataset = Dataset.from_rows(rows, attribute_types, name=name or path.stem)
    logger.info("loaded %s from %s", dataset, path)
    return dataset
