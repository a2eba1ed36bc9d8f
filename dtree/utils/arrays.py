"""
Small helpers over numpy arrays for the operations the splitting code needs
and numpy does not express in one call.

Vectors are 1-D arrays, matrices are 2-D float arrays with one row per sample.
"""
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from dtree.ml.exceptions import DataConsistencyError


def as_matrix(data, n_cols: Optional[int] = None) -> np.ndarray:
    """
    Convert row data to a 2-D float matrix.

    Args:
        data: Sequence of equal-length rows, or an existing array.
        n_cols: Column count to use when ``data`` has no rows.

    Raises:
        DataConsistencyError: If rows are ragged or the result is not 2-D.
    """
    if isinstance(data, np.ndarray):
        matrix = data.astype(float, copy=True)
    else:
        rows = list(data)
        if len(rows) == 0:
            return np.empty((0, n_cols or 0), dtype=float)
        lengths = {len(row) for row in rows}
        if len(lengths) != 1:
            raise DataConsistencyError(f"All rows must have the same length, got lengths {sorted(lengths)}")
        matrix = np.array(rows, dtype=float)

    if matrix.ndim == 1 and matrix.size == 0:
        return np.empty((0, n_cols or 0), dtype=float)
    if matrix.ndim != 2:
        raise DataConsistencyError(f"Expected a 2-D matrix, got {matrix.ndim} dimension(s)")
    return matrix


def as_vector(data) -> np.ndarray:
    vector = np.array(data, copy=True)
    if vector.ndim != 1:
        raise DataConsistencyError(f"Expected a 1-D vector, got {vector.ndim} dimension(s)")
    return vector


def drop_column(matrix: np.ndarray, j: int) -> np.ndarray:
    return np.delete(matrix, j, axis=1)


def append_row(matrix: np.ndarray, row: Sequence[float]) -> np.ndarray:
    row = np.asarray(row, dtype=float)
    if row.shape != (matrix.shape[1],):
        raise DataConsistencyError(f"Row of length {row.size} does not fit a matrix with {matrix.shape[1]} columns")
    return np.vstack([matrix, row])


def take_rows(matrix: np.ndarray, indices) -> np.ndarray:
    """Row-subset projection; always returns a copy."""
    indices = np.asarray(indices, dtype=int)
    return matrix[indices].copy()


def occurrences(values) -> Dict[object, int]:
    """Count each distinct value, keys in ascending order."""
    distinct, counts = np.unique(np.asarray(values), return_counts=True)
    return {value.item(): int(count) for value, count in zip(distinct, counts)}


def value_of_max_occurrence(values):
    """
    Most frequent value. Ties go to the smallest value so results do not depend
    on hashing or insertion order.
    """
    counts = occurrences(values)
    if not counts:
        raise DataConsistencyError("Cannot take the most frequent value of an empty vector")
    # max() keeps the first of equal counts and keys are ascending
    return max(counts, key=counts.get)


def category(value):
    """Hashable key for a discrete value; the NaN missing sentinel maps to None."""
    value = float(value)
    if np.isnan(value):
        return None
    return value


def first_seen_groups(values) -> Tuple[List[object], List[np.ndarray]]:
    """
    Partition row indices by value in a single pass.

    Returns:
        (keys, groups): distinct category keys in first-seen order and, for each,
        the ascending row indices holding that value.
    """
    keys: List[object] = []
    buckets: Dict[object, List[int]] = {}
    for i, value in enumerate(values):
        key = category(value)
        if key not in buckets:
            keys.append(key)
            buckets[key] = []
        buckets[key].append(i)
    return keys, [np.array(buckets[key], dtype=int) for key in keys]


def candidate_pivots(values) -> np.ndarray:
    """Midpoints between adjacent distinct observed values, ascending. NaNs are ignored."""
    values = np.asarray(values, dtype=float)
    distinct = np.unique(values[~np.isnan(values)])
    midpoints = (distinct[:-1] + distinct[1:]) / 2
    # adjacent floats can round their midpoint onto an endpoint
    strict = (midpoints > distinct[:-1]) & (midpoints < distinct[1:])
    return midpoints[strict]
