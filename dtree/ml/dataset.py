import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy.stats import entropy as shannon_entropy

from dtree.ml.exceptions import AttributeTypeError, DataConsistencyError
from dtree.utils.arrays import (
    append_row,
    as_matrix,
    as_vector,
    candidate_pivots,
    drop_column,
    first_seen_groups,
    take_rows,
)

logger = logging.getLogger(__name__)


class AttributeType(IntEnum):
    DISCRETE = 0
    CONTINUOUS = 1


AttributeTypes = Union[AttributeType, int, Sequence[Union[AttributeType, int]]]


def label_entropy(labels) -> float:
    """Shannon entropy (bits) of the label distribution; 0.0 for no labels."""
    labels = np.asarray(labels)
    if labels.size == 0:
        return 0.0
    _, counts = np.unique(labels, return_counts=True)
    return float(shannon_entropy(counts, base=2))


def weighted_entropy(subsets: Sequence["Dataset"]) -> float:
    """Sample-count-weighted average of the subsets' entropies."""
    total = sum(subset.sample_count() for subset in subsets)
    if total == 0:
        return 0.0
    return sum(subset.sample_count() * subset.entropy() for subset in subsets) / total


@dataclass(eq=False)
class Dataset:
    """
    Labelled tabular data: a feature matrix, one label per row and one
    AttributeType per column.

    X is stored as a float matrix (NaN marks a missing value). Every split
    returns new Dataset instances holding copies, never views of this one.
    """
    X: np.ndarray
    y: np.ndarray
    attribute_types: AttributeTypes = AttributeType.DISCRETE
    name: Optional[str] = None
    _entropy: Optional[float] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        """Normalise inputs and reject mismatched dimensions."""
        if np.ndim(self.attribute_types) == 0:
            self.X = as_matrix(self.X)
            self.attribute_types = [AttributeType(self.attribute_types)] * self.X.shape[1]
        else:
            self.attribute_types = [AttributeType(t) for t in self.attribute_types]
            self.X = as_matrix(self.X, n_cols=len(self.attribute_types))
        self.y = as_vector(self.y)

        if self.X.shape[1] != len(self.attribute_types):
            logger.error(
                "length mismatch: attributes: %d, attribute types: %d",
                self.X.shape[1], len(self.attribute_types),
            )
            raise DataConsistencyError(
                f"Attribute type vector length must match attribute count. "
                f"Got {len(self.attribute_types)} types for {self.X.shape[1]} attributes"
            )
        if self.X.shape[0] != len(self.y):
            logger.error("length mismatch: rows: %d, labels: %d", self.X.shape[0], len(self.y))
            raise DataConsistencyError(
                f"X row count and y length must match. Got X: {self.X.shape[0]}, y: {len(self.y)}"
            )

    @classmethod
    def from_rows(cls, rows, attribute_types: AttributeTypes, name: Optional[str] = None) -> "Dataset":
        """Build a dataset from rows whose last element is the label."""
        data = as_matrix(rows)
        if data.shape[1] == 0:
            raise DataConsistencyError("Rows must at least contain a label")
        return cls(data[:, :-1], data[:, -1], attribute_types, name=name)

    @classmethod
    def empty(cls, attribute_types: Sequence[AttributeType], name: Optional[str] = None) -> "Dataset":
        """An empty dataset to accumulate samples into with add()."""
        return cls(np.empty((0, len(attribute_types))), np.empty(0), list(attribute_types), name=name)

    def sample_count(self) -> int:
        return self.X.shape[0]

    def attribute_count(self) -> int:
        return self.X.shape[1]

    def attribute_type(self, j: int) -> AttributeType:
        return self.attribute_types[j]

    def class_value(self, i: int):
        return self.y[i].item()

    def attribute(self, j: int) -> np.ndarray:
        return self.X[:, j].copy()

    def classes(self) -> np.ndarray:
        return self.y.copy()

    def sample(self, i: int) -> np.ndarray:
        """Features of row i followed by its label."""
        return np.append(self.X[i], self.y[i])

    def samples(self, indices) -> "Dataset":
        """Row-subset projection keeping every attribute and its type."""
        indices = np.asarray(indices, dtype=int)
        return Dataset(take_rows(self.X, indices), self.y[indices], list(self.attribute_types), name=self.name)

    def entropy(self) -> float:
        """Shannon entropy of the labels in bits, memoised until the next mutation."""
        if self._entropy is None:
            self._entropy = label_entropy(self.y)
            logger.debug("entropy of %s is %f", self, self._entropy)
        return self._entropy

    def split_by_class(self) -> Dict[object, "Dataset"]:
        """One sub-dataset per distinct label, keyed by label in ascending order."""
        separated = {}
        for label in np.unique(self.y):
            separated[label.item()] = self.samples(np.flatnonzero(self.y == label))
        return separated

    def split_by_discrete_attribute(self, j: int) -> Tuple[List[object], List["Dataset"]]:
        """
        Group rows by the value of discrete attribute j.

        Returns:
            (values, subsets): distinct values in first-seen order (None for the
            missing sentinel) and the matching sub-datasets, each without column j.

        Raises:
            AttributeTypeError: If attribute j is not discrete.
        """
        self._require_type(j, AttributeType.DISCRETE)

        values, groups = first_seen_groups(self.X[:, j])
        types = self.attribute_types[:j] + self.attribute_types[j + 1:]
        subsets = [
            Dataset(drop_column(self.X[rows], j), self.y[rows], list(types), name=self.name)
            for rows in groups
        ]
        logger.debug("attribute %d splits %s into %d subsets", j, self, len(subsets))
        return values, subsets

    def split_by_continuous_attribute(self, j: int) -> Tuple[float, Tuple["Dataset", "Dataset"]]:
        """
        Find the pivot on continuous attribute j that minimises the weighted
        entropy of the two sides, and split there.

        Candidate pivots are the midpoints between adjacent distinct observed
        values; the first (lowest) pivot wins ties.

        Raises:
            AttributeTypeError: If attribute j is not continuous.
            DataConsistencyError: If no pivot lies strictly between two distinct observed values.
        """
        self._require_type(j, AttributeType.CONTINUOUS)

        column = self.X[:, j]
        pivots = candidate_pivots(column)
        if pivots.size == 0:
            raise DataConsistencyError(f"Attribute {j} has no pivot strictly between two distinct observed values")

        # Class counts below each pivot, read off cumulative counts over the sorted column
        order = np.argsort(column, kind="stable")
        _, codes = np.unique(self.y, return_inverse=True)
        one_hot = np.eye(codes.max() + 1)[codes[order]]
        cumulative = np.cumsum(one_hot, axis=0)
        cut = np.searchsorted(column[order], pivots, side="left")

        below_counts = cumulative[cut - 1]
        above_counts = cumulative[-1] - below_counts
        n = self.sample_count()
        scores = (
            cut * shannon_entropy(below_counts, base=2, axis=1)
            + (n - cut) * shannon_entropy(above_counts, base=2, axis=1)
        ) / n

        best = int(np.argmin(scores))
        pivot = float(pivots[best])
        logger.debug("best pivot for attribute %d is %f with weighted entropy %f", j, pivot, scores[best])
        return pivot, self.split_at(j, pivot)

    def split_at(self, j: int, pivot: float) -> Tuple["Dataset", "Dataset"]:
        """
        Split on continuous attribute j into rows below the pivot and the rest.
        Missing (NaN) values go with the rest.

        Raises:
            AttributeTypeError: If attribute j is not continuous.
            DataConsistencyError: If any row holds exactly the pivot value.
        """
        self._require_type(j, AttributeType.CONTINUOUS)

        column = self.X[:, j]
        if np.any(column == pivot):
            raise DataConsistencyError(f"Pivot {pivot} must not match an observed value of attribute {j}")

        below = column < pivot
        return self.samples(np.flatnonzero(below)), self.samples(np.flatnonzero(~below))

    def add(self, sample: Sequence) -> None:
        """Append a row of features followed by its label."""
        sample = np.asarray(sample, dtype=float)
        if sample.ndim != 1 or sample.size != self.attribute_count() + 1:
            raise DataConsistencyError(
                f"Sample must hold {self.attribute_count()} attributes and a label, got {sample.size} values"
            )
        logger.debug("adding sample %s to %s", sample, self)
        self.X = append_row(self.X, sample[:-1])
        self.y = np.append(self.y, sample[-1])
        self._entropy = None

    def drop_attribute(self, j: int) -> None:
        """Remove column j together with its type."""
        self.X = drop_column(self.X, j)
        del self.attribute_types[j]
        self._entropy = None

    def replace_classes(self, y) -> None:
        y = as_vector(y)
        if len(y) != self.sample_count():
            raise DataConsistencyError(f"Expected {self.sample_count()} labels, got {len(y)}")
        self.y = y
        self._entropy = None

    def _require_type(self, j: int, expected: AttributeType) -> None:
        if self.attribute_type(j) != expected:
            raise AttributeTypeError(
                f"Attribute {j} is {self.attribute_type(j).name.lower()}, expected {expected.name.lower()}"
            )

    def __len__(self) -> int:
        return self.sample_count()

    def __str__(self) -> str:
        return f"{self.name}[{self.sample_count()} x {self.attribute_count()}]"

    def data_to_string(self) -> str:
        return "\n" + "".join(f"{self.X[i]} -> {self.y[i]}\n" for i in range(self.sample_count()))
