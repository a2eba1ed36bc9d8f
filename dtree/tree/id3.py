import logging
from typing import Optional

from dtree.abstract_interfaces.algorithm import Algorithm, Model
from dtree.ml.dataset import Dataset
from dtree.ml.exceptions import DataConsistencyError
from dtree.tree.node import Node, SelectionMetric, classify

logger = logging.getLogger(__name__)


class DecisionTreeModel(Model):
    """A fitted decision tree; predictions walk from the root to a leaf."""

    def __init__(self, root: Node):
        self.root = root

    def _predict_sample(self, sample):
        return classify(self.root, sample)

    def __str__(self) -> str:
        return self.root.describe()


class ID3(Algorithm):
    """
    Entropy-driven decision tree induction over discrete and continuous attributes.

    Discrete attributes get one branch per observed value, continuous attributes
    a binary split at the pivot with the lowest weighted entropy.
    """

    def __init__(self, max_depth: Optional[int] = None, selection_metric=SelectionMetric.REFERENCE):
        """
        Args:
            max_depth: Depth at which nodes are forced to be leaves. None grows
                       until leaves are pure or no attribute can be split.
            selection_metric: SelectionMetric (or its value) used to compare attributes.
        """
        if max_depth is not None and max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        self.max_depth = max_depth
        self.selection_metric = SelectionMetric(selection_metric)

    @classmethod
    def from_config(cls, config: dict) -> "ID3":
        """
        Build the algorithm from a plain dictionary.

        Example:
            config = {"max_depth": 3, "selection_metric": "weighted"}

        Raises:
            ValueError: If the config holds unknown keys or invalid values.
        """
        known = {"max_depth", "selection_metric"}
        unknown = set(config) - known
        if unknown:
            raise ValueError(f"Unknown ID3 options: {sorted(unknown)}. Available options: {sorted(known)}")
        return cls(**config)

    def fit(self, dataset: Dataset) -> DecisionTreeModel:
        if dataset.sample_count() == 0:
            raise DataConsistencyError("Cannot fit a decision tree on an empty dataset")

        logger.info("fitting %s on %s", self, dataset)
        root = Node(dataset, 0, self.max_depth, self.selection_metric)
        root.build()
        logger.info(
            "fitted tree with %d leaves and height %d", root.leaf_count(), root.height(),
            extra={"leaves": root.leaf_count(), "height": root.height()},
        )
        return DecisionTreeModel(root)

    def __str__(self) -> str:
        return f"ID3(max_depth={self.max_depth}, selection_metric={self.selection_metric.value})"
