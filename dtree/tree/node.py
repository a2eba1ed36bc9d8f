import logging
from enum import Enum
from typing import Dict, Iterator, List, NamedTuple, Optional

import numpy as np

from dtree.ml.dataset import AttributeType, Dataset, weighted_entropy
from dtree.ml.exceptions import DataConsistencyError, UnseenAttributeValueError
from dtree.utils.arrays import category, value_of_max_occurrence

logger = logging.getLogger(__name__)


class Branch(Enum):
    """Child keys of a node split on a continuous attribute."""
    BELOW = "below"
    ABOVE = "above"


class SelectionMetric(Enum):
    """
    How candidate attributes are scored against each other.

    REFERENCE: discrete candidates score the plain sum of their children's
        entropies, continuous candidates the weighted average of their two sides.
        The two are not on the same scale.
    WEIGHTED: every candidate scores the weighted average entropy of its children.
    """
    REFERENCE = "reference"
    WEIGHTED = "weighted"


class Candidate(NamedTuple):
    attribute: int
    score: float
    keys: list
    subsets: List[Dataset]
    pivot: Optional[float] = None


class Node:
    """
    A decision tree node built top-down from its own slice of the training data.

    A node starts unbuilt and ends either as a leaf predicting the majority
    label of its data, or as an interior node whose children partition its rows.
    Discrete splits remove the consumed column from the children, so a child's
    attribute indices refer to the reduced column set.
    """

    def __init__(
        self,
        dataset: Dataset,
        depth: int = 0,
        max_depth: Optional[int] = None,
        selection_metric: SelectionMetric = SelectionMetric.REFERENCE,
    ):
        self.dataset = dataset
        self.depth = depth
        self.max_depth = max_depth
        self.selection_metric = selection_metric

        self.is_leaf = False
        self.label = None
        self.attribute: Optional[int] = None
        self.pivot: Optional[float] = None
        self.children: Dict[object, "Node"] = {}
        self._built = False

    @property
    def is_built(self) -> bool:
        return self._built

    def entropy(self) -> float:
        return self.dataset.entropy()

    def entry_count(self) -> int:
        return self.dataset.sample_count()

    def build(self) -> None:
        """Finalise a pure or single-sample node as a leaf, otherwise split it."""
        if self._is_terminal():
            self.make_leaf()
        else:
            self.split()

    def _is_terminal(self) -> bool:
        return self.entropy() == 0 or self.entry_count() <= 1

    def make_leaf(self) -> None:
        self.is_leaf = True
        self.label = value_of_max_occurrence(self.dataset.y)
        self._built = True
        logger.info("leaf at depth %d predicts %s from %d samples", self.depth, self.label, self.entry_count())

    def split(self) -> None:
        """
        Choose the attribute whose partition has the lowest score and build the
        subtree below it, depth first and pre-order.

        The node becomes a leaf when the depth bound is reached or when no
        attribute can be split. Pending nodes sit on an explicit stack, so
        the subtree may be deeper than the interpreter's recursion limit.
        """
        if self._built:
            raise RuntimeError("Node has already been built")

        pending = list(reversed(self._expand()))
        while pending:
            node = pending.pop()
            if node._is_terminal():
                node.make_leaf()
            else:
                pending.extend(reversed(node._expand()))

    def _expand(self) -> List["Node"]:
        """Turn this node into a leaf or an interior node; return its unbuilt children."""
        logger.info("split - starting for depth %d with %d samples", self.depth, self.entry_count())
        if self.max_depth is not None and self.depth >= self.max_depth:
            self.make_leaf()
            return []

        candidates = self._candidates()
        if not candidates:
            logger.info("no splittable attribute left at depth %d", self.depth)
            self.make_leaf()
            return []

        # min() keeps the first of equal scores, i.e. the lowest attribute index
        best = min(candidates, key=lambda c: c.score)
        logger.debug("the best attribute is %d for depth %d (score %f)", best.attribute, self.depth, best.score)

        self.attribute = best.attribute
        self.pivot = best.pivot
        for key, subset in zip(best.keys, best.subsets):
            self.children[key] = Node(subset, self.depth + 1, self.max_depth, self.selection_metric)
        self._built = True
        return list(self.children.values())

    def _candidates(self) -> List[Candidate]:
        candidates = []
        for j in range(self.dataset.attribute_count()):
            if self.dataset.attribute_type(j) == AttributeType.DISCRETE:
                keys, subsets = self.dataset.split_by_discrete_attribute(j)
                if self.selection_metric == SelectionMetric.REFERENCE:
                    score = sum(subset.entropy() for subset in subsets)
                else:
                    score = weighted_entropy(subsets)
                candidates.append(Candidate(j, score, keys, subsets))
            else:
                try:
                    pivot, (below, above) = self.dataset.split_by_continuous_attribute(j)
                except DataConsistencyError:
                    logger.debug("attribute %d has no pivot at depth %d, skipping", j, self.depth)
                    continue
                candidates.append(
                    Candidate(j, weighted_entropy((below, above)), [Branch.BELOW, Branch.ABOVE], [below, above], pivot)
                )
            logger.debug("attribute %d scores %f at depth %d", j, candidates[-1].score, self.depth)
        return candidates

    def classify(self, sample):
        return classify(self, sample)

    def walk(self) -> Iterator["Node"]:
        """Yield the nodes of the subtree in pre-order."""
        pending = [self]
        while pending:
            node = pending.pop()
            yield node
            pending.extend(reversed(list(node.children.values())))

    def leaf_count(self) -> int:
        return sum(1 for node in self.walk() if node.is_leaf)

    def height(self) -> int:
        return max(node.depth for node in self.walk()) - self.depth

    def describe(self, indent: str = "") -> str:
        """Indented text rendering of the subtree."""
        lines = []
        pending = [(self, indent, None)]
        while pending:
            node, prefix, condition = pending.pop()
            if condition is not None:
                lines.append(f"{prefix}{condition}\n")
                prefix += "    "
            if node.is_leaf:
                lines.append(f"{prefix}-> {node.label} ({node.entry_count()} samples)\n")
            elif not node.is_built:
                lines.append(f"{prefix}<unbuilt, {node.entry_count()} samples>\n")
            else:
                branches = [(child, prefix, node._condition(key)) for key, child in node.children.items()]
                pending.extend(reversed(branches))
        return "".join(lines)

    def _condition(self, key) -> str:
        if key == Branch.BELOW:
            return f"attribute {self.attribute} < {self.pivot:g}"
        if key == Branch.ABOVE:
            return f"attribute {self.attribute} >= {self.pivot:g}"
        return f"attribute {self.attribute} == {'missing' if key is None else f'{key:g}'}"

    def __repr__(self) -> str:
        if self.is_leaf:
            return f"Node(depth={self.depth}, leaf, label={self.label!r})"
        return f"Node(depth={self.depth}, attribute={self.attribute}, children={len(self.children)})"


def classify(node: Node, sample):
    """
    Walk from node down to a leaf following the sample's attribute values and
    return the leaf's majority label.

    Raises:
        UnseenAttributeValueError: If a discrete value has no matching child.
        RuntimeError: If the walk reaches a node that was never built.
    """
    sample = np.asarray(sample, dtype=float)
    while not node.is_leaf:
        if not node.is_built:
            raise RuntimeError("Cannot classify with a node that has not been built")

        value = sample[node.attribute]
        if node.pivot is not None:
            # NaN compares false and goes above, as during training
            node = node.children[Branch.BELOW if value < node.pivot else Branch.ABOVE]
            continue

        key = category(value)
        if key not in node.children:
            raise UnseenAttributeValueError(node.attribute, float(value), node.children.keys())
        # children of a discrete split no longer hold the consumed column
        sample = np.delete(sample, node.attribute)
        node = node.children[key]
    return node.label
