"""
We import the main classes here so that elsewhere in the code we can do:
from dtree import Dataset, ID3

rather than:
from dtree.ml.dataset import Dataset
"""

from dtree.ml.dataset import AttributeType, Dataset
from dtree.ml.exceptions import AttributeTypeError, DataConsistencyError, UnseenAttributeValueError
from dtree.tree.id3 import ID3, DecisionTreeModel
from dtree.tree.node import Branch, Node, SelectionMetric, classify

__all__ = [
    "AttributeType",
    "Dataset",
    "AttributeTypeError",
    "DataConsistencyError",
    "UnseenAttributeValueError",
    "ID3",
    "DecisionTreeModel",
    "Branch",
    "Node",
    "SelectionMetric",
    "classify",
]
