import logging

import numpy as np
import pytest

from dtree.abstract_interfaces import Algorithm, Model
from dtree.ml.dataset import AttributeType, Dataset
from dtree.ml.exceptions import DataConsistencyError, UnseenAttributeValueError
from dtree.tree.id3 import ID3, DecisionTreeModel
from dtree.tree.node import SelectionMetric

D = AttributeType.DISCRETE
C = AttributeType.CONTINUOUS


def separable_dataset():
    return Dataset([[1, 0, 1], [1, 1, 0], [0, 0, 1], [0, 1, 0]], [1, 1, 0, 0], D)


def test_id3_satisfies_the_algorithm_contract():
    algorithm = ID3(max_depth=3)
    model = algorithm.fit(separable_dataset())
    assert isinstance(algorithm, Algorithm)
    assert isinstance(model, Model)
    assert isinstance(model, DecisionTreeModel)


def test_end_to_end_prediction():
    model = ID3(max_depth=3).fit(separable_dataset())
    assert model.predict(np.array([1, 1, 1])) == 1
    assert model.predict([0, 1, 1]) == 0
    assert model.root.attribute == 0


def test_predict_dataset_returns_label_vector():
    dataset = separable_dataset()
    model = ID3(max_depth=3).fit(dataset)
    predictions = model.predict(dataset)
    np.testing.assert_array_equal(predictions, dataset.y)
    assert model.accuracy(dataset) == 1.0


def test_fit_leaves_training_data_untouched():
    dataset = separable_dataset()
    X_before, y_before = dataset.X.copy(), dataset.y.copy()
    ID3().fit(dataset)
    np.testing.assert_array_equal(dataset.X, X_before)
    np.testing.assert_array_equal(dataset.y, y_before)
    assert dataset.attribute_types == [D, D, D]


def test_unbounded_tree_fits_distinct_mixed_training_data():
    rng = np.random.default_rng(7)
    X = np.column_stack([rng.integers(0, 2, size=50), rng.normal(size=50), rng.normal(size=50)])
    y = rng.integers(0, 3, size=50)
    dataset = Dataset(X, y, [D, C, C])
    model = ID3().fit(dataset)
    assert model.accuracy(dataset) == 1.0


def test_continuous_only_tree():
    dataset = Dataset([[1.0], [2.0], [3.0], [4.0]], [0, 0, 1, 1], C)
    model = ID3().fit(dataset)
    assert model.root.pivot == 2.5
    np.testing.assert_array_equal(model.predict(Dataset([[0.0], [9.0]], [0, 1], C)), [0, 1])


def test_unseen_value_propagates_from_predict():
    model = ID3(max_depth=3).fit(separable_dataset())
    with pytest.raises(UnseenAttributeValueError):
        model.predict([5, 0, 0])


def test_empty_dataset_cannot_be_fitted():
    with pytest.raises(DataConsistencyError):
        ID3().fit(Dataset.empty([D, D]))


def test_negative_depth_is_rejected():
    with pytest.raises(ValueError):
        ID3(max_depth=-1)


def test_from_config():
    algorithm = ID3.from_config({"max_depth": 4, "selection_metric": "weighted"})
    assert algorithm.max_depth == 4
    assert algorithm.selection_metric is SelectionMetric.WEIGHTED
    assert str(algorithm) == "ID3(max_depth=4, selection_metric=weighted)"


def test_from_config_rejects_unknown_options():
    with pytest.raises(ValueError, match="Unknown ID3 options"):
        ID3.from_config({"max_depth": 4, "criterion": "gini"})
    with pytest.raises(ValueError):
        ID3.from_config({"selection_metric": "gini"})


def test_model_str_renders_tree():
    model = ID3(max_depth=3).fit(separable_dataset())
    assert "attribute 0 == 0" in str(model)
    assert "-> 0" in str(model)


def test_fit_logs_tree_size(caplog):
    with caplog.at_level(logging.INFO, logger="dtree"):
        ID3(max_depth=3).fit(separable_dataset())
    fitted = [r for r in caplog.records if r.getMessage().startswith("fitted tree")]
    assert len(fitted) == 1
    assert fitted[0].leaves == 2
    assert fitted[0].height == 1


def alternating_chain(n):
    """One continuous attribute with alternating labels; the lowest pivot keeps peeling one sample off."""
    return Dataset(np.arange(n, dtype=float).reshape(-1, 1), np.arange(n) % 2, C)


def test_deep_chain_builds_past_the_recursion_limit():
    n = 1000
    dataset = alternating_chain(n)
    model = ID3(max_depth=2000).fit(dataset)

    assert model.root.height() > n // 2
    assert model.root.leaf_count() == n
    assert model.accuracy(dataset) == 1.0
    assert str(model).count("->") == n


def test_depth_bound_cuts_a_deep_chain():
    model = ID3(max_depth=300).fit(alternating_chain(1000))
    assert model.root.height() == 300
    assert all(node.is_built for node in model.root.walk())


def test_noisy_continuous_data_terminates_with_pure_leaves():
    rng = np.random.default_rng(11)
    n = 2500
    X = rng.normal(size=(n, 2))
    y = (X[:, 0] + rng.normal(scale=1.5, size=n) > 0).astype(int)
    dataset = Dataset(X, y, C)

    model = ID3().fit(dataset)

    assert model.accuracy(dataset) == 1.0
    for node in model.root.walk():
        if node.is_leaf:
            assert node.entry_count() >= 1
            assert node.entropy() == 0
        else:
            assert sum(c.entry_count() for c in node.children.values()) == node.entry_count()
