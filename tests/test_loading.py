import numpy as np
import pytest

from dtree.ml.dataset import AttributeType
from dtree.ml.exceptions import DataConsistencyError
from dtree.utils.loading import check_file_exists, dtree_data_dir, load_dataset, parse_row, resolve_data_path


def test_parse_row_maps_missing_marker_to_nan():
    row = parse_row(["1", " 2.5", "?", "0"])
    assert row[:2].tolist() == [1.0, 2.5]
    assert np.isnan(row[2])


def test_parse_row_rejects_text():
    with pytest.raises(DataConsistencyError, match="not 'red'"):
        parse_row(["1", "red"])


def test_check_file_exists():
    with pytest.raises(FileNotFoundError, match="File not found: /this/is/dummy/path"):
        check_file_exists("/this/is/dummy/path")


def test_dtree_data_dir_requires_environment(monkeypatch):
    monkeypatch.delenv("DTREE_DATA_DIR", raising=False)
    with pytest.raises(RuntimeError):
        dtree_data_dir()


def test_resolve_data_path(tmp_path, monkeypatch):
    monkeypatch.setenv("DTREE_DATA_DIR", str(tmp_path))
    assert resolve_data_path("iris.data") == tmp_path / "iris.data"
    assert resolve_data_path(tmp_path / "other.csv") == tmp_path / "other.csv"


def test_load_dataset(tmp_path):
    path = tmp_path / "weather.csv"
    path.write_text("1,2.5,0\n0,?,1\n\n1,4.0,1\n")

    dataset = load_dataset(path, [AttributeType.DISCRETE, AttributeType.CONTINUOUS])

    assert dataset.sample_count() == 3
    assert dataset.attribute_types == [AttributeType.DISCRETE, AttributeType.CONTINUOUS]
    assert str(dataset) == "weather[3 x 2]"
    np.testing.assert_array_equal(dataset.y, [0, 1, 1])
    assert np.isnan(dataset.X[1, 1])


def test_load_dataset_from_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("DTREE_DATA_DIR", str(tmp_path))
    (tmp_path / "tiny.data").write_text("1;0\n2;1\n")

    dataset = load_dataset("tiny.data", AttributeType.CONTINUOUS, delimiter=";", name="tiny")

    assert str(dataset) == "tiny[2 x 1]"


def test_load_dataset_with_wrong_type_count(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("1,2,0\n")
    with pytest.raises(DataConsistencyError):
        load_dataset(path, [AttributeType.DISCRETE])
