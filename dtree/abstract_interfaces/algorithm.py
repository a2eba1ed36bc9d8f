from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Union

import numpy as np
from tqdm import tqdm

if TYPE_CHECKING:
    from dtree.ml.dataset import Dataset


class Model(ABC):
    """
    A fitted classifier.

    Subclasses only implement _predict_sample(); predicting a whole Dataset and
    scoring accuracy are built on top of it.
    """

    def predict(self, data: Union["Dataset", np.ndarray], progress: bool = False):
        """
        Predict one label for a single sample, or a label vector for a Dataset.

        Args:
            data: A 1-D feature vector or a Dataset.
            progress: Show a tqdm progress bar when predicting a Dataset.
        """
        from dtree.ml.dataset import Dataset

        if isinstance(data, Dataset):
            rows = tqdm(data.X, desc="Classifying samples", disable=not progress)
            return np.array([self._predict_sample(row) for row in rows])
        return self._predict_sample(np.asarray(data, dtype=float))

    def accuracy(self, dataset: "Dataset") -> float:
        """Fraction of the dataset's samples whose label is predicted correctly."""
        if dataset.sample_count() == 0:
            raise ValueError("Cannot compute accuracy on an empty dataset")
        predictions = self.predict(dataset)
        return float(np.mean(predictions == dataset.y))

    @abstractmethod
    def _predict_sample(self, sample: np.ndarray):
        """Return the predicted label for one feature vector."""
        pass


class Algorithm(ABC):
    """
    A learning algorithm: anything that turns a Dataset into a Model.

    Ensembles and evaluation loops only rely on this contract.
    """

    @abstractmethod
    def fit(self, dataset: "Dataset") -> Model:
        """
        Train on the dataset.

        Args:
            dataset (Dataset): Labelled training data. Implementations must not mutate it.

        Returns:
            Model: The fitted model.
        """
        pass
