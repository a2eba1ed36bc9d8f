import logging

import numpy as np

from dtree import AttributeType, Dataset, ID3, UnseenAttributeValueError
from dtree.utils.json_logging import setup_json_logging

""" Demo of decision tree induction on a small mixed dataset. """
setup_json_logging(level=logging.INFO)

""" Outlook (discrete), humidity (continuous) -> play """
D, C = AttributeType.DISCRETE, AttributeType.CONTINUOUS
dataset = Dataset.from_rows(
    [
        [0, 85.0, 0],
        [0, 90.0, 0],
        [1, 78.0, 1],
        [2, 96.0, 1],
        [2, 80.0, 1],
        [2, 70.0, 0],
        [1, 65.0, 1],
        [0, 95.0, 0],
        [0, 70.0, 1],
        [2, 80.0, 1],
    ],
    [D, C],
    name="weather",
)

""" Fit and inspect """
config = {"max_depth": 4, "selection_metric": "reference"}
model = ID3.from_config(config).fit(dataset)
print(model)
print(f"Training accuracy: {model.accuracy(dataset):.2f}")

""" Classify new days """
for sample in [np.array([0, 72.0]), np.array([1, 99.0]), np.array([3, 80.0])]:
    try:
        print(f"{sample} -> {model.predict(sample)}")
    except UnseenAttributeValueError as e:
        print(f"{sample} -> cannot classify: {e}")
