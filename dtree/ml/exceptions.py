class DataConsistencyError(ValueError):
    """Raised when data dimensions disagree or a split cannot be made from the data."""


class AttributeTypeError(TypeError):
    """Raised when a discrete-only or continuous-only operation meets the other attribute type."""


class UnseenAttributeValueError(LookupError):
    """
    Raised at classification time when a sample carries a discrete attribute value
    that no child of the current node was built for.

    The tree is left untouched; the caller decides on any fallback.
    """

    def __init__(self, attribute: int, value, known_values):
        self.attribute = attribute
        self.value = value
        self.known_values = list(known_values)
        super().__init__(
            f"No child for value {value!r} of attribute {attribute}. Known values: {self.known_values}"
        )
