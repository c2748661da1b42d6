class InvalidArgument(ValueError):
    """An argument or a target tuple is malformed.

    Raised when a target does not consist of the ground truth alone or of
    the ground truth plus inside and outside weights, and when a
    hyperparameter such as :obj:`sigma` is out of range.

    """


class ShapeMismatch(ValueError):
    """The element counts of an input and its target arrays disagree."""
