# entropy_tree/exceptions.py


class InvalidInputError(ValueError):
    """Training data or labels not in the expected shape."""
