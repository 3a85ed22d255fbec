# entropy_tree/utils.py
import math
import warnings

import numpy as np
import pandas as pd

from .exceptions import InvalidInputError


def class_counts(labels):
    """Per-class counts of a label set, in ascending class order."""
    labels = np.asarray(labels)
    if labels.size == 0:
        return []
    _, counts = np.unique(labels, return_counts=True)
    return counts.tolist()


def calculate_entropy_from_counts(counts):
    """
    Shannon entropy (base 2) from class counts given in ascending class order.
    Zero counts are skipped. No samples means entropy 0.0.
    """
    total = sum(counts)
    if total == 0:
        return 0.0

    entropy = 0.0
    for count in counts:
        if count == 0:
            continue
        p = count / total
        entropy -= p * math.log2(p)
    return entropy


def calculate_entropy(labels):
    """
    Shannon entropy (base 2) of a label set.

    Entropy(S) = -sum_c p_c * log2(p_c), where p_c is the proportion of
    labels in S belonging to class c. Classes are visited in ascending
    order. An empty label set has entropy 0.0.
    """
    return calculate_entropy_from_counts(class_counts(labels))


def calculate_information_gain_from_counts(parent_counts, left_counts, right_counts):
    """
    Information gain computed from per-class counts of the parent and of
    both children, each in ascending class order.
    """
    n_parent = sum(parent_counts)
    if n_parent == 0:
        return 0.0

    parent_entropy = calculate_entropy_from_counts(parent_counts)
    left_entropy = calculate_entropy_from_counts(left_counts)
    right_entropy = calculate_entropy_from_counts(right_counts)

    weight_left = sum(left_counts) / n_parent
    weight_right = sum(right_counts) / n_parent

    return parent_entropy - (weight_left * left_entropy + weight_right * right_entropy)


def calculate_information_gain(parent_labels, left_labels, right_labels):
    """
    Information gain of partitioning `parent_labels` into two children.

    Gain(S) = Entropy(S) - (|L|/|S| * Entropy(L) + |R|/|S| * Entropy(R))

    Args:
        parent_labels (array-like of int): Labels before the split.
        left_labels (array-like of int): Labels routed left.
        right_labels (array-like of int): Labels routed right.

    Returns:
        float: The reduction in entropy. 0.0 if the parent is empty.
    """
    return calculate_information_gain_from_counts(
        class_counts(parent_labels), class_counts(left_labels), class_counts(right_labels)
    )


def majority_label(labels):
    """
    Most frequent label. Ties go to the smallest label value.
    """
    labels = np.asarray(labels)
    if labels.size == 0:
        raise ValueError("Cannot take the majority label of an empty label set.")
    unique_labels, counts = np.unique(labels, return_counts=True)
    # np.unique sorts, and argmax returns the first maximum
    return int(unique_labels[np.argmax(counts)])


def is_pandas_dataframe(data):
    """Checks if the provided data is a Pandas DataFrame."""
    return isinstance(data, pd.DataFrame)


def convert_features_to_matrix(data, allow_empty=False):
    """
    Converts a dataset into a 2-D float matrix.

    Args:
        data: A Pandas DataFrame, a 2-D numpy array or a list of rows.
        allow_empty (bool): If False, an empty dataset raises InvalidInputError.

    Returns:
        tuple: (feature_matrix, feature_columns). feature_columns holds the
               DataFrame column names, or None for other containers.
    """
    feature_columns = None

    if is_pandas_dataframe(data):
        feature_columns = [str(col) for col in data.columns]
        raw = data.to_numpy()
    elif isinstance(data, np.ndarray):
        raw = data
        if raw.ndim != 2 and not (raw.ndim == 1 and raw.size == 0):
            raise InvalidInputError(f"Feature array must be 2-D, got {raw.ndim}-D.")
    elif isinstance(data, (list, tuple)):
        if data:
            try:
                expected_width = len(data[0])
            except TypeError:
                raise InvalidInputError("Each sample must be a sequence of feature values.")
            for i, row in enumerate(data):
                try:
                    row_width = len(row)
                except TypeError:
                    raise InvalidInputError(f"Sample {i} is not a sequence of feature values.")
                if row_width != expected_width:
                    raise InvalidInputError(
                        f"Ragged dataset: sample {i} has {row_width} features, expected {expected_width}."
                    )
        raw = data
    else:
        raise TypeError("Input data must be a Pandas DataFrame, a numpy array or a list of samples.")

    if len(raw) == 0:
        if not allow_empty:
            raise InvalidInputError("Training data cannot be empty.")
        return np.empty((0, 0), dtype=float), feature_columns

    try:
        feature_matrix = np.array(raw, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Feature values must be numeric: {e}")

    if feature_matrix.ndim != 2:
        raise InvalidInputError("Feature values must form a rectangular 2-D table.")

    if np.isnan(feature_matrix).any():
        warnings.warn(
            "NaN feature values found. Missing values are not handled; NaN compares false against every threshold and routes right.",
            UserWarning
        )
    return feature_matrix, feature_columns


def convert_labels_to_array(labels):
    """
    Converts class labels into a 1-D int64 array.
    Float labels are accepted only when every value is integral.
    """
    if isinstance(labels, pd.Series):
        raw = labels.to_numpy()
    elif isinstance(labels, (list, tuple, np.ndarray)):
        raw = np.asarray(labels)
    else:
        raise TypeError("Labels must be a Pandas Series, a numpy array or a list.")

    if raw.ndim != 1:
        raise InvalidInputError(f"Labels must be 1-D, got {raw.ndim}-D.")

    if raw.size == 0 or np.issubdtype(raw.dtype, np.integer) or np.issubdtype(raw.dtype, np.bool_):
        return raw.astype(np.int64)

    if np.issubdtype(raw.dtype, np.floating):
        if not np.all(np.isfinite(raw)) or not np.all(np.mod(raw, 1) == 0):
            raise InvalidInputError("Class labels must be integers.")
        return raw.astype(np.int64)

    raise InvalidInputError(f"Class labels must be integers, got dtype '{raw.dtype}'.")


def validate_training_inputs(feature_matrix, label_array):
    """Checks the data/labels pairing before any node is built."""
    if feature_matrix.shape[0] == 0:
        raise InvalidInputError("Training data cannot be empty.")
    if label_array.shape[0] != feature_matrix.shape[0]:
        raise InvalidInputError(
            f"Length of labels ({label_array.shape[0]}) must match number of samples ({feature_matrix.shape[0]})."
        )
