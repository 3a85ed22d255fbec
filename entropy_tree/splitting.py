# entropy_tree/splitting.py
import math
import time # For performance logging
import numpy as np
from .utils import calculate_information_gain_from_counts


def split_data(feature_matrix, labels, feature_index, threshold):
    """
    Partitions samples and their labels by the rule `value <= threshold` (left)
    versus `value > threshold` (right). Boolean indexing copies, so each
    side owns its rows.

    Returns:
        tuple: (left_matrix, left_labels, right_matrix, right_labels)
    """
    left_mask = feature_matrix[:, feature_index] <= threshold
    right_mask = ~left_mask
    return (
        feature_matrix[left_mask], labels[left_mask],
        feature_matrix[right_mask], labels[right_mask]
    )


def calculate_threshold_gains(feature_column, label_codes, parent_counts):
    """
    Information gain of every distinct value of one feature used as a
    `<= threshold` split.

    The column is scanned once in ascending order while per-class counts are
    moved from the right child to the left child, so each gain comes from the
    same counts a direct partition would produce. NaN values sort last, are
    never moved left and get no entry.

    Args:
        feature_column (np.ndarray): Values of one feature for the node's samples.
        label_codes (np.ndarray): Class index (0..k-1, ascending class order) per sample.
        parent_counts (list of int): Per-class counts of the node.

    Returns:
        dict: threshold value -> information gain.
    """
    order = np.argsort(feature_column, kind='stable')
    sorted_values = feature_column[order].tolist()
    sorted_codes = label_codes[order].tolist()

    left_counts = [0] * len(parent_counts)
    right_counts = list(parent_counts)
    gains = {}

    i, num_samples = 0, len(sorted_values)
    while i < num_samples:
        value = sorted_values[i]
        if math.isnan(value):
            break
        while i < num_samples and sorted_values[i] == value:
            code = sorted_codes[i]
            left_counts[code] += 1
            right_counts[code] -= 1
            i += 1
        gains[value] = calculate_information_gain_from_counts(parent_counts, left_counts, right_counts)
    return gains


def find_best_threshold_for_feature(
    feature_matrix: np.ndarray,
    labels: np.ndarray,
    feature_index: int,
    verbose: bool = False,
    node_depth_for_logs: int = 0
):
    """
    Tries every sample value of one feature as a candidate threshold.

    Candidates are visited in sample order and a candidate replaces the
    current best only when its gain is strictly greater, starting from a
    baseline of 0.0. A value already seen for this feature yields the same
    partition, so it is skipped.

    Returns:
        dict: {'feature_index', 'threshold', 'information_gain'} or an empty
              dict if no candidate beat zero gain.
    """
    best_split = {}
    best_gain = 0.0
    indent = "  " * (node_depth_for_logs + 2)

    feature_column = feature_matrix[:, feature_index]
    _, label_codes = np.unique(labels, return_inverse=True)
    parent_counts = np.bincount(label_codes.ravel()).tolist()
    gains = calculate_threshold_gains(feature_column, label_codes.ravel(), parent_counts)

    seen_thresholds = set()
    for threshold in feature_column.tolist():
        if threshold in seen_thresholds:
            continue
        seen_thresholds.add(threshold)

        # NaN thresholds send every sample right
        gain = gains.get(threshold, 0.0)
        if gain > best_gain:
            best_gain = gain
            best_split = {
                'feature_index': feature_index,
                'threshold': threshold,
                'information_gain': gain
            }

    if verbose:
        if best_split:
            print(f"{indent}Feature {feature_index}: {len(seen_thresholds)} candidate thresholds, "
                  f"best <= {best_split['threshold']:.4f} (gain={best_split['information_gain']:.4f}).")
        else:
            print(f"{indent}Feature {feature_index}: {len(seen_thresholds)} candidate thresholds, none with positive gain.")

    return best_split


def find_best_split_for_node(
    feature_matrix: np.ndarray,
    labels: np.ndarray,
    verbose: bool = False,
    node_depth_for_logs: int = 0
):
    """
    Exhaustive search over all features and all sample values for the
    (feature, threshold) pair with the highest information gain.

    Features are visited in ascending index order and a later feature only
    wins on strictly greater gain, so ties resolve to the first candidate in
    feature-then-sample order. Every feature is a candidate at every node.

    Args:
        feature_matrix (np.ndarray): (n_samples, n_features) matrix of the current node.
        labels (np.ndarray): Labels of the current node, parallel to the rows.
        verbose (bool): Flag for detailed logging.
        node_depth_for_logs (int): Depth of the node, for log indentation.

    Returns:
        dict: The best split, or an empty dict if no split has positive gain.
    """
    overall_best_split = {}
    indent = "  " * (node_depth_for_logs + 1)

    if feature_matrix.shape[0] < 2:
        return overall_best_split

    for feature_index in range(feature_matrix.shape[1]):
        if verbose:
            t_feat_split_start = time.time()

        current_feature_best_split = find_best_threshold_for_feature(
            feature_matrix=feature_matrix,
            labels=labels,
            feature_index=feature_index,
            verbose=verbose,
            node_depth_for_logs=node_depth_for_logs
        )

        if verbose:
            print(f"{indent}  Feature {feature_index} took {time.time() - t_feat_split_start:.4f}s")

        if current_feature_best_split and \
           current_feature_best_split['information_gain'] > overall_best_split.get('information_gain', 0.0):
            overall_best_split = current_feature_best_split

    if verbose:
        if overall_best_split:
            print(f"{indent}  Overall best split: feature {overall_best_split['feature_index']} "
                  f"<= {overall_best_split['threshold']:.4f}, gain {overall_best_split['information_gain']:.4f}")
        else:
            print(f"{indent}  No beneficial split found.")

    return overall_best_split
