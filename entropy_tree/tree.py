# entropy_tree/tree.py
import time
import numpy as np
import pandas as pd

from .utils import (
    majority_label,
    is_pandas_dataframe,
    convert_features_to_matrix,
    convert_labels_to_array,
    validate_training_inputs
)
from .stopping import check_pre_split_stopping_conditions, check_post_split_stopping_condition
from .splitting import find_best_split_for_node, split_data


class Node:
    """Base class for tree vertices. Use LeafNode or SplitNode."""
    is_leaf = False

    def __init__(self, depth, num_samples):
        self.depth = depth
        self.num_samples = num_samples


class LeafNode(Node):
    is_leaf = True

    def __init__(self, label, depth=0, num_samples=0, leaf_reason=None):
        super().__init__(depth, num_samples)
        self.label = int(label)
        self.leaf_reason = leaf_reason

    def __repr__(self):
        return (f"LeafNode(label={self.label}, depth={self.depth}, samples={self.num_samples}, "
                f"reason='{self.leaf_reason}')")


class SplitNode(Node):
    """Internal node: samples with `sample[feature_index] <= threshold` go left."""

    def __init__(self, feature_index, threshold, left=None, right=None, depth=0, num_samples=0, information_gain=0.0):
        super().__init__(depth, num_samples)
        self.feature_index = int(feature_index)
        self.threshold = float(threshold)
        self.left = left
        self.right = right
        self.information_gain = information_gain

    def __repr__(self):
        return (f"SplitNode(feature={self.feature_index}, threshold={self.threshold:.3f}, "
                f"depth={self.depth}, samples={self.num_samples}, gain={self.information_gain:.4f})")


def _grow_node(feature_matrix, labels, depth, verbose):
    """
    Decides what a single node becomes.

    1. A pure node becomes a leaf.
    2. Otherwise every (feature, sample value) pair is tried as a split.
    3. If no split has positive information gain, the node becomes a leaf
       holding the majority label.
    4. Otherwise the node becomes a split and its samples are partitioned.

    Returns:
        tuple: (node, partitions). partitions is None for a leaf, otherwise
               (left_matrix, left_labels, right_matrix, right_labels) with the
               node's children still to be attached.
    """
    num_samples = feature_matrix.shape[0]
    indent = "  " * (depth + 1)
    if verbose:
        print(f"{indent}Processing node (Depth {depth}): {num_samples} samples.")

    # 1. Check pre-split stopping conditions
    stop_reason = check_pre_split_stopping_conditions(labels)
    if stop_reason:
        if verbose: print(f"{indent}  Node becomes LEAF (label={int(labels[0])}). Reason: {stop_reason}")
        return LeafNode(labels[0], depth=depth, num_samples=num_samples, leaf_reason=stop_reason), None

    # 2. Find the best possible split across all features
    best_split = find_best_split_for_node(
        feature_matrix=feature_matrix, labels=labels,
        verbose=verbose, node_depth_for_logs=depth
    )

    # 3. Fall back to the majority label when nothing beats zero gain
    stop_reason = check_post_split_stopping_condition(best_split, verbose=verbose, node_depth_for_logs=depth)
    if stop_reason:
        label = majority_label(labels)
        if verbose: print(f"{indent}  Node becomes LEAF (label={label}). Reason: {stop_reason}")
        return LeafNode(label, depth=depth, num_samples=num_samples, leaf_reason=stop_reason), None

    # 4. Perform the split
    feature_index, threshold = best_split['feature_index'], best_split['threshold']
    if verbose: print(f"{indent}  Node SPLIT on feature {feature_index} <= {threshold}.")

    node = SplitNode(
        feature_index=feature_index, threshold=threshold,
        depth=depth, num_samples=num_samples,
        information_gain=best_split['information_gain']
    )
    return node, split_data(feature_matrix, labels, feature_index, threshold)


def build_tree(feature_matrix, labels, depth=0, verbose=False):
    """
    Grows a tree from a node's samples.

    Pending nodes are kept on an explicit work stack, so tree depth is not
    limited by the interpreter's recursion limit. Each entry carries its own
    partitioned copy of the samples and the parent/side its finished node is
    attached to.

    Args:
        feature_matrix (np.ndarray): (n_samples, n_features) float matrix, n_samples >= 1.
        labels (np.ndarray): int labels parallel to the rows.
        depth (int): Depth of the node being built.
        verbose (bool): Flag for detailed logging.

    Returns:
        Node: The root of the subtree.
    """
    root = None
    stack = [(feature_matrix, labels, depth, None, None)]

    while stack:
        node_matrix, node_labels, node_depth, parent, side = stack.pop()
        node, partitions = _grow_node(node_matrix, node_labels, node_depth, verbose)

        if parent is None:
            root = node
        elif side == 'left':
            parent.left = node
        else:
            parent.right = node

        if partitions is not None:
            left_matrix, left_labels, right_matrix, right_labels = partitions
            # Left is pushed last so it is built first
            stack.append((right_matrix, right_labels, node_depth + 1, node, 'right'))
            stack.append((left_matrix, left_labels, node_depth + 1, node, 'left'))

    return root


def traverse_tree(node, sample):
    """
    Follows split rules from `node` down to a leaf and returns its label.
    Feature indices are positional, also for a pandas Series sample.
    """
    sample = np.asarray(sample)
    while not node.is_leaf:
        if node.feature_index >= sample.shape[0]:
            raise IndexError(
                f"Sample has {sample.shape[0]} features but the tree references feature index {node.feature_index}."
            )
        if sample[node.feature_index] <= node.threshold:
            node = node.left
        else:
            node = node.right
    return node.label


class EntropyDecisionTree:
    def __init__(self, verbose=False):
        self.verbose = verbose

        self.root = None
        self.n_features = None
        self.feature_columns = None
        self.classes_ = None

    def fit(self, data, labels):
        fit_start_time = time.time()
        feature_matrix, feature_columns = convert_features_to_matrix(data)
        label_array = convert_labels_to_array(labels)
        validate_training_inputs(feature_matrix, label_array)
        if self.verbose:
            print(f"EntropyDecisionTree.fit started. Data has {feature_matrix.shape[0]} rows, {feature_matrix.shape[1]} features.")

        self.n_features = feature_matrix.shape[1]
        self.feature_columns = feature_columns
        self.classes_ = np.unique(label_array)
        self.root = build_tree(feature_matrix, label_array, depth=0, verbose=self.verbose)

        if self.verbose:
            fit_end_time = time.time()
            print(f"EntropyDecisionTree.fit completed in {fit_end_time - fit_start_time:.4f}s. "
                  f"Total nodes: {self.get_tree_stats()['num_nodes']}")
        return self

    def _check_fitted(self):
        if self.root is None: raise ValueError("Tree has not been fitted yet.")

    def predict_one(self, sample):
        """
        Predicts one sample. A pandas Series carrying every training column
        name is reordered to the training columns; otherwise positions are used.
        """
        self._check_fitted()
        if isinstance(sample, pd.Series) and self.feature_columns is not None:
            names = sample.index.astype(str)
            if all(col in names for col in self.feature_columns):
                sample = sample.set_axis(names)[self.feature_columns]
        return traverse_tree(self.root, sample)

    def predict(self, data):
        self._check_fitted()

        if is_pandas_dataframe(data) and self.feature_columns is not None:
            missing = [col for col in self.feature_columns if col not in data.columns.astype(str)]
            if missing: raise ValueError(f"Prediction data is missing training columns: {missing}")
            data = data.rename(columns=str)[self.feature_columns]

        feature_matrix, _ = convert_features_to_matrix(data, allow_empty=True)
        return np.array([traverse_tree(self.root, row) for row in feature_matrix], dtype=np.int64)

    def iter_nodes(self):
        """Yields every node in pre-order (node, left subtree, right subtree)."""
        self._check_fitted()
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            if not node.is_leaf:
                stack.append(node.right)
                stack.append(node.left)

    def get_tree_stats(self):
        nodes = list(self.iter_nodes())
        return {
            'num_nodes': len(nodes),
            'num_leaf_nodes': sum(1 for n in nodes if n.is_leaf),
            'max_depth': max(n.depth for n in nodes)
        }

    def get_params(self, deep=True):
        return {'verbose': self.verbose}

    def _feature_name(self, feature_index):
        if self.feature_columns is not None:
            return self.feature_columns[feature_index]
        return f"x[{feature_index}]"

    def print_tree(self, node=None, indent=""):
        if node is None:
            self._check_fitted()
            node = self.root

        stack = [(node, indent)]
        while stack:
            node, indent = stack.pop()
            if node.is_leaf:
                print(f"{indent}Leaf: label={node.label} | N={node.num_samples} (Reason: {node.leaf_reason})")
                continue

            condition = f"{self._feature_name(node.feature_index)} <= {node.threshold:.3f}"
            print(f"{indent}Split: {condition} (gain={node.information_gain:.4f}) | N={node.num_samples}")
            stack.append((node.right, indent + "  +--R: "))
            stack.append((node.left, indent + "  |--L: "))


def fit(data, labels, verbose=False):
    """Builds a tree from `data` and `labels` and returns the fitted estimator."""
    return EntropyDecisionTree(verbose=verbose).fit(data, labels)


def predict(tree, sample):
    """Predicts the class of one sample with a fitted estimator or a root node."""
    if isinstance(tree, EntropyDecisionTree):
        return tree.predict_one(sample)
    return traverse_tree(tree, sample)
