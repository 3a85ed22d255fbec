# entropy_tree/stopping.py
import numpy as np


def is_pure(labels):
    """True when every label equals the first one."""
    labels = np.asarray(labels)
    return bool(np.all(labels == labels[0])) if labels.size > 0 else True


def check_pre_split_stopping_conditions(labels):
    """
    Checks for stopping conditions before attempting to find a split.
    This avoids the cost of split-finding for nodes that are already terminal.

    Only purity is checked. There is no depth or sample-count limit, and
    features are never removed from the candidate set, so termination of a
    non-pure node relies on the zero-gain floor checked after the search.

    Args:
        labels (np.ndarray): Class labels of the samples in the current node.

    Returns:
        str or None: A string describing the reason for stopping, or None if no stopping condition is met.
    """
    if is_pure(labels):
        return "pure_node"
    return None


def check_post_split_stopping_condition(best_split, verbose=False, node_depth_for_logs=0):
    """
    Determines if splitting should stop after the split search.

    A split is only taken when its information gain is strictly positive.
    The search starts from a baseline of 0.0, so an empty result means no
    candidate beat the zero-gain floor.

    Args:
        best_split (dict): The result of find_best_split_for_node; empty if nothing beat the floor.
        verbose (bool): Flag for detailed logging.
        node_depth_for_logs (int): Depth of the node, for log indentation.

    Returns:
        str or None: A string describing the reason for stopping, or None if splitting should proceed.
    """
    indent = "  " * (node_depth_for_logs + 1)

    if not best_split or best_split.get('information_gain', 0.0) <= 0.0:
        if verbose:
            print(f"{indent}  Stop Check: no candidate split improved on zero information gain.")
        return "no_beneficial_split"
    return None
