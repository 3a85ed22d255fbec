# entropy_tree/__init__.py

"""
Entropy Decision Tree Package
"""

from .tree import EntropyDecisionTree, Node, LeafNode, SplitNode, build_tree, fit, predict
from .utils import calculate_entropy, calculate_information_gain, majority_label
from .exceptions import InvalidInputError

VERSION = "0.1.0"
