# tests/test_tree.py
import numpy as np
import pandas as pd
import pytest

from entropy_tree import (
    EntropyDecisionTree,
    InvalidInputError,
    LeafNode,
    SplitNode,
    build_tree,
    fit,
    predict,
)
from tests.generated_datasets.dataset_generator_numerical import (
    generate_step_class_data,
    generate_xor_class_data,
)


@pytest.fixture
def separable_tree():
    return fit([[0], [0], [10], [10]], [0, 0, 1, 1])


def test_pure_labels_give_single_leaf():
    tree = fit([[1.0, 9.0], [4.0, -2.0], [7.5, 3.3]], [7, 7, 7])

    assert isinstance(tree.root, LeafNode)
    assert tree.root.label == 7
    assert tree.root.leaf_reason == "pure_node"
    assert tree.get_tree_stats() == {'num_nodes': 1, 'num_leaf_nodes': 1, 'max_depth': 0}


def test_perfectly_separable_feature(separable_tree):
    root = separable_tree.root

    assert isinstance(root, SplitNode)
    assert root.feature_index == 0
    assert root.threshold == 0.0
    assert root.information_gain == pytest.approx(1.0)
    assert root.left.label == 0
    assert root.right.label == 1
    assert predict(separable_tree, [0]) == 0
    assert predict(separable_tree, [10]) == 1


def test_no_signal_falls_back_to_majority_label():
    tree = fit([[5], [5]], [0, 1])

    assert isinstance(tree.root, LeafNode)
    assert tree.root.label == 0
    assert tree.root.leaf_reason == "no_beneficial_split"


def test_majority_tie_goes_to_smallest_label():
    tree = fit([[0], [0], [0], [0]], [3, 1, 3, 1])
    assert tree.root.label == 1


def test_value_equal_to_threshold_routes_left(separable_tree):
    assert separable_tree.root.threshold == 0.0
    assert predict(separable_tree, [0.0]) == 0
    assert predict(separable_tree, [1e-9]) == 1
    assert predict(separable_tree, [-3.0]) == 0


def test_tie_between_features_keeps_first_feature():
    tree = fit([[1, 5], [2, 6]], [0, 1])

    assert tree.root.feature_index == 0
    assert tree.root.threshold == 1.0


def test_tie_within_feature_keeps_first_sample():
    # thresholds 1 and 3 give exactly the same gain
    tree = fit([[1], [2], [3], [4]], [0, 1, 1, 0])
    assert tree.root.threshold == 1.0


def test_same_feature_can_be_reselected_deeper():
    tree = fit([[1], [2], [3], [4]], [0, 1, 1, 0])
    root = tree.root

    assert root.feature_index == 0
    assert isinstance(root.right, SplitNode)
    assert root.right.feature_index == 0
    assert root.right.threshold == 3.0
    assert [tree.predict_one([v]) for v in (1, 2, 3, 4)] == [0, 1, 1, 0]


def test_training_samples_are_reproduced():
    data, labels = generate_step_class_data(num_samples=150, num_features=3, thresholds=[20, 55, 80], seed=7)
    tree = fit(data, labels)

    assert all(n.leaf_reason == "pure_node" for n in tree.iter_nodes() if n.is_leaf)
    assert tree.predict(data).tolist() == labels


def test_xor_training_samples_are_reproduced():
    data, labels = generate_xor_class_data(num_samples=120, seed=3)
    tree = fit(data, labels)
    assert tree.predict(data).tolist() == labels


def test_fit_is_deterministic():
    data, labels = generate_step_class_data(num_samples=80, num_features=2, label_noise=0.2, seed=11)
    probe, _ = generate_step_class_data(num_samples=200, num_features=2, seed=12)

    first = fit(data, labels)
    second = fit(data, labels)

    assert np.array_equal(first.predict(probe), second.predict(probe))


def test_predict_accepts_bare_root(separable_tree):
    root = build_tree(np.array([[0.0], [0.0], [10.0], [10.0]]), np.array([0, 0, 1, 1]))
    assert predict(root, [10]) == 1
    assert predict(separable_tree.root, [10]) == 1


def test_short_sample_raises_index_error():
    tree = fit([[0, 0], [0, 10]], [0, 1])

    assert tree.root.feature_index == 1
    with pytest.raises(IndexError):
        predict(tree, [0])


def test_sample_only_needs_referenced_features():
    tree = fit([[0, 0], [10, 0]], [0, 1])
    assert predict(tree, [0]) == 0


@pytest.mark.parametrize(
    "data, labels",
    [
        ([], []),
        ([[1], [2]], [0]),
        ([[1, 2], [3]], [0, 1]),
        ([[1], ["a"]], [0, 1]),
        ([[1], [2]], [0.5, 1]),
        ([[1], [2]], ["x", "y"]),
        (np.array([1.0, 2.0]), [0, 1]),
    ],
)
def test_invalid_input_raises(data, labels):
    with pytest.raises(InvalidInputError):
        fit(data, labels)


def test_invalid_input_is_a_value_error():
    with pytest.raises(ValueError):
        fit([], [])


def test_unsupported_container_raises_type_error():
    with pytest.raises(TypeError):
        fit("not a dataset", [0])


def test_unfitted_tree_raises():
    tree = EntropyDecisionTree()
    with pytest.raises(ValueError, match="not been fitted"):
        tree.predict([[1.0]])
    with pytest.raises(ValueError, match="not been fitted"):
        tree.predict_one([1.0])


def test_integral_float_labels_are_accepted():
    tree = fit([[0], [10]], np.array([0.0, 1.0]))
    assert tree.classes_.tolist() == [0, 1]
    assert predict(tree, [10]) == 1


def test_dataframe_input_uses_column_names():
    X = pd.DataFrame({"a": [0, 0, 10, 10], "b": [1, 2, 3, 4]})
    y = pd.Series([0, 0, 1, 1])
    tree = EntropyDecisionTree().fit(X, y)

    assert tree.feature_columns == ["a", "b"]
    assert tree.root.feature_index == 0

    X_new = pd.DataFrame({"b": [9, 9], "a": [0, 10]})
    assert tree.predict(X_new).tolist() == [0, 1]


def test_dataframe_missing_column_raises():
    tree = EntropyDecisionTree().fit(pd.DataFrame({"a": [0, 10]}), [0, 1])
    with pytest.raises(ValueError, match="missing training columns"):
        tree.predict(pd.DataFrame({"b": [1]}))


def test_predict_on_empty_batch(separable_tree):
    assert separable_tree.predict([]).tolist() == []


def test_nan_features_warn():
    with pytest.warns(UserWarning, match="NaN"):
        tree = fit([[np.nan], [1.0]], [0, 1])
    assert tree.root.threshold == 1.0


def test_tree_stats(separable_tree):
    assert separable_tree.get_tree_stats() == {'num_nodes': 3, 'num_leaf_nodes': 2, 'max_depth': 1}
    assert separable_tree.get_params() == {'verbose': False}


def test_print_tree(separable_tree, capsys):
    separable_tree.print_tree()
    out = capsys.readouterr().out

    assert "Split: x[0] <= 0.000" in out
    assert "|--L: Leaf: label=0" in out
    assert "+--R: Leaf: label=1" in out


def test_verbose_fit_logs_progress(capsys):
    fit([[0], [10]], [0, 1], verbose=True)
    out = capsys.readouterr().out

    assert "EntropyDecisionTree.fit started" in out
    assert "Node SPLIT on feature 0" in out
    assert "EntropyDecisionTree.fit completed" in out


CHAIN_LENGTH = 2000


@pytest.fixture(scope="module")
def chain_data():
    # Alternating labels on a sorted feature: every split peels off one sample
    data = [[float(i)] for i in range(CHAIN_LENGTH)]
    labels = [i % 2 for i in range(CHAIN_LENGTH)]
    return data, labels


@pytest.fixture(scope="module")
def chain_tree(chain_data):
    data, labels = chain_data
    return fit(data, labels)


def test_deep_chain_tree_is_built(chain_tree, chain_data):
    data, labels = chain_data
    stats = chain_tree.get_tree_stats()

    assert stats['max_depth'] == CHAIN_LENGTH - 1
    assert stats['num_leaf_nodes'] == CHAIN_LENGTH
    assert chain_tree.predict(data).tolist() == labels


def test_deep_chain_tree_prints(chain_tree, capsys):
    chain_tree.print_tree()
    out = capsys.readouterr().out

    assert len(out.splitlines()) == chain_tree.get_tree_stats()['num_nodes']


def test_series_sample_is_read_by_position():
    tree = fit([[0, 0], [0, 10]], [0, 1])
    sample = pd.Series([0, 10], index=[1, 0])

    assert tree.predict_one(sample) == 1
    assert predict(tree.root, sample) == 1


def test_series_sample_with_training_columns_is_read_by_name():
    X = pd.DataFrame({"a": [0, 0, 10, 10], "b": [1, 2, 3, 4]})
    tree = EntropyDecisionTree().fit(X, [0, 0, 1, 1])

    assert tree.predict_one(pd.Series({"b": 1, "a": 10})) == 1
    assert tree.predict_one(X.iloc[0]) == 0
