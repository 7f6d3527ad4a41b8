import numpy as np
import pytest
from sklearn.exceptions import NotFittedError
from entropytree import (
    DecisionTree,
    DecisionTreeError,
    InvalidInputError,
    ModelNotTrainedError,
    DimensionMismatchError,
)


@pytest.mark.parametrize("X, y", [
    ([], []),                               # empty dataset
    ([[1.0], [2.0]], [0]),                  # length mismatch
    ([[1.0, 2.0], [3.0]], [0, 1]),          # ragged rows
    ([1.0, 2.0], [0, 1]),                   # 1-D data
    ([[], []], [0, 1]),                     # no features
    ([[1.0], [np.nan]], [0, 1]),            # missing value
    ([[1.0], [2.0]], [0.5, 1.5]),           # non-integer labels
    ([[1.0], [2.0]], [[0], [1]]),           # 2-D labels
    ([["a"], ["b"]], [0, 1]),               # non-numeric features
])
def test_fit_rejects_invalid_input(X, y):
    with pytest.raises(InvalidInputError):
        DecisionTree().fit(X, y)

def test_invalid_input_is_a_value_error():
    with pytest.raises(ValueError):
        DecisionTree().fit([], [])

def test_feature_names_length_checked():
    clf = DecisionTree(feature_names=["a", "b"])
    with pytest.raises(InvalidInputError):
        clf.fit([[1.0], [2.0]], [0, 1])

def test_predict_before_fit_raises():
    clf = DecisionTree()
    with pytest.raises(ModelNotTrainedError):
        clf.predict([1.0])
    with pytest.raises(NotFittedError):
        clf.predict([[1.0]])
    with pytest.raises(ModelNotTrainedError):
        clf.get_depth()
    with pytest.raises(ModelNotTrainedError):
        clf.export_rules()

def test_predict_dimension_mismatch():
    clf = DecisionTree().fit([[1.0, 2.0], [3.0, 4.0]], [0, 1])
    with pytest.raises(DimensionMismatchError):
        clf.predict([1.0])
    with pytest.raises(DimensionMismatchError):
        clf.predict([[1.0, 2.0, 3.0]])

def test_all_errors_share_a_base_class():
    for exc in (InvalidInputError, ModelNotTrainedError, DimensionMismatchError):
        assert issubclass(exc, DecisionTreeError)

def test_predict_rejects_nan_samples():
    clf = DecisionTree().fit([[1.0], [2.0], [3.0], [4.0]], [0, 0, 1, 1])
    with pytest.raises(InvalidInputError):
        clf.predict([np.nan])
    with pytest.raises(InvalidInputError):
        clf.predict([[1.0], [np.nan]])
    with pytest.raises(InvalidInputError):
        clf.predict_rule([np.nan])
