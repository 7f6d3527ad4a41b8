# entropytree/__init__.py
"""
entropytree: binary decision trees grown by information gain (scikit-learn style).

Exports:
    - DecisionTree
    - Leaf, DecisionNode
    - entropy, information_gain
    - the error classes from :mod:`entropytree.exceptions`
"""
from .tree import DecisionTree, Leaf, DecisionNode, entropy, information_gain
from .exceptions import (
    DecisionTreeError,
    InvalidInputError,
    ModelNotTrainedError,
    DimensionMismatchError,
)

__all__ = [
    "DecisionTree",
    "Leaf",
    "DecisionNode",
    "entropy",
    "information_gain",
    "DecisionTreeError",
    "InvalidInputError",
    "ModelNotTrainedError",
    "DimensionMismatchError",
]
__version__ = "0.1.0"
