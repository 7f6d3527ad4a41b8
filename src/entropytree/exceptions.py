# entropytree/exceptions.py
"""Errors raised by :mod:`entropytree`."""
from __future__ import annotations
from sklearn.exceptions import NotFittedError


class DecisionTreeError(Exception):
    """Base class for all entropytree errors."""


class InvalidInputError(DecisionTreeError, ValueError):
    """Training data is empty, ragged, mislabeled or otherwise malformed."""


class ModelNotTrainedError(DecisionTreeError, NotFittedError):
    """The estimator was used before ``fit`` was called."""


class DimensionMismatchError(DecisionTreeError, ValueError):
    """A sample's width differs from the number of training features."""
