# -*- coding: utf-8 -*-
"""
entropytree.tree
================

This module implements a binary decision tree classifier for numeric
features.  Trees are grown top‑down: every node searches all features and all
observed feature values for the ``x[f] <= t`` split with the largest
information gain (entropy reduction), partitions the rows and recurses on both
sides.  Growth stops when a node is pure or when no candidate split reduces
entropy at all, in which case the node predicts the majority label.

There is no pruning, no depth limit and no special handling of categorical or
missing values; the tree is exactly what the greedy search produces.

The estimator follows scikit‑learn conventions (``fit``/``predict``/``score``)
and also offers rule tracing, rule export, pretty printing and Graphviz
export of the learned tree.

Nodes are represented by two immutable variants, :class:`Leaf` and
:class:`DecisionNode`.
"""

# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from functools import reduce
from typing import NamedTuple, Optional, Union

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin

from .exceptions import DimensionMismatchError, InvalidInputError, ModelNotTrainedError

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Split criteria
# -----------------------------------------------------------------------------
def entropy(labels) -> float:
    """Shannon entropy (base 2) of a label set; ``0.0`` for an empty set."""
    y = np.asarray(labels)
    if y.size == 0:
        return 0.0
    # np.unique sorts; terms are accumulated one by one in ascending label order
    _, counts = np.unique(y, return_counts=True)
    e = 0.0
    for p in (counts / y.size).tolist():
        e -= p * math.log2(p)
    return e

def information_gain(parent, left, right) -> float:
    """
    Entropy reduction obtained by splitting ``parent`` into ``left``/``right``.

    ``H(parent) - (|left|/|parent| * H(left) + |right|/|parent| * H(right))``
    """
    n = len(parent)
    if n == 0:
        return 0.0
    w_left = len(left) / n
    w_right = len(right) / n
    return entropy(parent) - (w_left * entropy(left) + w_right * entropy(right))

def split_labels(X: np.ndarray, y: np.ndarray, feature: int, threshold: float):
    mask = X[:, feature] <= threshold
    return y[mask], y[~mask]

def split_data(X: np.ndarray, y: np.ndarray, feature: int, threshold: float):
    mask = X[:, feature] <= threshold
    return X[mask], y[mask], X[~mask], y[~mask]

def is_pure(y: np.ndarray) -> bool:
    if len(y) == 0:
        return True
    return bool(np.all(y == y[0]))

def majority_label(y: np.ndarray) -> int:
    # argmax keeps the first maximum, i.e. the smallest label id on ties
    values, counts = np.unique(y, return_counts=True)
    return int(values[np.argmax(counts)])


class _Split(NamedTuple):
    feature: Optional[int]
    threshold: float
    gain: float

_NO_SPLIT = _Split(None, 0.0, 0.0)

def _candidate_splits(X: np.ndarray, y: np.ndarray):
    # features outer, rows inner; repeated values cannot beat their first occurrence
    for feature in range(X.shape[1]):
        for threshold in dict.fromkeys(X[:, feature].tolist()):
            left, right = split_labels(X, y, feature, threshold)
            yield _Split(feature, threshold, information_gain(y, left, right))

def _prefer(best: _Split, candidate: _Split) -> _Split:
    return candidate if candidate.gain > best.gain else best

def _best_split(X: np.ndarray, y: np.ndarray) -> _Split:
    """Highest-gain split, or ``_NO_SPLIT`` when no candidate has gain > 0."""
    return reduce(_prefer, _candidate_splits(X, y), _NO_SPLIT)


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Leaf:
    """Terminal node predicting ``label``."""
    label: int

    @property
    def depth(self) -> int:
        return 0

    @property
    def n_leaves(self) -> int:
        return 1


@dataclass(frozen=True)
class DecisionNode:
    """Internal node routing ``x[feature_index] <= threshold`` to ``left``, the rest to ``right``."""
    feature_index: int
    threshold: float
    left: "Node"
    right: "Node"

    @property
    def depth(self) -> int:
        return 1 + max(self.left.depth, self.right.depth)

    @property
    def n_leaves(self) -> int:
        return self.left.n_leaves + self.right.n_leaves


Node = Union[Leaf, DecisionNode]


# -----------------------------------------------------------------------------
# Classifier
# -----------------------------------------------------------------------------
class DecisionTree(ClassifierMixin, BaseEstimator):
    """
    Binary decision tree classifier grown by information gain.

    At each node every feature ``f`` and every value ``t`` observed for that
    feature among the node's rows is tried as a split ``x[f] <= t``.  The split
    with the strictly largest information gain is kept; ties go to the lower
    feature index and, within a feature, to the value seen first.  A node
    becomes a leaf when all its labels are equal, or when no split has a
    positive gain, in which case it predicts the most frequent label (the
    smallest label id on ties).  Features stay eligible at every depth.

    Parameters
    ----------
    feature_names : list[str] or None, default=None
        Optional feature names used by :meth:`predict_rule`,
        :meth:`export_rules`, :meth:`print_tree` and :meth:`export_graphviz`.
        Must match the number of columns passed to :meth:`fit`.

    Attributes
    ----------
    root_ : Leaf or DecisionNode
        Root of the learned tree.
    classes_ : ndarray
        Sorted distinct labels seen during :meth:`fit`.
    n_features_in_ : int
        Number of features seen during :meth:`fit`.

    Notes
    -----
    Trees are built recursively, so extremely deep trees (thousands of
    levels) can exceed Python's recursion limit.
    """

    def __init__(self, *, feature_names: list[str] | None = None):
        self.feature_names = feature_names

    def fit(self, X, y):
        """
        Grow a tree on ``X``/``y``, replacing any previously learned tree.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Real-valued training samples.  Must be non-empty, rectangular and
            free of NaN.
        y : array-like of shape (n_samples,)
            Integer class labels.

        Returns
        -------
        self

        Raises
        ------
        InvalidInputError
            If the input violates any of the requirements above.
        """
        X, y = self._validate_training_data(X, y)
        self.classes_ = np.unique(y)
        self.n_features_in_ = X.shape[1]
        self.root_ = self._build_tree(X, y, majority_label(y))
        logger.info("fitted tree on %d samples x %d features: depth=%d, leaves=%d",
                    X.shape[0], X.shape[1], self.root_.depth, self.root_.n_leaves)
        return self

    def predict(self, X):
        """
        Predict class labels.

        Parameters
        ----------
        X : array-like of shape (n_features,) or (n_samples, n_features)
            A single sample or a batch of samples.

        Returns
        -------
        int or ndarray of shape (n_samples,)
            The label for a single sample, or an array of labels for a batch.

        Raises
        ------
        ModelNotTrainedError
            If the estimator has not been fitted.
        DimensionMismatchError
            If the sample width differs from the training feature count.
        """
        root = self._check_fitted()
        X = self._validate_samples(X)
        if X.ndim == 1:
            return self._predict_sample(X, root)
        return np.array([self._predict_sample(x, root) for x in X], dtype=self.classes_.dtype)

    def get_depth(self) -> int:
        """Depth of the learned tree; a single leaf has depth 0."""
        return self._check_fitted().depth

    def get_n_leaves(self) -> int:
        """Number of leaves in the learned tree."""
        return self._check_fitted().n_leaves

    def predict_rule(self, X, feature_names=None):
        """
        Return the decision rule (antecedent) followed by each input instance.

        Parameters
        ----------
        X : array-like of shape (n_features,) or (n_samples, n_features)
            Input samples.
        feature_names : list[str], optional
            Alternative names for the features.  Defaults to the names given
            at construction time.

        Returns
        -------
        list[str]
            One antecedent string per sample, e.g. ``"X[0] <= 2.0000 AND X[1] > 0.5000"``.
            A tree consisting of a single leaf yields ``"<root>"``.
        """
        root = self._check_fitted()
        X = np.atleast_2d(self._validate_samples(X))
        fn = self._feature_names(feature_names)
        return [self._trace_rule(x, root, fn) for x in X]

    def export_rules(self, *, feature_names=None, class_names=None) -> list[str]:
        """
        Export every root-to-leaf path as a ``"<antecedent> => <class>"`` string.

        Parameters
        ----------
        feature_names : list[str], optional
            Alternative names for the features.
        class_names : list[str], optional
            Names for the classes, ordered according to :attr:`classes_`.

        Returns
        -------
        list[str]
            One rule per leaf, left subtrees first.
        """
        root = self._check_fitted()
        fn = self._feature_names(feature_names)
        cn = self._class_names(class_names)
        rules: list[str] = []
        self._collect_rules(root, [], rules, fn, cn)
        return rules

    def print_tree(self, feature_names=None, class_names=None):
        """
        Pretty‑print the decision tree to ``stdout``.

        Parameters
        ----------
        feature_names : list[str], optional
            Alternative names for the features.
        class_names : list[str], optional
            Names for the classes, ordered according to :attr:`classes_`.
        """
        root = self._check_fitted()
        self._print_node(root, "", self._feature_names(feature_names), self._class_names(class_names))

    def export_graphviz(self, filename: str | None = None, *, feature_names=None,
                        class_names=None, format: str = "png") -> str:
        """
        Export the tree structure in Graphviz format.

        Requires the optional `graphviz` Python package.  With
        ``format='dot'`` the DOT source is written directly and no external
        Graphviz binary is needed; other formats invoke the ``dot`` command
        and fall back to writing a ``.dot`` file if it is unavailable.

        Parameters
        ----------
        filename : str or None, default=None
            Basename of the output file (the extension is determined by
            ``format``).  If None, the DOT source is returned and nothing is
            written.
        feature_names : list[str], optional
            Alternative names for the features.
        class_names : list[str], optional
            Names for the classes, ordered according to :attr:`classes_`.
        format : str, default="png"
            Graphviz output format, e.g. ``'png'``, ``'pdf'``, ``'svg'`` or ``'dot'``.

        Returns
        -------
        str
            Path to the written file, or the DOT source if ``filename`` is None.

        Raises
        ------
        ModelNotTrainedError
            If the estimator is not fitted.
        RuntimeError
            If the `graphviz` package is not installed.
        """
        root = self._check_fitted()
        try:
            import graphviz
        except ImportError as exc:
            raise RuntimeError("Graphviz is required for export_graphviz but not installed.") from exc
        dot = graphviz.Digraph(format=format)
        self._add_graph_nodes(dot, root, "0", self._feature_names(feature_names),
                              self._class_names(class_names))

        if filename is None:
            return dot.source
        if format.lower() == "dot":
            path = f"{filename}.dot"
            dot.save(path)
            return path
        try:
            dot.render(filename, cleanup=True)
            return f"{filename}.{format}"
        except graphviz.ExecutableNotFound:
            logger.warning("Graphviz 'dot' executable not found; writing %s.dot instead", filename)
            fallback_path = f"{filename}.dot"
            dot.save(fallback_path)
            return fallback_path

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def _validate_training_data(self, X, y):
        try:
            X = np.asarray(X, dtype=float)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"X must be a rectangular array of real numbers: {exc}") from exc
        y = np.asarray(y)
        if X.ndim == 0 or len(X) == 0:
            raise InvalidInputError("X must contain at least one sample")
        if X.ndim != 2:
            raise InvalidInputError(f"X must be 2-D (n_samples, n_features), got shape {X.shape}")
        if X.shape[1] == 0:
            raise InvalidInputError("X must have at least one feature")
        if np.isnan(X).any():
            raise InvalidInputError("X contains NaN; missing values are not supported")
        if y.ndim != 1:
            raise InvalidInputError(f"y must be 1-D, got shape {y.shape}")
        if len(y) != len(X):
            raise InvalidInputError(f"X has {len(X)} samples but y has {len(y)} labels")
        if not np.issubdtype(y.dtype, np.integer):
            raise InvalidInputError(f"y must contain integer class labels, got dtype {y.dtype}")
        if self.feature_names is not None and len(self.feature_names) != X.shape[1]:
            raise InvalidInputError("feature_names length must match X.shape[1]")
        return X, y

    def _validate_samples(self, X) -> np.ndarray:
        try:
            X = np.asarray(X, dtype=float)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"samples must be real-valued and rectangular: {exc}") from exc
        if X.ndim not in (1, 2):
            raise InvalidInputError(f"expected a sample or a 2-D batch of samples, got shape {X.shape}")
        if X.shape[-1] != self.n_features_in_:
            raise DimensionMismatchError(
                f"X has {X.shape[-1]} features, but the tree was fitted with {self.n_features_in_}")
        if np.isnan(X).any():
            raise InvalidInputError("samples contain NaN; missing values are not supported")
        return X

    def _check_fitted(self) -> Node:
        root = getattr(self, "root_", None)
        if root is None:
            raise ModelNotTrainedError("Estimator not fitted. Call fit(...) first.")
        return root

    def _feature_names(self, feature_names=None):
        return feature_names if feature_names is not None else self.feature_names

    def _class_names(self, class_names=None):
        if class_names is None:
            return None
        if len(class_names) != len(self.classes_):
            raise InvalidInputError("class_names length must match the number of classes")
        return dict(zip(self.classes_.tolist(), class_names))

    # ------------------------------------------------------------------
    # Tree construction (information gain)
    # ------------------------------------------------------------------
    def _build_tree(self, X: np.ndarray, y: np.ndarray,
                    fallback_label: int, depth: int = 0) -> Node:
        """
        Recursively grow the subtree for the rows ``X``/``y``.

        ``fallback_label`` is the parent's majority label and is used when a
        partition arrives empty.
        """
        if len(y) == 0:
            logger.debug("depth %d: empty partition, leaf with parent majority %s", depth, fallback_label)
            return Leaf(fallback_label)
        if is_pure(y):
            return Leaf(int(y[0]))

        split = _best_split(X, y)
        if split.feature is None:
            label = majority_label(y)
            logger.debug("depth %d: no split improves entropy over %d rows, leaf %d",
                         depth, len(y), label)
            return Leaf(label)

        left_X, left_y, right_X, right_y = split_data(X, y, split.feature, split.threshold)
        logger.debug("depth %d: split X[%d] <= %g (gain=%.4f, %d/%d rows)",
                     depth, split.feature, split.threshold, split.gain, len(left_y), len(right_y))
        parent_label = majority_label(y)
        left = self._build_tree(left_X, left_y, parent_label, depth + 1)
        right = self._build_tree(right_X, right_y, parent_label, depth + 1)
        return DecisionNode(split.feature, split.threshold, left, right)

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------
    def _predict_sample(self, x: np.ndarray, node: Node) -> int:
        while isinstance(node, DecisionNode):
            node = node.left if x[node.feature_index] <= node.threshold else node.right
        return node.label

    # ------------------------------------------------------------------
    # Rule tracing / Graphviz / printing helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _name(fn, index: int) -> str:
        if fn is not None and 0 <= index < len(fn):
            return str(fn[index])
        return f"X[{index}]"

    @staticmethod
    def _label(cn, label: int) -> str:
        return str(cn[label]) if cn is not None else str(label)

    def _trace_rule(self, x, node: Node, fn=None) -> str:
        parts = []
        while isinstance(node, DecisionNode):
            name = self._name(fn, node.feature_index)
            if x[node.feature_index] <= node.threshold:
                parts.append(f"{name} <= {node.threshold:.4f}")
                node = node.left
            else:
                parts.append(f"{name} > {node.threshold:.4f}")
                node = node.right
        return " AND ".join(parts) if parts else "<root>"

    def _collect_rules(self, node: Node, parts, rules, fn, cn):
        if isinstance(node, Leaf):
            body = " AND ".join(parts) if parts else "<root>"
            rules.append(f"{body} => {self._label(cn, node.label)}")
            return
        name = self._name(fn, node.feature_index)
        self._collect_rules(node.left, parts + [f"{name} <= {node.threshold:.4f}"], rules, fn, cn)
        self._collect_rules(node.right, parts + [f"{name} > {node.threshold:.4f}"], rules, fn, cn)

    def _add_graph_nodes(self, dot, node: Node, name: str, fn, cn):
        if isinstance(node, Leaf):
            dot.node(name, f"class={self._label(cn, node.label)}",
                     shape="box", style="filled", color="lightgrey")
            return
        label = f"{self._name(fn, node.feature_index)} <= {node.threshold:.4f}"
        dot.node(name, label, shape="ellipse", style="filled", color="lightblue")
        l_id, r_id = name + "L", name + "R"
        self._add_graph_nodes(dot, node.left, l_id, fn, cn)
        self._add_graph_nodes(dot, node.right, r_id, fn, cn)
        dot.edge(name, l_id, label="True")
        dot.edge(name, r_id, label="False")

    def _print_node(self, node: Node, indent="", fn=None, cn=None):
        if isinstance(node, Leaf):
            print(f"{indent}Predict {self._label(cn, node.label)}")
            return
        print(f"{indent}if {self._name(fn, node.feature_index)} <= {node.threshold:.4f}:")
        self._print_node(node.left, indent + "  ", fn, cn)
        print(f"{indent}else:")
        self._print_node(node.right, indent + "  ", fn, cn)
