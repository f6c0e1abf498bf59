"""
Regression tree (CART) from scratch.

Implements:
- Binary splits at midpoints between consecutive distinct feature values
- Variance reduction as the impurity criterion
- Pre-pruning through max_depth and min_samples_leaf
- Optional restriction to a subset of candidate features (used by forests)
- Impurity-decrease feature importances, normalized to sum to 1

Ties between equally good splits go to the first one found: features are
scanned in the given order and thresholds in ascending order.
"""

import numpy as np
from typing import Iterator, Optional, Sequence, Tuple
from dataclasses import dataclass

from errors import InvalidModelError


@dataclass
class TreeNode:
    """A split (feature_idx, threshold, children) or a leaf (value)."""
    feature_idx: Optional[int] = None
    threshold: Optional[float] = None
    left: Optional['TreeNode'] = None   # samples with x[feature_idx] <= threshold
    right: Optional['TreeNode'] = None
    value: float = 0.0
    is_leaf: bool = False

    def _detached(self) -> 'TreeNode':
        return TreeNode(self.feature_idx, self.threshold, value=self.value, is_leaf=self.is_leaf)

    def __deepcopy__(self, memo) -> 'TreeNode':
        # Iterative: an unbounded tree can be deeper than the recursion limit
        root = self._detached()
        stack = [(self, root)]
        while stack:
            source, target = stack.pop()
            for side in ('left', 'right'):
                child = getattr(source, side)
                if child is not None:
                    twin = child._detached()
                    setattr(target, side, twin)
                    stack.append((child, twin))
        memo[id(self)] = root
        return root


class DecisionTreeRegressor:
    """
    Regression tree grown by variance reduction.

    Var(S)  = mean((y - mean(y))^2)
    Gain    = Var(S) - (|L| Var(L) + |R| Var(R)) / |S|
    """

    def __init__(self,
                 max_depth: Optional[int] = None,
                 min_samples_leaf: int = 1):
        """
        Args:
            max_depth: Depth limit (None grows until nodes are pure)
            min_samples_leaf: A node with this many samples or fewer is a
                              leaf, and no split may leave a child smaller
        """
        self.max_depth = max_depth
        self.min_samples_leaf = min_samples_leaf

        self.root: Optional[TreeNode] = None
        self.n_features: int = 0
        self.feature_indices: Optional[np.ndarray] = None
        self.feature_importances_: Optional[np.ndarray] = None

    # =========================================================================
    # Split search
    # =========================================================================

    def _find_best_split(self, X: np.ndarray, y: np.ndarray
                         ) -> Tuple[Optional[int], Optional[float], float]:
        """
        Best (feature, threshold, gain) over the candidate features.

        For each feature the samples are sorted once, and the child variances
        of every cut come from prefix sums of the centered targets.

        Returns:
            (None, None, -inf) when no cut is admissible
        """
        n = len(y)
        centered = y - y.mean()
        parent_var = np.mean(centered ** 2)
        # Prefix sums leave a few ulps of noise; gains this close count as equal
        eps = 1e-12 * max(parent_var, 1.0)

        n_left = np.arange(1, n)
        n_right = n - n_left
        leaf_sizes_ok = (n_left >= self.min_samples_leaf) & (n_right >= self.min_samples_leaf)

        best = (None, None, -np.inf)
        for f in self.feature_indices:
            order = np.argsort(X[:, f], kind='stable')
            xs = X[order, f]
            admissible = leaf_sizes_ok & (xs[:-1] < xs[1:])
            if not admissible.any():
                continue

            ts = centered[order]
            left_sum = np.cumsum(ts)[:-1]
            left_sq = np.cumsum(ts ** 2)[:-1]
            right_sum = ts.sum() - left_sum
            right_sq = (ts ** 2).sum() - left_sq

            left_var = np.maximum(left_sq / n_left - (left_sum / n_left) ** 2, 0.0)
            right_var = np.maximum(right_sq / n_right - (right_sum / n_right) ** 2, 0.0)
            gain = parent_var - (n_left * left_var + n_right * right_var) / n
            gain[~admissible] = -np.inf

            k = int(np.flatnonzero(gain >= gain.max() - eps)[0])
            if gain[k] > best[2] + eps:
                best = (int(f), float((xs[k] + xs[k + 1]) / 2), float(gain[k]))

        return best

    def _is_terminal(self, y: np.ndarray, depth: int) -> bool:
        if self.max_depth is not None and depth >= self.max_depth:
            return True
        return len(y) <= self.min_samples_leaf or bool(np.all(y == y[0]))

    def _grow(self, X: np.ndarray, y: np.ndarray, depth: int) -> TreeNode:
        if self._is_terminal(y, depth):
            return TreeNode(value=float(y.mean()), is_leaf=True)

        feature, threshold, gain = self._find_best_split(X, y)
        if feature is None or gain <= 0:
            return TreeNode(value=float(y.mean()), is_leaf=True)

        self.feature_importances_[feature] += gain * len(y)

        goes_left = X[:, feature] <= threshold
        return TreeNode(
            feature_idx=feature,
            threshold=threshold,
            left=self._grow(X[goes_left], y[goes_left], depth + 1),
            right=self._grow(X[~goes_left], y[~goes_left], depth + 1),
        )

    # =========================================================================
    # Public API
    # =========================================================================

    def fit(self, X: np.ndarray, y: np.ndarray,
            feature_indices: Optional[Sequence[int]] = None) -> 'DecisionTreeRegressor':
        """
        Grow the tree.

        Args:
            X: Feature matrix (n_samples, n_features)
            y: Targets (n_samples,)
            feature_indices: Columns allowed as split features (default: all).
                             Indices are absolute columns of X.

        Returns:
            self
        """
        X = np.array(X, dtype=np.float64)
        y = np.array(y, dtype=np.float64).ravel()

        self.n_features = X.shape[1]
        self.feature_indices = (np.arange(self.n_features) if feature_indices is None
                                else np.asarray(feature_indices, dtype=int))
        self.feature_importances_ = np.zeros(self.n_features)

        self.root = self._grow(X, y, depth=0)

        total = self.feature_importances_.sum()
        if total > 0:
            self.feature_importances_ /= total
        return self

    def _leaf_for(self, x: np.ndarray) -> TreeNode:
        node = self.root
        while not node.is_leaf:
            node = node.left if x[node.feature_idx] <= node.threshold else node.right
        return node

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Mean target of the leaf each sample falls into."""
        if self.root is None:
            raise InvalidModelError("Model not fitted. Call fit() first.")

        X = np.array(X, dtype=np.float64)
        return np.array([self._leaf_for(x).value for x in X])

    def _walk(self) -> Iterator[Tuple[TreeNode, int]]:
        """Every (node, depth) pair, depth-first."""
        stack = [(self.root, 0)] if self.root is not None else []
        while stack:
            node, depth = stack.pop()
            yield node, depth
            if not node.is_leaf:
                stack.append((node.right, depth + 1))
                stack.append((node.left, depth + 1))

    def get_depth(self) -> int:
        """Number of splits on the longest root-to-leaf path."""
        return max((depth for node, depth in self._walk() if node.is_leaf), default=0)

    def get_n_leaves(self) -> int:
        return sum(1 for node, _ in self._walk() if node.is_leaf)
