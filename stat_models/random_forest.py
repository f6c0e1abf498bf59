"""
Bagged regression trees with per-tree feature sampling.

Every member tree gets its own bootstrap draw of the rows and its own random
subset of columns. The forest predicts the average of its members, and the
spread between members doubles as a per-sample confidence.
"""

import numpy as np
from typing import List, Optional, Tuple

from config import DEFAULT_RANDOM_STATE
from errors import InvalidModelError
from .decision_tree import DecisionTreeRegressor


class RandomForestRegressor:
    """
    Averaging ensemble of DecisionTreeRegressor members.

    Members are fitted on the full-width matrix but may only split on the
    columns listed in `feature_indices[k]`, so split indices stay absolute.
    """

    def __init__(self,
                 n_estimators: int = 100,
                 max_depth: Optional[int] = 10,
                 min_samples_leaf: int = 1,
                 max_features: Optional[int] = None,
                 random_state: int = DEFAULT_RANDOM_STATE):
        """
        Args:
            n_estimators: Ensemble size
            max_depth: Depth limit handed to every member
            min_samples_leaf: Leaf size limit handed to every member
            max_features: Columns sampled per member, capped at the column
                          count (None = max(1, int(sqrt(n_features))))
            random_state: Seed for the bootstrap and column draws
        """
        self.n_estimators = n_estimators
        self.max_depth = max_depth
        self.min_samples_leaf = min_samples_leaf
        self.max_features = max_features
        self.random_state = random_state

        self.trees: List[DecisionTreeRegressor] = []
        self.feature_indices: List[np.ndarray] = []
        self.n_features: int = 0
        self.feature_importances_: Optional[np.ndarray] = None

    def _columns_per_tree(self) -> int:
        if self.max_features is None:
            return max(1, int(np.sqrt(self.n_features)))
        return max(1, min(int(self.max_features), self.n_features))

    def _fit_member(self, X: np.ndarray, y: np.ndarray,
                    rng: np.random.Generator, n_columns: int) -> None:
        rows = rng.integers(0, len(X), size=len(X))
        columns = np.sort(rng.choice(self.n_features, size=n_columns, replace=False))

        member = DecisionTreeRegressor(max_depth=self.max_depth,
                                       min_samples_leaf=self.min_samples_leaf)
        member.fit(X[rows], y[rows], feature_indices=columns)

        self.trees.append(member)
        self.feature_indices.append(columns)

    def fit(self, X: np.ndarray, y: np.ndarray) -> 'RandomForestRegressor':
        """
        Grow `n_estimators` members.

        Args:
            X: Feature matrix (n_samples, n_features)
            y: Targets (n_samples,)

        Returns:
            self
        """
        X = np.array(X, dtype=np.float64)
        y = np.array(y, dtype=np.float64).ravel()
        self.n_features = X.shape[1]

        generator = np.random.default_rng(self.random_state)
        n_columns = self._columns_per_tree()
        self.trees, self.feature_indices = [], []
        for _ in range(self.n_estimators):
            self._fit_member(X, y, generator, n_columns)

        if self.trees:
            self.feature_importances_ = np.mean(
                [member.feature_importances_ for member in self.trees], axis=0)
        else:
            self.feature_importances_ = np.zeros(self.n_features)
        return self

    def predict_all(self, X: np.ndarray) -> np.ndarray:
        """Member predictions stacked as (n_trees, n_samples)."""
        if not self.trees:
            raise InvalidModelError("Model not fitted. Call fit() first.")

        X = np.array(X, dtype=np.float64)
        return np.vstack([member.predict(X) for member in self.trees])

    def predict(self, X: np.ndarray) -> np.ndarray:
        return self.predict_all(X).mean(axis=0)

    def predict_with_confidence(self, X: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Ensemble mean plus a confidence in [0, 1] per sample.

        confidence = clip(1 - std(member predictions), 0, 1), using the
        population standard deviation.
        """
        members = self.predict_all(X)
        return members.mean(axis=0), np.clip(1.0 - members.std(axis=0), 0.0, 1.0)

    def score(self, X: np.ndarray, y: np.ndarray) -> float:
        """R² of the ensemble mean; constant targets score 1.0 only if matched."""
        observed = np.asarray(y, dtype=np.float64).ravel()
        residual = np.sum((observed - self.predict(X)) ** 2)
        spread = np.sum((observed - observed.mean()) ** 2)
        if spread == 0:
            return 1.0 if residual == 0 else 0.0
        return float(1 - residual / spread)
