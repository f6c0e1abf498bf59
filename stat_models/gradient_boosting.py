"""
Gradient Boosting Regressor from scratch.

Implements:
- Gradient boosting on squared error with regression-tree base learners
- Shrinkage (learning rate)
- Optional early stopping on the training MSE

Each round fits a tree to the current residuals (the negative gradient of
the squared error) and adds a shrunken copy of it to the running prediction.
"""

import numpy as np
from typing import List, Optional

from errors import InvalidModelError
from .decision_tree import DecisionTreeRegressor


class GradientBoostingRegressor:
    """
    Gradient Boosting for regression.

    F_0(x) = mean(y)
    F_m(x) = F_{m-1}(x) + η * h_m(x),  h_m fit to y - F_{m-1}(x)
    """

    def __init__(self,
                 n_estimators: int = 100,
                 learning_rate: float = 0.1,
                 max_depth: Optional[int] = 3,
                 min_samples_leaf: int = 1,
                 early_stopping_rounds: int = 0,
                 early_stopping_tolerance: float = 0.0):
        """
        Initialize Gradient Boosting.

        Args:
            n_estimators: Number of boosting rounds
            learning_rate: Shrinkage factor (eta)
            max_depth: Max depth of each tree
            min_samples_leaf: Minimum samples in leaf
            early_stopping_rounds: Stop after this many rounds without
                                   improvement (0 disables)
            early_stopping_tolerance: Minimum MSE decrease counted as improvement
        """
        self.n_estimators = n_estimators
        self.learning_rate = learning_rate
        self.max_depth = max_depth
        self.min_samples_leaf = min_samples_leaf
        self.early_stopping_rounds = early_stopping_rounds
        self.early_stopping_tolerance = early_stopping_tolerance

        self.trees: List[DecisionTreeRegressor] = []
        self.base_score: Optional[float] = None
        self.loss_history: List[float] = []
        self.n_features: int = 0

    def fit(self, X: np.ndarray, y: np.ndarray) -> 'GradientBoostingRegressor':
        """
        Fit the boosted ensemble.

        Args:
            X: Feature matrix (n_samples, n_features)
            y: Targets (n_samples,)

        Returns:
            self
        """
        X = np.array(X, dtype=np.float64)
        y = np.array(y, dtype=np.float64).ravel()

        self.n_features = X.shape[1]
        self.base_score = float(np.mean(y))
        pred = np.full(len(y), self.base_score)

        self.trees = []
        self.loss_history = []
        best_mse = np.inf
        rounds_without_improvement = 0

        for _ in range(self.n_estimators):
            residuals = y - pred

            tree = DecisionTreeRegressor(
                max_depth=self.max_depth,
                min_samples_leaf=self.min_samples_leaf
            )
            tree.fit(X, residuals)
            self.trees.append(tree)

            # Update predictions
            pred += self.learning_rate * tree.predict(X)

            mse = float(np.mean((y - pred) ** 2))
            self.loss_history.append(mse)

            if self.early_stopping_rounds > 0:
                if best_mse - mse > self.early_stopping_tolerance:
                    best_mse = mse
                    rounds_without_improvement = 0
                else:
                    rounds_without_improvement += 1
                    if rounds_without_improvement >= self.early_stopping_rounds:
                        break

        return self

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Predict targets."""
        if self.base_score is None:
            raise InvalidModelError("Model not fitted. Call fit() first.")

        X = np.array(X, dtype=np.float64)
        pred = np.full(len(X), self.base_score)
        for tree in self.trees:
            pred += self.learning_rate * tree.predict(X)
        return pred

    @property
    def n_estimators_used(self) -> int:
        """Number of rounds actually trained (fewer with early stopping)."""
        return len(self.trees)
