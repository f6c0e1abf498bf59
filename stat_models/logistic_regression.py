"""
Logistic Regression from scratch.

Two optimizers are available and produce equivalent models on
well-conditioned data:
- 'gradient_descent': batch gradient ascent on the mean log-likelihood
- 'newton': Newton-Raphson using the analytic gradient and Hessian,
  each step solved with the engine's Gaussian elimination

Both stop when the largest per-coefficient update falls below the tolerance
or the iteration cap is reached.
"""

import numpy as np
from typing import List, Optional

from config import DECISION_THRESHOLD
from errors import InvalidInputError, InvalidModelError
from .linear_algebra import solve
from .stats import sigmoid


class LogisticRegression:
    """
    Binary Logistic Regression.

    P(y=1|x) = sigmoid(θ_0 + θ^T x)

    Gradient of the log-likelihood:   g = X^T (y - p)
    Hessian of the log-likelihood:    H = -X^T W X,  W = diag(p (1 - p))
    """

    SOLVERS = ('gradient_descent', 'newton')

    def __init__(self,
                 solver: str = 'gradient_descent',
                 learning_rate: float = 0.01,
                 max_iterations: int = 1000,
                 tolerance: float = 1e-6):
        """
        Initialize Logistic Regression.

        Args:
            solver: 'gradient_descent' or 'newton'
            learning_rate: Step size (gradient descent only)
            max_iterations: Iteration cap
            tolerance: Stop when max |update| drops below this
        """
        if solver not in self.SOLVERS:
            raise InvalidInputError(f"Unknown solver: {solver}")

        self.solver = solver
        self.learning_rate = learning_rate
        self.max_iterations = max_iterations
        self.tolerance = tolerance

        self.coefficients_: Optional[np.ndarray] = None
        self.n_iter_: int = 0
        self.pseudo_r2_: float = 0.0
        self.loss_history: List[float] = []

    @staticmethod
    def _design_matrix(X: np.ndarray) -> np.ndarray:
        return np.hstack([np.ones((X.shape[0], 1)), X])

    @staticmethod
    def _log_loss(y: np.ndarray, p: np.ndarray) -> float:
        eps = 1e-15
        p = np.clip(p, eps, 1 - eps)
        return float(-np.mean(y * np.log(p) + (1 - y) * np.log(1 - p)))

    def fit(self, X: np.ndarray, y: np.ndarray) -> 'LogisticRegression':
        """
        Fit the model.

        Args:
            X: Feature matrix (n_samples, n_features)
            y: Binary labels in {0, 1}

        Returns:
            self
        """
        X = np.array(X, dtype=np.float64)
        y = np.array(y, dtype=np.float64).ravel()

        if not np.all((y == 0) | (y == 1)):
            raise InvalidInputError(
                "Logistic regression requires binary dependent variable (0 or 1)")

        X_b = self._design_matrix(X)
        theta = np.zeros(X_b.shape[1])
        self.loss_history = []

        step = self._newton_step if self.solver == 'newton' else self._gradient_step

        for iteration in range(self.max_iterations):
            p = sigmoid(X_b @ theta)
            self.loss_history.append(self._log_loss(y, p))

            delta = step(X_b, y, p)
            theta += delta
            self.n_iter_ = iteration + 1

            if np.max(np.abs(delta)) < self.tolerance:
                break

        self.coefficients_ = theta
        self.pseudo_r2_ = self._mcfadden_r2(y, sigmoid(X_b @ theta))
        return self

    def _gradient_step(self, X_b: np.ndarray, y: np.ndarray,
                       p: np.ndarray) -> np.ndarray:
        """θ update for gradient ascent on the mean log-likelihood."""
        gradient = X_b.T @ (y - p) / len(y)
        return self.learning_rate * gradient

    def _newton_step(self, X_b: np.ndarray, y: np.ndarray,
                     p: np.ndarray) -> np.ndarray:
        """Solve H Δ = -g for the Newton-Raphson update."""
        gradient = X_b.T @ (y - p)
        weights = p * (1 - p)
        hessian = -(X_b.T * weights) @ X_b
        return solve(hessian, -gradient)

    @staticmethod
    def _mcfadden_r2(y: np.ndarray, p: np.ndarray) -> float:
        """McFadden pseudo R² = 1 - LL(model) / LL(null)."""
        mean_y = np.mean(y)
        if mean_y in (0.0, 1.0):
            return 0.0
        p = np.clip(p, 1e-4, 1 - 1e-4)
        ll_model = np.sum(np.where(y == 1, np.log(p), np.log(1 - p)))
        ll_null = np.sum(np.where(y == 1, np.log(mean_y), np.log(1 - mean_y)))
        return float(1 - ll_model / ll_null)

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        """
        Predict class probabilities.

        Returns:
            Matrix (n_samples, 2) of [P(y=0), P(y=1)]
        """
        if self.coefficients_ is None:
            raise InvalidModelError("Model not fitted. Call fit() first.")

        X = np.array(X, dtype=np.float64)
        p = sigmoid(self._design_matrix(X) @ self.coefficients_)
        return np.column_stack([1 - p, p])

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Predict 0/1 labels with the 0.5 decision threshold."""
        p = self.predict_proba(X)[:, 1]
        return (p > DECISION_THRESHOLD).astype(np.float64)

    def score(self, X: np.ndarray, y: np.ndarray) -> float:
        """Calculate accuracy."""
        y_pred = self.predict(X)
        return float(np.mean(y_pred == np.asarray(y)))

    @property
    def coef_(self) -> np.ndarray:
        if self.coefficients_ is None:
            return np.array([])
        return self.coefficients_[1:]

    @property
    def intercept_(self) -> float:
        if self.coefficients_ is None:
            return 0.0
        return float(self.coefficients_[0])
