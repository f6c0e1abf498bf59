"""
Kernel margin classifier (RBF support vector machine) from scratch.

Implements:
- Gaussian (RBF) kernel
- Simplified Sequential Minimal Optimization over the soft-margin dual
- Binary labels given as 0/1 or -1/+1, predicted back in the same encoding

The dual being maximized:
    W(alpha) = sum(alpha) - 1/2 * sum_ij alpha_i alpha_j y_i y_j K(x_i, x_j)
    subject to 0 <= alpha_i <= C and sum(alpha_i y_i) = 0
"""

import numpy as np
from typing import Optional, Tuple

from config import SVM_MIN_ALPHA_CHANGE
from errors import InvalidInputError, InvalidModelError
from .stats import squared_distances


def rbf_kernel(A: np.ndarray, B: np.ndarray, gamma: float) -> np.ndarray:
    """Gram matrix K[a, b] = exp(-gamma * ||A_a - B_b||^2)."""
    return np.exp(-gamma * squared_distances(A, B))


class SVC:
    """
    RBF support vector classifier.

    Each pass visits every sample that violates the KKT conditions and
    optimizes it jointly with the next sample, (i + 1) mod n. No randomness
    is involved, so a given dataset always yields the same multipliers.

    Training data holding a single class yields a constant classifier: no
    support vectors and a bias of +1 or -1.
    """

    def __init__(self,
                 C: float = 1.0,
                 gamma: float = 1.0,
                 tol: float = 1e-3,
                 max_iter: int = 1000,
                 min_alpha_change: float = SVM_MIN_ALPHA_CHANGE):
        """
        Args:
            C: Upper bound on each multiplier (soft-margin penalty)
            gamma: RBF width
            tol: Slack allowed before a sample counts as a KKT violator
            max_iter: Cap on full passes over the data
            min_alpha_change: Multiplier updates smaller than this are skipped
        """
        self.C = C
        self.gamma = gamma
        self.tol = tol
        self.max_iter = max_iter
        self.min_alpha_change = min_alpha_change

        self.alpha: Optional[np.ndarray] = None
        self.b: float = 0.0
        self.support_vectors_: Optional[np.ndarray] = None
        self.support_labels_: Optional[np.ndarray] = None
        self.support_alpha_: Optional[np.ndarray] = None
        self.negative_label_: float = 0.0
        self.n_iter_: int = 0

    # =========================================================================
    # Label handling
    # =========================================================================

    def _encode_labels(self, y: np.ndarray) -> np.ndarray:
        """Map 0/1 or -1/+1 labels to -1/+1, remembering the negative label."""
        observed = set(np.unique(y).tolist())
        if not (observed <= {0.0, 1.0} or observed <= {-1.0, 1.0}):
            raise InvalidInputError(
                "Support vector machine requires binary labels (0/1 or -1/+1)")
        self.negative_label_ = -1.0 if -1.0 in observed else 0.0
        return np.where(y > 0, 1.0, -1.0)

    # =========================================================================
    # SMO
    # =========================================================================

    def _margin_error(self, k: int, K: np.ndarray, y: np.ndarray) -> float:
        """f(x_k) - y_k under the current multipliers and bias."""
        return float(K[:, k] @ (self.alpha * y) + self.b - y[k])

    def _violates_kkt(self, k: int, error: float, y: np.ndarray) -> bool:
        margin = y[k] * error
        return ((margin < -self.tol and self.alpha[k] < self.C) or
                (margin > self.tol and self.alpha[k] > 0))

    def _bounds(self, i: int, j: int, y: np.ndarray) -> Tuple[float, float]:
        """Feasible interval [L, H] for alpha_j keeping sum(alpha * y) fixed."""
        a_i, a_j = self.alpha[i], self.alpha[j]
        if y[i] == y[j]:
            return max(0.0, a_i + a_j - self.C), min(self.C, a_i + a_j)
        return max(0.0, a_j - a_i), min(self.C, self.C + a_j - a_i)

    def _optimize_pair(self, i: int, j: int, K: np.ndarray, y: np.ndarray) -> bool:
        """
        Jointly optimize alpha_i and alpha_j.

        Returns:
            True if the multipliers moved
        """
        if i == j:
            return False

        low, high = self._bounds(i, j, y)
        if low >= high:
            return False

        curvature = 2 * K[i, j] - K[i, i] - K[j, j]
        if curvature >= 0:
            return False

        E_i = self._margin_error(i, K, y)
        E_j = self._margin_error(j, K, y)

        old_i, old_j = self.alpha[i], self.alpha[j]
        new_j = float(np.clip(old_j - y[j] * (E_i - E_j) / curvature, low, high))
        if abs(new_j - old_j) < self.min_alpha_change:
            return False
        new_i = old_i + y[i] * y[j] * (old_j - new_j)

        self.alpha[i], self.alpha[j] = new_i, new_j
        self._update_bias(i, j, E_i, E_j, new_i - old_i, new_j - old_j, K, y)
        return True

    def _update_bias(self, i: int, j: int, E_i: float, E_j: float,
                     delta_i: float, delta_j: float,
                     K: np.ndarray, y: np.ndarray) -> None:
        """Pick the bias that restores the margin of a free multiplier."""
        b_i = self.b - E_i - y[i] * delta_i * K[i, i] - y[j] * delta_j * K[i, j]
        b_j = self.b - E_j - y[i] * delta_i * K[i, j] - y[j] * delta_j * K[j, j]

        if 0 < self.alpha[i] < self.C:
            self.b = b_i
        elif 0 < self.alpha[j] < self.C:
            self.b = b_j
        else:
            self.b = (b_i + b_j) / 2

    # =========================================================================
    # Training and prediction
    # =========================================================================

    def fit(self, X: np.ndarray, y: np.ndarray) -> 'SVC':
        """
        Train with SMO until a pass changes nothing or max_iter is reached.

        Args:
            X: Feature matrix (n_samples, n_features)
            y: Binary labels

        Returns:
            self
        """
        X = np.array(X, dtype=np.float64)
        signed = self._encode_labels(np.array(y, dtype=np.float64).ravel())
        n = len(X)

        gram = rbf_kernel(X, X, self.gamma)
        self.alpha = np.zeros(n)
        self.b = 0.0
        self.n_iter_ = 0

        single_class = signed.size > 0 and bool(np.all(signed == signed[0]))
        if single_class:
            # No feasible pair exists; the bias alone carries the label
            self.b = float(signed[0])

        while not single_class and self.n_iter_ < self.max_iter:
            updates = 0
            for i in range(n):
                if self._violates_kkt(i, self._margin_error(i, gram, signed), signed):
                    updates += self._optimize_pair(i, (i + 1) % n, gram, signed)
            self.n_iter_ += 1
            if not updates:
                break

        support = self.alpha > 0
        self.support_vectors_ = X[support]
        self.support_labels_ = signed[support]
        self.support_alpha_ = self.alpha[support]
        return self

    def decision_function(self, X: np.ndarray) -> np.ndarray:
        """Signed score; positive means the positive class."""
        if self.alpha is None:
            raise InvalidModelError("Model not fitted. Call fit() first.")

        X = np.array(X, dtype=np.float64)
        if len(self.support_alpha_) == 0:
            return np.full(len(X), self.b)

        weights = self.support_alpha_ * self.support_labels_
        return rbf_kernel(X, self.support_vectors_, self.gamma) @ weights + self.b

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Labels in the encoding seen during fit."""
        return np.where(self.decision_function(X) > 0, 1.0, self.negative_label_)

    def score(self, X: np.ndarray, y: np.ndarray) -> float:
        """Mean accuracy."""
        return float(np.mean(self.predict(X) == np.asarray(y, dtype=np.float64)))
