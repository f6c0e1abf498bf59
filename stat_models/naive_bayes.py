"""
Gaussian Naive Bayes from scratch.

Features are treated as independent normals within each class, so the
class posterior factorizes:

    log P(c | x) = log P(c) + sum_f log N(x_f; mu_cf, var_cf) + const
"""

import numpy as np
from typing import Optional

from config import VARIANCE_FLOOR
from errors import InvalidInputError, InvalidModelError


class GaussianNB:
    """
    Gaussian Naive Bayes for any number of classes.

    Per-class variances are population variances, raised to `var_floor` so a
    feature that is constant within a class keeps a finite likelihood.
    """

    def __init__(self, var_floor: float = VARIANCE_FLOOR):
        self.var_floor = var_floor

        self.classes_: Optional[np.ndarray] = None
        self.n_classes: int = 0
        self.class_prior_: Optional[np.ndarray] = None
        self.theta_: Optional[np.ndarray] = None  # (n_classes, n_features) means
        self.var_: Optional[np.ndarray] = None    # (n_classes, n_features) variances

    def fit(self, X: np.ndarray, y: np.ndarray) -> 'GaussianNB':
        """
        Estimate priors, means and variances.

        Args:
            X: Feature matrix (n_samples, n_features)
            y: Class labels (n_samples,)

        Returns:
            self
        """
        X = np.array(X, dtype=np.float64)
        y = np.array(y, dtype=np.float64).ravel()
        if y.size == 0:
            raise InvalidInputError("Naive Bayes requires at least one sample")

        self.classes_, class_index, counts = np.unique(
            y, return_inverse=True, return_counts=True)
        self.n_classes = len(self.classes_)

        # One-hot membership turns per-class sums into matrix products
        membership = np.eye(self.n_classes)[class_index]
        self.class_prior_ = counts / y.size
        self.theta_ = (membership.T @ X) / counts[:, None]
        centered = X - self.theta_[class_index]
        self.var_ = np.maximum((membership.T @ centered ** 2) / counts[:, None], self.var_floor)
        return self

    def _joint_log_likelihood(self, X: np.ndarray) -> np.ndarray:
        """
        Unnormalized log posterior, shape (n_samples, n_classes).

        log N(x; mu, var) = -0.5 * (log(2 pi var) + (x - mu)^2 / var)
        """
        if self.classes_ is None:
            raise InvalidModelError("Model not fitted. Call fit() first.")

        X = np.array(X, dtype=np.float64)
        diff = X[:, None, :] - self.theta_[None, :, :]
        log_density = -0.5 * (np.log(2 * np.pi * self.var_)[None] + diff ** 2 / self.var_[None])
        return np.log(self.class_prior_)[None, :] + log_density.sum(axis=2)

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        """
        Posterior P(c | x), columns ordered like `classes_`.

        Returns:
            Matrix (n_samples, n_classes) with rows summing to 1
        """
        log_post = self._joint_log_likelihood(X)
        log_post -= log_post.max(axis=1, keepdims=True)
        weights = np.exp(log_post)
        return weights / weights.sum(axis=1, keepdims=True)

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Most probable class per sample."""
        return self.classes_[np.argmax(self._joint_log_likelihood(X), axis=1)]

    def score(self, X: np.ndarray, y: np.ndarray) -> float:
        return float(np.mean(self.predict(X) == np.asarray(y, dtype=np.float64)))
