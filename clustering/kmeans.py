"""
K-Means clustering from scratch.

Algorithm:
1. Initialize each centroid coordinate uniformly within that feature's range
2. Assign points to the nearest centroid (first centroid wins ties)
3. Move each non-empty cluster's centroid to the mean of its members
4. Repeat until no centroid moves more than the tolerance
"""

import numpy as np
from loguru import logger
from typing import List, Optional

from config import DEFAULT_RANDOM_STATE
from errors import InvalidInputError, InvalidModelError
from stat_models.stats import squared_distances


def validate_n_clusters(n_clusters: int, n_samples: int) -> None:
    """Number of clusters must lie in [1, n_samples]."""
    if n_clusters < 1 or n_clusters > n_samples:
        raise InvalidInputError(
            f"Number of clusters must be between 1 and {n_samples}, got {n_clusters}")


def compute_centroids(X: np.ndarray, labels: np.ndarray, n_clusters: int) -> np.ndarray:
    """Mean of the members of each cluster (zeros for an empty cluster)."""
    centroids = np.zeros((n_clusters, X.shape[1]))
    for k in range(n_clusters):
        members = X[labels == k]
        if len(members) > 0:
            centroids[k] = members.mean(axis=0)
    return centroids


def compute_inertia(X: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> float:
    """Sum of squared distances of samples to their assigned centroid."""
    return float(np.sum((X - centroids[labels]) ** 2))


class KMeans:
    """
    K-Means clustering.

    Minimizes the within-cluster sum of squares (inertia):
        J = sum_i ||x_i - mu_{c(i)}||^2
    """

    def __init__(self,
                 n_clusters: int = 3,
                 max_iterations: int = 100,
                 tolerance: float = 1e-4,
                 random_state: int = DEFAULT_RANDOM_STATE):
        """
        Initialize K-Means.

        Args:
            n_clusters: Number of clusters
            max_iterations: Maximum assignment/update rounds
            tolerance: Stop once the largest centroid movement is below this
            random_state: Seed for centroid initialization
        """
        self.n_clusters = n_clusters
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.random_state = random_state

        self.cluster_centers_: Optional[np.ndarray] = None
        self.labels_: Optional[np.ndarray] = None
        self.inertia_: float = 0.0
        self.inertia_history_: List[float] = []
        self.n_iter_: int = 0

    @staticmethod
    def _assign(X: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        return np.argmin(squared_distances(X, centroids), axis=1)

    def fit(self, X: np.ndarray) -> 'KMeans':
        """
        Fit the model.

        Args:
            X: Data (n_samples, n_features)

        Returns:
            self
        """
        X = np.array(X, dtype=np.float64)
        validate_n_clusters(self.n_clusters, len(X))

        rng = np.random.default_rng(self.random_state)
        low, high = X.min(axis=0), X.max(axis=0)
        centroids = rng.uniform(low, high, size=(self.n_clusters, X.shape[1]))

        self.inertia_history_ = []
        self.n_iter_ = 0

        for iteration in range(self.max_iterations):
            labels = self._assign(X, centroids)

            # Empty clusters keep their previous centroid
            new_centroids = centroids.copy()
            for k in range(self.n_clusters):
                members = X[labels == k]
                if len(members) > 0:
                    new_centroids[k] = members.mean(axis=0)

            shift = float(np.max(np.sqrt(np.sum((new_centroids - centroids) ** 2, axis=1))))
            centroids = new_centroids
            self.inertia_history_.append(compute_inertia(X, labels, centroids))
            self.n_iter_ = iteration + 1

            if shift < self.tolerance:
                logger.debug(f"K-means converged after {self.n_iter_} iterations")
                break

        self.cluster_centers_ = centroids
        self.labels_ = self._assign(X, centroids)
        self.inertia_ = compute_inertia(X, self.labels_, centroids)
        return self

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Index of the nearest centroid for each sample."""
        if self.cluster_centers_ is None:
            raise InvalidModelError("Model not fitted. Call fit() first.")
        return self._assign(np.array(X, dtype=np.float64), self.cluster_centers_)

    def fit_predict(self, X: np.ndarray) -> np.ndarray:
        return self.fit(X).labels_
