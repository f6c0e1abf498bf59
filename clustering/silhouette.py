"""
Silhouette coefficient for a clustering.
"""

import numpy as np

from stat_models.stats import pairwise_distances


def silhouette_samples(X: np.ndarray, labels: np.ndarray) -> np.ndarray:
    """
    Per-sample silhouette values.

    a(i) = mean distance to the other members of i's cluster (0 for a singleton)
    b(i) = min over other clusters of the mean distance to their members
    s(i) = (b - a) / max(a, b), or 0 when both are 0
    """
    X = np.array(X, dtype=np.float64)
    labels = np.asarray(labels)
    clusters = np.unique(labels)
    distances = pairwise_distances(X)

    scores = np.zeros(len(X))
    for i in range(len(X)):
        same = labels == labels[i]
        n_peers = np.sum(same) - 1
        a = np.sum(distances[i, same]) / n_peers if n_peers > 0 else 0.0

        b = min(np.mean(distances[i, labels == c]) for c in clusters if c != labels[i])

        denom = max(a, b)
        scores[i] = 0.0 if denom == 0 else (b - a) / denom

    return scores


def silhouette_score(X: np.ndarray, labels: np.ndarray) -> float:
    """Mean silhouette over all samples; 0.0 with fewer than two clusters."""
    if len(np.unique(labels)) < 2:
        return 0.0
    return float(np.mean(silhouette_samples(X, labels)))
