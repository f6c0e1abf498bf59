"""
Agglomerative (single-linkage) hierarchical clustering from scratch.

Every sample starts as its own cluster; the two clusters whose closest
members are nearest are merged until the requested number of clusters
remains. Single linkage merges in the same order as Kruskal's algorithm on
the complete distance graph, so sample pairs are visited by ascending
distance (ties: lowest (i, j) pair first) and merged with a union-find.
"""

import numpy as np
from typing import Optional

from errors import InvalidModelError
from stat_models.stats import pairwise_distances
from .kmeans import compute_centroids, compute_inertia, validate_n_clusters


class _DisjointSet:
    """Union-find over sample indices."""

    def __init__(self, n: int):
        self.parent = list(range(n))

    def find(self, i: int) -> int:
        while self.parent[i] != i:
            self.parent[i] = self.parent[self.parent[i]]
            i = self.parent[i]
        return i

    def union(self, i: int, j: int) -> bool:
        root_i, root_j = self.find(i), self.find(j)
        if root_i == root_j:
            return False
        self.parent[max(root_i, root_j)] = min(root_i, root_j)
        return True


class SingleLinkageClustering:
    """
    Single-linkage agglomerative clustering.

    Cluster distance: d(A, B) = min_{a in A, b in B} ||a - b||
    """

    def __init__(self, n_clusters: int = 3):
        """
        Args:
            n_clusters: Number of clusters to stop at
        """
        self.n_clusters = n_clusters

        self.labels_: Optional[np.ndarray] = None
        self.cluster_centers_: Optional[np.ndarray] = None
        self.inertia_: float = 0.0
        self.n_merges_: int = 0

    def fit(self, X: np.ndarray) -> 'SingleLinkageClustering':
        """
        Fit the model.

        Args:
            X: Data (n_samples, n_features)

        Returns:
            self
        """
        X = np.array(X, dtype=np.float64)
        n_samples = len(X)
        validate_n_clusters(self.n_clusters, n_samples)

        distances = pairwise_distances(X)
        rows, cols = np.triu_indices(n_samples, k=1)
        order = np.argsort(distances[rows, cols], kind='stable')

        clusters = _DisjointSet(n_samples)
        n_remaining = n_samples
        self.n_merges_ = 0

        for idx in order:
            if n_remaining <= self.n_clusters:
                break
            if clusters.union(int(rows[idx]), int(cols[idx])):
                n_remaining -= 1
                self.n_merges_ += 1

        # Renumber clusters in order of first member
        roots = [clusters.find(i) for i in range(n_samples)]
        numbering = {}
        for root in roots:
            if root not in numbering:
                numbering[root] = len(numbering)
        self.labels_ = np.array([numbering[root] for root in roots], dtype=int)

        self.cluster_centers_ = compute_centroids(X, self.labels_, len(numbering))
        self.inertia_ = compute_inertia(X, self.labels_, self.cluster_centers_)
        return self

    def fit_predict(self, X: np.ndarray) -> np.ndarray:
        return self.fit(X).labels_

    @property
    def n_clusters_(self) -> int:
        if self.labels_ is None:
            raise InvalidModelError("Model not fitted. Call fit() first.")
        return int(self.labels_.max()) + 1
