"""
Clustering - unsupervised grouping implemented from scratch.

- KMeans: Lloyd's algorithm with range-uniform initialization
- SingleLinkageClustering: agglomerative clustering, single linkage
- silhouette_score: cluster separation quality in [-1, 1]
"""

from .kmeans import KMeans, compute_centroids, compute_inertia
from .hierarchical import SingleLinkageClustering
from .silhouette import silhouette_score, silhouette_samples

__all__ = [
    'KMeans',
    'compute_centroids',
    'compute_inertia',
    'SingleLinkageClustering',
    'silhouette_score',
    'silhouette_samples',
]
