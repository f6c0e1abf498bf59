"""
Distance and statistics utilities shared by the estimators and clustering.
"""

import math

import numpy as np


def euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two points."""
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.sqrt(np.sum(diff ** 2)))


def squared_distances(X: np.ndarray, Y: np.ndarray) -> np.ndarray:
    """
    Squared Euclidean distances between every row of X and every row of Y.

    ||x - y||^2 = ||x||^2 + ||y||^2 - 2*x.y, clipped at 0 for round-off.
    """
    X_sq = np.sum(X ** 2, axis=1, keepdims=True)
    Y_sq = np.sum(Y ** 2, axis=1)
    return np.maximum(X_sq + Y_sq - 2 * X @ Y.T, 0.0)


def pairwise_distances(X: np.ndarray) -> np.ndarray:
    """Symmetric (n, n) matrix of Euclidean distances between rows of X."""
    diff = X[:, np.newaxis, :] - X[np.newaxis, :, :]
    return np.sqrt(np.sum(diff ** 2, axis=2))


def variance(values: np.ndarray) -> float:
    """Population variance (divides by n). Empty input gives 0."""
    values = np.asarray(values, dtype=np.float64)
    if len(values) == 0:
        return 0.0
    return float(np.mean((values - np.mean(values)) ** 2))


def standard_deviation(values: np.ndarray) -> float:
    """Population standard deviation."""
    return math.sqrt(variance(values))


def normal_cdf(x: float) -> float:
    """
    Standard normal cumulative distribution.

    Phi(x) = 0.5 * (1 + erf(x / sqrt(2)))
    """
    return 0.5 * (1.0 + math.erf(x / math.sqrt(2.0)))


def sigmoid(z: np.ndarray) -> np.ndarray:
    """Logistic function with clipping for stability."""
    z = np.clip(z, -500, 500)
    return 1.0 / (1.0 + np.exp(-z))
