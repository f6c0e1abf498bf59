"""
Tests for the linear algebra kernel and statistics utilities.
"""

import numpy as np
import pytest

from errors import InvalidInputError, SingularMatrixError
from stat_models.linear_algebra import invert, solve
from stat_models.stats import (
    euclidean_distance, normal_cdf, pairwise_distances, sigmoid,
    squared_distances, standard_deviation, variance,
)


# =============================================================================
# solve
# =============================================================================

def test_solve_three_by_three():
    A = [[2, 1, -1], [-3, -1, 2], [-2, 1, 2]]
    b = [8, -11, -3]
    assert np.allclose(solve(A, b), [2, 3, -1])


def test_solve_needs_row_swap():
    """Zero on the diagonal is handled by pivoting."""
    x = solve([[0, 1], [1, 0]], [2, 3])
    assert np.allclose(x, [3, 2])


def test_solve_does_not_modify_inputs():
    A = np.array([[4.0, 1.0], [1.0, 3.0]])
    b = np.array([1.0, 2.0])
    A_copy, b_copy = A.copy(), b.copy()
    solve(A, b)
    assert np.array_equal(A, A_copy)
    assert np.array_equal(b, b_copy)


def test_solve_singular_matrix_raises():
    with pytest.raises(SingularMatrixError):
        solve([[1, 2], [2, 4]], [1, 2])


def test_singular_error_is_arithmetic_error():
    with pytest.raises(ArithmeticError):
        solve([[0, 0], [0, 0]], [0, 0])


def test_solve_rejects_non_square():
    with pytest.raises(InvalidInputError):
        solve([[1, 2, 3], [4, 5, 6]], [1, 2])


def test_solve_rejects_mismatched_rhs():
    with pytest.raises(InvalidInputError):
        solve([[1, 0], [0, 1]], [1, 2, 3])


# =============================================================================
# invert
# =============================================================================

def test_invert_two_by_two():
    A = [[4, 7], [2, 6]]
    expected = np.array([[0.6, -0.7], [-0.2, 0.4]])
    assert np.allclose(invert(A), expected)


def test_invert_times_matrix_is_identity():
    rng = np.random.default_rng(0)
    A = rng.normal(size=(5, 5)) + 5 * np.eye(5)
    assert np.allclose(np.array(A) @ invert(A), np.eye(5))


def test_invert_singular_raises():
    with pytest.raises(SingularMatrixError):
        invert([[1, 2, 3], [2, 4, 6], [0, 1, 1]])


# =============================================================================
# Statistics utilities
# =============================================================================

def test_distances():
    assert euclidean_distance([0, 0], [3, 4]) == pytest.approx(5.0)

    X = np.array([[0.0, 0.0], [3.0, 4.0], [6.0, 8.0]])
    D = pairwise_distances(X)
    assert np.allclose(D, D.T)
    assert np.allclose(np.diag(D), 0)
    assert D[0, 2] == pytest.approx(10.0)
    assert np.allclose(squared_distances(X, X), D ** 2)


def test_population_variance():
    assert variance([1, 2, 3, 4]) == pytest.approx(1.25)
    assert standard_deviation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)
    assert variance([]) == 0.0


def test_normal_cdf():
    assert normal_cdf(0) == pytest.approx(0.5)
    assert normal_cdf(1.96) == pytest.approx(0.975, abs=1e-3)
    assert normal_cdf(-1.96) == pytest.approx(0.025, abs=1e-3)


def test_sigmoid_is_stable_for_large_inputs():
    values = sigmoid(np.array([-1e6, 0.0, 1e6]))
    assert np.all(np.isfinite(values))
    assert values[0] == pytest.approx(0.0)
    assert values[1] == pytest.approx(0.5)
    assert values[2] == pytest.approx(1.0)
