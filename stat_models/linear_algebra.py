"""
Dense linear algebra kernel from scratch.

Implements:
- solve: Gaussian elimination with partial pivoting + back-substitution
- invert: Gauss-Jordan reduction of the augmented matrix [A | I]

Both use the same pivot rule: at column i the row with the largest absolute
value in that column (at or below row i) becomes the pivot row. A pivot whose
magnitude is below the singularity threshold means the matrix is singular.
"""

import numpy as np

from config import SINGULARITY_THRESHOLD
from errors import InvalidInputError, SingularMatrixError


def _as_square(A) -> np.ndarray:
    """Copy A to a float matrix and check it is square."""
    A = np.array(A, dtype=np.float64)
    if A.ndim != 2 or A.shape[0] != A.shape[1] or A.shape[0] == 0:
        raise InvalidInputError(f"Expected a non-empty square matrix, got shape {A.shape}")
    return A


def _pivot(A: np.ndarray, i: int) -> int:
    """Row index (>= i) holding the largest |A[k, i]|; first one on ties."""
    return i + int(np.argmax(np.abs(A[i:, i])))


def solve(A, b, threshold: float = SINGULARITY_THRESHOLD) -> np.ndarray:
    """
    Solve the linear system A x = b.

    Args:
        A: Square coefficient matrix (n, n)
        b: Right-hand side (n,)
        threshold: Minimum pivot magnitude

    Returns:
        Solution vector x of shape (n,)

    Raises:
        SingularMatrixError: if a pivot falls below the threshold
    """
    A = _as_square(A)
    b = np.array(b, dtype=np.float64).ravel()
    n = A.shape[0]

    if b.shape[0] != n:
        raise InvalidInputError(f"Right-hand side has {b.shape[0]} entries, expected {n}")

    # Forward elimination
    for i in range(n):
        max_row = _pivot(A, i)
        if max_row != i:
            A[[i, max_row]] = A[[max_row, i]]
            b[[i, max_row]] = b[[max_row, i]]

        if abs(A[i, i]) < threshold:
            raise SingularMatrixError("Matrix is singular")

        factors = A[i + 1:, i] / A[i, i]
        A[i + 1:, i:] -= np.outer(factors, A[i, i:])
        b[i + 1:] -= factors * b[i]

    # Back substitution
    x = np.zeros(n)
    for i in range(n - 1, -1, -1):
        x[i] = (b[i] - A[i, i + 1:] @ x[i + 1:]) / A[i, i]

    return x


def invert(A, threshold: float = SINGULARITY_THRESHOLD) -> np.ndarray:
    """
    Invert a square matrix by row-reducing [A | I] to [I | A^-1].

    Raises:
        SingularMatrixError: if a pivot falls below the threshold
    """
    A = _as_square(A)
    n = A.shape[0]

    augmented = np.hstack([A, np.eye(n)])

    for i in range(n):
        max_row = _pivot(augmented, i)
        if max_row != i:
            augmented[[i, max_row]] = augmented[[max_row, i]]

        if abs(augmented[i, i]) < threshold:
            raise SingularMatrixError("Matrix is singular")

        # Scale pivot row, then clear the column everywhere else
        augmented[i] /= augmented[i, i]
        for k in range(n):
            if k != i:
                augmented[k] -= augmented[k, i] * augmented[i]

    return augmented[:, n:]
