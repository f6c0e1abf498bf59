"""
Least-squares linear regression solved in closed form.

The intercept is modelled as a leading column of ones, and the weights come
from the normal equation

    (X^T X + lambda * D) theta = X^T y,    D = diag(0, 1, ..., 1)

which is plain OLS at lambda = 0 and ridge otherwise (the intercept is never
penalized). The system is solved with the package's Gaussian elimination, so
an exactly collinear design raises instead of returning garbage.

After fitting, R2, adjusted R2, coefficient standard errors and two-sided
p-values (normal approximation) are available.

With degree d > 1 the single input column x is expanded to [x, x^2, ..., x^d]
before solving, which gives polynomial regression through the same path.
"""

import numpy as np
from typing import Optional

from config import POLYNOMIAL_MAX_DEGREE
from errors import InvalidInputError, InvalidModelError
from .linear_algebra import solve, invert
from .stats import normal_cdf


class LinearRegression:
    """OLS / ridge / polynomial regressor with an unpenalized intercept."""

    def __init__(self, l2_penalty: float = 0.0, degree: int = 1):
        """
        Args:
            l2_penalty: Ridge strength lambda; 0 fits plain OLS
            degree: Polynomial degree in [1, POLYNOMIAL_MAX_DEGREE]; above 1
                    the model takes exactly one input feature
        """
        self.l2_penalty = l2_penalty
        self.degree = degree

        self.coefficients_: Optional[np.ndarray] = None  # [intercept, w_1..w_p]
        self.n_features: int = 0

        self.r2_: float = 0.0
        self.adjusted_r2_: float = 0.0
        self.standard_errors_: Optional[np.ndarray] = None
        self.p_values_: Optional[np.ndarray] = None

    def _expand(self, X: np.ndarray) -> np.ndarray:
        """Powers 1..degree of the input column; X itself at degree 1."""
        if self.degree == 1:
            return X
        return X[:, :1] ** np.arange(1, self.degree + 1)

    def _with_intercept(self, X: np.ndarray) -> np.ndarray:
        return np.column_stack([np.ones(len(X)), self._expand(X)])

    def fit(self, X: np.ndarray, y: np.ndarray) -> 'LinearRegression':
        """
        Solve the (optionally penalized) normal equation.

        Args:
            X: Feature matrix (n_samples, n_features)
            y: Targets (n_samples,)

        Returns:
            self

        Raises:
            SingularMatrixError: if the penalized Gram matrix is singular
            InvalidInputError: degree out of range, or degree > 1 with more
                               than one feature
        """
        X = np.array(X, dtype=np.float64)
        y = np.array(y, dtype=np.float64).ravel()
        self.n_features = X.shape[1]

        if not 1 <= self.degree <= POLYNOMIAL_MAX_DEGREE:
            raise InvalidInputError(
                f"Polynomial degree must be between 1 and {POLYNOMIAL_MAX_DEGREE}, got {self.degree}")
        if self.degree > 1 and self.n_features != 1:
            raise InvalidInputError("Polynomial regression requires a single independent variable")

        design = self._with_intercept(X)
        gram = design.T @ design
        if self.l2_penalty > 0:
            penalty = np.full(design.shape[1], float(self.l2_penalty))
            penalty[0] = 0.0
            gram = gram + np.diag(penalty)

        self.coefficients_ = solve(gram, design.T @ y)
        self._fit_statistics(design, y, gram)
        return self

    def _fit_statistics(self, design: np.ndarray, y: np.ndarray,
                        gram: np.ndarray) -> None:
        n, p = design.shape
        sse = float(np.sum((y - design @ self.coefficients_) ** 2))
        sst = float(np.sum((y - y.mean()) ** 2))

        self.r2_ = 1 - sse / sst if sst > 0 else 0.0
        self.adjusted_r2_ = (1 - (1 - self.r2_) * (n - 1) / (n - p)
                             if n > p else self.r2_)

        # Standard errors need at least one residual degree of freedom
        if n <= p:
            self.standard_errors_ = None
            self.p_values_ = None
            return

        sigma2 = sse / (n - p)
        self.standard_errors_ = np.sqrt(np.maximum(sigma2 * np.diag(invert(gram)), 0.0))

        self.p_values_ = np.array([
            2 * (1 - normal_cdf(abs(coef / se))) if se > 0
            else (1.0 if coef == 0 else 0.0)  # exact fit
            for coef, se in zip(self.coefficients_, self.standard_errors_)
        ])

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Fitted values, shape (n_samples,)."""
        if self.coefficients_ is None:
            raise InvalidModelError("Model not fitted. Call fit() first.")
        return self._with_intercept(np.array(X, dtype=np.float64)) @ self.coefficients_

    def score(self, X: np.ndarray, y: np.ndarray) -> float:
        """R2 on the given data; 0.0 when y is constant."""
        observed = np.asarray(y, dtype=np.float64).ravel()
        sst = np.sum((observed - observed.mean()) ** 2)
        if sst == 0:
            return 0.0
        return float(1 - np.sum((observed - self.predict(X)) ** 2) / sst)

    @property
    def coef_(self) -> np.ndarray:
        """Weights without the intercept, one per power when degree > 1."""
        return np.array([]) if self.coefficients_ is None else self.coefficients_[1:]

    @property
    def intercept_(self) -> float:
        return 0.0 if self.coefficients_ is None else float(self.coefficients_[0])
