"""
Statistical models - estimators implemented from scratch on NumPy arrays.

No solver or estimator from a numerical library is used; systems of linear
equations go through the Gaussian elimination in `linear_algebra`.

Kernel:
- solve, invert: Gaussian elimination and Gauss-Jordan inversion

Regressors:
- LinearRegression: OLS (optionally ridge) via the normal equation
- DecisionTreeRegressor: CART with variance reduction
- RandomForestRegressor: Bagging + per-tree feature sampling
- GradientBoostingRegressor: Residual boosting of regression trees
- NeuralNetwork: MLP with ReLU hidden layers and a linear output

Classifiers:
- LogisticRegression: Gradient descent or Newton-Raphson
- SVC: RBF-kernel SVM trained with simplified SMO
- GaussianNB: Gaussian Naive Bayes
"""

# Kernel
from .linear_algebra import solve, invert

# Regressors
from .linear_regression import LinearRegression
from .decision_tree import DecisionTreeRegressor, TreeNode
from .random_forest import RandomForestRegressor
from .gradient_boosting import GradientBoostingRegressor
from .neural_network import NeuralNetwork

# Classifiers
from .logistic_regression import LogisticRegression
from .svm import SVC
from .naive_bayes import GaussianNB

__all__ = [
    # Kernel
    'solve',
    'invert',

    # Regressors
    'LinearRegression',
    'DecisionTreeRegressor',
    'TreeNode',
    'RandomForestRegressor',
    'GradientBoostingRegressor',
    'NeuralNetwork',

    # Classifiers
    'LogisticRegression',
    'SVC',
    'GaussianNB',
]
