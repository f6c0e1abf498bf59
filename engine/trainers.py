"""
Training dispatch: one builder per supervised model family.

Each builder turns the family's typed hyperparameters into an unfitted
estimator from stat_models; fit_estimator() fits it on a training matrix.
"""

import numpy as np
from loguru import logger
from typing import Any, Callable, Dict

from errors import InvalidInputError, UnsupportedOperationError
from stat_models import (
    LinearRegression, LogisticRegression, DecisionTreeRegressor,
    RandomForestRegressor, GradientBoostingRegressor, NeuralNetwork,
    SVC, GaussianNB,
)
from .hyperparameters import (
    LinearRegressionParams, LogisticRegressionParams, DecisionTreeParams,
    RandomForestParams, GradientBoostingParams, NeuralNetworkParams,
    SVMParams, NaiveBayesParams,
)
from .types import ModelFamily


def _linear_regression(params: LinearRegressionParams) -> LinearRegression:
    return LinearRegression(l2_penalty=params.l2_penalty, degree=params.degree)


def _logistic_regression(params: LogisticRegressionParams) -> LogisticRegression:
    return LogisticRegression(
        solver=params.solver,
        learning_rate=params.learning_rate,
        max_iterations=params.max_iterations,
        tolerance=params.tolerance
    )


def _decision_tree(params: DecisionTreeParams) -> DecisionTreeRegressor:
    return DecisionTreeRegressor(
        max_depth=params.max_depth,
        min_samples_leaf=params.min_samples_leaf
    )


def _random_forest(params: RandomForestParams) -> RandomForestRegressor:
    return RandomForestRegressor(
        n_estimators=params.num_trees,
        max_depth=params.max_depth,
        min_samples_leaf=params.min_samples_leaf,
        max_features=params.max_features,
        random_state=params.random_state
    )


def _gradient_boosting(params: GradientBoostingParams) -> GradientBoostingRegressor:
    return GradientBoostingRegressor(
        n_estimators=params.num_iterations,
        learning_rate=params.learning_rate,
        max_depth=params.max_depth,
        min_samples_leaf=params.min_samples_leaf,
        early_stopping_rounds=params.early_stopping_rounds,
        early_stopping_tolerance=params.early_stopping_tolerance
    )


def _neural_network(params: NeuralNetworkParams) -> NeuralNetwork:
    return NeuralNetwork(
        hidden_layers=params.hidden_layers,
        learning_rate=params.learning_rate,
        epochs=params.epochs,
        random_state=params.random_state
    )


def _support_vector_machine(params: SVMParams) -> SVC:
    return SVC(
        C=params.C,
        gamma=params.gamma,
        tol=params.tolerance,
        max_iter=params.max_iterations,
        min_alpha_change=params.min_alpha_change
    )


def _naive_bayes(params: NaiveBayesParams) -> GaussianNB:
    return GaussianNB(var_floor=params.var_floor)


ESTIMATOR_BUILDERS: Dict[ModelFamily, Callable[[Any], Any]] = {
    ModelFamily.LINEAR_REGRESSION: _linear_regression,
    ModelFamily.LOGISTIC_REGRESSION: _logistic_regression,
    ModelFamily.DECISION_TREE: _decision_tree,
    ModelFamily.RANDOM_FOREST: _random_forest,
    ModelFamily.GRADIENT_BOOSTING: _gradient_boosting,
    ModelFamily.NEURAL_NETWORK: _neural_network,
    ModelFamily.SUPPORT_VECTOR_MACHINE: _support_vector_machine,
    ModelFamily.NAIVE_BAYES: _naive_bayes,
}

# Estimator class expected in a Model's parameter payload, per family
ESTIMATOR_TYPES: Dict[ModelFamily, type] = {
    ModelFamily.LINEAR_REGRESSION: LinearRegression,
    ModelFamily.LOGISTIC_REGRESSION: LogisticRegression,
    ModelFamily.DECISION_TREE: DecisionTreeRegressor,
    ModelFamily.RANDOM_FOREST: RandomForestRegressor,
    ModelFamily.GRADIENT_BOOSTING: GradientBoostingRegressor,
    ModelFamily.NEURAL_NETWORK: NeuralNetwork,
    ModelFamily.SUPPORT_VECTOR_MACHINE: SVC,
    ModelFamily.NAIVE_BAYES: GaussianNB,
}


def fit_estimator(family: ModelFamily, X: np.ndarray, y: np.ndarray, params: Any) -> Any:
    """
    Build and fit the estimator for a supervised family.

    Raises:
        UnsupportedOperationError: clustering or unimplemented families
        InvalidInputError: empty training data
    """
    builder = ESTIMATOR_BUILDERS.get(family)
    if builder is None:
        raise UnsupportedOperationError(
            f"Model family {family.value} cannot be trained as a supervised model")

    if len(X) == 0:
        raise InvalidInputError("No training samples")

    logger.debug(f"Fitting {family.value} on {X.shape[0]} samples x {X.shape[1]} features")
    return builder(params).fit(X, y)
