"""
Predictive Engine - Typed Hyperparameters

One frozen dataclass per model family, defaults taken from config.py. Every
family also carries the hold-out split ratio and the random seed.

Callers may pass either the typed object or a plain mapping such as
{"num_trees": 200, "max_depth": 8}; unknown keys are rejected.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional, Tuple, Type

from config import (
    DEFAULT_SPLIT_RATIO, DEFAULT_RANDOM_STATE, VARIANCE_FLOOR,
    POLYNOMIAL_MAX_DEGREE,
    LOGISTIC_SOLVER, LOGISTIC_LEARNING_RATE, LOGISTIC_MAX_ITERATIONS, LOGISTIC_TOLERANCE,
    TREE_MAX_DEPTH, TREE_MIN_SAMPLES_LEAF,
    FOREST_NUM_TREES, FOREST_MAX_DEPTH, FOREST_MIN_SAMPLES_LEAF,
    BOOSTING_NUM_ITERATIONS, BOOSTING_LEARNING_RATE, BOOSTING_MAX_DEPTH,
    BOOSTING_EARLY_STOPPING_ROUNDS, BOOSTING_EARLY_STOPPING_TOLERANCE,
    NETWORK_HIDDEN_LAYERS, NETWORK_LEARNING_RATE, NETWORK_EPOCHS,
    SVM_C, SVM_GAMMA, SVM_TOLERANCE, SVM_MAX_ITERATIONS, SVM_MIN_ALPHA_CHANGE,
    NUM_CLUSTERS, KMEANS_MAX_ITERATIONS, KMEANS_TOLERANCE,
)
from errors import InvalidInputError, UnsupportedOperationError
from .types import ModelFamily


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise InvalidInputError(message)


# =============================================================================
# BASE
# =============================================================================

@dataclass(frozen=True)
class Hyperparameters:
    """Settings shared by every family."""
    split_ratio: float = DEFAULT_SPLIT_RATIO
    random_state: int = DEFAULT_RANDOM_STATE

    def __post_init__(self):
        _require(0 < self.split_ratio <= 1, f"split_ratio must be in (0, 1], got {self.split_ratio}")

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# =============================================================================
# SUPERVISED FAMILIES
# =============================================================================

@dataclass(frozen=True)
class LinearRegressionParams(Hyperparameters):
    l2_penalty: float = 0.0
    degree: int = 1  # > 1 fits a polynomial in a single feature

    def __post_init__(self):
        super().__post_init__()
        _require(self.l2_penalty >= 0, "l2_penalty must be non-negative")
        _require(1 <= self.degree <= POLYNOMIAL_MAX_DEGREE,
                 f"degree must be between 1 and {POLYNOMIAL_MAX_DEGREE}, got {self.degree}")


@dataclass(frozen=True)
class LogisticRegressionParams(Hyperparameters):
    solver: str = LOGISTIC_SOLVER
    learning_rate: float = LOGISTIC_LEARNING_RATE
    max_iterations: int = LOGISTIC_MAX_ITERATIONS
    tolerance: float = LOGISTIC_TOLERANCE

    def __post_init__(self):
        super().__post_init__()
        _require(self.solver in ('gradient_descent', 'newton'),
                 f"solver must be 'gradient_descent' or 'newton', got {self.solver!r}")
        _require(self.max_iterations >= 1, "max_iterations must be at least 1")


@dataclass(frozen=True)
class DecisionTreeParams(Hyperparameters):
    max_depth: Optional[int] = TREE_MAX_DEPTH
    min_samples_leaf: int = TREE_MIN_SAMPLES_LEAF

    def __post_init__(self):
        super().__post_init__()
        _require(self.max_depth is None or self.max_depth >= 0, "max_depth must be non-negative")
        _require(self.min_samples_leaf >= 1, "min_samples_leaf must be at least 1")


@dataclass(frozen=True)
class RandomForestParams(Hyperparameters):
    num_trees: int = FOREST_NUM_TREES
    max_depth: Optional[int] = FOREST_MAX_DEPTH
    min_samples_leaf: int = FOREST_MIN_SAMPLES_LEAF
    max_features: Optional[int] = None  # None = int(sqrt(n_features))

    def __post_init__(self):
        super().__post_init__()
        _require(self.num_trees >= 1, "num_trees must be at least 1")
        _require(self.min_samples_leaf >= 1, "min_samples_leaf must be at least 1")
        _require(self.max_features is None or self.max_features >= 1,
                 "max_features must be at least 1")


@dataclass(frozen=True)
class GradientBoostingParams(Hyperparameters):
    num_iterations: int = BOOSTING_NUM_ITERATIONS
    learning_rate: float = BOOSTING_LEARNING_RATE
    max_depth: Optional[int] = BOOSTING_MAX_DEPTH
    min_samples_leaf: int = 1
    early_stopping_rounds: int = BOOSTING_EARLY_STOPPING_ROUNDS
    early_stopping_tolerance: float = BOOSTING_EARLY_STOPPING_TOLERANCE

    def __post_init__(self):
        super().__post_init__()
        _require(self.num_iterations >= 1, "num_iterations must be at least 1")
        _require(self.early_stopping_rounds >= 0, "early_stopping_rounds must be non-negative")


@dataclass(frozen=True)
class NeuralNetworkParams(Hyperparameters):
    hidden_layers: Tuple[int, ...] = NETWORK_HIDDEN_LAYERS
    learning_rate: float = NETWORK_LEARNING_RATE
    epochs: int = NETWORK_EPOCHS

    def __post_init__(self):
        # Accept lists from plain mappings
        object.__setattr__(self, 'hidden_layers', tuple(int(n) for n in self.hidden_layers))
        super().__post_init__()
        _require(all(n >= 1 for n in self.hidden_layers), "hidden layer sizes must be positive")
        _require(self.epochs >= 1, "epochs must be at least 1")


@dataclass(frozen=True)
class SVMParams(Hyperparameters):
    C: float = SVM_C
    gamma: float = SVM_GAMMA
    tolerance: float = SVM_TOLERANCE
    max_iterations: int = SVM_MAX_ITERATIONS
    min_alpha_change: float = SVM_MIN_ALPHA_CHANGE

    def __post_init__(self):
        super().__post_init__()
        _require(self.C > 0, "C must be positive")
        _require(self.gamma > 0, "gamma must be positive")
        _require(self.min_alpha_change >= 0, "min_alpha_change must be non-negative")


@dataclass(frozen=True)
class NaiveBayesParams(Hyperparameters):
    var_floor: float = VARIANCE_FLOOR


# =============================================================================
# CLUSTERING FAMILIES
# =============================================================================

@dataclass(frozen=True)
class KMeansParams(Hyperparameters):
    num_clusters: int = NUM_CLUSTERS
    max_iterations: int = KMEANS_MAX_ITERATIONS
    tolerance: float = KMEANS_TOLERANCE


@dataclass(frozen=True)
class HierarchicalParams(Hyperparameters):
    num_clusters: int = NUM_CLUSTERS


HYPERPARAMETER_TYPES: Dict[ModelFamily, Type[Hyperparameters]] = {
    ModelFamily.LINEAR_REGRESSION: LinearRegressionParams,
    ModelFamily.LOGISTIC_REGRESSION: LogisticRegressionParams,
    ModelFamily.DECISION_TREE: DecisionTreeParams,
    ModelFamily.RANDOM_FOREST: RandomForestParams,
    ModelFamily.GRADIENT_BOOSTING: GradientBoostingParams,
    ModelFamily.NEURAL_NETWORK: NeuralNetworkParams,
    ModelFamily.SUPPORT_VECTOR_MACHINE: SVMParams,
    ModelFamily.NAIVE_BAYES: NaiveBayesParams,
    ModelFamily.KMEANS: KMeansParams,
    ModelFamily.HIERARCHICAL: HierarchicalParams,
}


def resolve_hyperparameters(family: ModelFamily, value: Any = None) -> Hyperparameters:
    """
    Build the typed hyperparameters for a family.

    Args:
        family: Model family
        value: None (all defaults), the family's dataclass, or a mapping of
               field name to value

    Raises:
        UnsupportedOperationError: family has no implementation
        InvalidInputError: wrong type, unknown keys or out-of-range values
    """
    params_type = HYPERPARAMETER_TYPES.get(family)
    if params_type is None:
        raise UnsupportedOperationError(f"Model family {family.value} is not supported")

    if value is None:
        return params_type()

    if isinstance(value, params_type):
        return value

    if isinstance(value, Mapping):
        known = {f.name for f in fields(params_type)}
        unknown = sorted(set(value) - known)
        if unknown:
            raise InvalidInputError(
                f"Unknown hyperparameters for {family.value}: {', '.join(map(str, unknown))}")
        try:
            return params_type(**value)
        except TypeError as e:
            raise InvalidInputError(f"Invalid hyperparameters for {family.value}: {e}") from e

    raise InvalidInputError(
        f"Hyperparameters for {family.value} must be {params_type.__name__} or a mapping, "
        f"got {type(value).__name__}")
