"""
Predictive Engine - training, prediction, clustering and cross-validation
over the from-scratch estimators in stat_models and clustering.

Public API:
- PredictiveEngine: train_model, predict, cluster, cross_validate
- ModelRegistry: thread-safe model store
- ModelFamily and the result types in engine.types
- Typed hyperparameters per family in engine.hyperparameters
"""

from .types import (
    ModelFamily,
    Model,
    ModelPerformance,
    TrainingDataDescriptor,
    PredictionResult,
    ClusteringResult,
    CrossValidationResult,
)
from .hyperparameters import (
    Hyperparameters,
    LinearRegressionParams,
    LogisticRegressionParams,
    DecisionTreeParams,
    RandomForestParams,
    GradientBoostingParams,
    NeuralNetworkParams,
    SVMParams,
    NaiveBayesParams,
    KMeansParams,
    HierarchicalParams,
    resolve_hyperparameters,
)
from .registry import ModelRegistry
from .telemetry import (
    MetricsSink,
    ErrorReporter,
    LoggingMetricsSink,
    LoggingErrorReporter,
    CancellationToken,
)
from .logger import configure_logging
from .predictive_engine import PredictiveEngine

__all__ = [
    # Data model
    'ModelFamily',
    'Model',
    'ModelPerformance',
    'TrainingDataDescriptor',
    'PredictionResult',
    'ClusteringResult',
    'CrossValidationResult',

    # Hyperparameters
    'Hyperparameters',
    'LinearRegressionParams',
    'LogisticRegressionParams',
    'DecisionTreeParams',
    'RandomForestParams',
    'GradientBoostingParams',
    'NeuralNetworkParams',
    'SVMParams',
    'NaiveBayesParams',
    'KMeansParams',
    'HierarchicalParams',
    'resolve_hyperparameters',

    # Services
    'ModelRegistry',
    'MetricsSink',
    'ErrorReporter',
    'LoggingMetricsSink',
    'LoggingErrorReporter',
    'CancellationToken',
    'configure_logging',
    'PredictiveEngine',
]
