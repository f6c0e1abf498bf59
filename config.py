"""
Predictive Engine - Global Configuration

This module contains all configuration constants for the modeling engine.
Per-family hyperparameter defaults live here; the typed hyperparameter
objects built from them are in engine/hyperparameters.py.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

# =============================================================================
# ENGINE SETTINGS
# =============================================================================
MODEL_VERSION = "1.0"
DEFAULT_SPLIT_RATIO = 0.8  # Train fraction for the hold-out evaluation
DEFAULT_RANDOM_STATE = 42

# =============================================================================
# NUMERICAL THRESHOLDS
# =============================================================================
SINGULARITY_THRESHOLD = 1e-10  # Smallest usable pivot magnitude
VARIANCE_FLOOR = 1e-9  # Naive Bayes per-feature variance floor
DECISION_THRESHOLD = 0.5  # Probability cut-off for binary labels

# =============================================================================
# FIXED CONFIDENCE SCORES
# =============================================================================
# Families without a derived confidence report these constants
LINEAR_REGRESSION_CONFIDENCE = 0.95
GRADIENT_BOOSTING_CONFIDENCE = 0.9
NEURAL_NETWORK_CONFIDENCE = 0.85

# =============================================================================
# LINEAR / POLYNOMIAL REGRESSION
# =============================================================================
POLYNOMIAL_MAX_DEGREE = 10  # Degree 1 is plain linear regression

# =============================================================================
# LOGISTIC REGRESSION
# =============================================================================
LOGISTIC_MAX_ITERATIONS = 1000
LOGISTIC_LEARNING_RATE = 0.01
LOGISTIC_TOLERANCE = 1e-6
LOGISTIC_SOLVER = 'gradient_descent'  # or 'newton'

# =============================================================================
# TREES, FORESTS AND BOOSTING
# =============================================================================
TREE_MAX_DEPTH = None  # Unbounded
TREE_MIN_SAMPLES_LEAF = 1

FOREST_NUM_TREES = 100
FOREST_MAX_DEPTH = 10
FOREST_MIN_SAMPLES_LEAF = 1

BOOSTING_NUM_ITERATIONS = 100
BOOSTING_LEARNING_RATE = 0.1
BOOSTING_MAX_DEPTH = 3
BOOSTING_EARLY_STOPPING_ROUNDS = 0  # 0 disables early stopping
BOOSTING_EARLY_STOPPING_TOLERANCE = 0.0

# =============================================================================
# NEURAL NETWORK
# =============================================================================
NETWORK_HIDDEN_LAYERS: Tuple[int, ...] = (10, 5)
NETWORK_LEARNING_RATE = 0.01
NETWORK_EPOCHS = 100
NETWORK_LOG_EVERY = 10  # Epochs between loss log lines

# =============================================================================
# SUPPORT VECTOR MACHINE
# =============================================================================
SVM_C = 1.0
SVM_GAMMA = 1.0
SVM_TOLERANCE = 1e-3
SVM_MAX_ITERATIONS = 1000
SVM_MIN_ALPHA_CHANGE = 1e-5

# =============================================================================
# CLUSTERING
# =============================================================================
NUM_CLUSTERS = 3
KMEANS_MAX_ITERATIONS = 100
KMEANS_TOLERANCE = 1e-4

# =============================================================================
# CROSS-VALIDATION
# =============================================================================
CV_FOLDS = 5

# =============================================================================
# LOGGING
# =============================================================================
LOG_LEVEL = "INFO"
LOG_DIR: Optional[str] = None  # None = stderr only
LOG_ROTATION = "1 day"
LOG_RETENTION = "30 days"

# =============================================================================
# DATACLASSES FOR CONFIGURATION
# =============================================================================

@dataclass
class EngineConfig:
    """Engine-wide settings."""
    version: str = MODEL_VERSION
    default_folds: int = CV_FOLDS


@dataclass
class LoggingConfig:
    """Log sink configuration."""
    level: str = LOG_LEVEL
    log_dir: Optional[str] = LOG_DIR
    rotation: str = LOG_ROTATION
    retention: str = LOG_RETENTION
