# tests/conftest.py
import numpy as np
import pytest
from loguru import logger

from engine import PredictiveEngine


@pytest.fixture(autouse=True)
def disable_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def regression_data(rng):
    """
    Noise-free y = 3 + 2*x1 - x2 as a column-major table.

    Returns:
        (features, targets, feature_names)
    """
    x1 = rng.uniform(0, 10, 60)
    x2 = rng.uniform(-5, 5, 60)
    y = 3 + 2 * x1 - x2
    return [x1.tolist(), x2.tolist()], y.tolist(), ["x1", "x2"]


@pytest.fixture
def blobs(rng):
    """
    Two overlapping Gaussian blobs labelled 0/1, as an (n, 2) matrix.

    Returns:
        (X, y)
    """
    X0 = rng.normal([-1.5, -1.5], 1.0, size=(60, 2))
    X1 = rng.normal([1.5, 1.5], 1.0, size=(60, 2))
    X = np.vstack([X0, X1])
    y = np.concatenate([np.zeros(60), np.ones(60)])
    idx = rng.permutation(len(X))
    return X[idx], y[idx]


@pytest.fixture
def classification_data(blobs):
    """Blobs as a column-major table with names."""
    X, y = blobs
    return X.T.tolist(), y.tolist(), ["f1", "f2"]


class RecordingMetricsSink:
    """Keeps every (name, seconds) pair it is given."""

    def __init__(self):
        self.records = []

    def record_metric(self, name, elapsed_seconds):
        self.records.append((name, elapsed_seconds))


class RecordingErrorReporter:
    """Keeps every (error, context) pair it is given."""

    def __init__(self):
        self.reports = []

    def handle_error(self, error, context):
        self.reports.append((error, context))


@pytest.fixture
def metrics_sink():
    return RecordingMetricsSink()


@pytest.fixture
def error_reporter():
    return RecordingErrorReporter()


@pytest.fixture
def engine(metrics_sink, error_reporter):
    return PredictiveEngine(metrics_sink=metrics_sink, error_reporter=error_reporter)
