"""
Predictive Engine - Error Types

Every failure raised by the engine derives from EngineError. Where a
built-in exception has the same meaning the engine error also derives from
it, so callers can catch either.

Error kinds:
- InvalidInputError: empty or mismatched dimensions, non-binary targets
- ModelNotFoundError: unknown model identifier
- InvalidModelError: parameter payload does not fit its model family
- SingularMatrixError: elimination pivot below the singularity threshold
- UnsupportedOperationError: family has no training/prediction routine
- ModelTrainingError: cross-validation produced no viable candidate
- OperationCancelledError: a cancellation token was triggered
"""


class EngineError(Exception):
    """Base class for all engine errors."""


class InvalidInputError(EngineError, ValueError):
    """Input table, targets or hyperparameters are malformed."""


class ModelNotFoundError(EngineError, KeyError):
    """No model is registered under the requested identifier."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ''


class InvalidModelError(EngineError):
    """Model parameters are missing the fields expected for its family."""


class SingularMatrixError(EngineError, ArithmeticError):
    """Matrix cannot be solved or inverted."""


class UnsupportedOperationError(EngineError, NotImplementedError):
    """Model family does not implement the requested operation."""


class ModelTrainingError(EngineError):
    """Training could not produce a usable model."""


class OperationCancelledError(EngineError):
    """Operation stopped because its cancellation token was set."""
