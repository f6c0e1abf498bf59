"""
Collaborators the engine reports to, and the cooperative cancellation token.

MetricsSink and ErrorReporter are structural interfaces: any object with the
right method works. The logging implementations below are the defaults; they
write through loguru and retain nothing.
"""

import threading
from typing import Optional, Protocol

from loguru import logger

from errors import OperationCancelledError


class MetricsSink(Protocol):
    def record_metric(self, name: str, elapsed_seconds: float) -> None:
        ...


class ErrorReporter(Protocol):
    def handle_error(self, error: BaseException, context: str) -> None:
        ...


class LoggingMetricsSink:
    """Logs each timing at INFO."""

    def record_metric(self, name: str, elapsed_seconds: float) -> None:
        logger.info(f"[METRIC] {name} took {elapsed_seconds:.4f}s")


class LoggingErrorReporter:
    """Logs each failure with its traceback at ERROR."""

    def handle_error(self, error: BaseException, context: str) -> None:
        logger.opt(exception=error).error(f"[ERROR] {context}: {error}")


class CancellationToken:
    """
    Cooperative cancellation flag shared between a caller and an operation.

    Long-running operations call raise_if_cancelled() between phases; a set
    token never alters results already computed.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str = "") -> None:
        if self._event.is_set():
            suffix = f" during {stage}" if stage else ""
            raise OperationCancelledError(f"Operation cancelled{suffix}")


def check_cancelled(token: Optional[CancellationToken], stage: str = "") -> None:
    """No-op when no token was given."""
    if token is not None:
        token.raise_if_cancelled(stage)
