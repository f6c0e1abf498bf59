"""
Logging setup and the instrumentation decorator for public engine calls.

The engine logs through the global loguru `logger`. configure_logging()
installs the sinks once per process; calling it again replaces them.
"""

import os
import sys
from functools import wraps
from time import perf_counter
from typing import Callable, Optional

from loguru import logger

from config import LoggingConfig

_LOGGER_CONFIGURED = False

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message}"


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Configure the global logger.

    - stderr sink at the configured level
    - optional daily-rotated file sink under config.log_dir
    """
    global _LOGGER_CONFIGURED
    config = config or LoggingConfig()

    logger.remove()
    logger.add(sys.stderr, level=config.level, format=LOG_FORMAT)

    if config.log_dir:
        os.makedirs(config.log_dir, exist_ok=True)
        logger.add(
            sink=os.path.join(config.log_dir, "{time:YYYY-MM-DD}.log"),
            rotation=config.rotation,
            retention=config.retention,
            level=config.level,
            format=LOG_FORMAT,
            enqueue=True,  # safe across threads
            backtrace=True,
            diagnose=False,
        )

    if not _LOGGER_CONFIGURED:
        logger.debug("Logger initialized")
    _LOGGER_CONFIGURED = True


def instrumented(metric_name: str, context: str) -> Callable:
    """
    Decorate a PredictiveEngine method.

    On success the elapsed wall time goes to `self.metrics_sink` under
    `metric_name`; on failure the exception goes to `self.error_reporter`
    with `context` and is re-raised unchanged.
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            start = perf_counter()

            try:
                result = func(self, *args, **kwargs)
            except Exception as error:
                self.error_reporter.handle_error(error, context)
                raise

            cost = perf_counter() - start
            self.metrics_sink.record_metric(metric_name, cost)
            logger.debug(f"[TIME] {func.__name__} took {cost:.4f}s")
            return result

        return wrapper

    return decorator
