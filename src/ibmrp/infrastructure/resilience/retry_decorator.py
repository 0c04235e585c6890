"""Retry helpers."""
import time
from typing import Any, Callable, Optional, TypeVar

from ibmrp.infrastructure.logging.logger import get_logger
from ibmrp.infrastructure.resilience.strategy import QuadraticBackoffStrategy, RetryStrategy

T = TypeVar("T")
logger = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 10.0


def retry_call(
    func: Callable[..., T],
    *args: Any,
    strategy: Optional[RetryStrategy] = None,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> T:
    """
    Call func until it succeeds or the strategy gives up.

    The last error is re-raised unchanged once retries are exhausted.

    Args:
        func: Operation to call
        *args: Positional arguments for the operation
        strategy: Retry strategy, quadratic back-off with 3 retries by default
        sleep: Sleep function, replaced in tests
        **kwargs: Keyword arguments for the operation

    Returns:
        The operation's return value
    """
    strategy = strategy or QuadraticBackoffStrategy(
        max_attempts=DEFAULT_MAX_ATTEMPTS, base_delay=DEFAULT_BASE_DELAY
    )
    operation_name = getattr(func, "__name__", "operation")
    attempt = 0
    while True:
        delay = strategy.get_delay(attempt)
        if delay > 0:
            sleep(delay)
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not strategy.should_retry(attempt, e):
                raise
            logger.warning(
                f"Attempt {attempt + 1} of {operation_name} failed, retrying: {str(e)}"
            )
            attempt += 1
