"""Infrastructure resilience package - retry mechanisms."""

from .exceptions import RetryConfigurationError, RetryError
from .retry_decorator import retry_call
from .strategy import QuadraticBackoffStrategy, RetryStrategy

__all__ = [
    "retry_call",
    "RetryError",
    "RetryConfigurationError",
    "RetryStrategy",
    "QuadraticBackoffStrategy",
]
