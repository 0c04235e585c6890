"""Base retry strategy."""
from abc import ABC, abstractmethod
from typing import Callable, Optional, Tuple, Type

from ibmrp.infrastructure.resilience.exceptions import RetryConfigurationError


class RetryStrategy(ABC):
    """
    Decides whether a failed attempt is retried and how long to wait first.

    Attempts are numbered from 0. Attempt 0 is the initial call, so a
    strategy with max_attempts=3 makes at most four calls.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        retryable_exceptions: Tuple[Type[BaseException], ...] = (Exception,),
        retry_if: Optional[Callable[[Exception], bool]] = None,
    ):
        if max_attempts < 0:
            raise RetryConfigurationError("max_attempts must be non-negative")
        if base_delay < 0:
            raise RetryConfigurationError("base_delay must be non-negative")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.retryable_exceptions = retryable_exceptions
        self.retry_if = retry_if

    def should_retry(self, attempt: int, error: Exception) -> bool:
        """
        Check whether another attempt should follow a failed one.

        Args:
            attempt: Number of the attempt that just failed
            error: Exception raised by that attempt

        Returns:
            True if the operation should be called again
        """
        if attempt >= self.max_attempts:
            return False
        if not isinstance(error, self.retryable_exceptions):
            return False
        if self.retry_if is not None and not self.retry_if(error):
            return False
        return True

    @abstractmethod
    def get_delay(self, attempt: int) -> float:
        """Seconds to wait before the given attempt."""
