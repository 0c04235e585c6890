"""Quadratic back-off strategy."""
from .base import RetryStrategy


class QuadraticBackoffStrategy(RetryStrategy):
    """Waits base_delay * attempt**2 seconds before each attempt (0, 10, 40, 90 for a 10 s base)."""

    def get_delay(self, attempt: int) -> float:
        return self.base_delay * attempt * attempt
