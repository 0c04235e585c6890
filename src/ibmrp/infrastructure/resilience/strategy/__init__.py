"""Retry strategies package."""

from .base import RetryStrategy
from .quadratic import QuadraticBackoffStrategy

__all__ = [
    "RetryStrategy",
    "QuadraticBackoffStrategy",
]
