"""Retry exceptions."""
from ibmrp.infrastructure.exceptions import InfrastructureError


class RetryError(InfrastructureError):
    """Base exception for retry errors."""
    pass


class RetryConfigurationError(RetryError):
    """Raised when a retry strategy is configured with invalid values."""
    pass
