from typing import Any, Iterable, Optional


class InfrastructureError(Exception):
    """Base exception for infrastructure-related errors."""
    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.details = details


class StorageError(InfrastructureError):
    """Raised when state storage operations fail."""
    pass


class WaitTimeoutError(InfrastructureError):
    """Raised when a resource does not reach a target state in time."""
    def __init__(self, message: str, last_state: Optional[str] = None,
                 expected: Optional[Iterable[str]] = None):
        super().__init__(message, {"last_state": last_state, "expected": list(expected or [])})
        self.last_state = last_state
        self.expected = list(expected or [])


class UnexpectedStateError(InfrastructureError):
    """Raised when a refreshed resource reports a state that is neither pending nor target."""
    def __init__(self, state: str, expected: Iterable[str]):
        expected = list(expected)
        super().__init__(f"unexpected state '{state}', wanted target '{', '.join(expected)}'",
                         {"state": state, "expected": expected})
        self.state = state
        self.expected = expected


class ResourceVanishedError(InfrastructureError):
    """Raised when a polled resource stops being returned by its refresh function."""
    pass
