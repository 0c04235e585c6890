"""Resource Registry - maps resource type names to schemas and handler factories.

New resource types are added by registering their factories, without
touching the CLI or the lifecycle service.
"""

import threading
from typing import Any, Callable, Dict, List, Optional

from ibmrp.infrastructure.logging.logger import get_logger


class UnsupportedResourceError(Exception):
    """Exception raised when an unregistered resource type is requested."""
    pass


class ResourceRegistration:
    """Container for resource registration information."""

    def __init__(self,
                 resource_type: str,
                 schema: Any,
                 handler_factory: Callable[..., Any],
                 importable: bool = True):
        """
        Initialize resource registration.

        Args:
            resource_type: Type identifier, e.g. 'ibm_database'
            schema: Schema describing the resource attributes
            handler_factory: Callable taking an IBMClientSession and returning a handler
            importable: Whether the resource supports import by ID
        """
        self.resource_type = resource_type
        self.schema = schema
        self.handler_factory = handler_factory
        self.importable = importable


class ResourceRegistry:
    """
    Registry for resource types.

    Thread-safe singleton implementation.
    """

    _instance: Optional["ResourceRegistry"] = None
    _lock = threading.RLock()

    def __init__(self):
        self._registrations: Dict[str, ResourceRegistration] = {}
        self._logger = get_logger(__name__)
        self._registration_lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> "ResourceRegistry":
        """Return the process-wide registry."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the process-wide registry. Used by tests."""
        with cls._lock:
            cls._instance = None

    def register(self, registration: ResourceRegistration) -> None:
        """
        Register a resource type.

        Raises:
            ValueError: If the type is already registered
        """
        with self._registration_lock:
            if registration.resource_type in self._registrations:
                raise ValueError(f"Resource type already registered: {registration.resource_type}")
            self._registrations[registration.resource_type] = registration
            self._logger.debug(f"Registered resource type: {registration.resource_type}")

    def is_registered(self, resource_type: str) -> bool:
        return resource_type in self._registrations

    def get(self, resource_type: str) -> ResourceRegistration:
        """
        Get the registration for a resource type.

        Raises:
            UnsupportedResourceError: If the type is not registered
        """
        try:
            return self._registrations[resource_type]
        except KeyError:
            raise UnsupportedResourceError(
                f"Unsupported resource type: {resource_type}. "
                f"Available types: {', '.join(self.get_registered_types())}"
            )

    def create_handler(self, resource_type: str, session: Any) -> Any:
        """Create a handler for the resource type."""
        return self.get(resource_type).handler_factory(session)

    def get_registered_types(self) -> List[str]:
        return sorted(self._registrations.keys())
