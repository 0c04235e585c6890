"""Resource type registry."""
from .resource_registry import (
    ResourceRegistration,
    ResourceRegistry,
    UnsupportedResourceError,
)

__all__ = ["ResourceRegistration", "ResourceRegistry", "UnsupportedResourceError"]
