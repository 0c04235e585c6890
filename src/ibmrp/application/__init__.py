"""Application layer: resource lifecycle orchestration."""
from .resource_service import ResourceLifecycleService

__all__ = ["ResourceLifecycleService"]
