# src/ibmrp/domain/core/exceptions.py
from typing import Any, Dict, List, Optional


class DomainException(Exception):
    """Base exception for all domain-specific errors."""
    pass


class ValidationError(DomainException):
    """Raised when domain validation fails."""
    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details


class ResourceNotFoundError(DomainException):
    """Raised when a requested resource cannot be found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with ID {resource_id} not found")
        self.resource_type = resource_type
        self.resource_id = resource_id


class ScalingLimitError(ValidationError):
    """Raised when a scaling value falls outside its group limits."""
    def __init__(self, attribute: str, message: str):
        super().__init__(message, {attribute: message})
        self.attribute = attribute


class SchemaValidationError(ValidationError):
    """Raised when a resource configuration does not satisfy its schema."""
    def __init__(self, resource_type: str, errors: Dict[str, str]):
        summary = "; ".join(f"{k}: {v}" for k, v in sorted(errors.items()))
        super().__init__(f"Configuration validation failed for {resource_type}: {summary}", errors)
        self.resource_type = resource_type
        self.errors = errors


class ConfigurationError(DomainException):
    """Raised when there's an issue with configuration."""
    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []
