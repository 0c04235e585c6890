"""IBM Cloud provider exceptions."""
from typing import Any, Optional

from ibmrp.infrastructure.exceptions import InfrastructureError


class IBMCloudError(InfrastructureError):
    """Base exception for IBM Cloud API errors."""
    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Any] = None):
        super().__init__(message, details)
        self.status_code = status_code


class IBMResourceNotFoundError(IBMCloudError):
    """Raised when the API answers 404."""
    pass


class IBMResourceGoneError(IBMCloudError):
    """Raised when the API answers 410."""
    pass


class IBMAuthorizationError(IBMCloudError):
    """Raised when the API answers 401 or 403."""
    pass


class IBMRateLimitError(IBMCloudError):
    """Raised when the API answers 429."""
    pass


class IBMValidationError(IBMCloudError):
    """Raised when the API rejects a request with 400 or 422."""
    pass


class TaskFailedError(IBMCloudError):
    """Raised when an ICD task ends in the failed state."""
    def __init__(self, task_id: str, message: Optional[str] = None):
        super().__init__(message or f"Database task {task_id} failed", details={"task_id": task_id})
        self.task_id = task_id


class TaskTimeoutError(IBMCloudError):
    """Raised when an ICD task does not finish before the timeout."""
    def __init__(self, task_id: str, timeout: float):
        super().__init__(
            f"Timed out after {timeout:.0f}s waiting for database task {task_id} to complete",
            details={"task_id": task_id, "timeout": timeout},
        )
        self.task_id = task_id
        self.timeout = timeout


class InstanceFailedError(IBMCloudError):
    """Raised when a resource instance reports the failed state."""
    def __init__(self, instance_id: str, operation: str = "operation"):
        super().__init__(
            f"The resource instance {instance_id} failed during {operation}",
            details={"instance_id": instance_id},
        )
        self.instance_id = instance_id


class InstanceNotFoundError(IBMCloudError):
    """Raised when a resource instance disappears while it is being waited on."""
    def __init__(self, instance_id: str):
        super().__init__(
            f"The resource instance {instance_id} does not exist anymore",
            status_code=404,
            details={"instance_id": instance_id},
        )
        self.instance_id = instance_id


class DeploymentNotReadyError(IBMCloudError):
    """Raised when the ICD API does not serve a new deployment in time."""
    def __init__(self, instance_id: str, cause: Exception):
        super().__init__(
            f"ICD interface not ready for {instance_id}: {cause}",
            status_code=getattr(cause, "status_code", None),
            details={"instance_id": instance_id},
        )
        self.instance_id = instance_id
        self.cause = cause
