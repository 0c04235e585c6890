"""Base IBM Cloud handler with common functionality."""
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, List

from ibmrp.domain.base.resource_data import ResourceData
from ibmrp.domain.base.schema import Schema
from ibmrp.domain.core.exceptions import ValidationError
from ibmrp.infrastructure.logging.logger import get_logger
from ibmrp.providers.ibm.exceptions import IBMResourceNotFoundError
from ibmrp.providers.ibm.infrastructure.api_errors import call_api
from ibmrp.providers.ibm.ibm_client import IBMClientSession


def sep_id_parts(resource_id: str, separator: str = "/", count: int = 2) -> List[str]:
    """
    Split a composite resource ID such as "<instance_guid>/<destination_id>".

    Raises:
        ValidationError: If the ID does not have exactly count non-empty parts
    """
    parts = (resource_id or "").split(separator)
    if len(parts) != count or not all(parts):
        raise ValidationError(
            f"Invalid ID {resource_id!r}: expected {count} parts separated by {separator!r}",
            {"id": resource_id},
        )
    return parts


class IBMResourceHandler(ABC):
    """Base class for IBM Cloud resource handlers."""

    def __init__(self, session: IBMClientSession, schema: Schema,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic) -> None:
        """
        Initialize handler with common dependencies.

        Args:
            session: IBM Cloud SDK client session
            schema: Schema of the managed resource type
            sleep: Sleep function used by pollers
            clock: Monotonic clock used by pollers
        """
        self.session = session
        self.schema = schema
        self._sleep = sleep
        self._clock = clock
        self._logger = get_logger(self.__class__.__module__)

    @property
    def resource_type(self) -> str:
        return self.schema.name

    def validate(self, data: ResourceData) -> None:
        """
        Validate the configuration of data against the resource schema.

        Raises:
            SchemaValidationError: If the configuration is invalid
        """
        config = data.config
        self.schema.validate_or_raise(config)
        for warning in self.schema.deprecation_warnings(config):
            self._logger.warning(f"Deprecated attribute in {self.resource_type}: {warning}")

    @abstractmethod
    def create(self, data: ResourceData) -> None:
        """
        Create the resource and populate data from the result.

        Raises:
            ValidationError: If the configuration is invalid
            IBMCloudError: For API errors
        """

    @abstractmethod
    def read(self, data: ResourceData) -> None:
        """Refresh data from the API. Clears the ID when the resource is gone."""

    @abstractmethod
    def update(self, data: ResourceData) -> None:
        """Apply configuration changes to the resource."""

    @abstractmethod
    def delete(self, data: ResourceData) -> None:
        """Delete the resource. Deleting a resource that is already gone succeeds."""

    @abstractmethod
    def exists(self, data: ResourceData) -> bool:
        """Whether the resource still exists."""

    def import_resource(self, data: ResourceData) -> None:
        """Import an existing resource by ID. Reads the full state."""
        self.read(data)
        if data.is_removed:
            raise IBMResourceNotFoundError(
                f"Cannot import non-existent {self.resource_type}", status_code=404
            )

    def _call(self, operation_name: str, func: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Call an SDK method and return its result body.

        Raises:
            IBMCloudError: Converted from ApiException
        """
        return call_api(operation_name, func, *args, **kwargs)
