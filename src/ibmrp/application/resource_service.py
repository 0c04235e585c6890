"""
Resource Lifecycle Service - orchestrates resource operations for external consumers.

The service resolves the handler of a resource type from the registry,
builds the ResourceData of an operation from the stored state and the
supplied configuration, runs the handler and persists the resulting state.
"""
from typing import Any, Callable, Dict, Optional

from ibmrp.config.manager import ConfigurationManager
from ibmrp.config.schemas.provider_schema import IBMProviderConfig
from ibmrp.domain.base.resource_data import ResourceData
from ibmrp.domain.core.exceptions import ResourceNotFoundError, ValidationError
from ibmrp.infrastructure.logging.logger import get_logger
from ibmrp.infrastructure.persistence.json_state_store import JSONStateStore
from ibmrp.infrastructure.registry.resource_registry import ResourceRegistry
from ibmrp.providers.ibm.ibm_client import IBMClientSession
from ibmrp.providers.ibm.registration import register_ibm_resources


class ResourceLifecycleService:
    """Create, read, update, delete, exists, import and validate for registered resource types."""

    def __init__(self,
                 config_manager: ConfigurationManager,
                 registry: Optional[ResourceRegistry] = None,
                 state_store: Optional[JSONStateStore] = None,
                 session_factory: Optional[Callable[[IBMProviderConfig], Any]] = None):
        """
        Initialize the service.

        Args:
            config_manager: Source of provider, timeout, polling and state settings
            registry: Resource registry, the IBM types are registered when omitted
            state_store: State store, built from the state settings when omitted
            session_factory: Builds the SDK client session from the provider settings
        """
        self._config = config_manager
        self._registry = registry or register_ibm_resources(polling=config_manager.get_polling_config())
        if state_store is None:
            state_config = config_manager.get_state_config()
            state_store = JSONStateStore(state_config.path, backup=state_config.backup)
        self._store = state_store
        self._session_factory = session_factory or IBMClientSession
        self._session: Optional[Any] = None
        self._logger = get_logger(__name__)

    @property
    def registry(self) -> ResourceRegistry:
        return self._registry

    @property
    def session(self) -> Any:
        """SDK client session, built on first use."""
        if self._session is None:
            self._session = self._session_factory(self._config.get_provider_config())
        return self._session

    def _handler(self, resource_type: str) -> Any:
        return self._registry.create_handler(resource_type, self.session)

    def _schema(self, resource_type: str) -> Any:
        return self._registry.get(resource_type).schema

    def _timeouts(self) -> Dict[str, float]:
        timeouts = self._config.get_timeouts()
        return {
            "create": float(timeouts.create),
            "update": float(timeouts.update),
            "delete": float(timeouts.delete),
        }

    def _data(self, resource_type: str, config: Optional[Dict[str, Any]] = None,
              state: Optional[Dict[str, Any]] = None, resource_id: Optional[str] = None) -> ResourceData:
        return ResourceData(
            resource_type,
            schema=self._schema(resource_type),
            config=config,
            state=state,
            resource_id=resource_id,
            timeouts=self._timeouts(),
        )

    def _persist(self, data: ResourceData, resource_id: str) -> Optional[Dict[str, Any]]:
        """Save the state of data, or drop it when the resource is gone."""
        if data.is_removed:
            self._store.delete(data.resource_type, resource_id)
            return None
        state = data.to_state()
        if data.id != resource_id:
            self._store.delete(data.resource_type, resource_id)
        self._store.save(data.resource_type, data.id, state)
        return state

    def _stored_state(self, resource_type: str, resource_id: str) -> Dict[str, Any]:
        state = self._store.get(resource_type, resource_id)
        if state is None:
            raise ResourceNotFoundError(resource_type, resource_id)
        return state

    def validate(self, resource_type: str, config: Dict[str, Any]) -> Dict[str, str]:
        """
        Validate a configuration without calling any API.

        Returns:
            Map of attribute path to error message, empty when valid
        """
        return self._schema(resource_type).validate(config)

    def create(self, resource_type: str, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a resource.

        Returns:
            The state of the new resource
        """
        handler = self._handler(resource_type)
        data = self._data(resource_type, config=config)
        self._logger.info(f"Creating {resource_type}")
        try:
            handler.create(data)
        finally:
            # A partially created resource keeps its ID so it can be deleted later.
            if not data.is_removed:
                self._store.save(resource_type, data.id, data.to_state())
        return data.to_state()

    def read(self, resource_type: str, resource_id: str) -> Optional[Dict[str, Any]]:
        """
        Refresh a resource from the API.

        Returns:
            The refreshed state, or None when the resource no longer exists
        """
        state = self._store.get(resource_type, resource_id) or {}
        data = self._data(resource_type, state=state, resource_id=resource_id)
        self._handler(resource_type).read(data)
        if data.is_removed:
            self._logger.warning(f"{resource_type} {resource_id} no longer exists")
        return self._persist(data, resource_id)

    def update(self, resource_type: str, resource_id: str, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a new configuration to an existing resource.

        Raises:
            ResourceNotFoundError: If the resource has no stored state
            ValidationError: If a changed attribute can only be set on create
        """
        state = self._stored_state(resource_type, resource_id)
        replaced = self._schema(resource_type).force_new_changes(state, config)
        if replaced:
            raise ValidationError(
                f"Changing {', '.join(replaced)} requires replacing {resource_type} {resource_id}",
                {"attributes": replaced},
            )
        data = self._data(resource_type, config=config, state=state, resource_id=resource_id)
        self._logger.info(f"Updating {resource_type} {resource_id}")
        self._handler(resource_type).update(data)
        return self._persist(data, resource_id) or data.to_state()

    def delete(self, resource_type: str, resource_id: str) -> None:
        """Delete a resource and drop its state."""
        state = self._store.get(resource_type, resource_id) or {}
        data = self._data(resource_type, state=state, resource_id=resource_id)
        self._logger.info(f"Deleting {resource_type} {resource_id}")
        self._handler(resource_type).delete(data)
        self._store.delete(resource_type, resource_id)

    def exists(self, resource_type: str, resource_id: str) -> bool:
        state = self._store.get(resource_type, resource_id) or {}
        data = self._data(resource_type, state=state, resource_id=resource_id)
        found = self._handler(resource_type).exists(data)
        if data.is_removed:
            self._store.delete(resource_type, resource_id)
        return found

    def import_resource(self, resource_type: str, resource_id: str) -> Dict[str, Any]:
        """
        Import an existing resource by ID.

        Raises:
            ValidationError: If the resource type does not support import
        """
        if not self._registry.get(resource_type).importable:
            raise ValidationError(f"{resource_type} does not support import")
        data = self._data(resource_type, state={}, resource_id=resource_id)
        self._logger.info(f"Importing {resource_type} {resource_id}")
        self._handler(resource_type).import_resource(data)
        self._store.save(resource_type, data.id, data.to_state())
        return data.to_state()
