"""Event Notifications destination handler.

Destinations are addressed by a composite ID "<instance_guid>/<destination_id>".
"""
import time
from typing import Any, Callable, Dict

from ibmrp.domain.base.resource_data import ResourceData
from ibmrp.providers.ibm.exceptions import IBMResourceNotFoundError
from ibmrp.providers.ibm.ibm_client import IBMClientSession
from ibmrp.providers.ibm.infrastructure.handlers.base_handler import IBMResourceHandler, sep_id_parts
from ibmrp.providers.ibm.infrastructure.handlers.components.notifications import (
    expand_destination_config,
    flatten_destination_config,
)
from ibmrp.providers.ibm.schemas.en_destination_schema import (
    EN_DESTINATION_SCHEMA,
    PARAM_NAMES,
    SENSITIVE_PARAMS,
)


class EventNotificationsDestinationHandler(IBMResourceHandler):
    """Handler for ibm_en_destination resources."""

    def __init__(self, session: IBMClientSession,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        super().__init__(session, EN_DESTINATION_SCHEMA, sleep=sleep, clock=clock)

    @property
    def _client(self) -> Any:
        return self.session.event_notifications()

    def create(self, data: ResourceData) -> None:
        """Create a destination and read it back."""
        self.validate(data)
        instance_guid = data.get("instance_guid")

        options: Dict[str, Any] = {
            "instance_id": instance_guid,
            "name": data.get("name"),
            "type": data.get("type"),
        }
        if data.get("description") is not None:
            options["description"] = data.get("description")
        config = expand_destination_config(data.get("config"))
        if config:
            options["config"] = config

        self._logger.info(f"Creating {options['type']} destination {options['name']} in {instance_guid}")
        result = self._call("creating destination", self._client.create_destination, **options)
        data.set_id(f"{instance_guid}/{result['id']}")
        self.read(data)

    def read(self, data: ResourceData) -> None:
        instance_guid, destination_id = sep_id_parts(data.id)
        try:
            result = self._call(
                "getting destination",
                self._client.get_destination,
                instance_id=instance_guid,
                id=destination_id,
            )
        except IBMResourceNotFoundError:
            self._logger.warning(f"Removing destination {data.id} from state because it's not found via the API")
            data.set_id("")
            return

        data.set("instance_guid", instance_guid)
        data.set("destination_id", result.get("id", destination_id))
        data.set("name", result.get("name"))
        data.set("type", result.get("type"))
        data.set("description", result.get("description"))
        data.set("updated_at", result.get("updated_at"))
        data.set("subscription_count", result.get("subscription_count"))
        data.set("subscription_names", result.get("subscription_names") or [])
        data.set(
            "config",
            flatten_destination_config(result.get("config"), data.get("config"), PARAM_NAMES, SENSITIVE_PARAMS),
        )

    def update(self, data: ResourceData) -> None:
        """Update name, description and config parameters in place."""
        self.validate(data)
        instance_guid, destination_id = sep_id_parts(data.id)
        if data.has_changes("name", "description", "config"):
            options: Dict[str, Any] = {
                "instance_id": instance_guid,
                "id": destination_id,
                "name": data.get("name"),
            }
            if data.get("description") is not None:
                options["description"] = data.get("description")
            config = expand_destination_config(data.get("config"))
            if config:
                options["config"] = config
            self._logger.info(f"Updating destination {data.id}")
            self._call("updating destination", self._client.update_destination, **options)
        self.read(data)

    def delete(self, data: ResourceData) -> None:
        instance_guid, destination_id = sep_id_parts(data.id)
        try:
            self._call(
                "deleting destination",
                self._client.delete_destination,
                instance_id=instance_guid,
                id=destination_id,
            )
        except IBMResourceNotFoundError:
            self._logger.warning(f"Destination {data.id} already deleted")
        data.set_id("")

    def exists(self, data: ResourceData) -> bool:
        instance_guid, destination_id = sep_id_parts(data.id)
        try:
            self._call(
                "getting destination",
                self._client.get_destination,
                instance_id=instance_guid,
                id=destination_id,
            )
        except IBMResourceNotFoundError:
            return False
        return True
