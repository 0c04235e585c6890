"""Event Notifications subscription handler."""
import time
from typing import Any, Callable, Dict

from ibmrp.domain.base.resource_data import ResourceData
from ibmrp.providers.ibm.exceptions import IBMResourceNotFoundError
from ibmrp.providers.ibm.ibm_client import IBMClientSession
from ibmrp.providers.ibm.infrastructure.handlers.base_handler import IBMResourceHandler, sep_id_parts
from ibmrp.providers.ibm.infrastructure.handlers.components.notifications import (
    expand_subscription_attributes,
    flatten_subscription_attributes,
)
from ibmrp.providers.ibm.schemas.en_subscription_schema import ATTRIBUTE_NAMES, EN_SUBSCRIPTION_SCHEMA


class EventNotificationsSubscriptionHandler(IBMResourceHandler):
    """Handler for ibm_en_subscription resources, ID "<instance_guid>/<subscription_id>"."""

    def __init__(self, session: IBMClientSession,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        super().__init__(session, EN_SUBSCRIPTION_SCHEMA, sleep=sleep, clock=clock)

    @property
    def _client(self) -> Any:
        return self.session.event_notifications()

    def _options(self, data: ResourceData) -> Dict[str, Any]:
        options: Dict[str, Any] = {"name": data.get("name")}
        if data.get("description") is not None:
            options["description"] = data.get("description")
        attributes = expand_subscription_attributes(data.get("attributes"))
        if attributes:
            options["attributes"] = attributes
        return options

    def create(self, data: ResourceData) -> None:
        self.validate(data)
        instance_guid = data.get("instance_guid")
        options = self._options(data)
        self._logger.info(f"Creating subscription {options['name']} in {instance_guid}")
        result = self._call(
            "creating subscription",
            self._client.create_subscription,
            instance_id=instance_guid,
            destination_id=data.get("destination_id"),
            topic_id=data.get("topic_id"),
            **options,
        )
        data.set_id(f"{instance_guid}/{result['id']}")
        self.read(data)

    def read(self, data: ResourceData) -> None:
        instance_guid, subscription_id = sep_id_parts(data.id)
        try:
            result = self._call(
                "getting subscription",
                self._client.get_subscription,
                instance_id=instance_guid,
                id=subscription_id,
            )
        except IBMResourceNotFoundError:
            self._logger.warning(f"Removing subscription {data.id} from state because it's not found via the API")
            data.set_id("")
            return

        data.set("instance_guid", instance_guid)
        data.set("subscription_id", result.get("id", subscription_id))
        for attribute in ("name", "description", "destination_id", "destination_type",
                          "destination_name", "topic_id", "topic_name", "updated_at"):
            data.set(attribute, result.get(attribute))
        data.set("attributes", flatten_subscription_attributes(result.get("attributes"), ATTRIBUTE_NAMES))

    def update(self, data: ResourceData) -> None:
        self.validate(data)
        instance_guid, subscription_id = sep_id_parts(data.id)
        if data.has_changes("name", "description", "attributes"):
            self._logger.info(f"Updating subscription {data.id}")
            self._call(
                "updating subscription",
                self._client.update_subscription,
                instance_id=instance_guid,
                id=subscription_id,
                **self._options(data),
            )
        self.read(data)

    def delete(self, data: ResourceData) -> None:
        instance_guid, subscription_id = sep_id_parts(data.id)
        try:
            self._call(
                "deleting subscription",
                self._client.delete_subscription,
                instance_id=instance_guid,
                id=subscription_id,
            )
        except IBMResourceNotFoundError:
            self._logger.warning(f"Subscription {data.id} already deleted")
        data.set_id("")

    def exists(self, data: ResourceData) -> bool:
        instance_guid, subscription_id = sep_id_parts(data.id)
        try:
            self._call(
                "getting subscription",
                self._client.get_subscription,
                instance_id=instance_guid,
                id=subscription_id,
            )
        except IBMResourceNotFoundError:
            return False
        return True
