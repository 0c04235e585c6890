"""IBM Provider Registration - Register IBM Cloud resource types with the resource registry."""

from typing import Any, Callable, Optional, TYPE_CHECKING

from ibmrp.config.schemas.polling_schema import PollingConfig
from ibmrp.infrastructure.registry.resource_registry import ResourceRegistration, ResourceRegistry
from ibmrp.providers.ibm.schemas import (
    DATABASE_SCHEMA,
    EN_DESTINATION_SCHEMA,
    EN_SUBSCRIPTION_SCHEMA,
)

if TYPE_CHECKING:
    from ibmrp.providers.ibm.ibm_client import IBMClientSession


def create_database_handler_factory(polling: Optional[PollingConfig] = None) -> Callable[["IBMClientSession"], Any]:
    """
    Create the ibm_database handler factory.

    Args:
        polling: Poll intervals and retry settings passed to every handler

    Returns:
        Callable building a DatabaseInstanceHandler from a session
    """
    def factory(session: "IBMClientSession") -> Any:
        from ibmrp.providers.ibm.infrastructure.handlers.database_handler import DatabaseInstanceHandler
        return DatabaseInstanceHandler(session, polling=polling)
    return factory


def create_en_destination_handler(session: "IBMClientSession") -> Any:
    """Create an ibm_en_destination handler."""
    from ibmrp.providers.ibm.infrastructure.handlers.en_destination_handler import (
        EventNotificationsDestinationHandler,
    )
    return EventNotificationsDestinationHandler(session)


def create_en_subscription_handler(session: "IBMClientSession") -> Any:
    """Create an ibm_en_subscription handler."""
    from ibmrp.providers.ibm.infrastructure.handlers.en_subscription_handler import (
        EventNotificationsSubscriptionHandler,
    )
    return EventNotificationsSubscriptionHandler(session)


def register_ibm_resources(registry: Optional[ResourceRegistry] = None,
                           polling: Optional[PollingConfig] = None,
                           logger: Any = None) -> ResourceRegistry:
    """Register the IBM Cloud resource types.

    Types that are already registered are left untouched.

    Args:
        registry: Resource registry instance (optional)
        polling: Poll settings for the database handler (optional)
        logger: Logger for logging (optional)

    Returns:
        The registry the types were registered with
    """
    if registry is None:
        registry = ResourceRegistry.get_instance()

    registrations = [
        ResourceRegistration(DATABASE_SCHEMA.name, DATABASE_SCHEMA, create_database_handler_factory(polling)),
        ResourceRegistration(EN_DESTINATION_SCHEMA.name, EN_DESTINATION_SCHEMA, create_en_destination_handler),
        ResourceRegistration(EN_SUBSCRIPTION_SCHEMA.name, EN_SUBSCRIPTION_SCHEMA, create_en_subscription_handler),
    ]
    for registration in registrations:
        if registry.is_registered(registration.resource_type):
            continue
        registry.register(registration)

    if logger:
        logger.info(f"IBM resource types registered: {', '.join(registry.get_registered_types())}")
    return registry
