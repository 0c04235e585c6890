"""Resource group lookups."""
from typing import Any

from ibmrp.domain.core.exceptions import ConfigurationError
from ibmrp.providers.ibm.infrastructure.api_errors import call_api


def default_resource_group_id(resource_manager: Any) -> str:
    """
    ID of the account's default resource group.

    Args:
        resource_manager: ResourceManagerV2 client

    Raises:
        ConfigurationError: If the account has no default resource group
    """
    result = call_api(
        "retrieving default resource group",
        resource_manager.list_resource_groups,
        default=True,
    )
    groups = result.get("resources") or []
    if not groups:
        raise ConfigurationError("The account has no default resource group; set resource_group_id")
    return groups[0]["id"]
