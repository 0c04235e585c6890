"""Plan-time checks of database scaling values.

The checks run before any create or update call. For the services whose
scaling groups are validated, proposed values are compared to the default
group limits served by the ICD API for the database type. Per-node values
are compared to the group limits divided by the minimum member count.
"""
from typing import Any, Dict, Optional

from ibmrp.domain.base.resource_data import ResourceData
from ibmrp.domain.core.exceptions import ValidationError
from ibmrp.domain.database.scaling import GroupLimit, GroupLimits, check_group_value
from ibmrp.domain.database.value_objects import PLAN_VALIDATED_SERVICES, database_type
from ibmrp.infrastructure.logging.logger import get_logger
from ibmrp.providers.ibm.exceptions import IBMCloudError
from ibmrp.providers.ibm.infrastructure.api_errors import call_api

logger = get_logger(__name__)

NODE_ATTRIBUTES = (
    "node_count",
    "node_memory_allocation_mb",
    "node_disk_allocation_mb",
    "node_cpu_allocation_count",
)


def get_database_service_defaults(service: str, cloud_databases: Any) -> Dict[str, Any]:
    """
    Default scaling group of a database service.

    Args:
        service: Service name, e.g. databases-for-postgresql
        cloud_databases: CloudDatabasesV5 client

    Raises:
        ValidationError: If the defaults cannot be fetched
    """
    try:
        result = call_api(
            "getting default scaling groups",
            cloud_databases.get_default_scaling_groups,
            type=database_type(service),
        )
    except IBMCloudError as e:
        raise ValidationError(
            f"ICD API is down for plan validation, set plan_validation=false {e}",
            {"service": service},
        ) from e
    groups = result.get("groups") or []
    if not groups:
        raise ValidationError(
            f"ICD API returned no default scaling group for {service}, set plan_validation=false",
            {"service": service},
        )
    return groups[0]


def _check(data: ResourceData, name: str, limits: GroupLimit, divider: int) -> None:
    if not data.has_change(name):
        return
    old, new = data.get_change(name)
    check_group_value(name, limits, divider, old, new)


def customize_diff(data: ResourceData, cloud_databases: Any,
                   defaults: Optional[Dict[str, Any]] = None) -> None:
    """
    Reject scaling values the service would refuse.

    Args:
        data: Resource data with the proposed configuration
        cloud_databases: CloudDatabasesV5 client
        defaults: Default scaling group, fetched when not given

    Raises:
        ValidationError: If the service does not support per-node scaling
        ScalingLimitError: If a value is outside the group limits
    """
    service = data.get("service", "")
    if service not in PLAN_VALIDATED_SERVICES:
        changed = [name for name in NODE_ATTRIBUTES if data.has_change(name)]
        if changed:
            raise ValidationError(
                "node_count, node_memory_allocation_mb, node_disk_allocation_mb, "
                "node_cpu_allocation_count only supported for postgresql, elasticsearch and cassandra",
                {"attributes": changed},
            )
        return

    if not data.get("plan_validation", True):
        logger.debug(f"Plan validation disabled for {service}")
        return

    limits = GroupLimits.from_api(defaults or get_database_service_defaults(service, cloud_databases))

    _check(data, "members_memory_allocation_mb", limits.memory, 1)
    _check(data, "members_disk_allocation_mb", limits.disk, 1)
    _check(data, "members_cpu_allocation_count", limits.cpu, 1)
    _check(data, "node_count", limits.members, 1)

    divider = limits.members.minimum
    _check(data, "node_memory_allocation_mb", limits.memory, divider)
    _check(data, "node_disk_allocation_mb", limits.disk, divider)

    if data.has_change("node_cpu_allocation_count"):
        _check(data, "node_cpu_allocation_count", limits.cpu, divider)
    elif data.has_change("node_count"):
        _, cpu_set = data.get_ok("node_cpu_allocation_count")
        if not cpu_set:
            _, node_count = data.get_change("node_count")
            minimum = limits.cpu.minimum // divider if divider > 0 else limits.cpu.minimum
            if node_count != minimum:
                raise ValidationError(
                    f"node_cpu_allocation_count must be set when node_count is greater then the minimum {minimum}",
                    {"node_count": node_count},
                )
