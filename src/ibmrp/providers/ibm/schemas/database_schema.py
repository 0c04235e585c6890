"""Schema of the ibm_database resource."""
from ibmrp.domain.base.schema import (
    Attribute,
    AttrType,
    Schema,
    validate_allowed_values,
    validate_cidr,
    validate_json_object,
    validate_string_length,
)
from ibmrp.domain.database.value_objects import (
    SERVICE_ENDPOINTS,
    SUPPORTED_PLANS,
    SUPPORTED_SERVICES,
)

from .common import tags_attribute, timeouts_attribute

RESOURCE_TYPE = "ibm_database"

_MEMBER_ATTRIBUTES = [
    "members_memory_allocation_mb",
    "members_disk_allocation_mb",
    "members_cpu_allocation_count",
]
_NODE_ATTRIBUTES = [
    "node_count",
    "node_memory_allocation_mb",
    "node_disk_allocation_mb",
    "node_cpu_allocation_count",
]


def _computed(attr_type: AttrType, description: str = "", **kwargs) -> Attribute:
    return Attribute(attr_type, computed=True, description=description, **kwargs)


def _allowlist_entry() -> Schema:
    return Schema("allowlist", {
        "address": Attribute(AttrType.STRING, optional=True, validators=[validate_cidr],
                             description="IP address or CIDR block"),
        "description": Attribute(AttrType.STRING, optional=True, validators=[validate_string_length(1, 32)],
                                 description="Unique description of the entry"),
    })


_USER = Schema("users", {
    "name": Attribute(AttrType.STRING, required=True, validators=[validate_string_length(5, 32)]),
    "password": Attribute(AttrType.STRING, required=True, sensitive=True,
                          validators=[validate_string_length(10, 32)]),
    "user_type": Attribute(AttrType.STRING, required=True, description="User type, e.g. database"),
})

_HOST = Schema("hosts", {
    "hostname": _computed(AttrType.STRING),
    "port": _computed(AttrType.STRING),
})

_CONNECTION_STRING = Schema("connectionstrings", {
    "name": _computed(AttrType.STRING, "User name"),
    "password": _computed(AttrType.STRING, "Always empty"),
    "composed": _computed(AttrType.STRING, "Connection string"),
    "scheme": _computed(AttrType.STRING, "DB scheme"),
    "certname": _computed(AttrType.STRING, "Certificate name"),
    "certbase64": _computed(AttrType.STRING, "Certificate in base64 encoding"),
    "bundlename": _computed(AttrType.STRING, "Secure connect bundle name"),
    "bundlebase64": _computed(AttrType.STRING, "Secure connect bundle in base64 encoding"),
    "queryoptions": _computed(AttrType.STRING, "DB query options"),
    "database": _computed(AttrType.STRING, "DB name"),
    "path": _computed(AttrType.STRING, "DB path"),
    "hosts": _computed(AttrType.LIST, elem=_HOST),
})


def _group_resource(suffix: str) -> Schema:
    return Schema("group_resource", {
        "units": _computed(AttrType.STRING),
        f"allocation_{suffix}": _computed(AttrType.INT),
        f"minimum_{suffix}": _computed(AttrType.INT),
        f"step_size_{suffix}": _computed(AttrType.INT),
        "is_adjustable": _computed(AttrType.BOOL),
        "can_scale_down": _computed(AttrType.BOOL),
    })


_GROUP = Schema("groups", {
    "group_id": _computed(AttrType.STRING, "Scaling group name"),
    "count": _computed(AttrType.INT, "Count of scaling groups for the instance"),
    "memory": _computed(AttrType.LIST, elem=_group_resource("mb")),
    "cpu": _computed(AttrType.LIST, elem=_group_resource("count")),
    "disk": _computed(AttrType.LIST, elem=_group_resource("mb")),
})


def _autoscaling_attr(attr_type: AttrType) -> Attribute:
    return Attribute(attr_type, optional=True, computed=True)


_AUTOSCALING_DISK = Schema("disk", {
    "capacity_enabled": _autoscaling_attr(AttrType.BOOL),
    "free_space_less_than_percent": _autoscaling_attr(AttrType.INT),
    "io_enabled": _autoscaling_attr(AttrType.BOOL),
    "io_over_period": _autoscaling_attr(AttrType.STRING),
    "io_above_percent": _autoscaling_attr(AttrType.INT),
    "rate_increase_percent": _autoscaling_attr(AttrType.FLOAT),
    "rate_period_seconds": _autoscaling_attr(AttrType.INT),
    "rate_limit_mb_per_member": _autoscaling_attr(AttrType.FLOAT),
    "rate_units": _autoscaling_attr(AttrType.STRING),
})

_AUTOSCALING_MEMORY = Schema("memory", {
    "io_enabled": _autoscaling_attr(AttrType.BOOL),
    "io_over_period": _autoscaling_attr(AttrType.STRING),
    "io_above_percent": _autoscaling_attr(AttrType.INT),
    "rate_increase_percent": _autoscaling_attr(AttrType.FLOAT),
    "rate_period_seconds": _autoscaling_attr(AttrType.INT),
    "rate_limit_mb_per_member": _autoscaling_attr(AttrType.FLOAT),
    "rate_units": _autoscaling_attr(AttrType.STRING),
})

_AUTOSCALING_CPU = Schema("cpu", {
    "rate_increase_percent": _autoscaling_attr(AttrType.FLOAT),
    "rate_period_seconds": _autoscaling_attr(AttrType.INT),
    "rate_limit_count_per_member": _autoscaling_attr(AttrType.INT),
    "rate_units": _autoscaling_attr(AttrType.STRING),
})

_AUTOSCALING = Schema("auto_scaling", {
    "disk": Attribute(AttrType.LIST, optional=True, computed=True, max_items=1, elem=_AUTOSCALING_DISK),
    "memory": Attribute(AttrType.LIST, optional=True, computed=True, max_items=1, elem=_AUTOSCALING_MEMORY),
    "cpu": Attribute(AttrType.LIST, optional=True, computed=True, max_items=1, elem=_AUTOSCALING_CPU),
})


def _scaling_attribute(description: str, conflicts_with) -> Attribute:
    return Attribute(
        AttrType.INT,
        optional=True,
        computed=True,
        conflicts_with=list(conflicts_with),
        description=description,
    )


DATABASE_SCHEMA = Schema(RESOURCE_TYPE, {
    "name": Attribute(AttrType.STRING, required=True, description="Resource instance name"),
    "resource_group_id": Attribute(AttrType.STRING, optional=True, computed=True, force_new=True,
                                   description="ID of the resource group of the instance"),
    "location": Attribute(AttrType.STRING, required=True, description="Region of the instance"),
    "service": Attribute(AttrType.STRING, required=True,
                         validators=[validate_allowed_values(SUPPORTED_SERVICES)]),
    "plan": Attribute(AttrType.STRING, required=True, force_new=True,
                      validators=[validate_allowed_values(SUPPORTED_PLANS)]),
    "status": _computed(AttrType.STRING, "The resource instance status"),
    "guid": _computed(AttrType.STRING, "Unique identifier of resource instance"),
    "adminuser": _computed(AttrType.STRING, "The admin user id for the instance"),
    "adminpassword": Attribute(AttrType.STRING, optional=True, sensitive=True,
                               validators=[validate_string_length(10, 32)]),
    "configuration": Attribute(AttrType.STRING, optional=True, validators=[validate_json_object],
                               description="Database configuration in JSON format"),
    "version": Attribute(AttrType.STRING, optional=True, computed=True, force_new=True),
    "members_memory_allocation_mb": _scaling_attribute("Memory allocation of the cluster", _NODE_ATTRIBUTES),
    "members_disk_allocation_mb": _scaling_attribute("Disk allocation of the cluster", _NODE_ATTRIBUTES),
    "members_cpu_allocation_count": _scaling_attribute("CPU allocation of the cluster", _NODE_ATTRIBUTES),
    "node_count": _scaling_attribute("Total number of nodes in the cluster", _MEMBER_ATTRIBUTES),
    "node_memory_allocation_mb": _scaling_attribute("Memory allocation per node", _MEMBER_ATTRIBUTES),
    "node_disk_allocation_mb": _scaling_attribute("Disk allocation per node", _MEMBER_ATTRIBUTES),
    "node_cpu_allocation_count": _scaling_attribute("CPU allocation per node", _MEMBER_ATTRIBUTES),
    "plan_validation": Attribute(AttrType.BOOL, optional=True, default=True,
                                 description="Validate scaling values against group defaults before applying"),
    "service_endpoints": Attribute(AttrType.STRING, optional=True, default="public",
                                   validators=[validate_allowed_values(SERVICE_ENDPOINTS)]),
    "backup_id": Attribute(AttrType.STRING, optional=True, description="CRN of a backup to restore"),
    "remote_leader_id": Attribute(AttrType.STRING, optional=True, description="CRN of the leader database"),
    "key_protect_instance": Attribute(AttrType.STRING, optional=True, force_new=True),
    "key_protect_key": Attribute(AttrType.STRING, optional=True, force_new=True),
    "backup_encryption_key_crn": Attribute(AttrType.STRING, optional=True, force_new=True),
    "tags": tags_attribute(),
    "point_in_time_recovery_deployment_id": Attribute(AttrType.STRING, optional=True),
    "point_in_time_recovery_time": Attribute(AttrType.STRING, optional=True),
    "users": Attribute(AttrType.SET, optional=True, elem=_USER),
    "connectionstrings": _computed(AttrType.LIST, elem=_CONNECTION_STRING),
    "whitelist": Attribute(AttrType.SET, optional=True, conflicts_with=["allowlist"],
                           elem=_allowlist_entry(), deprecated="use allowlist instead"),
    "allowlist": Attribute(AttrType.SET, optional=True, conflicts_with=["whitelist"],
                           elem=_allowlist_entry()),
    "groups": _computed(AttrType.LIST, elem=_GROUP),
    "auto_scaling": Attribute(AttrType.LIST, optional=True, computed=True, max_items=1, elem=_AUTOSCALING),
    "resource_name": _computed(AttrType.STRING, "The name of the resource"),
    "resource_crn": _computed(AttrType.STRING, "The crn of the resource"),
    "resource_status": _computed(AttrType.STRING, "The status of the resource"),
    "resource_group_name": _computed(AttrType.STRING, "The resource group of the resource"),
    "resource_controller_url": _computed(
        AttrType.STRING, "URL of the IBM Cloud dashboard page of the resource"
    ),
    "timeouts": timeouts_attribute(),
})
