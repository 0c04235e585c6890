"""Schema of the ibm_en_destination resource."""
from ibmrp.domain.base.schema import (
    Attribute,
    AttrType,
    Schema,
    validate_allowed_values,
    validate_string_length,
)

from .common import timeouts_attribute

RESOURCE_TYPE = "ibm_en_destination"

DESTINATION_TYPES = [
    "webhook",
    "slack",
    "pagerduty",
    "servicenow",
    "msteams",
    "ibmcf",
    "ibmcos",
    "push_android",
    "push_ios",
    "push_chrome",
    "push_firefox",
    "push_safari",
]

# Parameters the API accepts but never returns.
SENSITIVE_PARAMS = frozenset({"password", "client_secret", "api_key", "routing_key"})

_PARAMS = Schema("params", {
    "url": Attribute(AttrType.STRING, optional=True, description="Webhook or service URL"),
    "verb": Attribute(AttrType.STRING, optional=True, validators=[validate_allowed_values(["get", "post"])]),
    "custom_headers": Attribute(AttrType.MAP, optional=True, elem=AttrType.STRING),
    "sensitive_headers": Attribute(AttrType.LIST, optional=True, elem=AttrType.STRING),
    "api_key": Attribute(AttrType.STRING, optional=True, sensitive=True),
    "routing_key": Attribute(AttrType.STRING, optional=True, sensitive=True),
    "client_id": Attribute(AttrType.STRING, optional=True),
    "client_secret": Attribute(AttrType.STRING, optional=True, sensitive=True),
    "username": Attribute(AttrType.STRING, optional=True),
    "password": Attribute(AttrType.STRING, optional=True, sensitive=True),
    "instance_name": Attribute(AttrType.STRING, optional=True),
    "bucket_name": Attribute(AttrType.STRING, optional=True),
    "instance_id": Attribute(AttrType.STRING, optional=True),
    "endpoint": Attribute(AttrType.STRING, optional=True),
    "sender_id": Attribute(AttrType.STRING, optional=True),
    "website_url": Attribute(AttrType.STRING, optional=True),
})

_CONFIG = Schema("config", {
    "params": Attribute(AttrType.LIST, required=True, max_items=1, elem=_PARAMS),
})

EN_DESTINATION_SCHEMA = Schema(RESOURCE_TYPE, {
    "instance_guid": Attribute(AttrType.STRING, required=True, force_new=True,
                               description="GUID of the Event Notifications instance"),
    "name": Attribute(AttrType.STRING, required=True, validators=[validate_string_length(1, 255)]),
    "type": Attribute(AttrType.STRING, required=True, force_new=True,
                      validators=[validate_allowed_values(DESTINATION_TYPES)]),
    "description": Attribute(AttrType.STRING, optional=True),
    "config": Attribute(AttrType.LIST, optional=True, max_items=1, elem=_CONFIG),
    "destination_id": Attribute(AttrType.STRING, computed=True),
    "updated_at": Attribute(AttrType.STRING, computed=True),
    "subscription_count": Attribute(AttrType.INT, computed=True),
    "subscription_names": Attribute(AttrType.LIST, computed=True, elem=AttrType.STRING),
    "timeouts": timeouts_attribute(),
})

PARAM_NAMES = list(_PARAMS.attributes)
