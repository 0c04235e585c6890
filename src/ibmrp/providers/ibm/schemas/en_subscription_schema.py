"""Schema of the ibm_en_subscription resource."""
from ibmrp.domain.base.schema import Attribute, AttrType, Schema, validate_string_length

from .common import timeouts_attribute

RESOURCE_TYPE = "ibm_en_subscription"

_ATTRIBUTES = Schema("attributes", {
    "signing_enabled": Attribute(AttrType.BOOL, optional=True, description="Sign webhook payloads"),
    "attachment_color": Attribute(AttrType.STRING, optional=True, description="Slack attachment color"),
    "assigned_to": Attribute(AttrType.STRING, optional=True, description="ServiceNow assignee"),
    "assignment_group": Attribute(AttrType.STRING, optional=True, description="ServiceNow assignment group"),
    "add_notification_payload": Attribute(AttrType.BOOL, optional=True),
    "to": Attribute(AttrType.LIST, optional=True, elem=AttrType.STRING),
    "reply_to_mail": Attribute(AttrType.STRING, optional=True),
    "reply_to_name": Attribute(AttrType.STRING, optional=True),
    "from_name": Attribute(AttrType.STRING, optional=True),
})

EN_SUBSCRIPTION_SCHEMA = Schema(RESOURCE_TYPE, {
    "instance_guid": Attribute(AttrType.STRING, required=True, force_new=True,
                               description="GUID of the Event Notifications instance"),
    "name": Attribute(AttrType.STRING, required=True, validators=[validate_string_length(1, 255)]),
    "description": Attribute(AttrType.STRING, optional=True),
    "destination_id": Attribute(AttrType.STRING, required=True, force_new=True),
    "topic_id": Attribute(AttrType.STRING, required=True, force_new=True),
    "attributes": Attribute(AttrType.LIST, optional=True, max_items=1, elem=_ATTRIBUTES),
    "subscription_id": Attribute(AttrType.STRING, computed=True),
    "destination_type": Attribute(AttrType.STRING, computed=True),
    "destination_name": Attribute(AttrType.STRING, computed=True),
    "topic_name": Attribute(AttrType.STRING, computed=True),
    "updated_at": Attribute(AttrType.STRING, computed=True),
    "timeouts": timeouts_attribute(),
})

ATTRIBUTE_NAMES = list(_ATTRIBUTES.attributes)
