"""Attributes shared by several resource schemas."""
from ibmrp.domain.base.schema import (
    Attribute,
    AttrType,
    validate_regexp_with_length,
)
from ibmrp.providers.ibm.infrastructure.tagging import TAG_PATTERN


def tags_attribute() -> Attribute:
    return Attribute(
        AttrType.SET,
        optional=True,
        computed=True,
        elem=AttrType.STRING,
        validators=[_validate_tags],
        description="User tags attached to the resource",
    )


_tag_validator = validate_regexp_with_length(TAG_PATTERN, 1, 128)


def _validate_tags(value, path):
    errors = []
    for index, tag in enumerate(value):
        if isinstance(tag, str):
            errors.extend(_tag_validator(tag, f"{path}.{index}"))
    return errors


def timeouts_attribute() -> Attribute:
    return Attribute(
        AttrType.MAP,
        optional=True,
        elem=AttrType.FLOAT,
        description="Operation timeouts in seconds keyed by create, update and delete",
    )
