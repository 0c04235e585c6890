# src/ibmrp/domain/base/schema.py
from __future__ import annotations

import ipaddress
import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from ibmrp.domain.core.exceptions import SchemaValidationError

# A validator receives the value and the attribute path and returns error messages.
Validator = Callable[[Any, str], List[str]]


class AttrType(str, Enum):
    """Attribute value types."""
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    LIST = "list"
    SET = "set"
    MAP = "map"


_PY_TYPES = {
    AttrType.STRING: (str,),
    AttrType.INT: (int,),
    AttrType.FLOAT: (int, float),
    AttrType.BOOL: (bool,),
    AttrType.LIST: (list, tuple),
    AttrType.SET: (list, tuple, set, frozenset),
    AttrType.MAP: (dict,),
}


@dataclass
class Attribute:
    """Declaration of a single resource attribute."""
    type: AttrType
    required: bool = False
    optional: bool = False
    computed: bool = False
    default: Any = None
    force_new: bool = False
    sensitive: bool = False
    conflicts_with: List[str] = field(default_factory=list)
    max_items: Optional[int] = None
    elem: Union["Schema", AttrType, None] = None
    validators: List[Validator] = field(default_factory=list)
    deprecated: Optional[str] = None
    description: str = ""

    @property
    def settable(self) -> bool:
        return self.required or self.optional


class Schema:
    """
    Set of attribute declarations for a resource or a nested block.

    validate() collects every error before returning so a caller can report
    all problems of a configuration at once.
    """

    def __init__(self, name: str, attributes: Dict[str, Attribute]):
        self.name = name
        self.attributes = attributes

    def __contains__(self, key: str) -> bool:
        return key in self.attributes

    def __getitem__(self, key: str) -> Attribute:
        return self.attributes[key]

    @property
    def computed_attributes(self) -> List[str]:
        return [k for k, a in self.attributes.items() if a.computed]

    @property
    def sensitive_attributes(self) -> List[str]:
        return [k for k, a in self.attributes.items() if a.sensitive]

    def apply_defaults(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of config with defaults filled in for unset attributes."""
        result = dict(config)
        for key, attr in self.attributes.items():
            if result.get(key) is None and attr.default is not None:
                result[key] = attr.default
        return result

    def validate(self, config: Dict[str, Any], path: str = "") -> Dict[str, str]:
        """
        Validate a configuration map.

        Args:
            config: Attribute values supplied by the user
            path: Prefix for nested attribute paths

        Returns:
            Map of attribute path to error message, empty when valid
        """
        errors: Dict[str, str] = {}

        for key in config:
            if key not in self.attributes:
                errors[f"{path}{key}"] = "unsupported attribute"

        for key, attr in self.attributes.items():
            attr_path = f"{path}{key}"
            value = config.get(key)

            if value is None:
                if attr.required:
                    errors[attr_path] = "required attribute is missing"
                continue

            if attr.computed and not attr.settable:
                errors[attr_path] = "attribute is computed and cannot be set"
                continue

            type_error = _check_type(attr.type, value)
            if type_error:
                errors[attr_path] = type_error
                continue

            if attr.max_items is not None and len(value) > attr.max_items:
                errors[attr_path] = f"attribute supports {attr.max_items} item(s) maximum"
                continue

            messages: List[str] = [
                f"conflicts with {other}"
                for other in attr.conflicts_with
                if config.get(other) is not None
            ]
            for validator in attr.validators:
                messages.extend(validator(value, attr_path))
            if messages:
                errors[attr_path] = "; ".join(messages)

            if attr.type in (AttrType.LIST, AttrType.SET, AttrType.MAP) and attr.elem is not None:
                errors.update(self._validate_elements(attr, value, attr_path))

        return errors

    @staticmethod
    def _validate_elements(attr: Attribute, value: Any, attr_path: str) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        items = value.items() if isinstance(value, dict) else enumerate(value)
        for index, item in items:
            item_path = f"{attr_path}.{index}"
            if isinstance(attr.elem, Schema):
                if not isinstance(item, dict):
                    errors[item_path] = "expected a block"
                    continue
                errors.update(attr.elem.validate(item, path=f"{item_path}."))
            else:
                type_error = _check_type(attr.elem, item)
                if type_error:
                    errors[item_path] = type_error
        return errors

    def validate_or_raise(self, config: Dict[str, Any]) -> None:
        """
        Validate a configuration map.

        Raises:
            SchemaValidationError: If any attribute is invalid
        """
        errors = self.validate(config)
        if errors:
            raise SchemaValidationError(self.name, errors)

    def deprecation_warnings(self, config: Dict[str, Any]) -> List[str]:
        """Messages for deprecated attributes present in config."""
        return [
            f"{key}: {attr.deprecated}"
            for key, attr in self.attributes.items()
            if attr.deprecated and config.get(key) is not None
        ]

    def force_new_changes(self, old: Dict[str, Any], new: Dict[str, Any]) -> List[str]:
        """Attributes whose change requires replacing the resource."""
        return sorted(
            key for key, attr in self.attributes.items()
            if attr.force_new and key in new and old.get(key) != new.get(key)
        )


def _check_type(attr_type: AttrType, value: Any) -> Optional[str]:
    expected = _PY_TYPES[attr_type]
    # bool is a subclass of int
    if attr_type in (AttrType.INT, AttrType.FLOAT) and isinstance(value, bool):
        return f"expected {attr_type.value}, got bool"
    if not isinstance(value, expected):
        return f"expected {attr_type.value}, got {type(value).__name__}"
    return None


def validate_allowed_values(allowed: Iterable[str]) -> Validator:
    """Value must be one of allowed."""
    allowed_values = list(allowed)

    def _validate(value: Any, path: str) -> List[str]:
        if value not in allowed_values:
            return [f"{path} must contain a value from {allowed_values}, got {value!r}"]
        return []
    return _validate


def validate_string_length(min_length: int, max_length: int) -> Validator:
    """String length must lie within [min_length, max_length]."""
    def _validate(value: Any, path: str) -> List[str]:
        if not min_length <= len(value) <= max_length:
            return [f"{path} must be between {min_length} and {max_length} characters, got {len(value)}"]
        return []
    return _validate


def validate_regexp_with_length(pattern: str, min_length: int, max_length: int) -> Validator:
    """String must match pattern and have a length within [min_length, max_length]."""
    compiled = re.compile(pattern)

    def _validate(value: Any, path: str) -> List[str]:
        errors = []
        if not compiled.match(value):
            errors.append(f"{path} {value!r} must match regular expression {pattern}")
        if not min_length <= len(value) <= max_length:
            errors.append(f"{path} must be between {min_length} and {max_length} characters")
        return errors
    return _validate


def validate_cidr(value: Any, path: str) -> List[str]:
    """Value must be an IPv4 or IPv6 address or CIDR block."""
    try:
        ipaddress.ip_network(value, strict=False)
    except ValueError:
        return [f"{path} {value!r} is not a valid IP address or CIDR block"]
    return []


def validate_json_object(value: Any, path: str) -> List[str]:
    """Value must be a JSON document encoding an object."""
    try:
        decoded = json.loads(value)
    except ValueError as e:
        return [f"{path} is not valid JSON: {e}"]
    if not isinstance(decoded, dict):
        return [f"{path} must be a JSON object"]
    return []


def validate_int_range(minimum: int, maximum: int) -> Validator:
    """Integer must lie within [minimum, maximum]."""
    def _validate(value: Any, path: str) -> List[str]:
        if not minimum <= value <= maximum:
            return [f"{path} must be between {minimum} and {maximum}, got {value}"]
        return []
    return _validate
