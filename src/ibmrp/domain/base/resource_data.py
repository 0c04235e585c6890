# src/ibmrp/domain/base/resource_data.py
from __future__ import annotations

import copy
import json
from typing import Any, Dict, Optional, Tuple

from ibmrp.domain.base.schema import AttrType, Schema

DEFAULT_TIMEOUTS = {
    "create": 60 * 60.0,
    "update": 60 * 60.0,
    "delete": 10 * 60.0,
}


def is_zero(value: Any) -> bool:
    """Whether a value counts as unset (None, empty or zero)."""
    return value is None or value is False or value == 0 or value == "" or value == [] or value == {}


class ResourceData:
    """
    Attribute view of one resource during a lifecycle operation.

    Holds the prior state, the desired configuration and the working values
    the handler reads and writes. Working values start from the configuration
    with defaults applied; computed attributes missing from the configuration
    keep their prior value. When no configuration is given (read, import) the
    working values are the prior state.
    """

    def __init__(
        self,
        resource_type: str,
        schema: Optional[Schema] = None,
        config: Optional[Dict[str, Any]] = None,
        state: Optional[Dict[str, Any]] = None,
        resource_id: Optional[str] = None,
        timeouts: Optional[Dict[str, float]] = None,
    ):
        self.resource_type = resource_type
        self.schema = schema
        self._old: Dict[str, Any] = copy.deepcopy(state or {})
        self._config: Optional[Dict[str, Any]] = copy.deepcopy(config) if config is not None else None
        self._values: Dict[str, Any] = self._build_values()
        self._id: str = resource_id or ""
        self._timeouts = dict(DEFAULT_TIMEOUTS)
        self._timeouts.update(timeouts or {})
        if config is not None and isinstance(config.get("timeouts"), dict):
            self._timeouts.update(
                {k: float(v) for k, v in config["timeouts"].items() if v is not None}
            )

    def _build_values(self) -> Dict[str, Any]:
        if self._config is None:
            return copy.deepcopy(self._old)
        config = {k: v for k, v in self._config.items() if k != "timeouts"}
        if self.schema is None:
            values = copy.deepcopy(self._old)
            values.update(config)
            return values
        values = self.schema.apply_defaults(config)
        for key in self.schema.computed_attributes:
            if values.get(key) is None and key in self._old:
                values[key] = copy.deepcopy(self._old[key])
        return values

    @property
    def config(self) -> Dict[str, Any]:
        """The configuration supplied by the user, empty for read and import."""
        return copy.deepcopy(self._config) if self._config is not None else {}

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, resource_id: str) -> None:
        """Set the resource ID. An empty ID marks the resource as gone."""
        self._id = resource_id or ""

    @property
    def is_removed(self) -> bool:
        return self._id == ""

    @property
    def is_new_resource(self) -> bool:
        return not self._old

    def get(self, key: str, default: Any = None) -> Any:
        value = self._values.get(key)
        return default if value is None else value

    def get_ok(self, key: str) -> Tuple[Any, bool]:
        """Return the value and whether it is set to a non-zero value."""
        value = self._values.get(key)
        return value, not is_zero(value)

    def has_config(self, key: str) -> bool:
        """Whether the user configured the attribute."""
        return self._config is not None and self._config.get(key) is not None

    def has_change(self, key: str) -> bool:
        """Whether the working value differs from the prior state."""
        old, new = self.get_change(key)
        if is_zero(old) and is_zero(new):
            return False
        return self._comparable(key, old) != self._comparable(key, new)

    def has_changes(self, *keys: str) -> bool:
        return any(self.has_change(k) for k in keys)

    def get_change(self, key: str) -> Tuple[Any, Any]:
        """Return the (old, new) pair for an attribute."""
        return self._old.get(key), self._values.get(key)

    def _comparable(self, key: str, value: Any) -> Any:
        """
        Value in the form used to detect changes.

        Set attributes compare as unordered collections. Block elements get
        their defaults filled in and unset fields dropped, so an element read
        back from the API matches the configured one.
        """
        attr = self.schema.attributes.get(key) if self.schema is not None else None
        if attr is None or attr.type != AttrType.SET or not isinstance(value, (list, tuple, set, frozenset)):
            return value
        items = []
        for item in value:
            if isinstance(attr.elem, Schema) and isinstance(item, dict):
                item = {k: v for k, v in attr.elem.apply_defaults(item).items() if not is_zero(v)}
            items.append(json.dumps(item, sort_keys=True, default=str))
        return sorted(items)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def timeout(self, kind: str) -> float:
        """Timeout in seconds for create, update or delete."""
        return self._timeouts[kind]

    def to_state(self) -> Dict[str, Any]:
        """Attribute map to persist after the operation."""
        state = copy.deepcopy(self._values)
        state["id"] = self._id
        return state

    def __repr__(self) -> str:
        return f"ResourceData(type={self.resource_type!r}, id={self._id!r})"
