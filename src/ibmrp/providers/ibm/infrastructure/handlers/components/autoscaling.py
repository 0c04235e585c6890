"""Mapping between auto_scaling blocks and ICD autoscaling payloads."""
from typing import Any, Dict, List, Optional

# attribute -> (payload section, nested key, payload field)
_SCALER_FIELDS = {
    "capacity_enabled": ("scalers", "capacity", "enabled"),
    "free_space_less_than_percent": ("scalers", "capacity", "free_space_less_than_percent"),
    "io_enabled": ("scalers", "io_utilization", "enabled"),
    "io_over_period": ("scalers", "io_utilization", "over_period"),
    "io_above_percent": ("scalers", "io_utilization", "above_percent"),
}

_RATE_FIELDS = {
    "rate_increase_percent": "increase_percent",
    "rate_period_seconds": "period_seconds",
    "rate_limit_mb_per_member": "limit_mb_per_member",
    "rate_limit_count_per_member": "limit_count_per_member",
    "rate_units": "units",
}

# Attributes each autoscaling group supports.
GROUP_ATTRIBUTES = {
    "disk": [
        "capacity_enabled", "free_space_less_than_percent",
        "io_enabled", "io_over_period", "io_above_percent",
        "rate_increase_percent", "rate_period_seconds", "rate_limit_mb_per_member", "rate_units",
    ],
    "memory": [
        "io_enabled", "io_over_period", "io_above_percent",
        "rate_increase_percent", "rate_period_seconds", "rate_limit_mb_per_member", "rate_units",
    ],
    "cpu": [
        "rate_increase_percent", "rate_period_seconds", "rate_limit_count_per_member", "rate_units",
    ],
}

_FLOAT_FIELDS = {"rate_increase_percent", "rate_limit_mb_per_member"}


def get_group_record(auto_scaling: Optional[List[Dict[str, Any]]], group: str) -> Optional[Dict[str, Any]]:
    """Return auto_scaling.0.<group>.0, or None when not configured."""
    if not auto_scaling:
        return None
    records = (auto_scaling[0] or {}).get(group) or []
    if not records or not records[0]:
        return None
    return records[0]


def expand_autoscaling_group(group: str, record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build the autoscaling payload of one group from its attribute block.

    Args:
        group: disk, memory or cpu
        record: Attribute block, e.g. {"rate_increase_percent": 10, ...}

    Returns:
        Payload such as {"scalers": {...}, "rate": {...}}
    """
    payload: Dict[str, Any] = {}
    for attribute in GROUP_ATTRIBUTES[group]:
        value = record.get(attribute)
        if value is None:
            continue
        if attribute in _FLOAT_FIELDS:
            value = float(value)
        if attribute in _SCALER_FIELDS:
            section, scaler, field = _SCALER_FIELDS[attribute]
            payload.setdefault(section, {}).setdefault(scaler, {})[field] = value
        else:
            payload.setdefault("rate", {})[_RATE_FIELDS[attribute]] = value
    return payload


def expand_autoscaling(auto_scaling: Optional[List[Dict[str, Any]]]) -> Dict[str, Any]:
    """Payload for every configured group, keyed by group name."""
    result = {}
    for group in ("disk", "memory", "cpu"):
        record = get_group_record(auto_scaling, group)
        if record is not None:
            group_payload = expand_autoscaling_group(group, record)
            if group_payload:
                result[group] = group_payload
    return result


def flatten_autoscaling(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Flatten a get_autoscaling_conditions response into an auto_scaling block.

    Args:
        response: Response body with an "autoscaling" key
    """
    autoscaling = response.get("autoscaling") or {}
    block: Dict[str, Any] = {}
    for group, attributes in GROUP_ATTRIBUTES.items():
        section = autoscaling.get(group) or {}
        scalers = section.get("scalers") or {}
        rate = section.get("rate") or {}
        flat: Dict[str, Any] = {}
        for attribute in attributes:
            if attribute in _SCALER_FIELDS:
                _, scaler, field = _SCALER_FIELDS[attribute]
                if scaler in scalers and scalers[scaler] is not None:
                    flat[attribute] = scalers[scaler].get(field)
            elif rate:
                flat[attribute] = rate.get(_RATE_FIELDS[attribute])
        block[group] = [flat]
    return [block]
