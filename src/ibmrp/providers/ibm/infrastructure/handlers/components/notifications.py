"""Mapping between Event Notifications attribute blocks and API payloads."""
from typing import Any, Dict, Iterable, List, Optional


def _first(blocks: Optional[List[Dict[str, Any]]]) -> Dict[str, Any]:
    if not blocks:
        return {}
    return blocks[0] or {}


def _compact(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


def expand_destination_config(config: Optional[List[Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
    """
    Convert a config block to the destination config payload.

    Args:
        config: [{"params": [{"url": ..., "verb": ...}]}]

    Returns:
        {"params": {...}}, or None when no parameter is set
    """
    params = _compact(_first(_first(config).get("params")))
    if not params:
        return None
    return {"params": params}


def flatten_destination_config(response_config: Optional[Dict[str, Any]],
                               configured: Optional[List[Dict[str, Any]]],
                               known_params: Iterable[str],
                               sensitive_params: Iterable[str]) -> Optional[List[Dict[str, Any]]]:
    """
    Convert the config of a get_destination response to a config block.

    The API never returns sensitive parameters, so their configured values
    are kept.

    Args:
        response_config: "config" section of the response
        configured: config block currently held for the resource
        known_params: Parameter names the config block supports
        sensitive_params: Parameter names the API does not return
    """
    returned = (response_config or {}).get("params") or {}
    current = _first(_first(configured).get("params"))

    params = {k: returned[k] for k in known_params if returned.get(k) is not None}
    for name in sensitive_params:
        if current.get(name) is not None:
            params[name] = current[name]
    if not params:
        return None
    return [{"params": [params]}]


def expand_subscription_attributes(attributes: Optional[List[Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
    """Convert an attributes block to the subscription attributes payload."""
    payload = _compact(_first(attributes))
    return payload or None


def flatten_subscription_attributes(response_attributes: Optional[Dict[str, Any]],
                                    known_attributes: Iterable[str]) -> Optional[List[Dict[str, Any]]]:
    returned = response_attributes or {}
    block = {k: returned[k] for k in known_attributes if returned.get(k) is not None}
    return [block] if block else None
