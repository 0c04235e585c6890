"""Flattening of ICD scaling groups."""
from typing import Any, Dict, List, Optional


def _flatten_resource(resource: Dict[str, Any], suffix: str) -> List[Dict[str, Any]]:
    return [{
        "units": resource.get("units"),
        f"allocation_{suffix}": resource.get(f"allocation_{suffix}"),
        f"minimum_{suffix}": resource.get(f"minimum_{suffix}"),
        f"step_size_{suffix}": resource.get(f"step_size_{suffix}"),
        "is_adjustable": resource.get("is_adjustable"),
        "can_scale_down": resource.get("can_scale_down"),
    }]


def flatten_groups(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Convert a list_deployment_scaling_groups response to groups blocks."""
    result = []
    for group in response.get("groups") or []:
        result.append({
            "group_id": group.get("id"),
            "count": group.get("count"),
            "memory": _flatten_resource(group.get("memory") or {}, "mb"),
            "cpu": _flatten_resource(group.get("cpu") or {}, "count"),
            "disk": _flatten_resource(group.get("disk") or {}, "mb"),
        })
    return result


def member_allocations(response: Dict[str, Any]) -> Optional[Dict[str, int]]:
    """
    Total and per-node allocations of the first scaling group.

    Returns:
        Attribute map with node_count, members_* and node_* values, or None
        when the response has no group
    """
    groups = response.get("groups") or []
    if not groups:
        return None
    group = groups[0]
    members = int((group.get("members") or {}).get("allocation_count") or 0)
    memory = int((group.get("memory") or {}).get("allocation_mb") or 0)
    disk = int((group.get("disk") or {}).get("allocation_mb") or 0)
    cpu = int((group.get("cpu") or {}).get("allocation_count") or 0)
    divisor = members or 1
    return {
        "node_count": members,
        "members_memory_allocation_mb": memory,
        "members_disk_allocation_mb": disk,
        "members_cpu_allocation_count": cpu,
        "node_memory_allocation_mb": memory // divisor,
        "node_disk_allocation_mb": disk // divisor,
        "node_cpu_allocation_count": cpu // divisor,
    }
