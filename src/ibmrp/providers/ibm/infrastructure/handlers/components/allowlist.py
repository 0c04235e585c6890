"""Mapping between allowlist blocks and ICD allowlist payloads."""
from typing import Any, Dict, List, Optional


def expand_allowlist(entries: Optional[List[Dict[str, Any]]]) -> List[Dict[str, str]]:
    """Convert allowlist blocks to the ip_addresses payload."""
    result = []
    for entry in entries or []:
        item = {"address": entry.get("address", "")}
        if entry.get("description"):
            item["description"] = entry["description"]
        result.append(item)
    return result


def flatten_allowlist(response: Dict[str, Any]) -> List[Dict[str, str]]:
    """Convert a get_allowlist response to allowlist blocks."""
    return [
        {"address": ip.get("address", ""), "description": ip.get("description", "")}
        for ip in response.get("ip_addresses") or []
    ]


def effective_allowlist(allowlist: Optional[List[Dict[str, Any]]],
                        whitelist: Optional[List[Dict[str, Any]]]) -> Optional[List[Dict[str, Any]]]:
    """allowlist, falling back to the deprecated whitelist attribute."""
    if allowlist is not None:
        return allowlist
    return whitelist
