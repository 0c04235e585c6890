"""
CLI-specific formatting functions for human-readable output.

This module handles presentation formatting for the CLI, including:
- JSON and YAML rendering of resource state
- Rich tables of resource attributes
- Masking of sensitive attribute values
"""
import json
from typing import Any, Iterable, Set

import yaml
from rich.console import Console
from rich.table import Table

MASK = "********"


def collect_sensitive_keys(schema: Any) -> Set[str]:
    """Names of sensitive attributes declared anywhere in a schema, nested blocks included."""
    keys: Set[str] = set()
    for name, attribute in schema.attributes.items():
        if attribute.sensitive:
            keys.add(name)
        if hasattr(attribute.elem, "attributes"):
            keys |= collect_sensitive_keys(attribute.elem)
    return keys


def mask_sensitive(data: Any, keys: Iterable[str]) -> Any:
    """Return a copy of data with the values of sensitive keys replaced by a mask."""
    keys = set(keys)
    if isinstance(data, dict):
        return {
            k: (MASK if k in keys and v not in (None, "") else mask_sensitive(v, keys))
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive(item, keys) for item in data]
    return data


def format_output(data: Any, format_type: str) -> str:
    """Format data according to the specified format type."""
    if format_type == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=True)
    elif format_type == "table":
        return format_table_output(data)
    else:
        # Default to JSON
        return json.dumps(data, indent=2, sort_keys=True, default=str)


def format_table_output(data: Any) -> str:
    """Format a resource state as an attribute/value table."""
    if not isinstance(data, dict):
        return json.dumps(data, indent=2, default=str)
    if not data:
        return "No attributes."

    table = Table(show_header=True, header_style="bold magenta", show_lines=True)
    table.add_column("Attribute", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    for key in sorted(data):
        value = data[key]
        if isinstance(value, (dict, list)):
            rendered = json.dumps(value, indent=1, sort_keys=True, default=str)
        elif value is None:
            rendered = ""
        else:
            rendered = str(value)
        table.add_row(key, rendered)

    # Capture Rich output as string
    console = Console(width=120, legacy_windows=False, force_terminal=False)
    with console.capture() as capture:
        console.print(table)
    return capture.get()
