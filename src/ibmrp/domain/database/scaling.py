# src/ibmrp/domain/database/scaling.py
"""Scaling group limits and the checks applied to proposed scaling values."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ibmrp.domain.core.exceptions import ScalingLimitError


@dataclass(frozen=True)
class GroupLimit:
    """Limit envelope of one scaling resource (memory, disk, cpu or members)."""
    units: str
    allocation: int
    minimum: int
    maximum: int
    step_size: int
    is_adjustable: bool = True
    is_optional: bool = False
    can_scale_down: bool = True

    @classmethod
    def from_api(cls, data: Dict[str, Any], unit_suffix: str) -> "GroupLimit":
        """
        Build a limit from an ICD group resource.

        Args:
            data: Resource section of a scaling group, e.g. group["memory"]
            unit_suffix: "mb" for memory and disk, "count" for cpu and members
        """
        return cls(
            units=data.get("units", ""),
            allocation=int(data.get(f"allocation_{unit_suffix}", 0)),
            minimum=int(data.get(f"minimum_{unit_suffix}", 0)),
            maximum=int(data.get(f"maximum_{unit_suffix}", 0)),
            step_size=int(data.get(f"step_size_{unit_suffix}", 0)),
            is_adjustable=bool(data.get("is_adjustable", True)),
            is_optional=bool(data.get("is_optional", False)),
            can_scale_down=bool(data.get("can_scale_down", True)),
        )


@dataclass(frozen=True)
class GroupLimits:
    """Limits of all scaling resources of a group."""
    memory: GroupLimit
    disk: GroupLimit
    cpu: GroupLimit
    members: GroupLimit

    @classmethod
    def from_api(cls, group: Dict[str, Any]) -> "GroupLimits":
        return cls(
            memory=GroupLimit.from_api(group.get("memory", {}), "mb"),
            disk=GroupLimit.from_api(group.get("disk", {}), "mb"),
            cpu=GroupLimit.from_api(group.get("cpu", {}), "count"),
            members=GroupLimit.from_api(group.get("members", {}), "count"),
        )


def check_group_value(name: str, limits: GroupLimit, divider: int,
                      old: Optional[int], new: Optional[int]) -> None:
    """
    Check a proposed scaling value against its limits.

    The limits are expressed for the whole group; divider converts them to
    per-node values (divider 1 keeps them per group).

    Args:
        name: Attribute name used in error messages
        limits: Limit envelope
        divider: Divisor applied to minimum, maximum and step size
        old: Current value, None on create
        new: Proposed value

    Raises:
        ScalingLimitError: If the value is out of range, not a step multiple,
            changes a non-adjustable value or scales down where not allowed
    """
    if new is None or old == new:
        return
    if divider <= 0:
        raise ScalingLimitError(name, f"{name} has an invalid divider {divider}")

    minimum = limits.minimum // divider
    maximum = limits.maximum // divider
    step = limits.step_size // divider

    # A step that divides to zero cannot constrain the value.
    off_step = step > 0 and new % step != 0
    if new < minimum or new > maximum or off_step:
        raise ScalingLimitError(
            name, f"{name} must be >= {minimum} and <= {maximum} in increments of {step}"
        )
    if old is not None and not limits.is_adjustable:
        raise ScalingLimitError(name, f"{name} can not change value after create")
    if old is not None and new < old and not limits.can_scale_down:
        raise ScalingLimitError(name, f"{name} can not scale down from {old} to {new}")
