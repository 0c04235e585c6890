"""Resource data and schema primitives."""
from .resource_data import ResourceData
from .schema import Attribute, AttrType, Schema

__all__ = ["ResourceData", "Attribute", "AttrType", "Schema"]
