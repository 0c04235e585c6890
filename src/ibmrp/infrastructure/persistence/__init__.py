"""State persistence."""
from .json_state_store import JSONStateStore

__all__ = ["JSONStateStore"]
