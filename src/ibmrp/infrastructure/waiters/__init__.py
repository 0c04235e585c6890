"""Polling helpers."""
from .state_change import StateChangeConf

__all__ = ["StateChangeConf"]
