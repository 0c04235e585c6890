"""Configuration package."""
from .loader import ConfigurationLoader
from .manager import ConfigurationManager
from .schemas import (
    AppConfig,
    EndpointsConfig,
    IBMProviderConfig,
    LoggingConfig,
    PollingConfig,
    StateConfig,
    TimeoutsConfig,
)

__all__ = [
    "ConfigurationLoader",
    "ConfigurationManager",
    "AppConfig",
    "EndpointsConfig",
    "IBMProviderConfig",
    "LoggingConfig",
    "PollingConfig",
    "StateConfig",
    "TimeoutsConfig",
]
