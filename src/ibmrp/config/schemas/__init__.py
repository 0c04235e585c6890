"""Configuration schemas."""
from .app_schema import AppConfig, StateConfig, validate_config
from .logging_schema import LoggingConfig
from .polling_schema import PollingConfig, TimeoutsConfig
from .provider_schema import EndpointsConfig, IBMProviderConfig

__all__ = [
    "AppConfig",
    "StateConfig",
    "validate_config",
    "LoggingConfig",
    "PollingConfig",
    "TimeoutsConfig",
    "EndpointsConfig",
    "IBMProviderConfig",
]
