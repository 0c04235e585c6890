"""Main application configuration schema."""
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from .logging_schema import LoggingConfig
from .polling_schema import PollingConfig, TimeoutsConfig
from .provider_schema import IBMProviderConfig


class StateConfig(BaseModel):
    """Local state store configuration."""

    path: str = Field("ibmrp-state.json", description="Path of the JSON state file")
    backup: bool = Field(True, description="Keep a backup copy before each write")


class AppConfig(BaseModel):
    """Application configuration."""

    version: str = Field("1.0.0", description="Configuration version")
    provider: IBMProviderConfig = Field(default_factory=lambda: IBMProviderConfig())
    timeouts: TimeoutsConfig = Field(default_factory=lambda: TimeoutsConfig())
    polling: PollingConfig = Field(default_factory=lambda: PollingConfig())
    logging: LoggingConfig = Field(default_factory=lambda: LoggingConfig())
    state: StateConfig = Field(default_factory=lambda: StateConfig())
    debug: bool = Field(False, description="Debug mode")

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        if not v.split(".")[0].isdigit():
            raise ValueError("Configuration version must start with a major number")
        return v

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Create configuration from a raw dictionary."""
        return cls.model_validate(data)


def validate_config(config: Dict[str, Any]) -> AppConfig:
    """
    Validate configuration.

    Args:
        config: Configuration to validate

    Returns:
        Validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    return AppConfig(**config)
