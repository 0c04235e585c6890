"""Configuration management for the provider."""
from __future__ import annotations

import logging
import os
import threading
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ibmrp.config.loader import ConfigurationLoader
from ibmrp.config.schemas import (
    AppConfig,
    IBMProviderConfig,
    LoggingConfig,
    PollingConfig,
    StateConfig,
    TimeoutsConfig,
)
from ibmrp.domain.core.exceptions import ConfigurationError

T = TypeVar("T")
logger = logging.getLogger(__name__)


class ConfigurationManager:
    """
    Single source of truth for application configuration.

    The configuration is loaded lazily on first access, validated by the
    pydantic schemas and cached. Typed sections are served through get_typed.
    """

    _TYPE_MAPPING = {
        "IBMProviderConfig": "provider",
        "TimeoutsConfig": "timeouts",
        "PollingConfig": "polling",
        "LoggingConfig": "logging",
        "StateConfig": "state",
    }

    def __init__(self, config_file: Optional[str] = None, loader: Optional[ConfigurationLoader] = None):
        """Initialize configuration manager with lazy loading."""
        self._config_file = config_file
        self._lock = threading.RLock()
        self._app_config: Optional[AppConfig] = None
        self._loader = loader
        self._config_cache: Dict[Type, Any] = {}

    @property
    def loader(self) -> ConfigurationLoader:
        """Lazy load configuration loader."""
        if self._loader is None:
            self._loader = ConfigurationLoader()
        return self._loader

    @property
    def app_config(self) -> AppConfig:
        """Lazy load application configuration."""
        if self._app_config is None:
            with self._lock:
                if self._app_config is None:
                    self._app_config = self._load_app_config()
        return self._app_config

    def _load_app_config(self) -> AppConfig:
        """Load application configuration from sources."""
        if self._config_file:
            if not os.path.exists(self._config_file):
                raise ConfigurationError(f"Configuration file not found: {self._config_file}")
            config_data = self.loader.load_from_file(self._config_file)
        else:
            config_data = self.loader.load_configuration()

        config_data = self.loader.apply_environment_overrides(config_data)

        try:
            return AppConfig.from_dict(config_data)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {str(e)}")

    def get_typed(self, config_type: Type[T]) -> T:
        """Get typed configuration with caching."""
        if config_type not in self._config_cache:
            with self._lock:
                if config_type not in self._config_cache:
                    self._config_cache[config_type] = self._create_typed_config(config_type)
        return self._config_cache[config_type]

    def _create_typed_config(self, config_type: Type[T]) -> T:
        config_name = config_type.__name__
        if config_name not in self._TYPE_MAPPING:
            raise ValueError(f"Unknown configuration type: {config_name}")
        return getattr(self.app_config, self._TYPE_MAPPING[config_name])

    def get_provider_config(self) -> IBMProviderConfig:
        return self.get_typed(IBMProviderConfig)

    def get_timeouts(self) -> TimeoutsConfig:
        return self.get_typed(TimeoutsConfig)

    def get_polling_config(self) -> PollingConfig:
        return self.get_typed(PollingConfig)

    def get_logging_config(self) -> LoggingConfig:
        return self.get_typed(LoggingConfig)

    def get_state_config(self) -> StateConfig:
        return self.get_typed(StateConfig)

    def reload(self) -> None:
        """Reload configuration from sources."""
        with self._lock:
            self._app_config = None
            self._config_cache.clear()
