"""Configuration loading from files and environment variables."""
import copy
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from ibmrp.domain.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# ${VAR} or ${VAR:default}
_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")

DEFAULT_CONFIG_LOCATIONS = [
    "ibmrp.yaml",
    "ibmrp.yml",
    "ibmrp.json",
    "config/ibmrp.yaml",
    "~/.ibmrp/config.yaml",
]


class ConfigurationLoader:
    """
    Loads raw configuration dictionaries.

    Sources, in increasing order of precedence:
    - built-in defaults of the pydantic models
    - a YAML or JSON file
    - environment variables
    """

    # Environment variable -> dotted configuration path
    ENV_OVERRIDES: Dict[str, str] = {
        "IBMCLOUD_API_KEY": "provider.api_key",
        "IC_API_KEY": "provider.api_key",
        "IBMCLOUD_REGION": "provider.region",
        "IC_REGION": "provider.region",
        "IC_ENV_TAGS": "provider.env_tags",
        "IBMCLOUD_RESOURCE_GROUP": "provider.resource_group_id",
        "IBMCLOUD_VISIBILITY": "provider.visibility",
        "IBMRP_ENVIRONMENT": "provider.environment",
        "IBMRP_LOG_LEVEL": "logging.level",
        "IBMRP_LOG_DESTINATION": "logging.destination",
        "IBMRP_LOG_FILE": "logging.file_path",
        "IBMRP_STATE_FILE": "state.path",
        "IBMRP_DEBUG": "debug",
    }

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    def load_configuration(self, search_paths: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Load configuration from the first default location that exists.

        Args:
            search_paths: Candidate paths, defaults to DEFAULT_CONFIG_LOCATIONS

        Returns:
            Raw configuration dictionary, empty when no file is found
        """
        for candidate in search_paths or DEFAULT_CONFIG_LOCATIONS:
            path = Path(candidate).expanduser()
            if path.is_file():
                logger.debug(f"Loading configuration from {path}")
                return self.load_from_file(str(path))
        logger.debug("No configuration file found, using defaults")
        return {}

    def load_from_file(self, file_path: str) -> Dict[str, Any]:
        """
        Load a YAML or JSON configuration file.

        Args:
            file_path: Path of the file

        Returns:
            Raw configuration dictionary with ${VAR:default} references expanded

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        path = Path(file_path)
        if not path.is_file():
            raise ConfigurationError(f"Configuration file not found: {file_path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load configuration from {file_path}: {str(e)}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file {file_path} must contain a mapping at the top level"
            )
        return self.expand_environment_variables(data)

    def expand_environment_variables(self, value: Any) -> Any:
        """Recursively expand ${VAR} and ${VAR:default} references in strings."""
        if isinstance(value, dict):
            return {k: self.expand_environment_variables(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self.expand_environment_variables(v) for v in value]
        if isinstance(value, str):
            return _ENV_PATTERN.sub(self._replace_env_reference, value)
        return value

    def _replace_env_reference(self, match: "re.Match[str]") -> str:
        name, default = match.group(1), match.group(2)
        if name in self._environ:
            return self._environ[name]
        if default is not None:
            return default
        raise ConfigurationError(
            f"Environment variable {name} is not set and has no default",
            missing_fields=[name],
        )

    def apply_environment_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variable overrides.

        Later entries of ENV_OVERRIDES win, so IC_API_KEY takes precedence
        over IBMCLOUD_API_KEY.

        Args:
            config: Raw configuration dictionary

        Returns:
            A new dictionary with overrides applied
        """
        result = copy.deepcopy(config)
        for env_name, dotted_path in self.ENV_OVERRIDES.items():
            value = self._environ.get(env_name)
            if value is None or value == "":
                continue
            logger.debug(f"Applying environment override {env_name} -> {dotted_path}")
            self._set_path(result, dotted_path, value)
        return result

    @staticmethod
    def _set_path(config: Dict[str, Any], dotted_path: str, value: Any) -> None:
        keys = dotted_path.split(".")
        current = config
        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]
        current[keys[-1]] = value
