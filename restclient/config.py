"""
Client settings from an optional config.yaml, .env and RESTCLIENT_* variables.
"""

import os
import yaml
from dotenv import load_dotenv
from pathlib import Path
from typing import Dict, Any, Optional


DEFAULT_CONFIG_PATH = Path("config.yaml")


class Config:
    """Configuration loader that reads from config.yaml and environment variables."""

    # Environment variable -> nested config key
    ENV_MAPPINGS = {
        'RESTCLIENT_BASE_URL': ('client', 'base_url'),
        'RESTCLIENT_TIMEOUT': ('client', 'timeout'),
        'RESTCLIENT_SIMULATED_DELAY': ('client', 'simulated_delay'),
        'RESTCLIENT_USER_AGENT': ('client', 'user_agent'),
        'LOG_LEVEL': ('logging', 'level'),
    }

    def __init__(self, config_path: Optional[str] = None, load_env_file: bool = True):
        """Initialize configuration loader.

        Args:
            config_path: Path to a YAML file. If None, config.yaml in the
                        working directory is used when it exists.
            load_env_file: Load a .env file into the environment first.
        """
        if load_env_file:
            load_dotenv()

        self._explicit = config_path is not None
        self.config_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Read the YAML file, if any, then layer environment overrides on top."""
        if not self.config_path.exists():
            if self._explicit:
                raise FileNotFoundError(f"no config file at {self.config_path}")
            config = {}
        else:
            try:
                config = yaml.safe_load(self.config_path.read_text()) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"{self.config_path} is not valid YAML: {e}") from e

        if not isinstance(config, dict):
            raise ValueError(f"Configuration file must hold a mapping: {self.config_path}")

        return self._apply_env_overrides(config)

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Write each set ENV_MAPPINGS variable into its nested key."""
        for env_var, config_path in self.ENV_MAPPINGS.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                current = config
                for key in config_path[:-1]:
                    if not isinstance(current.get(key), dict):
                        current[key] = {}
                    current = current[key]

                current[config_path[-1]] = self._convert_env_value(env_value)

        return config

    def _convert_env_value(self, value: str) -> Any:
        """Parse an env string as bool, int or float, else keep it as text."""
        lowered = value.lower()
        if lowered in ('true', 'false'):
            return lowered == 'true'

        for cast in (int, float):
            try:
                return cast(value)
            except ValueError:
                continue

        return value

    def get(self, *keys, default=None):
        """Walk nested sections, e.g. get('client', 'timeout').

        Returns `default` as soon as a key is missing or a section is not a mapping.
        """
        section: Any = self._config
        for key in keys:
            if not isinstance(section, dict) or key not in section:
                return default
            section = section[key]
        return section

    @property
    def client(self) -> Dict[str, Any]:
        """Get REST client configuration."""
        return self.get('client', default={})

    @property
    def logging(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self.get('logging', default={})
