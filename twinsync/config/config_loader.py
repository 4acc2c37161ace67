"""
Configuration Loader

Loads configuration from an optional YAML file, merges environment
variable overrides and explicit overrides, then validates the result.

Author: TwinSync Project
License: MIT
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dotenv import load_dotenv

from .schema import Config


ENV_PREFIX = "TWINSYNC_"


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge overrides into base; None values are skipped."""
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict):
            if not isinstance(base.get(key), dict):
                base[key] = {}
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class ConfigLoader:
    """
    Configuration loader.

    Precedence, lowest to highest: built-in defaults, YAML file,
    environment variables, explicit overrides (command-line options).
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration loader.

        Args:
            config_path: Path to a YAML configuration file. If None, the
                TWINSYNC_CONFIG environment variable is consulted; with
                neither set, only defaults and overrides apply.
        """
        # Load environment variables from .env if present
        load_dotenv()

        self.config_path = config_path or os.getenv(f"{ENV_PREFIX}CONFIG")
        self._config: Optional[Config] = None

    def load(self, overrides: Optional[Dict[str, Any]] = None) -> Config:
        """
        Load and validate configuration.

        Args:
            overrides: Nested dictionary of values that win over everything else

        Returns:
            Validated Config object

        Raises:
            FileNotFoundError: If an explicitly given config file doesn't exist
            ValueError: If YAML parsing or validation fails
        """
        config_data = self._load_yaml()
        config_data = self._merge_env_vars(config_data)
        config_data = _deep_merge(config_data, overrides or {})

        self._config = Config(**config_data)
        return self._config

    def _load_yaml(self) -> Dict[str, Any]:
        """
        Load YAML configuration file.

        Returns:
            Dictionary with configuration data
        """
        if not self.config_path:
            return {}

        config_file = Path(self.config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML config: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {config_file}")

        return data

    def _merge_env_vars(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge environment variables into configuration.

        Environment variables override config file values.
        Naming convention: TWINSYNC_KEY (e.g., TWINSYNC_LOG_LEVEL, TWINSYNC_DEBOUNCE_MS)

        Args:
            config_data: Configuration dictionary from file

        Returns:
            Merged configuration dictionary
        """
        # App settings
        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            config_data.setdefault("app", {})["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FORMAT"):
            config_data.setdefault("app", {})["log_format"] = os.getenv(f"{ENV_PREFIX}LOG_FORMAT")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            config_data.setdefault("app", {})["log_to_file"] = True
            config_data["app"]["log_file_path"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        # Sync settings
        if os.getenv(f"{ENV_PREFIX}DEBOUNCE_MS"):
            config_data.setdefault("sync", {})["debounce_ms"] = int(os.getenv(f"{ENV_PREFIX}DEBOUNCE_MS"))
        if os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM"):
            config_data.setdefault("sync", {})["hash_algorithm"] = os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM")
        if os.getenv(f"{ENV_PREFIX}CHUNK_SIZE"):
            config_data.setdefault("sync", {})["chunk_size"] = int(os.getenv(f"{ENV_PREFIX}CHUNK_SIZE"))

        return config_data

    @property
    def config(self) -> Optional[Config]:
        """Get the current configuration object."""
        return self._config


def load_config(config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Config:
    """
    Convenience function to load configuration.

    Args:
        config_path: Optional path to config file
        overrides: Optional nested overrides

    Returns:
        Loaded and validated Config object
    """
    loader = ConfigLoader(config_path)
    return loader.load(overrides)
