"""
Configuration management for diarysync.

This module handles loading, accessing and persisting configuration values
from a YAML file. The ConfigManager is created once at startup and passed
explicitly to the operations that need it; every successful mutation is
written back to disk.
"""

import copy
import yaml
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List
import logging

from pydantic import BaseModel, Field, ValidationError


class NotebookSort(str, Enum):
    DOC_TREE = "doc-tree"
    CUSTOM_SORT = "custom-sort"


class ListItemPolicy(str, Enum):
    DISABLED = "disabled"
    DIRECT = "direct"
    WRAP_IN_LIST = "wrap-in-list"


class DiarySettings(BaseModel):
    """The user-facing settings recognized by the core."""

    notebook_sort: NotebookSort = Field(NotebookSort.CUSTOM_SORT)
    move_list_item_policy: ListItemPolicy = Field(ListItemPolicy.DIRECT)
    open_on_start: bool = Field(True)
    default_notebook: str = Field("")


DEFAULT_CONFIG: Dict[str, Any] = {
    "store": {
        "host": "http://127.0.0.1:6806",
        "token": "",
        "timeout": 10.0
    },
    "notebooks": {
        "sort": "custom-sort",
        "default": "",
        "hidden": [],
        "open_on_start": True
    },
    "move": {
        "list_item_policy": "direct"
    },
    "reservation": {
        "attribute": "custom-reservation",
        "marker": "Reservation",
        "variant": "embed",
        "position": "top"
    },
    "startup": {
        "max_retries": 5,
        "retry_delay": 1.0
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "file": "diarysync.log"
    }
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """
    Manages configuration loading, access and persistence for diarysync.
    """

    def __init__(self, config_path: str = "diarysync.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from the YAML file, layered over the defaults."""
        if not self.config_path.exists():
            logging.info(f"Configuration file not found, using defaults: {self.config_path}")
            self._config = self._get_default_config()
            return

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ValueError("top level of the configuration must be a mapping")
            self._config = _merge(self._get_default_config(), loaded)
            logging.info(f"Configuration loaded from {self.config_path}")

        except (OSError, yaml.YAMLError, ValueError) as e:
            logging.error(f"Failed to load configuration: {e}")
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return copy.deepcopy(DEFAULT_CONFIG)

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "store.host")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("store.host")            # Returns "http://127.0.0.1:6806"
            config.get("move.list_item_policy") # Returns "direct"
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> bool:
        """
        Update a known setting and persist the configuration.

        Args:
            key_path: Dot-separated path of an existing setting
            value: New value

        Returns:
            True if the setting was updated, False if the key is unknown or
            the value is invalid
        """
        logging.info(f"Setting update: {key_path} = {value}")
        keys = key_path.split('.')
        section = self._config
        for key in keys[:-1]:
            section = section.get(key) if isinstance(section, dict) else None
        if not isinstance(section, dict) or keys[-1] not in section:
            logging.error(f'"{key_path}" is not a setting')
            return False

        previous = section[keys[-1]]
        section[keys[-1]] = value
        try:
            self.settings
        except ValidationError as e:
            section[keys[-1]] = previous
            logging.error(f'Invalid value for "{key_path}": {e}')
            return False

        self.save()
        return True

    def save(self) -> None:
        """Write the current configuration to the YAML file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self._config, f, sort_keys=False, allow_unicode=True)
        logging.info(f"Configuration written to {self.config_path}")

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def store_host(self) -> str:
        return self.get("store.host", "http://127.0.0.1:6806")

    @property
    def store_token(self) -> str:
        return self.get("store.token", "")

    @property
    def store_timeout(self) -> float:
        return self.get("store.timeout", 10.0)

    @property
    def hidden_notebooks(self) -> List[str]:
        return self.get("notebooks.hidden", []) or []

    @property
    def reservation_attribute(self) -> str:
        return self.get("reservation.attribute", "custom-reservation")

    @property
    def reservation_marker(self) -> str:
        return self.get("reservation.marker", "Reservation")

    @property
    def startup_max_retries(self) -> int:
        return self.get("startup.max_retries", 5)

    @property
    def startup_retry_delay(self) -> float:
        return self.get("startup.retry_delay", 1.0)

    @property
    def log_filename(self) -> str:
        return self.get("logging.file", "diarysync.log")

    @property
    def settings(self) -> DiarySettings:
        """Typed view of the user-facing settings."""
        return DiarySettings(
            notebook_sort=self.get("notebooks.sort", NotebookSort.CUSTOM_SORT.value),
            move_list_item_policy=self.get("move.list_item_policy", ListItemPolicy.DIRECT.value),
            open_on_start=self.get("notebooks.open_on_start", True),
            default_notebook=self.get("notebooks.default", "") or "",
        )
