"""Read taskwatch configuration from a YAML file."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .config_schema import AppConfig

DEFAULT_CONFIG_PATH = "config.yaml"
CONFIG_PATH_ENV = "TASKWATCH_CONFIG"


def resolve_config_path(path: Optional[str] = None) -> Path:
    """Explicit path, else $TASKWATCH_CONFIG, else ./config.yaml."""
    return Path(path or os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)


class ConfigLoader:
    """Reads one configuration file into a validated AppConfig.

    Errors that are about the file rather than a single field (missing,
    empty, not a mapping, no usable root page) name the file path.
    Field-level problems surface as pydantic's ValidationError.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = resolve_config_path(path)

    def read(self) -> Dict[str, Any]:
        """
        Parse the YAML file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is empty or not a mapping
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.path}")

        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not data:
            raise ValueError(f"Configuration file is empty: {self.path}")
        if not isinstance(data, dict):
            raise ValueError(
                f"Configuration file {self.path} must contain a mapping, "
                f"got {type(data).__name__}"
            )
        return data

    def load(self) -> AppConfig:
        """
        Parse and validate the configuration.

        Returns:
            AppConfig whose root page ID is known to resolve

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file or its cross-field rules are invalid
        """
        config = AppConfig(**self.read())
        try:
            config.validate()
        except ValueError as e:
            raise ValueError(f"Invalid configuration in {self.path}: {e}") from e
        return config


def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from path, $TASKWATCH_CONFIG or ./config.yaml.

    Args:
        path: Explicit configuration file path

    Returns:
        Validated AppConfig instance
    """
    return ConfigLoader(path).load()
