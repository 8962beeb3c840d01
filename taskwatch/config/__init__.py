"""Configuration management module."""

from .config_loader import ConfigLoader, load_config, resolve_config_path
from .config_schema import AppConfig

__all__ = ["ConfigLoader", "load_config", "resolve_config_path", "AppConfig"]
