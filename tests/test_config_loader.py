"""Tests for configuration loader."""

import pytest
import yaml
from pathlib import Path
from tempfile import NamedTemporaryFile

from taskwatch.config.config_loader import (
    CONFIG_PATH_ENV,
    DEFAULT_CONFIG_PATH,
    ConfigLoader,
    load_config,
    resolve_config_path,
)
from taskwatch.config.config_schema import AppConfig

ROOT_ID = "0123456789abcdef0123456789abcdef"


def write_config(config_dict) -> str:
    with NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(config_dict, f)
        return f.name


def test_load_config_valid():
    """Test loading a valid configuration."""
    config_path = write_config(
        {
            "notion": {"api_key": "secret_test", "root_page_id": ROOT_ID},
            "monitor": {"interval_seconds": 30, "read_timeout_seconds": 10},
        }
    )

    try:
        config = load_config(config_path)
        assert isinstance(config, AppConfig)
        assert config.notion.api_key == "secret_test"
        assert config.monitor.interval_seconds == 30
        assert config.monitor.read_timeout_seconds == 10
    finally:
        Path(config_path).unlink()


def test_load_config_defaults():
    """Test optional sections fall back to defaults."""
    config_path = write_config({"notion": {"api_key": "secret_test", "root_page_id": ROOT_ID}})

    try:
        config = load_config(config_path)
        assert config.discovery.max_depth == 1
        assert config.monitor.enabled is True
        assert config.monitor.interval_seconds == 60
        assert config.monitor.collection_ids == []
        assert config.web.port == 8765
        assert config.notion.page_size == 100
    finally:
        Path(config_path).unlink()


def test_load_config_missing_file():
    """Test loading a non-existent configuration file."""
    with pytest.raises(FileNotFoundError):
        load_config("nonexistent.yaml")


def test_load_config_empty_file():
    """Test an empty file is rejected."""
    with NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        config_path = f.name

    try:
        with pytest.raises(ValueError, match="empty"):
            load_config(config_path)
    finally:
        Path(config_path).unlink()


def test_load_config_invalid():
    """Test loading an invalid configuration."""
    config_path = write_config({"notion": {"root_page_id": ROOT_ID}})  # Missing api_key

    try:
        with pytest.raises(Exception):  # Should raise validation error
            load_config(config_path)
    finally:
        Path(config_path).unlink()


def test_load_config_not_a_mapping():
    """Test a YAML list is rejected with the file path in the message."""
    with NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write("- notion\n- monitor\n")
        config_path = f.name

    try:
        with pytest.raises(ValueError, match="mapping") as exc_info:
            load_config(config_path)
        assert config_path in str(exc_info.value)
    finally:
        Path(config_path).unlink()


def test_load_config_missing_root_names_file():
    """Test a missing root page is reported against the config file."""
    config_path = write_config({"notion": {"api_key": "secret_test"}})

    try:
        with pytest.raises(ValueError, match="root_page_id") as exc_info:
            load_config(config_path)
        assert config_path in str(exc_info.value)
    finally:
        Path(config_path).unlink()


def test_load_config_missing_file_names_path():
    """Test the not-found error carries the resolved path."""
    with pytest.raises(FileNotFoundError, match="nonexistent.yaml"):
        load_config("nonexistent.yaml")


def test_config_path_from_environment(monkeypatch):
    """Test $TASKWATCH_CONFIG is used when no path is given."""
    config_path = write_config({"notion": {"api_key": "secret_env", "root_page_id": ROOT_ID}})
    monkeypatch.setenv(CONFIG_PATH_ENV, config_path)

    try:
        config = load_config()
        assert config.notion.api_key == "secret_env"
        assert ConfigLoader().path == Path(config_path)
    finally:
        Path(config_path).unlink()


def test_explicit_path_overrides_environment(monkeypatch):
    """Test an explicit path wins over $TASKWATCH_CONFIG."""
    monkeypatch.setenv(CONFIG_PATH_ENV, "elsewhere.yaml")

    assert resolve_config_path("mine.yaml") == Path("mine.yaml")


def test_default_config_path(monkeypatch):
    """Test ./config.yaml is used without a path or environment variable."""
    monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)

    assert resolve_config_path() == Path(DEFAULT_CONFIG_PATH)


def test_config_requires_root():
    """Test that a root page ID or URL is required."""
    config = AppConfig(notion={"api_key": "secret_test"})

    with pytest.raises(ValueError, match="root_page_id"):
        config.validate()


def test_root_id_from_url():
    """Test the root page ID is extracted from a URL."""
    config = AppConfig(
        notion={
            "api_key": "secret_test",
            "root_page_url": f"https://www.notion.so/Team-{ROOT_ID}",
        }
    )

    config.validate()
    assert config.notion.resolve_root_id() == ROOT_ID


def test_read_timeout_must_be_below_interval():
    """Test the read timeout has to fit inside one tick."""
    config = AppConfig(
        notion={"api_key": "secret_test", "root_page_id": ROOT_ID},
        monitor={"interval_seconds": 10, "read_timeout_seconds": 10},
    )

    with pytest.raises(ValueError, match="read_timeout_seconds"):
        config.validate()


def test_api_key_from_environment(monkeypatch):
    """Test ${ENV_VAR} references are expanded."""
    monkeypatch.setenv("TASKWATCH_TEST_KEY", "secret_from_env")

    config = AppConfig(notion={"api_key": "${TASKWATCH_TEST_KEY}", "root_page_id": ROOT_ID})

    assert config.notion.api_key == "secret_from_env"


def test_api_key_missing_environment(monkeypatch):
    """Test an unset environment reference is a validation error."""
    monkeypatch.delenv("TASKWATCH_TEST_KEY", raising=False)

    with pytest.raises(ValueError, match="TASKWATCH_TEST_KEY"):
        AppConfig(notion={"api_key": "${TASKWATCH_TEST_KEY}", "root_page_id": ROOT_ID})


def test_page_size_limit():
    """Test page size above the API maximum is rejected."""
    with pytest.raises(ValueError):
        AppConfig(notion={"api_key": "secret_test", "root_page_id": ROOT_ID, "page_size": 101})
