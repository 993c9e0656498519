from __future__ import annotations

import pytest
from pydantic import ValidationError

from landscape_catalog.core.config import CatalogConfig, load_config
from landscape_catalog.services.landscape_client import LANDSCAPE_DATA_URL


def test_defaults():
    config = load_config({})
    assert config == CatalogConfig()
    assert config.source_url == LANDSCAPE_DATA_URL
    assert config.freshness_window_seconds == 3600
    assert config.refresh_interval_seconds == 3600


def test_environment_overrides():
    config = load_config(
        {
            "LANDSCAPE_SOURCE_URL": "https://mirror.example/full.json",
            "LANDSCAPE_REFRESH_INTERVAL_SECONDS": "0",
            "LANDSCAPE_FETCH_TIMEOUT_SECONDS": "2.5",
            "LANDSCAPE_LOG_LEVEL": "debug",
        }
    )
    assert config.source_url == "https://mirror.example/full.json"
    assert config.refresh_interval_seconds == 0
    assert config.fetch_timeout_seconds == 2.5
    assert config.log_level == "debug"


def test_yaml_file_then_environment(tmp_path):
    config_file = tmp_path / "landscape.yaml"
    config_file.write_text(
        "source_url: https://file.example/full.json\n"
        "refresh_workers: 4\n"
        "freshness_window_seconds: 600\n",
        encoding="utf-8",
    )

    config = load_config(
        {
            "LANDSCAPE_CONFIG_FILE": str(config_file),
            "LANDSCAPE_REFRESH_WORKERS": "8",
        }
    )

    assert config.source_url == "https://file.example/full.json"
    assert config.freshness_window_seconds == 600
    assert config.refresh_workers == 8


def test_empty_yaml_file_uses_defaults(tmp_path):
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("", encoding="utf-8")
    assert load_config({"LANDSCAPE_CONFIG_FILE": str(config_file)}) == CatalogConfig()


def test_non_mapping_yaml_is_rejected(tmp_path):
    config_file = tmp_path / "list.yaml"
    config_file.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config({"LANDSCAPE_CONFIG_FILE": str(config_file)})


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        load_config({"LANDSCAPE_REFRESH_WORKERS": "0"})
    with pytest.raises(ValidationError):
        load_config({"LANDSCAPE_FETCH_TIMEOUT_SECONDS": "soon"})
