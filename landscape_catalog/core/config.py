"""
Service configuration.

Values are resolved in this order (later wins):
1. Defaults declared on ``CatalogConfig``.
2. A YAML file named by the LANDSCAPE_CONFIG_FILE environment variable.
3. Individual LANDSCAPE_* environment variables.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field

from landscape_catalog.domain import constants
from landscape_catalog.services.landscape_client import LANDSCAPE_DATA_URL

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV_VAR = "LANDSCAPE_CONFIG_FILE"

# Environment variable -> config field
ENV_VARS = {
    "LANDSCAPE_SOURCE_URL": "source_url",
    "LANDSCAPE_FETCH_TIMEOUT_SECONDS": "fetch_timeout_seconds",
    "LANDSCAPE_REFRESH_INTERVAL_SECONDS": "refresh_interval_seconds",
    "LANDSCAPE_FRESHNESS_WINDOW_SECONDS": "freshness_window_seconds",
    "LANDSCAPE_REFRESH_WORKERS": "refresh_workers",
    "LANDSCAPE_LOG_LEVEL": "log_level",
    "LANDSCAPE_USER_AGENT": "user_agent",
}


class CatalogConfig(BaseModel):
    """
    Top-level configuration for the catalog service.
    """

    source_url: str = Field(
        default=LANDSCAPE_DATA_URL,
        description="URL of the full landscape JSON document.",
    )
    fetch_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied to each fetch of the landscape document.",
    )
    refresh_interval_seconds: int = Field(
        default=3600,
        ge=0,
        description="How often the background loop refreshes the snapshot. 0 disables the loop.",
    )
    freshness_window_seconds: int = Field(
        default=constants.FRESHNESS_WINDOW_SECONDS,
        gt=0,
        description="A snapshot published within this window is reported as fresh.",
    )
    refresh_workers: int = Field(
        default=2,
        ge=1,
        description="Worker threads available for non-blocking refreshes.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level.",
    )
    user_agent: str = Field(
        default="landscape-catalog/0.1.0",
        description="User-Agent header sent to the landscape source.",
    )


def _load_config_file(path: Path) -> Dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(raw).__name__}")
    return raw


def load_config(environ: Optional[Mapping[str, str]] = None) -> CatalogConfig:
    """
    Build the configuration from the config file and environment.

    Raises:
        pydantic.ValidationError: If a value is out of range or of the wrong type.
    """
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    config_file = env.get(CONFIG_FILE_ENV_VAR)
    if config_file:
        path = Path(config_file).expanduser()
        logger.info(f"Loading configuration from {path}")
        values.update(_load_config_file(path))

    for env_var, field_name in ENV_VARS.items():
        value = env.get(env_var)
        if value is not None and value.strip():
            values[field_name] = value.strip()

    return CatalogConfig(**values)
