"""Load the autotest configuration from sdktest.yaml."""

import asyncio
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from sdk_autotest.errors import ConfigurationError
from sdk_autotest.models.config import Config

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("sdktest.yaml")


async def load_config(
    path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Config:
    """Load and validate the configuration file.

    Args:
        path: Path to the YAML file; a missing default file yields defaults
        overrides: Values that replace those from the file. Keys of the
            ``autotest`` section are given as a nested mapping.

    Returns:
        The validated configuration

    Raises:
        ConfigurationError: If the file cannot be read or is invalid

    """
    data: dict[str, Any] = {}
    config_path = path or DEFAULT_CONFIG_PATH

    if config_path.exists():
        log.debug("Loading configuration from %s", config_path)
        try:
            content = await asyncio.to_thread(config_path.read_text)
            loaded = yaml.safe_load(content)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read {config_path}: {e}") from e
        if loaded is not None:
            if not isinstance(loaded, dict):
                raise ConfigurationError(f"{config_path} must contain a mapping")
            data = loaded
    elif path is not None:
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    return build_config(data, overrides)


def build_config(
    data: Mapping[str, Any], overrides: Mapping[str, Any] | None = None
) -> Config:
    """Merge overrides into raw configuration data and validate it."""
    merged = merge_overrides(data, overrides or {})
    try:
        return Config.model_validate(merged)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def merge_overrides(
    data: Mapping[str, Any], overrides: Mapping[str, Any]
) -> dict[str, Any]:
    """Return a copy of ``data`` with ``overrides`` merged in recursively.

    ``None`` override values are skipped so unset CLI flags keep file values.
    """
    merged = dict(data)
    for key, value in overrides.items():
        if value is None:
            continue
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = merge_overrides(current, value)
        elif isinstance(value, Mapping):
            merged[key] = merge_overrides({}, value)
        else:
            merged[key] = value
    return merged
