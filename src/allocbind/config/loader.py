"""Configuration file loading and merging."""

import logging
import os
from pathlib import Path

import yaml

from allocbind.config.schema import (
    DEFAULT_CONFIG,
    AllocbindConfig,
    DockerConfig,
    NetworkConfig,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"

ENV_INTERFACE = "ALLOCBIND_DOCKER_INTERFACE"
ENV_ISPN = "ALLOCBIND_DOCKER_ISPN"


def get_home_config_path() -> Path:
    """Get path to global config: ~/.allocbind/config.yaml."""
    return Path.home() / ".allocbind" / CONFIG_FILENAME


def get_local_config_path() -> Path:
    """Get path to local config: ./.allocbind/config.yaml."""
    return Path.cwd() / ".allocbind" / CONFIG_FILENAME


def load_yaml_config(path: Path) -> dict[str, object] | None:
    """Load a YAML config file, return None if not found or empty."""
    if not path.exists():
        return None
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
            if data is None:
                return None
            if not isinstance(data, dict):
                return None
            result: dict[str, object] = data
            return result
    except yaml.YAMLError:
        logger.warning("Ignoring malformed config file %s", path, exc_info=True)
        return None


def env_config() -> AllocbindConfig:
    """Build a config from ALLOCBIND_DOCKER_* environment variables."""
    data: dict[str, object] = {}
    interface = os.environ.get(ENV_INTERFACE)
    if interface is not None:
        data["interface"] = interface
    ispn = os.environ.get(ENV_ISPN)
    if ispn is not None:
        data["ispn"] = ispn
    return AllocbindConfig(docker=DockerConfig(network=NetworkConfig.from_dict(data)))


def load_config() -> AllocbindConfig:
    """Load merged configuration.

    Precedence (lowest to highest):
    1. Built-in defaults
    2. Global config (~/.allocbind/config.yaml)
    3. Local config (./.allocbind/config.yaml)
    4. ALLOCBIND_DOCKER_* environment variables

    Files are read on every call so callers always see the current settings.
    """
    config = DEFAULT_CONFIG

    for path in (get_home_config_path(), get_local_config_path()):
        data = load_yaml_config(path)
        if data:
            config = config.merge(AllocbindConfig.from_dict(data))

    return config.merge(env_config())


def save_config(config: AllocbindConfig, path: Path) -> None:
    """Save config to a YAML file.

    Creates parent directories if needed.
    Only saves non-None values.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.to_dict()
    with path.open("w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
