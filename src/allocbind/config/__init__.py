"""Configuration loading."""

from allocbind.config.loader import load_config, save_config
from allocbind.config.schema import (
    DEFAULT_CONFIG,
    AllocbindConfig,
    DockerConfig,
    NetworkConfig,
)

__all__ = [
    "DEFAULT_CONFIG",
    "AllocbindConfig",
    "DockerConfig",
    "NetworkConfig",
    "load_config",
    "save_config",
]
