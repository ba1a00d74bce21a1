"""Configuration schema and validation for allocbind."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def coerce_bool(value: Any) -> bool:
    """Coerce YAML/env values such as "false" or 0 to a bool."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass(frozen=True)
class NetworkConfig:
    """Docker network settings.

    `interface` is the host-side address of the bridge network, substituted
    for 127.0.0.1 bindings. `ispn` (isolated server private network) drops
    those bindings instead.
    """

    interface: str | None = None
    ispn: bool | None = None
    name: str | None = None  # bridge network name

    def overlay(self, other: NetworkConfig) -> NetworkConfig:
        """Return a new config with non-None fields from `other` overlaid."""
        return NetworkConfig(
            interface=(
                other.interface if other.interface is not None else self.interface
            ),
            ispn=other.ispn if other.ispn is not None else self.ispn,
            name=other.name if other.name is not None else self.name,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        result: dict[str, Any] = {}
        if self.interface is not None:
            result["interface"] = self.interface
        if self.ispn is not None:
            result["ispn"] = self.ispn
        if self.name is not None:
            result["name"] = self.name
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NetworkConfig:
        """Create from a dictionary. Unknown keys are ignored."""
        interface = data.get("interface")
        ispn_raw = data.get("ispn")
        name = data.get("name")
        return cls(
            interface=str(interface) if interface is not None else None,
            ispn=coerce_bool(ispn_raw) if ispn_raw is not None else None,
            name=str(name) if name is not None else None,
        )


@dataclass(frozen=True)
class DockerConfig:
    """Docker environment settings."""

    network: NetworkConfig = NetworkConfig()

    def overlay(self, other: DockerConfig) -> DockerConfig:
        """Return a new config with `other` overlaid."""
        return DockerConfig(network=self.network.overlay(other.network))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"network": self.network.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DockerConfig:
        """Create from a dictionary. Unknown keys are ignored."""
        network_raw = data.get("network")
        network = (
            NetworkConfig.from_dict(network_raw)
            if isinstance(network_raw, dict)
            else NetworkConfig()
        )
        return cls(network=network)


@dataclass(frozen=True)
class AllocbindConfig:
    """allocbind configuration schema.

    None values indicate "not set" and will use defaults or be inherited.
    """

    docker: DockerConfig = DockerConfig()

    def merge(self, other: AllocbindConfig) -> AllocbindConfig:
        """Merge another config into this one.

        Values from `other` take precedence when they are not None.
        Returns a new AllocbindConfig instance.
        """
        return AllocbindConfig(docker=self.docker.overlay(other.docker))

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary, excluding None values."""
        return {"docker": self.docker.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AllocbindConfig:
        """Create an AllocbindConfig from a dictionary.

        Unknown keys are ignored.
        """
        docker_raw = data.get("docker")
        docker = (
            DockerConfig.from_dict(docker_raw)
            if isinstance(docker_raw, dict)
            else DockerConfig()
        )
        return cls(docker=docker)


# Default configuration values (used when not specified anywhere)
DEFAULT_CONFIG = AllocbindConfig(
    docker=DockerConfig(
        network=NetworkConfig(
            interface="172.18.0.1",
            ispn=False,
            name="pelican_nw",
        )
    )
)
