"""Allocation data model."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from allocbind.config.schema import coerce_bool


class AllocationError(ValueError):
    """Raised when an allocation document cannot be read."""


@dataclass(frozen=True)
class DefaultMapping:
    """The primary ip/port pair, used for {SERVER_IP} and {SERVER_PORT}."""

    ip: str = ""
    port: int = 0


@dataclass(frozen=True)
class Allocation:
    """Ports assigned to a server, grouped by the IP they were allocated on.

    Nothing is validated here. Keys of `mappings` are opaque labels and ports
    may be duplicated or out of range; the binding builder filters them.
    """

    # SNAT outgoing traffic to the default mapping's IP via a dedicated network
    force_outgoing_ip: bool = False
    default: DefaultMapping = DefaultMapping()
    mappings: Mapping[str, tuple[int, ...]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire format."""
        return {
            "force_outgoing_ip": self.force_outgoing_ip,
            "default": {"ip": self.default.ip, "port": self.default.port},
            "mappings": {ip: list(ports) for ip, ports in self.mappings.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Allocation:
        """Create an Allocation from the wire format.

        Missing keys fall back to defaults and unknown keys are ignored.
        Raises AllocationError for values that cannot be coerced.
        """
        force_raw = data.get("force_outgoing_ip", False)
        force_outgoing_ip = coerce_bool(force_raw) if force_raw is not None else False

        default_raw = data.get("default") or {}
        if not isinstance(default_raw, Mapping):
            raise AllocationError("'default' must be a mapping")
        ip_raw = default_raw.get("ip")
        port_raw = default_raw.get("port")
        default = DefaultMapping(
            ip=str(ip_raw) if ip_raw is not None else "",
            port=_coerce_port(port_raw, "default.port") if port_raw is not None else 0,
        )

        mappings_raw = data.get("mappings") or {}
        if not isinstance(mappings_raw, Mapping):
            raise AllocationError("'mappings' must be a mapping of ip to ports")
        mappings: dict[str, tuple[int, ...]] = {}
        for ip, ports in mappings_raw.items():
            if ports is None:
                ports = []
            if not isinstance(ports, list | tuple):
                raise AllocationError(f"mappings[{ip!r}] must be a list of ports")
            mappings[str(ip)] = tuple(
                _coerce_port(port, f"mappings[{ip!r}]") for port in ports
            )

        return cls(
            force_outgoing_ip=force_outgoing_ip,
            default=default,
            mappings=mappings,
        )


def _coerce_port(value: Any, where: str) -> int:
    """Coerce a port value to int. Range is not checked.

    Accepts ints, integral floats and integer strings. Anything else, such
    as 80.9 or "80.9", raises AllocationError rather than being truncated.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as e:
            raise AllocationError(
                f"{where}: expected a port number, got {value!r}"
            ) from e
    raise AllocationError(f"{where}: expected a port number, got {value!r}")
