"""Docker representations of binding tables and exposure sets."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

import docker
from docker.errors import DockerException

from allocbind.allocations.bindings import IPV6_WILDCARD, BindingTable
from allocbind.allocations.models import Allocation

logger = logging.getLogger(__name__)

# Bridge driver option that makes Docker SNAT outgoing traffic to a host IP
HOST_IPV4_OPTION = "com.docker.network.host_ipv4"


@dataclass(frozen=True)
class OutgoingNetwork:
    """A dedicated bridge network for servers that force their outgoing IP."""

    name: str
    driver: str = "bridge"
    options: dict[str, str] = field(default_factory=dict)


def to_port_bindings(table: BindingTable) -> dict[str, list[dict[str, str]]]:
    """Convert a binding table to the Engine API HostConfig.PortBindings shape."""
    return {
        port: [{"HostIp": b.host_ip, "HostPort": b.host_port} for b in binds]
        for port, binds in table.items()
    }


def to_exposed_ports(exposure: Iterable[str]) -> dict[str, dict[str, str]]:
    """Convert an exposure set to the Engine API ExposedPorts shape."""
    return {port: {} for port in sorted(exposure)}


def to_sdk_ports(table: BindingTable) -> dict[str, list[tuple[str, int]]]:
    """Convert a binding table to the `ports` argument of containers.create().

    The SDK takes bare IPv6 addresses, so the bracketed wildcard is unwrapped.
    Used by `allocbind bindings --sdk` and by callers creating containers
    through docker-py.
    """
    ports: dict[str, list[tuple[str, int]]] = {}
    for port, binds in table.items():
        ports[port] = [
            (_sdk_host_ip(b.host_ip), int(b.host_port)) for b in binds
        ]
    return ports


def _sdk_host_ip(host_ip: str) -> str:
    if host_ip == IPV6_WILDCARD:
        return "::"
    return host_ip


def outgoing_network(allocation: Allocation) -> OutgoingNetwork | None:
    """Describe the network needed to SNAT outgoing traffic, if any.

    Returns None unless the allocation forces its outgoing IP.
    """
    if not allocation.force_outgoing_ip:
        return None

    ip = allocation.default.ip
    name = "ip-" + ip.replace(".", "-").replace(":", "-")
    return OutgoingNetwork(
        name=name,
        options={
            "encryption": "false",
            "com.docker.network.bridge.default_bridge": "false",
            HOST_IPV4_OPTION: ip,
        },
    )


def detect_bridge_interface(network_name: str) -> str | None:
    """Look up the gateway IP of a Docker network.

    Returns None if the daemon cannot be reached, the network does not exist
    or its IPAM config has no gateway.
    """
    try:
        client = docker.from_env()
        try:
            network = client.networks.get(network_name)
        finally:
            client.close()
    except DockerException:
        logger.warning(
            "Could not inspect Docker network %s", network_name, exc_info=True
        )
        return None

    ipam_configs: list[dict[str, str]] = (
        network.attrs.get("IPAM", {}).get("Config") or []
    )
    for config in ipam_configs:
        gateway = config.get("Gateway")
        if gateway:
            logger.info("Detected %s gateway: %s", network_name, gateway)
            return gateway

    logger.warning("No gateway found in %s IPAM config", network_name)
    return None
