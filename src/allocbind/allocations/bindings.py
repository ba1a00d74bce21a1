"""Expand allocations into protocol-qualified port bindings."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from allocbind.allocations.models import Allocation

logger = logging.getLogger(__name__)

IPV6_WILDCARD = "[::]"
MIN_PORT = 1
MAX_PORT = 65535
PROTOCOLS = ("tcp", "udp")


@dataclass(frozen=True)
class PortBinding:
    """A host address/port pair a container port is published on."""

    host_ip: str
    host_port: str


# "<port>/tcp" or "<port>/udp" -> bindings in declaration order
BindingTable = dict[str, list[PortBinding]]


def is_valid_port(port: int) -> bool:
    """Check if port is within 1-65535."""
    return MIN_PORT <= port <= MAX_PORT


def build_bindings(allocation: Allocation) -> BindingTable:
    """Convert the allocation mappings into a binding table.

    Every valid port gets one TCP and one UDP binding on the IPv6 wildcard
    address. The mapping key is not used as the host address, so ports listed
    under different IPs produce identical bindings. Ports outside 1-65535 are
    skipped.
    """
    out: BindingTable = {}

    for ip, ports in allocation.mappings.items():
        for port in ports:
            if not is_valid_port(port):
                logger.debug("Skipping invalid port %s allocated on %s", port, ip)
                continue

            # The per-IP IPv4 binding (host_ip=ip) is intentionally not emitted.
            binding = PortBinding(host_ip=IPV6_WILDCARD, host_port=str(port))
            for protocol in PROTOCOLS:
                out.setdefault(f"{port}/{protocol}", []).append(binding)

    return out
