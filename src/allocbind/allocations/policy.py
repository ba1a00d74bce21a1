"""Rewrite loopback bindings according to the Docker network policy."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from allocbind.allocations.bindings import BindingTable, PortBinding, build_bindings
from allocbind.allocations.models import Allocation

if TYPE_CHECKING:
    from allocbind.config import AllocbindConfig

logger = logging.getLogger(__name__)

LOOPBACK = "127.0.0.1"


@dataclass(frozen=True)
class NetworkPolicy:
    """Network settings that decide what happens to loopback bindings.

    Resolved once by the caller per invocation; the rewriter never reads
    configuration on its own.
    """

    bridge_interface_ip: str
    isolated_network: bool = False

    @classmethod
    def from_config(cls, config: AllocbindConfig) -> NetworkPolicy:
        """Build the policy from the docker.network section of a config."""
        network = config.docker.network
        return cls(
            bridge_interface_ip=network.interface or "",
            isolated_network=bool(network.ispn),
        )


def rewrite_for_runtime(table: BindingTable, policy: NetworkPolicy) -> BindingTable:
    """Return a copy of `table` with loopback bindings rewritten.

    A binding on 127.0.0.1 is moved to the bridge interface address so the
    server stays reachable from other containers, or dropped entirely when
    the network is isolated. A port whose bindings are all dropped keeps its
    key with an empty list. The input table is left untouched.
    """
    out: BindingTable = {}

    for port, binds in table.items():
        kept: list[PortBinding] = []
        for binding in binds:
            if binding.host_ip != LOOPBACK:
                kept.append(binding)
            elif policy.isolated_network:
                logger.debug("Dropping loopback binding for %s (isolated)", port)
            else:
                logger.debug(
                    "Rewriting loopback binding for %s to %s",
                    port,
                    policy.bridge_interface_ip,
                )
                kept.append(
                    PortBinding(
                        host_ip=policy.bridge_interface_ip,
                        host_port=binding.host_port,
                    )
                )
        out[port] = kept

    return out


def docker_bindings(allocation: Allocation, policy: NetworkPolicy) -> BindingTable:
    """Build the bindings for an allocation and rewrite them for Docker."""
    return rewrite_for_runtime(build_bindings(allocation), policy)
