"""Reduce bindings to the set of exposed ports."""

from __future__ import annotations

from allocbind.allocations.bindings import BindingTable
from allocbind.allocations.models import Allocation
from allocbind.allocations.policy import NetworkPolicy, docker_bindings


def exposed_ports(table: BindingTable) -> frozenset[str]:
    """Return the protocol-qualified ports present in `table`.

    Keys with no remaining bindings are still exposed.
    """
    return frozenset(table)


def exposed(allocation: Allocation, policy: NetworkPolicy) -> frozenset[str]:
    """Run the full pipeline and return the exposed ports."""
    return exposed_ports(docker_bindings(allocation, policy))
