"""Allocation model and the binding pipeline built on top of it."""

from allocbind.allocations.bindings import (
    IPV6_WILDCARD,
    BindingTable,
    PortBinding,
    build_bindings,
    is_valid_port,
)
from allocbind.allocations.exposure import exposed, exposed_ports
from allocbind.allocations.models import Allocation, AllocationError, DefaultMapping
from allocbind.allocations.policy import (
    LOOPBACK,
    NetworkPolicy,
    docker_bindings,
    rewrite_for_runtime,
)

__all__ = [
    "IPV6_WILDCARD",
    "LOOPBACK",
    "Allocation",
    "AllocationError",
    "BindingTable",
    "DefaultMapping",
    "NetworkPolicy",
    "PortBinding",
    "build_bindings",
    "docker_bindings",
    "exposed",
    "exposed_ports",
    "is_valid_port",
    "rewrite_for_runtime",
]
