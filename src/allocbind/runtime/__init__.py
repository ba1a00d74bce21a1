"""Container runtime adapters."""

from allocbind.runtime.docker import (
    OutgoingNetwork,
    detect_bridge_interface,
    outgoing_network,
    to_exposed_ports,
    to_port_bindings,
    to_sdk_ports,
)

__all__ = [
    "OutgoingNetwork",
    "detect_bridge_interface",
    "outgoing_network",
    "to_exposed_ports",
    "to_port_bindings",
    "to_sdk_ports",
]
