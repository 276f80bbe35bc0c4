"""
Deterministic network placement.

Maps each participant's ordinal to an address, a pair of host ports and a
bootstrap peer. All functions are pure.
"""

from .address import allocate_address, check_capacity, gateway_address, host_capacity
from .bootstrap import Bootstrap, BootstrapPeer, resolve_bootstrap
from .plan import TopologyFact, plan_topology
from .ports import CONTAINER_API_PORT, CONTAINER_PEER_PORT, HostPorts, allocate_ports

__all__ = [
    "Bootstrap",
    "BootstrapPeer",
    "CONTAINER_API_PORT",
    "CONTAINER_PEER_PORT",
    "HostPorts",
    "TopologyFact",
    "allocate_address",
    "allocate_ports",
    "check_capacity",
    "gateway_address",
    "host_capacity",
    "plan_topology",
    "resolve_bootstrap",
]
