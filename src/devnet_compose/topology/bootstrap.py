"""
Bootstrap resolution.

The network forms a fixed star around its first validator. That node starts
with no bootstrap peers. Every other node, archive nodes included, dials it.
"""

from __future__ import annotations

from dataclasses import dataclass
from ipaddress import IPv4Address

from .ports import CONTAINER_PEER_PORT


@dataclass(frozen=True, slots=True)
class BootstrapPeer:
    """The node everybody else bootstraps from."""

    node_id: str
    """Node identifier of the genesis validator."""

    address: IPv4Address
    """Address of the genesis validator on the bridge network."""

    @property
    def endpoint(self) -> str:
        """Peer endpoint in the `ip:port` form the node binary expects."""
        return f"{self.address}:{CONTAINER_PEER_PORT}"


@dataclass(frozen=True, slots=True)
class Bootstrap:
    """Bootstrap fields of a node config. Both empty for the genesis node."""

    ids: str = ""
    """Comma-separated bootstrap node ids."""

    ips: str = ""
    """Comma-separated bootstrap `ip:port` endpoints."""

    @property
    def is_genesis(self) -> bool:
        """Whether this node bootstraps from nothing."""
        return not self.ids and not self.ips


def resolve_bootstrap(ordinal: int, genesis: BootstrapPeer) -> Bootstrap:
    """
    Decide whom a node bootstraps from.

    Args:
        ordinal: Zero-based position across validators then archive nodes.
        genesis: The first validator.

    Returns:
        Empty fields for ordinal 0, the genesis peer otherwise.
    """
    if ordinal < 0:
        raise ValueError(f"ordinal must be non-negative, got {ordinal}")
    if ordinal == 0:
        return Bootstrap()
    return Bootstrap(ids=genesis.node_id, ips=genesis.endpoint)
