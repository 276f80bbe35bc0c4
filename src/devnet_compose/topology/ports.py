"""
Host port allocation.

Every node listens on the same container ports. On the host, node `i` is
published at `base + 2i` (API) and `base + 2i + 1` (staking), so consecutive
nodes never share a port and the API port keeps the parity of the base.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from devnet_compose.config import DEFAULT_HOST_PORT_BASE
from devnet_compose.exceptions import PortRangeExhaustedError

CONTAINER_API_PORT: Final = 9650
"""HTTP API port inside every container."""

CONTAINER_PEER_PORT: Final = 9651
"""Staking (peer-to-peer) port inside every container."""

PORT_STRIDE: Final = 2
"""Host ports consumed per node."""

MAX_PORT: Final = 65535
"""Highest valid TCP port."""


@dataclass(frozen=True, slots=True)
class HostPorts:
    """Host ports published for one node."""

    api: int
    """Host port mapped to the container's API port."""

    peer: int
    """Host port mapped to the container's staking port."""


def allocate_ports(ordinal: int, base: int = DEFAULT_HOST_PORT_BASE) -> HostPorts:
    """
    Map an ordinal to its pair of host ports.

    Args:
        ordinal: Zero-based position across validators then archive nodes.
        base: First host port.

    Returns:
        The node's API and staking host ports.

    Raises:
        ValueError: If the ordinal is negative.
        PortRangeExhaustedError: If either port exceeds 65535.
    """
    if ordinal < 0:
        raise ValueError(f"ordinal must be non-negative, got {ordinal}")

    api = base + PORT_STRIDE * ordinal
    peer = api + 1
    if peer > MAX_PORT:
        raise PortRangeExhaustedError(ordinal, peer)
    return HostPorts(api=api, peer=peer)
