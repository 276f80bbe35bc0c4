"""
IPv4 address allocation inside the compose bridge subnet.

The first two addresses of the subnet are reserved: `.0` identifies the
network and `.1` is the bridge gateway. The broadcast address is never handed
out. Node `i` therefore lives at `network + 2 + i`.
"""

from __future__ import annotations

from ipaddress import IPv4Address, IPv4Network
from typing import Final

from devnet_compose.exceptions import AddressSpaceExhaustedError

GATEWAY_OFFSET: Final = 1
"""Offset of the bridge gateway from the network address."""

FIRST_NODE_OFFSET: Final = 2
"""Offset of ordinal 0 from the network address."""


def gateway_address(subnet: IPv4Network) -> IPv4Address:
    """Address of the bridge gateway."""
    return subnet.network_address + GATEWAY_OFFSET


def host_capacity(subnet: IPv4Network) -> int:
    """
    Number of node addresses the subnet can hold.

    Excludes the network, gateway and broadcast addresses: 253 for a /24.
    """
    return max(subnet.num_addresses - FIRST_NODE_OFFSET - 1, 0)


def check_capacity(subnet: IPv4Network, count: int) -> None:
    """
    Verify that `count` nodes fit in the subnet.

    Raises:
        AddressSpaceExhaustedError: If they do not.
    """
    capacity = host_capacity(subnet)
    if count > capacity:
        raise AddressSpaceExhaustedError(subnet, requested=count, capacity=capacity)


def allocate_address(subnet: IPv4Network, ordinal: int) -> IPv4Address:
    """
    Map an ordinal to its fixed address inside the subnet.

    Args:
        subnet: Bridge network subnet.
        ordinal: Zero-based position across validators then archive nodes.

    Returns:
        The node's IPv4 address.

    Raises:
        ValueError: If the ordinal is negative.
        AddressSpaceExhaustedError: If the ordinal falls outside the host range.
    """
    if ordinal < 0:
        raise ValueError(f"ordinal must be non-negative, got {ordinal}")
    check_capacity(subnet, ordinal + 1)
    return subnet.network_address + FIRST_NODE_OFFSET + ordinal
