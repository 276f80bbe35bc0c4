"""Tests for subnet address allocation."""

from __future__ import annotations

from ipaddress import IPv4Address, IPv4Network

import pytest
from hypothesis import given
from hypothesis import strategies as st

from devnet_compose.exceptions import AddressSpaceExhaustedError, ConfigurationError
from devnet_compose.topology import (
    allocate_address,
    check_capacity,
    gateway_address,
    host_capacity,
)

SUBNET = IPv4Network("10.0.7.0/24")


class TestAllocateAddress:
    """Tests for ordinal to address mapping."""

    def test_first_ordinal_skips_network_and_gateway(self) -> None:
        """Ordinal 0 lands on .2."""
        assert allocate_address(SUBNET, 0) == IPv4Address("10.0.7.2")

    def test_ordinals_increment_by_one(self) -> None:
        """Each ordinal moves one address up."""
        assert allocate_address(SUBNET, 4) == IPv4Address("10.0.7.6")
        assert allocate_address(SUBNET, 6) == IPv4Address("10.0.7.8")

    def test_last_host_address(self) -> None:
        """Ordinal 252 is .254, the last usable host."""
        assert allocate_address(SUBNET, 252) == IPv4Address("10.0.7.254")

    def test_broadcast_is_never_allocated(self) -> None:
        """Ordinal 253 would be the broadcast address."""
        with pytest.raises(AddressSpaceExhaustedError):
            allocate_address(SUBNET, 253)

    def test_negative_ordinal_rejected(self) -> None:
        """Negative ordinals are programming errors."""
        with pytest.raises(ValueError):
            allocate_address(SUBNET, -1)

    def test_other_subnet(self) -> None:
        """Allocation follows the configured network address."""
        subnet = IPv4Network("172.20.0.0/16")
        assert allocate_address(subnet, 0) == IPv4Address("172.20.0.2")
        assert allocate_address(subnet, 300) == IPv4Address("172.20.1.46")

    @given(n=st.integers(min_value=1, max_value=253))
    def test_addresses_are_distinct_and_increasing(self, n: int) -> None:
        """N ordinals map to N strictly increasing addresses starting at .2."""
        addresses = [allocate_address(SUBNET, i) for i in range(n)]

        assert addresses[0] == IPv4Address("10.0.7.2")
        assert len(set(addresses)) == n
        assert all(a < b for a, b in zip(addresses, addresses[1:], strict=False))
        assert all(a in SUBNET for a in addresses)


class TestCapacity:
    """Tests for subnet capacity checks."""

    def test_slash_24_holds_253_nodes(self) -> None:
        """A /24 minus network, gateway and broadcast."""
        assert host_capacity(SUBNET) == 253

    def test_slash_30_holds_one_node(self) -> None:
        """The smallest usable subnet."""
        assert host_capacity(IPv4Network("10.0.7.0/30")) == 1

    def test_full_subnet_accepted(self) -> None:
        """Exactly 253 nodes fit."""
        check_capacity(SUBNET, 253)

    def test_overflow_is_configuration_error(self) -> None:
        """254 nodes do not fit, and the error carries the numbers."""
        with pytest.raises(AddressSpaceExhaustedError) as exc_info:
            check_capacity(SUBNET, 254)

        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.requested == 254
        assert exc_info.value.capacity == 253


class TestGateway:
    """Tests for the gateway address."""

    def test_gateway_is_dot_one(self) -> None:
        """The gateway takes the first host address."""
        assert gateway_address(SUBNET) == IPv4Address("10.0.7.1")
