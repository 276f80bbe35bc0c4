"""Tests for host port allocation."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from devnet_compose.exceptions import PortRangeExhaustedError
from devnet_compose.topology import HostPorts, allocate_ports

ordinals = st.integers(min_value=0, max_value=2000)


class TestAllocatePorts:
    """Tests for ordinal to host port mapping."""

    def test_first_node(self) -> None:
        """Ordinal 0 gets the base pair."""
        assert allocate_ports(0) == HostPorts(api=9650, peer=9651)

    def test_fifth_node(self) -> None:
        """Ordinal 4 is two ports per node further along."""
        assert allocate_ports(4) == HostPorts(api=9658, peer=9659)

    def test_custom_base(self) -> None:
        """The base shifts every pair."""
        assert allocate_ports(3, base=20000) == HostPorts(api=20006, peer=20007)

    def test_negative_ordinal_rejected(self) -> None:
        """Negative ordinals are programming errors."""
        with pytest.raises(ValueError):
            allocate_ports(-1)

    def test_port_overflow(self) -> None:
        """Ports past 65535 are a configuration error."""
        with pytest.raises(PortRangeExhaustedError) as exc_info:
            allocate_ports(1, base=65534)

        assert exc_info.value.port == 65537

    def test_highest_valid_pair(self) -> None:
        """A pair ending exactly at 65535 is fine."""
        assert allocate_ports(0, base=65534) == HostPorts(api=65534, peer=65535)

    @given(i=ordinals)
    def test_api_port_even_and_increasing(self, i: int) -> None:
        """API ports are even for an even base and strictly increase."""
        assert allocate_ports(i).api % 2 == 0
        assert allocate_ports(i).api < allocate_ports(i + 1).api

    @given(i=ordinals, j=ordinals)
    def test_api_never_collides_with_peer(self, i: int, j: int) -> None:
        """No node's API port equals any node's peer port."""
        assert allocate_ports(i).api != allocate_ports(j).peer

    @given(i=ordinals, j=ordinals)
    def test_pairs_are_injective(self, i: int, j: int) -> None:
        """Different ordinals never share a port."""
        if i != j:
            a, b = allocate_ports(i), allocate_ports(j)
            assert {a.api, a.peer}.isdisjoint({b.api, b.peer})
