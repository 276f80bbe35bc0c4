"""
Topology planning.

Assigns every participant its address, host ports and bootstrap peer before
any file is written. Validators and archive nodes share one ordinal space:
validators take ordinals `0..V-1` in roster order, archive nodes continue at
`V`. Writers and the manifest builder consume the resulting facts, so every
artifact agrees on them.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from ipaddress import IPv4Address
from pathlib import Path

from devnet_compose.config import DevnetConfig
from devnet_compose.exceptions import RosterError
from devnet_compose.roster import Participant, Role

from .address import allocate_address, check_capacity
from .bootstrap import Bootstrap, BootstrapPeer, resolve_bootstrap
from .ports import HostPorts, allocate_ports

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TopologyFact:
    """Network placement of one participant."""

    ordinal: int
    """Position across validators then archive nodes."""

    address: IPv4Address
    """Fixed address on the bridge network."""

    ports: HostPorts
    """Published host ports."""

    bootstrap: Bootstrap
    """Bootstrap peer fields for the node config."""


def _names_node_dir(node_id: str, root: Path) -> bool:
    """Whether `root / node_id` is a direct child of `root` usable as a volume source."""
    if node_id in (".", "..") or ":" in node_id:
        return False
    return (root / node_id).parent == root


def plan_topology(
    participants: Sequence[Participant],
    config: DevnetConfig,
) -> list[TopologyFact]:
    """
    Compute the topology fact of every participant.

    Args:
        participants: Validators in roster order followed by archive nodes.
        config: Run configuration (subnet and port base).

    Returns:
        One fact per participant, in the same order.

    Raises:
        RosterError: If the roster is empty, starts with an archive node,
            lists a validator after an archive node, repeats a node id, or has
            a node id that does not resolve to a directory under the output root.
        AddressSpaceExhaustedError: If the roster does not fit in the subnet.
        PortRangeExhaustedError: If the host ports run past 65535.
    """
    if not participants:
        raise RosterError("Cannot plan a network without participants")

    # The bootstrap node must be a validator.
    #
    # Archive nodes are appended after all validators, so the first entry
    # being an archive node means there are no validators at all.
    if participants[0].role is not Role.VALIDATOR:
        raise RosterError(f"First participant {participants[0].node_id} is not a validator")

    seen: set[str] = set()
    archive_seen = False
    for p in participants:
        if p.node_id in seen:
            raise RosterError(f"Duplicate node id {p.node_id}")
        seen.add(p.node_id)
        if not _names_node_dir(p.node_id, config.output_root):
            raise RosterError(
                f"Node id {p.node_id!r} does not name a directory under the output root"
            )
        if p.role is Role.ARCHIVE:
            archive_seen = True
        elif archive_seen:
            raise RosterError(f"Validator {p.node_id} listed after archive nodes")

    check_capacity(config.subnet, len(participants))

    genesis = BootstrapPeer(
        node_id=participants[0].node_id,
        address=allocate_address(config.subnet, 0),
    )

    facts: list[TopologyFact] = []
    for ordinal, p in enumerate(participants):
        fact = TopologyFact(
            ordinal=ordinal,
            address=allocate_address(config.subnet, ordinal),
            ports=allocate_ports(ordinal, config.host_port_base),
            bootstrap=resolve_bootstrap(ordinal, genesis),
        )
        logger.debug(
            "Planned %s %s: ip=%s api=%d peer=%d bootstrap=%s",
            p.role,
            p.node_id,
            fact.address,
            fact.ports.api,
            fact.ports.peer,
            fact.bootstrap.ids or "<none>",
        )
        facts.append(fact)

    return facts
