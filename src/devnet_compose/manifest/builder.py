"""
Manifest construction, verification and output.

The manifest is built from the same topology facts the node writers used,
then checked against the files on disk before it is written. It is written
atomically: readers see either no manifest or a complete one.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import yaml

from devnet_compose.artifacts import NODE_MOUNT_DIR, NodeConfigArtifact, NodeTree
from devnet_compose.artifacts.layout import (
    CHAIN_CONFIG_DIRNAME,
    GENESIS_FILENAME,
    NODE_CONFIG_FILENAME,
)
from devnet_compose.config import DevnetConfig
from devnet_compose.exceptions import ManifestConsistencyError, ManifestWriteError
from devnet_compose.roster import Participant
from devnet_compose.topology import (
    CONTAINER_API_PORT,
    CONTAINER_PEER_PORT,
    TopologyFact,
    gateway_address,
)

from .models import (
    IPV4_ADDRESS_KEY,
    Ipam,
    IpamConfig,
    Manifest,
    NetworkDefinition,
    ServiceDefinition,
)

logger = logging.getLogger(__name__)

NODE_BINARY: Final = "./camino-node"
"""Node executable, relative to the image's working directory."""

MANIFEST_MODE: Final = 0o644
"""Permissions of the written manifest."""


@dataclass(frozen=True, slots=True)
class ManifestEntry:
    """A materialized participant, ready to become a service."""

    participant: Participant
    """The node's owner."""

    fact: TopologyFact
    """Address and ports assigned by the planner."""

    tree: NodeTree
    """Files the node writer produced."""


def node_entrypoint() -> str:
    """Command line every node service starts with."""
    return " ".join(
        [
            NODE_BINARY,
            f"--config-file {NODE_MOUNT_DIR / NODE_CONFIG_FILENAME}",
            f"--genesis {NODE_MOUNT_DIR / GENESIS_FILENAME}",
            f"--chain-config-dir {NODE_MOUNT_DIR / CHAIN_CONFIG_DIRNAME}",
        ]
    )


@dataclass(frozen=True, slots=True)
class ManifestBuilder:
    """Builds the compose manifest for a set of materialized participants."""

    config: DevnetConfig
    """Run configuration."""

    def volume_source(self, tree: NodeTree) -> str:
        """Bind-mount source of a node directory, relative to the manifest."""
        return f"./{tree.node_dir.relative_to(self.config.output_root).as_posix()}"

    def service(self, entry: ManifestEntry) -> ServiceDefinition:
        """Service definition of one participant."""
        return ServiceDefinition(
            image=self.config.image,
            entrypoint=node_entrypoint(),
            volumes=[f"{self.volume_source(entry.tree)}:{NODE_MOUNT_DIR}"],
            ports=[
                f"{entry.fact.ports.api}:{CONTAINER_API_PORT}",
                f"{entry.fact.ports.peer}:{CONTAINER_PEER_PORT}",
            ],
            networks={self.config.network_name: {IPV4_ADDRESS_KEY: str(entry.fact.address)}},
        )

    def network(self) -> NetworkDefinition:
        """The single bridge network, sized to the configured subnet."""
        subnet = self.config.subnet
        return NetworkDefinition(
            ipam=Ipam(
                config=[IpamConfig(subnet=str(subnet), gateway=str(gateway_address(subnet)))]
            ),
        )

    def build(self, entries: Sequence[ManifestEntry]) -> Manifest:
        """
        Build the manifest.

        Args:
            entries: Materialized participants in roster order.

        Returns:
            One service per entry, in the given order, plus one network.
        """
        services: dict[str, ServiceDefinition] = {}
        for entry in entries:
            services[entry.participant.node_id] = self.service(entry)
        return Manifest(
            services=services,
            networks={self.config.network_name: self.network()},
        )


def check_consistency(
    manifest: Manifest,
    entries: Sequence[ManifestEntry],
    config: DevnetConfig,
) -> None:
    """
    Verify the manifest against the files written for each participant.

    Checks, per participant:

    - its service exists and its fixed address equals the planned address
      and the `public-ip` recorded in its node config on disk;
    - its bind-mount source resolves to the directory the writer created.

    Across the manifest, no two services may publish the same host port and
    there must be exactly one network.

    Raises:
        ManifestConsistencyError: On the first disagreement found.
    """
    if list(manifest.networks) != [config.network_name]:
        raise ManifestConsistencyError(
            "<manifest>", f"expected exactly network {config.network_name!r}"
        )

    if list(manifest.services) != [e.participant.node_id for e in entries]:
        raise ManifestConsistencyError("<manifest>", "services do not follow roster order")

    claimed: dict[int, str] = {}
    for entry in entries:
        node_id = entry.participant.node_id
        service = manifest.services[node_id]

        address = service.ipv4_address(config.network_name)
        if address != str(entry.fact.address):
            raise ManifestConsistencyError(
                node_id, f"address {address} differs from planned {entry.fact.address}"
            )

        try:
            node_config = NodeConfigArtifact.decode(entry.tree.node_config.read_bytes())
        except (OSError, ValueError) as e:
            raise ManifestConsistencyError(node_id, f"unreadable node config: {e}") from e
        if node_config.public_ip != address:
            raise ManifestConsistencyError(
                node_id, f"address {address} differs from node config {node_config.public_ip}"
            )

        for source in service.volume_sources():
            mounted = (config.output_root / source).resolve()
            if mounted != entry.tree.node_dir.resolve() or not mounted.is_dir():
                raise ManifestConsistencyError(
                    node_id, f"volume {source} does not point at {entry.tree.node_dir}"
                )

        for port in service.host_ports():
            if port in claimed:
                raise ManifestConsistencyError(
                    node_id, f"host port {port} already published by {claimed[port]}"
                )
            claimed[port] = node_id


def write_manifest(manifest: Manifest, path: Path) -> None:
    """
    Serialize and write the manifest atomically.

    The YAML goes to a temporary file next to `path`, which then replaces
    `path` in one rename. The result has mode
    `MANIFEST_MODE`.

    Raises:
        ManifestWriteError: If serialization or any filesystem step fails.
    """
    try:
        content = manifest.to_yaml()
    except yaml.YAMLError as e:
        raise ManifestWriteError(path, e) from e

    tmp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            delete=False,
        ) as f:
            tmp_name = f.name
            f.write(content)
        os.chmod(tmp_name, MANIFEST_MODE)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        raise ManifestWriteError(path, e) from e

    logger.info("Wrote manifest with %d services to %s", len(manifest.services), path)
