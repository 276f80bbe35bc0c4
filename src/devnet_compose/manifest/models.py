"""
Compose manifest document.

Mirrors the subset of the docker-compose v3 schema the deployment uses:
services with a fixed address on one bridge network, and that network's
IPAM block.
"""

from __future__ import annotations

from typing import Any, Final

import yaml
from pydantic import Field

from devnet_compose.types import DevnetModel

COMPOSE_VERSION: Final = "3"
"""Compose file format version."""

NETWORK_DRIVER: Final = "bridge"
"""Driver of the single compose network."""

IPV4_ADDRESS_KEY: Final = "ipv4_address"
"""Per-service network option carrying the fixed address."""


class IpamConfig(DevnetModel):
    """Address range of a compose network."""

    subnet: str
    """CIDR of the network."""

    gateway: str
    """Gateway address inside the subnet."""


class Ipam(DevnetModel):
    """IPAM block of a compose network."""

    config: list[IpamConfig]
    """Address ranges. Always exactly one."""


class NetworkDefinition(DevnetModel):
    """A compose network."""

    driver: str = NETWORK_DRIVER
    """Network driver."""

    ipam: Ipam
    """Address management."""


class ServiceDefinition(DevnetModel):
    """A compose service running one node."""

    image: str
    """Container image."""

    entrypoint: str
    """Command line starting the node."""

    volumes: list[str]
    """Bind mounts as `host:container`."""

    ports: list[str]
    """Published ports as `host:container`."""

    networks: dict[str, dict[str, str]]
    """Network name to per-network options (the fixed address)."""

    def ipv4_address(self, network_name: str) -> str | None:
        """Fixed address on `network_name`, if any."""
        return self.networks.get(network_name, {}).get(IPV4_ADDRESS_KEY)

    def host_ports(self) -> list[int]:
        """Host side of every published port."""
        return [int(mapping.split(":", 1)[0]) for mapping in self.ports]

    def volume_sources(self) -> list[str]:
        """Host side of every bind mount."""
        return [volume.split(":", 1)[0] for volume in self.volumes]


class Manifest(DevnetModel):
    """
    A complete compose file.

    Services keep insertion order, which is roster order, so the same roster
    always produces the same file.
    """

    version: str = COMPOSE_VERSION
    """Compose file format version."""

    services: dict[str, ServiceDefinition] = Field(default_factory=dict)
    """Node id to service."""

    networks: dict[str, NetworkDefinition]
    """Network name to network. Always exactly one."""

    def to_document(self) -> dict[str, Any]:
        """Plain-data form, ready for the YAML emitter."""
        return self.model_dump(mode="json")

    def to_yaml(self) -> str:
        """Serialize as YAML, preserving key order."""
        return yaml.safe_dump(self.to_document(), sort_keys=False, default_flow_style=False)

    @classmethod
    def from_yaml(cls, content: str) -> Manifest:
        """
        Parse a manifest.

        Raises:
            yaml.YAMLError: If the content is not valid YAML.
            pydantic.ValidationError: If the data is not a valid manifest.
        """
        return cls.model_validate(yaml.safe_load(content))
