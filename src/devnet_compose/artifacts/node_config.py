"""
Node configuration document.

One per participant, read by the node binary through `--config-file`.
Keys are the binary's flag names.
"""

from __future__ import annotations

import json
from typing import Final

from devnet_compose.config import DevnetConfig
from devnet_compose.topology import CONTAINER_API_PORT, CONTAINER_PEER_PORT, TopologyFact
from devnet_compose.types import KebabModel

from .layout import NODE_MOUNT_DIR

HTTP_HOST: Final = "0.0.0.0"
"""Bind address of the API server. All interfaces, so the published port reaches it."""

INDENT: Final = "\t"
"""Indentation of every JSON document written to a node directory."""


def encode_document(data: object) -> str:
    """Serialize a JSON document the way every node file is written."""
    return json.dumps(data, indent=INDENT) + "\n"


class NodeConfigArtifact(KebabModel):
    """
    Node config file contents.

    Field order is the serialization order, so encoding is stable.
    """

    data_dir: str
    """Node database and log directory inside the container."""

    http_port: int
    """Container API port."""

    staking_port: int
    """Container staking port."""

    http_host: str
    """API bind address."""

    public_ip: str
    """Address other nodes reach this node at. Must match the manifest."""

    index_enabled: bool
    """Enable the transaction indexer."""

    api_admin_enabled: bool
    """Enable the admin API."""

    log_display_level: str
    """Stdout log level."""

    log_level: str
    """File log level."""

    network_id: int
    """Network id shared by every node and the genesis document."""

    bootstrap_ips: str
    """Comma-separated `ip:port` of bootstrap peers. Empty for the genesis node."""

    bootstrap_ids: str
    """Comma-separated node ids of bootstrap peers. Empty for the genesis node."""

    def encode(self) -> str:
        """Serialize with kebab-case keys and tab indentation."""
        return encode_document(self.model_dump(mode="json", by_alias=True))

    @classmethod
    def decode(cls, content: str | bytes) -> NodeConfigArtifact:
        """
        Parse a node config file.

        Raises:
            pydantic.ValidationError: If the content is not a valid node config.
        """
        return cls.model_validate_json(content)


def build_node_config(fact: TopologyFact, config: DevnetConfig) -> NodeConfigArtifact:
    """
    Derive a node config from a participant's topology fact.

    Args:
        fact: Address and bootstrap fields of the participant.
        config: Run configuration (network id and log levels).
    """
    return NodeConfigArtifact(
        data_dir=str(NODE_MOUNT_DIR),
        http_port=CONTAINER_API_PORT,
        staking_port=CONTAINER_PEER_PORT,
        http_host=HTTP_HOST,
        public_ip=str(fact.address),
        index_enabled=True,
        api_admin_enabled=True,
        log_display_level=config.log_display_level,
        log_level=config.log_level,
        network_id=config.network_id,
        bootstrap_ips=fact.bootstrap.ips,
        bootstrap_ids=fact.bootstrap.ids,
    )
