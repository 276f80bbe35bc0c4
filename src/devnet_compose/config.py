"""
Run configuration for devnet generation.

Defaults mirror a local camino-node deployment: a /24 bridge network, the
node binary's standard API and staking ports, and a fixed local network id.
The node image can be overridden through the `DEVNET_IMAGE` environment
variable.
"""

from __future__ import annotations

import os
from enum import StrEnum
from ipaddress import IPv4Network
from pathlib import Path
from typing import Final

from pydantic import Field, field_validator

from devnet_compose.types import DevnetModel

DEFAULT_OUTPUT_ROOT: Final = Path("./local/docker-compose")
"""Directory that receives one subdirectory per node plus the manifest."""

DEFAULT_SUBNET: Final = IPv4Network("10.0.7.0/24")
"""Private subnet of the compose bridge network."""

DEFAULT_IMAGE: Final = os.environ.get("DEVNET_IMAGE", "c4tplatform/camino-node:chain4travel")
"""Container image every node service runs."""

DEFAULT_NETWORK_ID: Final = 54321
"""Network id baked into every node config. Local networks use 54321."""

DEFAULT_NETWORK_NAME: Final = "camino-local"
"""Name of the compose network the services attach to."""

DEFAULT_HOST_PORT_BASE: Final = 9650
"""First host port. Node `i` gets `base + 2i` (API) and `base + 2i + 1` (staking)."""

DEFAULT_CHAIN_ALIAS: Final = "C"
"""Alias of the chain whose config directory receives the pruning settings."""

DEFAULT_LOG_DISPLAY_LEVEL: Final = "INFO"
"""Log level the node prints to stdout."""

DEFAULT_LOG_LEVEL: Final = "DEBUG"
"""Log level the node writes to its log files."""

MANIFEST_FILENAME: Final = "docker-compose.yml"
"""Name of the manifest written at the output root."""

MAX_PREFIX_LENGTH: Final = 30
"""Longest accepted prefix. A /30 is the smallest subnet with room for one node."""


class ErrorPolicy(StrEnum):
    """How per-participant write failures affect the run."""

    STRICT = "strict"
    """Abort on the first failure. A partial deployment is worse than none."""

    LENIENT = "lenient"
    """Record the failure, leave the participant out of the manifest, carry on."""


class DevnetConfig(DevnetModel):
    """Everything a run needs besides the roster itself."""

    output_root: Path = DEFAULT_OUTPUT_ROOT
    """Root directory for node trees and the manifest."""

    subnet: IPv4Network = DEFAULT_SUBNET
    """Bridge network subnet. `.0` is the network, `.1` the gateway, nodes start at `.2`."""

    image: str = DEFAULT_IMAGE
    """Container image reference for every service."""

    network_id: int = Field(default=DEFAULT_NETWORK_ID, gt=0)
    """Network id written into each node config."""

    network_name: str = Field(default=DEFAULT_NETWORK_NAME, min_length=1)
    """Compose network name."""

    host_port_base: int = Field(default=DEFAULT_HOST_PORT_BASE, ge=1, le=65534)
    """First host port handed out by the port allocator."""

    chain_alias: str = Field(default=DEFAULT_CHAIN_ALIAS, min_length=1)
    """Chain whose config file is written under `configs/chains/<alias>/`."""

    log_display_level: str = DEFAULT_LOG_DISPLAY_LEVEL
    """Node stdout log level."""

    log_level: str = DEFAULT_LOG_LEVEL
    """Node file log level."""

    num_archive_nodes: int = Field(default=0, ge=0)
    """Number of archive nodes to deploy after the validators."""

    override: bool = False
    """Delete and regenerate an existing output root instead of refusing."""

    error_policy: ErrorPolicy = ErrorPolicy.STRICT
    """Per-participant failure handling."""

    @field_validator("subnet")
    @classmethod
    def subnet_has_room(cls, v: IPv4Network) -> IPv4Network:
        """Reject subnets too small to hold a gateway and at least one node."""
        if v.prefixlen > MAX_PREFIX_LENGTH:
            raise ValueError(f"subnet {v} is too small; use a /{MAX_PREFIX_LENGTH} or larger")
        return v

    @property
    def manifest_path(self) -> Path:
        """Location of the compose manifest."""
        return self.output_root / MANIFEST_FILENAME
