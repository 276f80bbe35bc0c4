"""
Paths shared by the artifact writers and the manifest.

Each node directory on the host is bind-mounted at `NODE_MOUNT_DIR` inside
its container, so host-side relative paths and container-side absolute paths
line up one to one.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Final

NODE_MOUNT_DIR: Final = PurePosixPath("/mnt/node")
"""Where a node's directory appears inside its container."""

NODE_CONFIG_FILENAME: Final = "config.json"
"""Node config file, relative to the node directory."""

GENESIS_FILENAME: Final = "genesis.json"
"""Genesis copy, relative to the node directory."""

STAKING_DIRNAME: Final = "staking"
"""Credential subdirectory, relative to the node directory."""

CERT_FILENAME: Final = "staker.crt"
"""Staking certificate, relative to the staking directory."""

KEY_FILENAME: Final = "staker.key"
"""Staking private key, relative to the staking directory."""

CHAIN_CONFIG_DIRNAME: Final = PurePosixPath("configs/chains")
"""Root of per-chain config directories, relative to the node directory."""

OFFLINE_PRUNING_DIRNAME: Final = "offline-pruning"
"""Scratch directory for offline pruning, relative to the node directory."""


def chain_config_relpath(chain_alias: str) -> PurePosixPath:
    """Chain config file for `chain_alias`, relative to the node directory."""
    return CHAIN_CONFIG_DIRNAME / chain_alias / "config.json"
