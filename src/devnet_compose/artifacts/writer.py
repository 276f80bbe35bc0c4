"""
Per-node artifact writer.

Materializes a participant's directory::

    <output_root>/<node_id>/
        config.json                     node config
        genesis.json                    shared genesis copy
        configs/chains/<alias>/config.json
        staking/staker.crt              (written by the credential writer)
        staking/staker.key

Every file is replaced wholesale, never merged.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from devnet_compose.config import DevnetConfig
from devnet_compose.exceptions import ArtifactWriteError
from devnet_compose.roster import Participant
from devnet_compose.topology import TopologyFact

from .chain_config import build_chain_config
from .layout import GENESIS_FILENAME, NODE_CONFIG_FILENAME, chain_config_relpath
from .node_config import build_node_config, encode_document

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NodeTree:
    """Files written for one participant."""

    node_dir: Path
    """The participant's directory under the output root."""

    node_config: Path
    """Node config file."""

    genesis: Path
    """Genesis copy."""

    chain_config: Path
    """Chain config file."""


@dataclass(frozen=True, slots=True)
class NodeArtifactWriter:
    """Writes node config, genesis copy and chain config into node directories."""

    config: DevnetConfig
    """Run configuration."""

    def node_dir(self, participant: Participant) -> Path:
        """Directory that holds everything belonging to `participant`."""
        return self.config.output_root / participant.node_id

    def write(
        self,
        participant: Participant,
        fact: TopologyFact,
        genesis: Mapping[str, Any],
    ) -> NodeTree:
        """
        Write the node config, genesis copy and chain config of a participant.

        Args:
            participant: Owner of the directory.
            fact: The participant's address and bootstrap fields.
            genesis: Shared genesis document.

        Returns:
            Paths of the written files.

        Raises:
            ArtifactWriteError: Naming the participant and the file that failed.
        """
        node_dir = self.node_dir(participant)
        tree = NodeTree(
            node_dir=node_dir,
            node_config=node_dir / NODE_CONFIG_FILENAME,
            genesis=node_dir / GENESIS_FILENAME,
            chain_config=node_dir / chain_config_relpath(self.config.chain_alias),
        )

        node_config = build_node_config(fact, self.config)
        chain_config = build_chain_config(participant.role)

        self._write(participant, tree.node_config, node_config.encode())
        self._write(participant, tree.genesis, self._encode_genesis(participant, genesis))
        self._write(participant, tree.chain_config, chain_config.encode())

        logger.debug(
            "Wrote node artifacts for %s (pruning=%s)",
            participant.node_id,
            chain_config.pruning_enabled,
        )
        return tree

    @staticmethod
    def _encode_genesis(participant: Participant, genesis: Mapping[str, Any]) -> str:
        try:
            return encode_document(dict(genesis))
        except (TypeError, ValueError) as e:
            raise ArtifactWriteError(participant.node_id, GENESIS_FILENAME, e) from e

    def _write(self, participant: Participant, path: Path, content: str) -> None:
        # e.g. "configs/chains/C/config.json"
        artifact = path.relative_to(self.node_dir(participant)).as_posix()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ArtifactWriteError(participant.node_id, artifact, e) from e
