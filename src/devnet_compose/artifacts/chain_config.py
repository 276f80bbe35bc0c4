"""
Per-chain configuration document.

Written to `configs/chains/<alias>/config.json` in the node directory and
picked up by the node through `--chain-config-dir`. Validators prune old
state. Archive nodes keep everything.
"""

from __future__ import annotations

from devnet_compose.roster import Role
from devnet_compose.types import KebabModel

from .layout import NODE_MOUNT_DIR, OFFLINE_PRUNING_DIRNAME
from .node_config import encode_document


class ChainConfigArtifact(KebabModel):
    """Chain config file contents."""

    pruning_enabled: bool
    """Discard historical state tries."""

    allow_missing_tries: bool
    """Tolerate missing tries, needed when a node stops pruning."""

    offline_pruning_enabled: bool
    """Run offline pruning at startup."""

    offline_pruning_data_directory: str
    """Scratch directory for offline pruning inside the container."""

    def encode(self) -> str:
        """Serialize with kebab-case keys and tab indentation."""
        return encode_document(self.model_dump(mode="json", by_alias=True))

    @classmethod
    def decode(cls, content: str | bytes) -> ChainConfigArtifact:
        """Parse a chain config file."""
        return cls.model_validate_json(content)


def build_chain_config(role: Role) -> ChainConfigArtifact:
    """Return the chain config preset for a role."""
    archive = role is Role.ARCHIVE
    return ChainConfigArtifact(
        pruning_enabled=not archive,
        allow_missing_tries=archive,
        offline_pruning_enabled=False,
        offline_pruning_data_directory=str(NODE_MOUNT_DIR / OFFLINE_PRUNING_DIRNAME),
    )
