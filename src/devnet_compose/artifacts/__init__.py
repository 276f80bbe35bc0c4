"""Per-node files: staking credentials, node config, chain config, genesis copy."""

from .chain_config import ChainConfigArtifact, build_chain_config
from .credentials import CredentialPaths, verify_credentials, write_credentials
from .layout import NODE_MOUNT_DIR, chain_config_relpath
from .node_config import NodeConfigArtifact, build_node_config
from .writer import NodeArtifactWriter, NodeTree

__all__ = [
    "ChainConfigArtifact",
    "CredentialPaths",
    "NODE_MOUNT_DIR",
    "NodeArtifactWriter",
    "NodeConfigArtifact",
    "NodeTree",
    "build_chain_config",
    "build_node_config",
    "chain_config_relpath",
    "verify_credentials",
    "write_credentials",
]
