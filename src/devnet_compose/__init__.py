"""
Local devnet generation.

Turns a participant roster into per-node directories (credentials, node
config, chain config, genesis copy) and a docker-compose manifest that
places every node at a fixed address on one bridge network.
"""

from .config import DevnetConfig, ErrorPolicy
from .orchestrator import Orchestrator, RunPhase, RunReport
from .roster import Participant, Role, Roster

__all__ = [
    "DevnetConfig",
    "ErrorPolicy",
    "Orchestrator",
    "Participant",
    "Role",
    "Roster",
    "RunPhase",
    "RunReport",
]
