"""Top-level driver of a devnet generation run."""

from .orchestrator import Orchestrator, RunPhase, RunReport

__all__ = ["Orchestrator", "RunPhase", "RunReport"]
