"""Participant roster produced by the external network builder."""

from .participant import Participant, Role, Roster

__all__ = ["Participant", "Role", "Roster"]
