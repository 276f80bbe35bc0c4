"""Test helpers for devnet_compose unit tests."""

from .builders import (
    ARCHIVE_SEED_OFFSET,
    SAMPLE_GENESIS,
    make_credentials,
    make_node_id,
    make_participant,
    make_roster,
)

__all__ = [
    "ARCHIVE_SEED_OFFSET",
    "SAMPLE_GENESIS",
    "make_credentials",
    "make_node_id",
    "make_participant",
    "make_roster",
]
