"""Compose manifest wiring every node into one bridge network."""

from .builder import (
    MANIFEST_MODE,
    ManifestBuilder,
    ManifestEntry,
    check_consistency,
    node_entrypoint,
    write_manifest,
)
from .models import Manifest, NetworkDefinition, ServiceDefinition

__all__ = [
    "MANIFEST_MODE",
    "Manifest",
    "ManifestBuilder",
    "ManifestEntry",
    "NetworkDefinition",
    "ServiceDefinition",
    "check_consistency",
    "node_entrypoint",
    "write_manifest",
]
