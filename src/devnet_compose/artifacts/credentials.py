"""
Staking credential writer.

Each node authenticates to its peers with a TLS certificate and key that the
network builder generated. They land in `<node_dir>/staking/` and are made
read-only once both are on disk.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

from devnet_compose.exceptions import CredentialWriteError
from devnet_compose.roster import Participant

from .layout import CERT_FILENAME, KEY_FILENAME, STAKING_DIRNAME

logger = logging.getLogger(__name__)

STAKING_DIR_MODE: Final = stat.S_IRWXU
"""Permissions of the staking directory (0o700)."""

READ_ONLY_MODE: Final = stat.S_IRUSR
"""Permissions of the certificate and key once written (0o400)."""


@dataclass(frozen=True, slots=True)
class CredentialPaths:
    """Where a participant's credentials were written."""

    cert: Path
    """Staking certificate."""

    key: Path
    """Staking private key."""


def _spki(public_key: PublicKeyTypes) -> bytes:
    """DER SubjectPublicKeyInfo of a public key, for equality checks."""
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def verify_credentials(participant: Participant) -> None:
    """
    Check that a participant's key and certificate belong together.

    A node started with a mismatched pair fails the TLS handshake with every
    peer, which only shows up long after the deployment is running.

    Raises:
        CredentialWriteError: If either blob is not PEM or the key does not
            match the certificate's public key.
    """
    try:
        cert = x509.load_pem_x509_certificate(participant.cert_bytes)
    except ValueError as e:
        raise CredentialWriteError(participant.node_id, CERT_FILENAME, e) from e

    try:
        key = serialization.load_pem_private_key(participant.key_bytes, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise CredentialWriteError(participant.node_id, KEY_FILENAME, e) from e

    if _spki(cert.public_key()) != _spki(key.public_key()):
        raise CredentialWriteError(
            participant.node_id,
            KEY_FILENAME,
            ValueError("private key does not match certificate"),
        )


def _write_file(path: Path, content: bytes, participant_id: str) -> None:
    """
    Write one credential file, replacing any earlier copy.

    A read-only leftover from a previous run is unlinked first. Unlinking
    depends on the directory's permissions, not the file's.
    """
    try:
        if path.exists():
            path.unlink()
        path.write_bytes(content)
    except OSError as e:
        raise CredentialWriteError(participant_id, path.name, e) from e


def write_credentials(node_dir: Path, participant: Participant) -> CredentialPaths:
    """
    Write a participant's staking certificate and key.

    The certificate is written first, then the key. Both are made read-only
    only after both writes succeed, so a failed run never leaves a read-only
    partial file behind.

    Args:
        node_dir: The participant's directory under the output root.
        participant: Owner of the credentials.

    Returns:
        Paths of the written certificate and key.

    Raises:
        CredentialWriteError: If verification, a write or a permission change fails.
    """
    verify_credentials(participant)

    staking_dir = node_dir / STAKING_DIRNAME
    try:
        staking_dir.mkdir(mode=STAKING_DIR_MODE, parents=True, exist_ok=True)
    except OSError as e:
        raise CredentialWriteError(participant.node_id, STAKING_DIRNAME, e) from e

    paths = CredentialPaths(cert=staking_dir / CERT_FILENAME, key=staking_dir / KEY_FILENAME)
    _write_file(paths.cert, participant.cert_bytes, participant.node_id)
    _write_file(paths.key, participant.key_bytes, participant.node_id)

    for path in (paths.cert, paths.key):
        try:
            os.chmod(path, READ_ONLY_MODE)
        except OSError as e:
            raise CredentialWriteError(participant.node_id, path.name, e) from e

    logger.debug("Wrote staking credentials for %s to %s", participant.node_id, staking_dir)
    return paths
