"""Exception hierarchy for devnet generation."""

from __future__ import annotations

from ipaddress import IPv4Network
from pathlib import Path


class DevnetError(Exception):
    """
    Base exception for all devnet generation errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class ConfigurationError(DevnetError):
    """
    Base class for fatal configuration errors.

    Raised before any artifact is written.
    """


class OutputExistsError(ConfigurationError):
    """
    Raised when the output root already exists and override was not requested.

    Attributes:
        path: The pre-existing output root.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Output root {path} already exists; pass override to replace it")


class AddressSpaceExhaustedError(ConfigurationError):
    """
    Raised when the roster does not fit in the subnet's host range.

    Attributes:
        subnet: The configured subnet.
        requested: Number of addresses requested.
        capacity: Number of addressable hosts in the subnet.
    """

    def __init__(self, subnet: IPv4Network, *, requested: int, capacity: int) -> None:
        self.subnet = subnet
        self.requested = requested
        self.capacity = capacity
        super().__init__(
            f"Subnet {subnet} holds {capacity} node addresses, {requested} requested"
        )


class PortRangeExhaustedError(ConfigurationError):
    """
    Raised when a host port would fall outside the valid TCP range.

    Attributes:
        ordinal: The ordinal whose port overflowed.
        port: The offending port number.
    """

    def __init__(self, ordinal: int, port: int) -> None:
        self.ordinal = ordinal
        self.port = port
        super().__init__(f"Host port {port} for ordinal {ordinal} exceeds 65535")


class RosterError(ConfigurationError):
    """Raised when the participant roster is malformed or inconsistent."""


class ArtifactWriteError(DevnetError):
    """
    Raised when a per-participant artifact cannot be written.

    Attributes:
        participant_id: Node identifier of the participant.
        artifact: Name of the artifact being written (e.g. "config.json").
        cause: The underlying error, if any.
    """

    def __init__(
        self,
        participant_id: str,
        artifact: str,
        cause: BaseException | None = None,
    ) -> None:
        self.participant_id = participant_id
        self.artifact = artifact
        self.cause = cause

        msg = f"Failed to write {artifact} for {participant_id}"
        if cause is not None:
            msg = f"{msg}: {cause}"

        super().__init__(msg)


class CredentialWriteError(ArtifactWriteError):
    """Raised when a staking certificate or key cannot be verified or written."""


class ManifestError(DevnetError):
    """Base class for manifest errors. Always fatal."""


class ManifestWriteError(ManifestError):
    """
    Raised when the manifest cannot be serialized or written.

    Attributes:
        path: Destination of the manifest.
    """

    def __init__(self, path: Path, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write manifest {path}: {cause}")


class ManifestConsistencyError(ManifestError):
    """
    Raised when the manifest disagrees with what was written to disk.

    Attributes:
        participant_id: Node identifier of the inconsistent service.
        detail: What disagreed.
    """

    def __init__(self, participant_id: str, detail: str) -> None:
        self.participant_id = participant_id
        self.detail = detail
        super().__init__(f"Manifest entry for {participant_id} is inconsistent: {detail}")
