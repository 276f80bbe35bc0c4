"""
Participants and the roster handed over by the network builder.

The network builder writes a JSON file shaped like::

    {
        "Version": "1",
        "GenesisConfig": {...},
        "Stakers": [
            {"NodeID": "NodeID-...", "CertBytes": "<base64>", "KeyBytes": "<base64>",
             "Stake": 200000000000000, ...}
        ],
        "ArchiveNodes": [...]
    }

Byte fields are base64-encoded. Every other key is PascalCase.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from enum import StrEnum
from pathlib import Path
from typing import Any, Final

from pydantic import ConfigDict, Field, field_validator, model_validator

from devnet_compose.exceptions import RosterError
from devnet_compose.types import DevnetModel

NODE_ID_PATTERN: Final = re.compile(r"[A-Za-z0-9._-]+")
"""Characters allowed in a node id. Ids name directories and volume sources."""


class Role(StrEnum):
    """Role a participant plays in the deployment."""

    VALIDATOR = "validator"
    """Staking node. The first validator is the network's bootstrap node."""

    ARCHIVE = "archive"
    """Non-staking node that keeps full historical state."""


class Participant(DevnetModel):
    """
    One network member as produced by the network builder.

    Identity and credentials are computed externally and never modified here.
    """

    model_config = DevnetModel.model_config | ConfigDict(extra="ignore")

    node_id: str = Field(alias="NodeID", min_length=1)
    """Stable node identifier, e.g. `NodeID-7Xhw2mDxuDS44j42TCB6U5579esbSt3Lg`."""

    cert_bytes: bytes = Field(alias="CertBytes", repr=False)
    """PEM-encoded staking certificate."""

    key_bytes: bytes = Field(alias="KeyBytes", repr=False)
    """PEM-encoded staking private key."""

    stake: int = Field(default=0, alias="Stake", ge=0)
    """Stake weight in the smallest denomination."""

    role: Role = Field(default=Role.VALIDATOR, alias="Role")
    """Deployment role."""

    private_key: str = Field(default="", alias="PrivateKey", repr=False)
    """Funding key of the staker's wallet. Informational."""

    public_address: str = Field(default="", alias="PublicAddress")
    """Platform-chain address of the staker. Informational."""

    c_chain_address: str = Field(default="", alias="CChainAddress")
    """C-chain address of the staker. Informational."""

    @field_validator("node_id")
    @classmethod
    def node_id_is_path_component(cls, v: str) -> str:
        """
        Require a node id that is a single plain path component.

        The id becomes `<output_root>/<node_id>` and the volume source
        `./<node_id>:/mnt/node`, so separators, `:` and the `.`/`..` entries
        are rejected.
        """
        if not NODE_ID_PATTERN.fullmatch(v) or v in (".", ".."):
            raise ValueError(f"node id {v!r} is not a plain directory name")
        return v

    @field_validator("cert_bytes", "key_bytes", mode="before")
    @classmethod
    def decode_base64(cls, v: Any) -> Any:
        """
        Decode base64 strings into raw bytes.

        JSON has no bytes type, so the builder base64-encodes credentials.
        Raw bytes pass through unchanged.
        """
        if isinstance(v, str):
            try:
                return base64.b64decode(v, validate=True)
            except binascii.Error as e:
                raise ValueError(f"not valid base64: {e}") from e
        return v

    @property
    def is_archive(self) -> bool:
        """Whether this participant runs with pruning disabled."""
        return self.role is Role.ARCHIVE


class Roster(DevnetModel):
    """
    The full set of participants plus the shared genesis document.

    Validators appear in roster order. Archive nodes appear in generation order
    and are only deployed when requested.
    """

    model_config = DevnetModel.model_config | ConfigDict(extra="ignore")

    version: str = Field(default="1", alias="Version")
    """Roster format version."""

    genesis: dict[str, Any] = Field(alias="GenesisConfig")
    """Genesis document, copied verbatim into every node directory."""

    stakers: list[Participant] = Field(alias="Stakers")
    """Validators. The first one bootstraps the network."""

    archive_nodes: list[Participant] = Field(default_factory=list, alias="ArchiveNodes")
    """Archive-only participants available for deployment."""

    @field_validator("archive_nodes", mode="before")
    @classmethod
    def mark_archive(cls, v: Any) -> Any:
        """Default the role of entries in `ArchiveNodes` to archive."""
        if not isinstance(v, list):
            return v
        return [
            {"Role": Role.ARCHIVE.value, **item}
            if isinstance(item, dict) and "Role" not in item and "role" not in item
            else item
            for item in v
        ]

    @model_validator(mode="after")
    def validate_roles(self) -> Roster:
        """Stakers must be validators and archive entries must be archive nodes."""
        if not self.stakers:
            raise ValueError("roster must contain at least one staker")
        for p in self.stakers:
            if p.role is not Role.VALIDATOR:
                raise ValueError(f"staker {p.node_id} has role {p.role}, expected validator")
        for p in self.archive_nodes:
            if p.role is not Role.ARCHIVE:
                raise ValueError(f"archive node {p.node_id} has role {p.role}, expected archive")
        return self

    def participants(self, num_archive_nodes: int = 0) -> list[Participant]:
        """
        Return the participants to deploy: validators, then archive nodes.

        Args:
            num_archive_nodes: How many archive nodes to include.

        Raises:
            RosterError: If the roster carries fewer archive nodes than requested.
        """
        if num_archive_nodes > len(self.archive_nodes):
            raise RosterError(
                f"Requested {num_archive_nodes} archive nodes, "
                f"roster provides {len(self.archive_nodes)}"
            )
        return [*self.stakers, *self.archive_nodes[:num_archive_nodes]]

    @classmethod
    def from_json(cls, content: str) -> Roster:
        """
        Parse a roster from the network builder's JSON output.

        Raises:
            json.JSONDecodeError: If the content is not valid JSON.
            pydantic.ValidationError: If the data fails validation.
        """
        return cls.model_validate(json.loads(content))

    @classmethod
    def from_json_file(cls, path: Path | str) -> Roster:
        """
        Load a roster from a JSON file.

        Raises:
            RosterError: If the file cannot be read, parsed or validated.
        """
        path = Path(path)
        try:
            return cls.from_json(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise RosterError(f"Cannot read roster {path}: {e}") from e
        except ValueError as e:
            # JSONDecodeError and pydantic.ValidationError are both ValueErrors.
            raise RosterError(f"Invalid roster {path}: {e}") from e
