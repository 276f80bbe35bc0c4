"""
Shared pytest fixtures for devnet_compose tests.

Every fixture writes under pytest's `tmp_path`.
"""

from __future__ import annotations

from ipaddress import IPv4Network
from pathlib import Path

import pytest

from devnet_compose.config import DevnetConfig
from devnet_compose.roster import Roster
from tests.devnet_compose.helpers import make_roster


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    """Output root that does not exist yet."""
    return tmp_path / "docker-compose"


@pytest.fixture
def config(output_root: Path) -> DevnetConfig:
    """Default configuration on 10.0.7.0/24 writing under `output_root`."""
    return DevnetConfig(output_root=output_root, subnet=IPv4Network("10.0.7.0/24"))


@pytest.fixture
def roster() -> Roster:
    """Five validators, no archive nodes."""
    return make_roster(num_validators=5)


@pytest.fixture
def archive_roster() -> Roster:
    """Five validators followed by two archive nodes."""
    return make_roster(num_validators=5, num_archive=2)
