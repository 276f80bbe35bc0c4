"""Tests for compose manifest construction, verification and output."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest
import yaml

from devnet_compose.artifacts import NodeArtifactWriter
from devnet_compose.config import DevnetConfig
from devnet_compose.exceptions import ManifestConsistencyError, ManifestWriteError
from devnet_compose.manifest import (
    MANIFEST_MODE,
    Manifest,
    ManifestBuilder,
    ManifestEntry,
    check_consistency,
    node_entrypoint,
    write_manifest,
)
from devnet_compose.roster import Roster
from devnet_compose.topology import allocate_address, plan_topology


def _materialize(
    roster: Roster, config: DevnetConfig, num_archive: int = 0
) -> list[ManifestEntry]:
    """Write node trees the way a run would and return their manifest entries."""
    participants = roster.participants(num_archive)
    facts = plan_topology(participants, config)
    writer = NodeArtifactWriter(config)
    return [
        ManifestEntry(p, f, writer.write(p, f, roster.genesis))
        for p, f in zip(participants, facts, strict=True)
    ]


class TestManifestBuilder:
    """Tests for building services and the network segment."""

    def test_services_follow_roster_order(
        self, archive_roster: Roster, config: DevnetConfig
    ) -> None:
        """Validators first in roster order, then archive nodes."""
        entries = _materialize(archive_roster, config, num_archive=2)
        manifest = ManifestBuilder(config).build(entries)

        expected = [p.node_id for p in archive_roster.participants(2)]
        assert list(manifest.services) == expected

    def test_service_addresses_match_allocator(
        self, archive_roster: Roster, config: DevnetConfig
    ) -> None:
        """Every service's fixed address is the allocator's address for its ordinal."""
        entries = _materialize(archive_roster, config, num_archive=2)
        manifest = ManifestBuilder(config).build(entries)

        for ordinal, node_id in enumerate(manifest.services):
            address = manifest.services[node_id].ipv4_address("camino-local")
            assert address == str(allocate_address(config.subnet, ordinal))

    def test_service_definition(self, roster: Roster, config: DevnetConfig) -> None:
        """Image, entrypoint, mount and ports of a single service."""
        entries = _materialize(roster, config)
        service = ManifestBuilder(config).build(entries).services[entries[4].participant.node_id]

        assert service.image == config.image
        assert service.entrypoint == node_entrypoint()
        assert service.volumes == [f"./{entries[4].participant.node_id}:/mnt/node"]
        assert service.ports == ["9658:9650", "9659:9651"]
        assert service.networks == {"camino-local": {"ipv4_address": "10.0.7.6"}}

    def test_entrypoint_points_into_mount(self) -> None:
        """The node reads its files from the bind mount."""
        assert node_entrypoint() == (
            "./camino-node --config-file /mnt/node/config.json "
            "--genesis /mnt/node/genesis.json "
            "--chain-config-dir /mnt/node/configs/chains"
        )

    def test_single_network_segment(self, roster: Roster, config: DevnetConfig) -> None:
        """Exactly one bridge network sized to the subnet."""
        manifest = ManifestBuilder(config).build(_materialize(roster, config))

        assert list(manifest.networks) == ["camino-local"]
        network = manifest.networks["camino-local"]
        assert network.driver == "bridge"
        assert len(network.ipam.config) == 1
        assert network.ipam.config[0].subnet == "10.0.7.0/24"
        assert network.ipam.config[0].gateway == "10.0.7.1"

    def test_host_ports_unique(self, archive_roster: Roster, config: DevnetConfig) -> None:
        """No two services publish the same host port."""
        manifest = ManifestBuilder(config).build(_materialize(archive_roster, config, 2))

        ports = [port for s in manifest.services.values() for port in s.host_ports()]
        assert len(ports) == len(set(ports)) == 14


class TestManifestYaml:
    """Tests for manifest serialization."""

    def test_document_shape(self, roster: Roster, config: DevnetConfig) -> None:
        """Top-level keys in compose order; version is a string."""
        manifest = ManifestBuilder(config).build(_materialize(roster, config))
        document = yaml.safe_load(manifest.to_yaml())

        assert list(document) == ["version", "services", "networks"]
        assert document["version"] == "3"
        assert document["networks"]["camino-local"]["ipam"]["config"] == [
            {"subnet": "10.0.7.0/24", "gateway": "10.0.7.1"}
        ]

    def test_yaml_round_trip(self, roster: Roster, config: DevnetConfig) -> None:
        """A parsed manifest equals the one that was written."""
        manifest = ManifestBuilder(config).build(_materialize(roster, config))
        assert Manifest.from_yaml(manifest.to_yaml()) == manifest

    def test_same_roster_same_bytes(self, roster: Roster, config: DevnetConfig) -> None:
        """Manifest output is deterministic."""
        entries = _materialize(roster, config)
        builder = ManifestBuilder(config)
        assert builder.build(entries).to_yaml() == builder.build(entries).to_yaml()


class TestCheckConsistency:
    """Tests for cross-artifact verification."""

    def test_consistent_manifest_passes(
        self, archive_roster: Roster, config: DevnetConfig
    ) -> None:
        """A freshly built manifest agrees with the trees on disk."""
        entries = _materialize(archive_roster, config, num_archive=2)
        check_consistency(ManifestBuilder(config).build(entries), entries, config)

    def test_address_mismatch(self, roster: Roster, config: DevnetConfig) -> None:
        """A service address that differs from the node config is caught."""
        entries = _materialize(roster, config)
        manifest = ManifestBuilder(config).build(entries)
        node_id = entries[1].participant.node_id

        service = manifest.services[node_id]
        tampered = manifest.copy(
            services={
                **manifest.services,
                node_id: service.copy(networks={"camino-local": {"ipv4_address": "10.0.7.99"}}),
            }
        )

        with pytest.raises(ManifestConsistencyError) as exc_info:
            check_consistency(tampered, entries, config)
        assert exc_info.value.participant_id == node_id

    def test_node_config_drift(self, roster: Roster, config: DevnetConfig) -> None:
        """A node config whose public-ip drifted from the plan is caught."""
        entries = _materialize(roster, config)
        manifest = ManifestBuilder(config).build(entries)

        path = entries[2].tree.node_config
        path.write_text(path.read_text().replace("10.0.7.4", "10.0.7.44"))

        with pytest.raises(ManifestConsistencyError, match="node config"):
            check_consistency(manifest, entries, config)

    def test_volume_mismatch(self, roster: Roster, config: DevnetConfig) -> None:
        """A bind mount that points elsewhere is caught."""
        entries = _materialize(roster, config)
        manifest = ManifestBuilder(config).build(entries)
        node_id = entries[0].participant.node_id

        tampered = manifest.copy(
            services={
                **manifest.services,
                node_id: manifest.services[node_id].copy(volumes=["./elsewhere:/mnt/node"]),
            }
        )

        with pytest.raises(ManifestConsistencyError, match="volume"):
            check_consistency(tampered, entries, config)

    def test_duplicate_host_port(self, roster: Roster, config: DevnetConfig) -> None:
        """Two services publishing the same host port are caught."""
        entries = _materialize(roster, config)
        manifest = ManifestBuilder(config).build(entries)
        node_id = entries[3].participant.node_id

        tampered = manifest.copy(
            services={
                **manifest.services,
                node_id: manifest.services[node_id].copy(ports=["9650:9650"]),
            }
        )

        with pytest.raises(ManifestConsistencyError, match="host port 9650"):
            check_consistency(tampered, entries, config)

    def test_missing_service(self, roster: Roster, config: DevnetConfig) -> None:
        """Services must line up with the materialized participants."""
        entries = _materialize(roster, config)
        manifest = ManifestBuilder(config).build(entries[:-1])

        with pytest.raises(ManifestConsistencyError, match="roster order"):
            check_consistency(manifest, entries, config)


class TestWriteManifest:
    """Tests for atomic manifest output."""

    def test_writes_file(self, roster: Roster, config: DevnetConfig) -> None:
        """The manifest is written where requested."""
        manifest = ManifestBuilder(config).build(_materialize(roster, config))
        write_manifest(manifest, config.manifest_path)

        assert Manifest.from_yaml(config.manifest_path.read_text()) == manifest
        assert [p.name for p in config.output_root.iterdir() if p.name.startswith(".")] == []

    def test_replaces_existing_file(self, roster: Roster, config: DevnetConfig) -> None:
        """An older manifest is replaced whole."""
        manifest = ManifestBuilder(config).build(_materialize(roster, config))
        config.manifest_path.write_text("stale: true\n")

        write_manifest(manifest, config.manifest_path)
        assert "stale" not in config.manifest_path.read_text()

    def test_manifest_is_world_readable(self, roster: Roster, config: DevnetConfig) -> None:
        """The manifest gets mode 0644, not the owner-only mode of a temp file."""
        manifest = ManifestBuilder(config).build(_materialize(roster, config))
        write_manifest(manifest, config.manifest_path)

        assert stat.S_IMODE(config.manifest_path.stat().st_mode) == MANIFEST_MODE == 0o644

    def test_missing_directory_is_fatal(
        self, roster: Roster, config: DevnetConfig, tmp_path: Path
    ) -> None:
        """Write failures surface as ManifestWriteError."""
        manifest = ManifestBuilder(config).build(_materialize(roster, config))
        path = tmp_path / "missing" / "docker-compose.yml"

        with pytest.raises(ManifestWriteError) as exc_info:
            write_manifest(manifest, path)

        assert exc_info.value.path == path
        assert not path.exists()
