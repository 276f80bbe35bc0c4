"""
Devnet generation run.

A run moves through fixed phases and never goes back:

1. PLAN: compute every participant's address, ports and bootstrap peer.
   Pure; configuration errors abort here with the filesystem untouched.
2. PREPARE: refuse an existing output root unless override is set, then
   create a fresh one.
3. MATERIALIZE: per participant, write credentials then node artifacts.
4. COMPOSE: build the manifest from the materialized participants, check it
   against the files on disk, write it.

A run ends COMPLETED (manifest written) or FAILED (an error escaped).
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

from devnet_compose.artifacts import NodeArtifactWriter, write_credentials
from devnet_compose.config import DevnetConfig, ErrorPolicy
from devnet_compose.exceptions import (
    ArtifactWriteError,
    ConfigurationError,
    DevnetError,
    OutputExistsError,
)
from devnet_compose.manifest import (
    ManifestBuilder,
    ManifestEntry,
    check_consistency,
    write_manifest,
)
from devnet_compose.roster import Participant, Roster
from devnet_compose.topology import TopologyFact, plan_topology

logger = logging.getLogger(__name__)


class RunPhase(StrEnum):
    """Phase of a generation run."""

    PLAN = "plan"
    PREPARE = "prepare"
    MATERIALIZE = "materialize"
    COMPOSE = "compose"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(slots=True)
class RunReport:
    """Outcome of a run, filled in as it progresses."""

    phase: RunPhase = RunPhase.PLAN
    """Current phase, or the terminal state once the run is over."""

    failed_in: RunPhase | None = None
    """Phase that raised, when the run FAILED."""

    materialized: list[ManifestEntry] = field(default_factory=list)
    """Participants whose files were written, in roster order."""

    failures: list[ArtifactWriteError] = field(default_factory=list)
    """Participants skipped under the lenient policy."""

    manifest_path: Path | None = None
    """Where the manifest was written."""

    @property
    def ok(self) -> bool:
        """Whether the run completed without skipping anyone."""
        return self.phase is RunPhase.COMPLETED and not self.failures


@dataclass(slots=True)
class Orchestrator:
    """
    Drives one devnet generation run.

    Holds no state across runs besides the last report.
    """

    config: DevnetConfig
    """Run configuration."""

    report: RunReport = field(default_factory=RunReport)
    """Report of the current or most recent run."""

    def run(self, roster: Roster) -> RunReport:
        """
        Generate node trees and the manifest for `roster`.

        Args:
            roster: Participants and the shared genesis document.

        Returns:
            The report of the completed run.

        Raises:
            ConfigurationError: From planning or preparing the output root.
            ArtifactWriteError: Under the strict policy, or for the genesis node.
            ManifestError: If the manifest cannot be built, checked or written.
        """
        self.report = report = RunReport()
        try:
            participants = roster.participants(self.config.num_archive_nodes)
            facts = plan_topology(participants, self.config)

            self._enter(RunPhase.PREPARE)
            self._prepare()

            self._enter(RunPhase.MATERIALIZE)
            self._materialize(participants, facts, roster.genesis)

            self._enter(RunPhase.COMPOSE)
            self._compose()
        except DevnetError as e:
            report.failed_in = report.phase
            report.phase = RunPhase.FAILED
            logger.error("Run failed during %s: %s", report.failed_in, e)
            raise

        report.phase = RunPhase.COMPLETED
        logger.info(
            "Generated %d nodes under %s (%d skipped)",
            len(report.materialized),
            self.config.output_root,
            len(report.failures),
        )
        return report

    def _enter(self, phase: RunPhase) -> None:
        logger.debug("Entering %s phase", phase)
        self.report.phase = phase

    def _prepare(self) -> None:
        """Create a fresh output root."""
        root = self.config.output_root
        if root.exists() or root.is_symlink():
            if not self.config.override:
                raise OutputExistsError(root)

            logger.warning("Overriding existing output root %s", root)
            try:
                if root.is_dir() and not root.is_symlink():
                    shutil.rmtree(root)
                else:
                    root.unlink()
            except OSError as e:
                raise ConfigurationError(f"Cannot remove output root {root}: {e}") from e

        try:
            root.mkdir(parents=True)
        except OSError as e:
            raise ConfigurationError(f"Cannot create output root {root}: {e}") from e

    def _materialize(
        self,
        participants: Sequence[Participant],
        facts: Sequence[TopologyFact],
        genesis: Mapping[str, Any],
    ) -> None:
        """Write credentials and node artifacts for every participant."""
        writer = NodeArtifactWriter(self.config)
        for participant, fact in zip(participants, facts, strict=True):
            try:
                write_credentials(writer.node_dir(participant), participant)
                tree = writer.write(participant, fact, genesis)
            except ArtifactWriteError as e:
                # Ordinal 0 is the bootstrap peer of every other node.
                if self.config.error_policy is ErrorPolicy.STRICT or fact.bootstrap.is_genesis:
                    raise
                logger.warning("Skipping %s: %s", participant.node_id, e)
                self.report.failures.append(e)
                continue

            logger.info(
                "Materialized %s %s at %s",
                participant.role,
                participant.node_id,
                fact.address,
            )
            self.report.materialized.append(ManifestEntry(participant, fact, tree))

    def _compose(self) -> None:
        """Build, verify and write the manifest."""
        entries = self.report.materialized
        manifest = ManifestBuilder(self.config).build(entries)
        check_consistency(manifest, entries, self.config)

        path = self.config.manifest_path
        write_manifest(manifest, path)
        self.report.manifest_path = path
