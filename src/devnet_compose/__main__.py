"""
Devnet generation CLI entry point.

Materialize a local devnet from a network builder roster.

Usage::

    python -m devnet_compose network.json
    python -m devnet_compose network.json --num-archive-nodes 2 --override
    python -m devnet_compose network.json --output ./local/docker-compose --subnet 10.0.7.0/24

Options:
    --output             Output root (default: ./local/docker-compose)
    --image              Container image for every node
    --subnet             Bridge network subnet (default: 10.0.7.0/24)
    --network-id         Network id written into node configs (default: 54321)
    --num-archive-nodes  Archive nodes to deploy after the validators (default: 0)
    --override           Replace an existing output root
    --lenient            Skip participants whose files fail to write instead of aborting
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from devnet_compose.config import (
    DEFAULT_IMAGE,
    DEFAULT_NETWORK_ID,
    DEFAULT_OUTPUT_ROOT,
    DEFAULT_SUBNET,
    DevnetConfig,
    ErrorPolicy,
)
from devnet_compose.exceptions import DevnetError
from devnet_compose.orchestrator import Orchestrator
from devnet_compose.roster import Roster

logger = logging.getLogger(__name__)

PACKAGE_LOGGER: Final = "devnet_compose"
"""Root logger of the package. Names below it are printed relative to it."""

LOG_DATEFMT: Final = "%H:%M:%S"
"""Timestamp format of CLI log lines."""


class ColoredFormatter(logging.Formatter):
    """
    Terminal formatter that colors the level and the logger name.

    Logger names are shown relative to the package, so a record from
    `devnet_compose.topology.plan` prints as `topology.plan`.
    """

    DIM = "\x1b[2m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: DIM,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format a record as `time level name: message`."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        name = record.name.removeprefix(f"{PACKAGE_LOGGER}.")
        line = (
            f"{self.DIM}{self.formatTime(record, self.datefmt)}{self.RESET} "
            f"{color}{record.levelname:8}{self.RESET} "
            f"{self.BLUE}{name}{self.RESET}: {record.getMessage()}"
        )
        # Tracebacks stay uncolored.
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """
    Send log records to stderr.

    Colors are used only when stderr is a terminal and `no_color` is unset.
    """
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if no_color or not sys.stderr.isatty():
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt=LOG_DATEFMT,
        )
    else:
        formatter = ColoredFormatter(datefmt=LOG_DATEFMT)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    """Command-line parser."""
    parser = argparse.ArgumentParser(
        prog="devnet-compose",
        description="Generate per-node trees and a docker-compose manifest for a local devnet",
    )
    parser.add_argument("roster", type=Path, help="Network builder roster (JSON)")
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT_ROOT,
        help=f"Output root (default: {DEFAULT_OUTPUT_ROOT})",
    )
    parser.add_argument("--image", default=DEFAULT_IMAGE, help="Container image for every node")
    parser.add_argument(
        "--subnet",
        default=str(DEFAULT_SUBNET),
        help=f"Bridge network subnet (default: {DEFAULT_SUBNET})",
    )
    parser.add_argument(
        "--network-id",
        type=int,
        default=DEFAULT_NETWORK_ID,
        help=f"Network id for node configs (default: {DEFAULT_NETWORK_ID})",
    )
    parser.add_argument(
        "--num-archive-nodes",
        type=int,
        default=0,
        help="Archive nodes to deploy after the validators (default: 0)",
    )
    parser.add_argument(
        "--override",
        action="store_true",
        help="Delete and regenerate an existing output root",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Skip participants whose files fail to write instead of aborting",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Run the CLI.

    Returns:
        0 on success, 1 if the run failed or skipped participants.
    """
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, no_color=args.no_color)

    try:
        config = DevnetConfig(
            output_root=args.output,
            subnet=args.subnet,
            image=args.image,
            network_id=args.network_id,
            num_archive_nodes=args.num_archive_nodes,
            override=args.override,
            error_policy=ErrorPolicy.LENIENT if args.lenient else ErrorPolicy.STRICT,
        )
    except ValidationError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    try:
        roster = Roster.from_json_file(args.roster)
        report = Orchestrator(config).run(roster)
    except DevnetError as e:
        logger.error("%s", e)
        return 1

    for failure in report.failures:
        logger.error("Skipped %s: %s", failure.participant_id, failure.artifact)
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
