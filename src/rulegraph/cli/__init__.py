"""Command-line entry point for rulegraph."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from rulegraph import __version__
from rulegraph.cli.graph import handle_graph_command, register_graph_arguments
from rulegraph.config import LOG_LEVELS, get_settings
from rulegraph.core.errors import main_with_error_handling
from rulegraph.logging import configure_logging

DEFAULT_LOG_LEVEL = "WARNING"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rulegraph",
        description="Create a graph of metric dependencies from Prometheus recording rules.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log level for structured logs on stderr (default: WARNING, "
        "or RULEGRAPH_LOG_LEVEL)",
    )
    register_graph_arguments(parser)
    return parser


@main_with_error_handling()
def run(args: argparse.Namespace) -> int:
    """Set up logging from flags and settings, then run the graph command."""
    # Settings can fail to load; that failure is logged to stderr as well
    configure_logging(args.log_level or DEFAULT_LOG_LEVEL)
    if args.log_level is None:
        configure_logging(get_settings().log_level)

    return handle_graph_command(args)


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    sys.exit(run(args))
