"""Command-line interface for declviews."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from .config import load_properties
from .errors import DeclViewsError
from .pipeline import run_files
from .utils.postprocessor import GRAPH_FORMATS

COMMAND_VIEWS = {
    "stub": ("stub",),
    "callgraph": ("callgraph",),
    "all": ("stub", "callgraph"),
}


def setup_logging(verbose=False, quiet=False):
    """Configure the loguru sink on stderr."""
    level = "WARNING"
    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    logger.remove()
    logger.add(sys.stderr, level=level, format="{level}: {message}")


def _add_common_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("units", nargs="+", help="Translation unit JSON documents")
    parser.add_argument("--out", "-o", default=".", help="Output directory (default: .)")
    parser.add_argument("--config", help="Optional JSON config file with view properties")
    parser.add_argument(
        "--option",
        action="append",
        default=[],
        metavar="SECTION.KEY=VALUE",
        help="Override a single property (may be repeated)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="declviews",
        description="Generate C++ test doubles and call graphs from declaration records",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Log progress")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Log errors only")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

    stub_parser = subparsers.add_parser("stub", help="Generate the test double header")
    _add_common_arguments(stub_parser)
    stub_parser.add_argument(
        "--interface",
        "-i",
        action="append",
        dest="interfaces",
        help="Interface to stub (may be repeated, default: all interfaces)",
    )

    callgraph_parser = subparsers.add_parser("callgraph", help="Build the call graph")
    _add_common_arguments(callgraph_parser)
    callgraph_parser.add_argument(
        "--format",
        choices=GRAPH_FORMATS,
        help="Graph document format (default: graphml)",
    )

    all_parser = subparsers.add_parser("all", help="Generate every artifact")
    _add_common_arguments(all_parser)
    all_parser.add_argument("--interface", "-i", action="append", dest="interfaces")
    all_parser.add_argument("--format", choices=GRAPH_FORMATS)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])
    setup_logging(args.verbose, args.quiet)

    try:
        properties = load_properties(args.config, args.option)
    except ValueError as exc:
        parser.error(str(exc))
    if getattr(args, "format", None):
        properties["callgraph"]["graph_format"] = args.format

    try:
        result = run_files(
            args.units,
            views=COMMAND_VIEWS[args.command],
            interfaces=getattr(args, "interfaces", None),
            properties=properties,
            output_dir=Path(args.out),
        )
    except DeclViewsError as exc:
        logger.error("{}", exc)
        return 1

    for diagnostic in result.diagnostics:
        print(f"diagnostic: {diagnostic}", file=sys.stderr)
    for artifact in result.artifacts:
        print(f"Wrote {artifact}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
