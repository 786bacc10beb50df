"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m airdrop_cli generate <recipients> --out PATH [--encoding packed|standard] [--json]
    python -m airdrop_cli verify [tree] [--url URL | --cid CID] [--expected-root 0x..] [--json] [--debug]
    python -m airdrop_cli proof <tree> [address] [--index N] [--json]
    python -m airdrop_cli check <tree> <address>... [--file PATH] [--json]
    python -m airdrop_cli stats <tree> [--threshold N] [--json]
    python -m airdrop_cli config --init

Environment Variables:
    AIRDROP_LEAF_ENCODING   Leaf encoding (packed or standard)
    AIRDROP_MERKLE_ROOT     Published root to verify against
    AIRDROP_TREE_PATH       Local tree document
    AIRDROP_TREE_URL        Remote tree document
    AIRDROP_IPFS_CID        Tree CID on IPFS
    AIRDROP_LOG_LEVEL       Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from airdrop_cli import __version__
from airdrop_cli.commands import check, generate, proof, stats, verify
from airdrop_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
)
from airdrop_cli.config import DEFAULT_CONFIG_FILE, get_default_config_template, load_config

__all__ = [
    "EXIT_SUCCESS",
    "EXIT_RUNTIME_ERROR",
    "EXIT_VERIFICATION_FAILED",
    "create_parser",
    "main",
]


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def _add_output_flags(parser: argparse.ArgumentParser, debug: bool = False) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    if debug:
        parser.add_argument(
            "--debug",
            action="store_true",
            default=False,
            help="Include detailed checks in output",
        )


def _add_source_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--url", type=str, default=None, help="Fetch the tree from a URL")
    parser.add_argument("--cid", type=str, default=None, help="Fetch the tree from IPFS by CID")
    parser.add_argument(
        "--expected-root",
        type=str,
        default=None,
        help="Published root the tree must rebuild to (0x + 64 hex)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="airdrop",
        description="Airdrop Merkle CLI - Build, verify and query airdrop allocation trees.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./airdrop.json or ~/.config/airdrop/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- generate command ---
    generate_parser = subparsers.add_parser(
        "generate",
        help="Build a tree from a recipient list",
        description="Validate recipients, build the tree and write its JSON document.",
    )
    generate_parser.add_argument(
        "recipients",
        type=str,
        help="Recipient list (.csv, .json or a Sablier campaign export)",
    )
    generate_parser.add_argument(
        "--out", "-o",
        type=str,
        default="tree.json",
        help="Output path for the tree document (default: tree.json)",
    )
    generate_parser.add_argument(
        "--encoding",
        type=str,
        choices=["packed", "standard"],
        default=None,
        help="Leaf encoding (default: from config or packed)",
    )
    generate_parser.add_argument(
        "--campaign",
        type=str,
        default=None,
        help="Campaign name recorded in the metadata",
    )
    _add_output_flags(generate_parser)
    generate_parser.set_defaults(func=generate.generate_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a tree document",
        description="Rebuild the tree, compare roots and run the integrity scan.",
    )
    verify_parser.add_argument(
        "tree",
        type=str,
        nargs="?",
        default=None,
        help="Path to tree document (default: tree_path from config)",
    )
    _add_source_flags(verify_parser)
    _add_output_flags(verify_parser, debug=True)
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- proof command ---
    proof_parser = subparsers.add_parser(
        "proof",
        help="Print the claim arguments of a recipient",
        description="Look up a recipient by address or index and print its proof.",
    )
    proof_parser.add_argument("tree", type=str, help="Path to tree document")
    proof_parser.add_argument("address", type=str, nargs="?", default=None, help="Recipient address")
    proof_parser.add_argument("--index", type=int, default=None, help="Look up by leaf index instead")
    _add_output_flags(proof_parser)
    proof_parser.set_defaults(func=proof.proof_cmd)

    # --- check command ---
    check_parser = subparsers.add_parser(
        "check",
        help="Check eligibility of several addresses",
    )
    check_parser.add_argument("tree", type=str, help="Path to tree document")
    check_parser.add_argument("addresses", type=str, nargs="*", help="Addresses to check")
    check_parser.add_argument("--file", type=str, default=None, help="File with one address per line")
    _add_output_flags(check_parser)
    check_parser.set_defaults(func=check.check_cmd)

    # --- stats command ---
    stats_parser = subparsers.add_parser(
        "stats",
        help="Show allocation statistics",
    )
    stats_parser.add_argument("tree", type=str, help="Path to tree document")
    stats_parser.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="List allocations at or above this amount",
    )
    _add_output_flags(stats_parser)
    stats_parser.set_defaults(func=stats.stats_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default=DEFAULT_CONFIG_FILE,
        help=f"Path for config file (default: {DEFAULT_CONFIG_FILE})",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (AIRDROP_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        config_path = Path(args.path)
        config = load_config(config_path if config_path.exists() else None)
        config_dict = config.runtime.to_dict()
        config_dict["log_level"] = config.log_level
        config_dict["log_file"] = config.log_file
        config_dict["default_output_format"] = config.default_output_format
        print(json.dumps(config_dict, indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: airdrop config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed or not eligible)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    # Attach config to args for commands to use
    args.cli_config = config
    if config.default_output_format == "json" and hasattr(args, "json"):
        args.json = True

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
