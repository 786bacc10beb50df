"""
CLI Generate Command

Build a tree from a recipient list and write the serialized tree.

Usage:
    airdrop generate recipients.csv --out tree.json [--encoding standard] [--json]
"""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from pathlib import Path

from core.merkle.eligibility import MerkleVerification
from core.merkle.merkle_tree import MerkleTree
from core.schemas.errors import AirdropException

from orchestrator.artifacts.io import load_recipients_file, save_tree_file

from airdrop_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    print_json,
    report_error,
)


logger = logging.getLogger(__name__)


def generate_cmd(args: Namespace) -> int:
    """
    Execute the generate command.

    Returns:
        Exit code
    """
    recipients_path = Path(args.recipients)
    if not recipients_path.exists():
        print(f"Error: Recipients file not found: {recipients_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    cli_config = getattr(args, "cli_config", None)
    encoding = args.encoding or (
        cli_config.merkle.leaf_encoding if cli_config is not None else "packed"
    )
    campaign = args.campaign or (
        cli_config.campaign.name if cli_config is not None else None
    )

    try:
        records = load_recipients_file(recipients_path)
        tree = MerkleTree(records, encoding)
    except AirdropException as e:
        report_error(e, args.json)
        return EXIT_RUNTIME_ERROR

    # A freshly built tree must pass its own scan before it is published
    integrity = MerkleVerification(tree).validate_integrity()
    if not integrity.ok:
        for message in integrity.get_error_messages():
            print(f"  ✗ {message}", file=sys.stderr)
        return EXIT_VERIFICATION_FAILED

    out_path = save_tree_file(tree, args.out, campaign=campaign)
    stats = MerkleVerification(tree).statistics()

    summary = {
        "root": tree.root_hex,
        "leaf_encoding": tree.encoding.value,
        "recipients": len(tree),
        "total_allocation": str(stats.total_allocation),
        "depth": tree.depth,
        "out": str(out_path),
    }
    if args.json:
        print_json(summary)
    else:
        for key, value in summary.items():
            print(f"{key}: {value}")

    logger.info("Generated tree %s for %d recipients", tree.root_hex, len(tree))
    return EXIT_SUCCESS
