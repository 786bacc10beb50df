"""
CLI Stats Command

Allocation statistics of a tree.

Usage:
    airdrop stats tree.json [--threshold 1000000] [--json]
"""

from __future__ import annotations

import sys
from argparse import Namespace

from core.merkle.eligibility import MerkleVerification
from core.schemas.errors import AirdropException

from airdrop_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    load_tree_from_args,
    print_json,
    report_error,
)


def stats_cmd(args: Namespace) -> int:
    """Execute the stats command."""
    try:
        tree = load_tree_from_args(args)
    except AirdropException as e:
        report_error(e, args.json)
        return EXIT_RUNTIME_ERROR
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    verification = MerkleVerification(tree)
    data = verification.statistics().to_dict()
    data["leaf_encoding"] = tree.encoding.value

    large = []
    if args.threshold is not None:
        large = [
            leaf.to_dict() for leaf in verification.find_large_allocations(args.threshold)
        ]
        data["large_allocations"] = large

    if args.json:
        print_json(data)
        return EXIT_SUCCESS

    for key, value in data.items():
        if key != "large_allocations":
            print(f"{key}: {value}")
    if args.threshold is not None:
        print(f"\nallocations >= {args.threshold} ({len(large)}):")
        for leaf in large:
            print(f"  {leaf['recipient']}  {leaf['amount']}  (index {leaf['index']})")
    return EXIT_SUCCESS
