"""
CLI Check Command

Batch eligibility check.

Usage:
    airdrop check tree.json 0xA... 0xB... [--file addresses.txt] [--json]
"""

from __future__ import annotations

import sys
from argparse import Namespace
from pathlib import Path

from core.crypto.addresses import shorten_address
from core.merkle.eligibility import MerkleVerification
from core.schemas.errors import AirdropException

from airdrop_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    load_tree_from_args,
    print_json,
    report_error,
)


def _collect_addresses(args: Namespace) -> list[str]:
    addresses = list(args.addresses or [])
    if args.file:
        for line in Path(args.file).read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                addresses.append(line)
    return addresses


def check_cmd(args: Namespace) -> int:
    """Execute the check command."""
    try:
        tree = load_tree_from_args(args)
        addresses = _collect_addresses(args)
    except AirdropException as e:
        report_error(e, args.json)
        return EXIT_RUNTIME_ERROR
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if not addresses:
        print("Error: no addresses given", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    result = MerkleVerification(tree).batch_check_eligibility(addresses)

    if args.json:
        print_json(result.to_dict())
        return EXIT_SUCCESS

    print(f"eligible ({len(result.eligible)}):")
    for entry in result.eligible:
        print(f"  ✓ {entry.leaf.recipient}  amount={entry.leaf.amount}  index={entry.leaf.index}")
    print(f"ineligible ({len(result.ineligible)}):")
    for address in result.ineligible:
        print(f"  - {shorten_address(address)}")
    if result.errors:
        print(f"errors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  ✗ {error['address']}: {error['error']}")
    return EXIT_SUCCESS
