"""
CLI Proof Command

Print the claim arguments of one recipient.

Usage:
    airdrop proof tree.json 0xRecipient [--json]
    airdrop proof tree.json --index 42
"""

from __future__ import annotations

import sys
from argparse import Namespace

from core.merkle.merkle_proofs import MerkleVerifier
from core.schemas.errors import AirdropException

from airdrop_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    load_tree_from_args,
    print_json,
    report_error,
)


def proof_cmd(args: Namespace) -> int:
    """
    Execute the proof command.

    Returns:
        Exit code (2 when the address or index is not in the tree)
    """
    if args.address is None and args.index is None:
        print("Error: pass an address or --index", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        tree = load_tree_from_args(args)
        key = args.index if args.index is not None else args.address
        proof = tree.proof_for(key)
    except AirdropException as e:
        report_error(e, args.json)
        return EXIT_RUNTIME_ERROR
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if proof is None:
        if args.json:
            print_json({"eligible": False, "query": str(key), "root": tree.root_hex})
        else:
            print(f"Not eligible: {key}")
        return EXIT_VERIFICATION_FAILED

    check = MerkleVerifier.check(proof)
    data = proof.to_dict()
    data["verified"] = check.valid
    if args.json:
        print_json(data)
    else:
        print(f"index: {data['index']}")
        print(f"recipient: {data['recipient']}")
        print(f"amount: {data['amount']}")
        print(f"root: {data['root']}")
        print(f"proof ({len(data['proof'])}):")
        for sibling in data["proof"]:
            print(f"  {sibling}")
        print(f"verified: {str(check.valid).lower()}")

    return EXIT_SUCCESS if check.valid else EXIT_VERIFICATION_FAILED
