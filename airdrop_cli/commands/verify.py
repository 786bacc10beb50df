"""
CLI Verify Command

Verify a serialized tree offline or from remote storage:
- Rebuild the tree and compare roots (embedded and, if given, published)
- Run the full integrity scan

Usage:
    airdrop verify tree.json [--expected-root 0x...] [--json] [--debug]
    airdrop verify --cid Qm... [--expected-root 0x...]
"""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from typing import Any

from core.merkle.eligibility import MerkleVerification
from core.schemas.errors import AirdropException, IntegrityMismatchException

from airdrop_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    load_tree_from_args,
    print_json,
    report_error,
)


logger = logging.getLogger(__name__)


@dataclass
class VerifySummary:
    """Summary of tree verification for CLI output."""
    source: str = ""
    root: str = ""
    recipients: int = 0
    root_ok: bool = False
    integrity_ok: bool = False
    checks: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if not d["checks"]:
            del d["checks"]
        if not d["errors"]:
            del d["errors"]
        return d

    @property
    def all_ok(self) -> bool:
        return self.root_ok and self.integrity_ok


def print_summary_human(summary: VerifySummary) -> None:
    """Print summary in human-readable format."""
    print(f"source: {summary.source}")
    print(f"root: {summary.root}")
    print(f"recipients: {summary.recipients}")
    print(f"root_ok: {str(summary.root_ok).lower()}")
    print(f"integrity_ok: {str(summary.integrity_ok).lower()}")

    if summary.errors:
        print(f"\nerrors ({len(summary.errors)}):")
        for err in summary.errors[:10]:
            print(f"  ✗ {err}")

    if summary.checks:
        passed = sum(1 for c in summary.checks if c["ok"])
        print(f"\nchecks: {passed} passed, {len(summary.checks) - passed} failed")
        for check in summary.checks:
            status = "✓" if check["ok"] else "✗"
            print(f"  {status} {check['check_id']}: {check['message']}")


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Returns:
        Exit code (2 when the root or the integrity scan fails)
    """
    source = args.url or args.cid or args.tree or "(config)"
    summary = VerifySummary(source=source)

    try:
        tree = load_tree_from_args(args)
    except IntegrityMismatchException as e:
        summary.root = e.actual_root
        summary.errors.append(e.message)
        if args.json:
            print_json(summary.to_dict())
        else:
            print_summary_human(summary)
        logger.warning("Verification failed: root mismatch")
        return EXIT_VERIFICATION_FAILED
    except AirdropException as e:
        report_error(e, args.json)
        return EXIT_RUNTIME_ERROR
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    summary.root = tree.root_hex
    summary.recipients = len(tree)
    summary.root_ok = True

    result = MerkleVerification(tree).validate_integrity()
    summary.integrity_ok = result.ok
    summary.errors.extend(result.get_error_messages())
    if args.debug:
        summary.checks = [
            {"check_id": c.check_id, "ok": c.ok, "message": c.message}
            for c in result.checks
        ]

    if args.json:
        print_json(summary.to_dict())
    else:
        print_summary_human(summary)

    if summary.all_ok:
        logger.info("Verification passed")
        return EXIT_SUCCESS
    logger.warning("Verification failed")
    return EXIT_VERIFICATION_FAILED
