"""
Shared helpers for CLI commands.
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from typing import Any

from core.http.client import HttpClient
from core.merkle.merkle_tree import MerkleTree
from core.schemas.errors import AirdropException, StructuralViolationException

from orchestrator.artifacts.io import load_tree_file
from orchestrator.artifacts.remote import fetch_tree


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def load_tree_from_args(args: Namespace) -> MerkleTree:
    """
    Load the tree named on the command line.

    Uses args.tree (a path), or args.url / args.cid when present. The
    configured expected root applies unless --expected-root overrides it.
    """
    cli_config = getattr(args, "cli_config", None)
    runtime = cli_config.runtime if cli_config is not None else None
    expected_root = getattr(args, "expected_root", None) or (
        runtime.merkle.expected_root if runtime is not None else None
    )

    url = getattr(args, "url", None)
    cid = getattr(args, "cid", None)
    if url or cid:
        gateway = runtime.merkle.ipfs_gateway if runtime is not None else None
        client = (
            HttpClient.from_config(runtime.http, proxy=runtime.proxy)
            if runtime is not None else HttpClient()
        )
        kwargs: dict[str, Any] = {"expected_root": expected_root}
        if gateway:
            kwargs["gateway"] = gateway
        with client:
            return fetch_tree(url=url, cid=cid, client=client, **kwargs)

    tree_path = getattr(args, "tree", None) or (
        runtime.merkle.tree_path if runtime is not None else None
    )
    if not tree_path:
        raise ValueError("No tree given (pass a tree file, --url or --cid)")
    return load_tree_file(tree_path, expected_root=expected_root)


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def report_error(e: AirdropException, output_json: bool = False) -> None:
    """Print a structured error (all violations for structural errors)."""
    if output_json:
        print_json({"ok": False, "error": e.to_error_model().model_dump()})
        return
    print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
    if isinstance(e, StructuralViolationException):
        for violation in e.violations[:50]:
            print(f"  ✗ {violation.code}: {violation.message}", file=sys.stderr)
        if len(e.violations) > 50:
            print(f"  ... {len(e.violations) - 50} more", file=sys.stderr)
