"""
Orchestration

Wires the Merkle engine to its surroundings: serialized tree IO, remote
loading and the claim session that owns the campaign's tree.

Public API:
- ClaimSession: Owner of the loaded tree, answers lookup queries
- ClaimStatusReader: Protocol for the already-claimed chain read
- LookupResult: Eligibility status plus claim arguments
- load_tree / dump_tree: Serialized tree round-trip with root check
- fetch_tree: Remote (URL / IPFS) tree loading
"""

from orchestrator.artifacts import (
    dump_tree,
    dumps_tree,
    fetch_tree,
    load_recipients_file,
    load_tree,
    load_tree_file,
    save_tree_file,
)
from orchestrator.claim_session import (
    ClaimSession,
    ClaimStatusReader,
    LookupResult,
)

__all__ = [
    "ClaimSession",
    "ClaimStatusReader",
    "LookupResult",
    "dump_tree",
    "dumps_tree",
    "fetch_tree",
    "load_recipients_file",
    "load_tree",
    "load_tree_file",
    "save_tree_file",
]
