"""
Artifacts - Tree Serialization & Remote Loading

Provides functionality for saving, loading and fetching serialized trees
and for importing recipient lists.
"""

from orchestrator.artifacts.io import (
    dump_tree,
    dumps_tree,
    load_tree,
    save_tree_file,
    load_tree_file,
    parse_recipients_csv,
    parse_recipients_json,
    parse_sablier_envelope,
    load_recipients_file,
)

from orchestrator.artifacts.remote import (
    ipfs_url,
    fetch_tree_data,
    fetch_tree,
    fetch_tree_from_config,
)

__all__ = [
    # IO
    "dump_tree",
    "dumps_tree",
    "load_tree",
    "save_tree_file",
    "load_tree_file",
    "parse_recipients_csv",
    "parse_recipients_json",
    "parse_sablier_envelope",
    "load_recipients_file",
    # Remote
    "ipfs_url",
    "fetch_tree_data",
    "fetch_tree",
    "fetch_tree_from_config",
]
