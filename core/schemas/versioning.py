"""
Schemas & Canonicalization
File: versioning.py

Purpose: Centralize serialized tree format version constants.
No imports from other schema files to avoid circular dependencies.
"""

from typing import Literal

# Format tag embedded in every serialized tree document
TREE_FORMAT: str = "airdrop-merkle-v1"

# Metadata version written by dump_tree
FORMAT_VERSION: str = "1.0.0"

# Type alias for the tree format tag
TreeFormat = Literal["airdrop-merkle-v1"]

SUPPORTED_TREE_FORMATS: frozenset[str] = frozenset({"airdrop-merkle-v1"})


class UnsupportedFormatVersionError(ValueError):
    """Raised when a serialized tree declares an unknown format."""

    def __init__(self, version: str, supported: frozenset[str] | None = None) -> None:
        self.version = version
        self.supported = supported or SUPPORTED_TREE_FORMATS
        super().__init__(
            f"Unsupported tree format: '{version}'. "
            f"Supported formats: {sorted(self.supported)}"
        )


def assert_supported_tree_format(version: str) -> None:
    """
    Validate that the given tree format is supported.

    Raises:
        UnsupportedFormatVersionError: If the format is not supported.
    """
    if version not in SUPPORTED_TREE_FORMATS:
        raise UnsupportedFormatVersionError(version)
