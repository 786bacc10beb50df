"""
Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Version constants
from .versioning import (
    FORMAT_VERSION,
    SUPPORTED_TREE_FORMATS,
    TREE_FORMAT,
    TreeFormat,
    UnsupportedFormatVersionError,
    assert_supported_tree_format,
)

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonicalize_value,
    dumps_canonical,
    ensure_utc,
    format_datetime_canonical,
    loads_canonical,
)

# Error models and exceptions
from .errors import (
    AirdropError,
    AirdropException,
    CanonicalizationException,
    ErrorCodes,
    IntegrityMismatchException,
    MalformedInputException,
    MerkleVerificationException,
    RemoteFetchException,
    StructuralViolationException,
    TreeDataFormatException,
    Violation,
)

# Serialized tree
from .tree_data import (
    LeafEntry,
    SerializedTree,
    TreeMetadata,
)

# Claim payloads
from .claims import (
    CampaignVariant,
    ClaimParams,
    EligibilityStatus,
)

# Verification results
from .verification import (
    CheckResult,
    CheckSeverity,
    VerificationResult,
)


__all__ = [
    # Versioning
    "TREE_FORMAT",
    "FORMAT_VERSION",
    "SUPPORTED_TREE_FORMATS",
    "TreeFormat",
    "UnsupportedFormatVersionError",
    "assert_supported_tree_format",
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonicalize_value",
    "dumps_canonical",
    "ensure_utc",
    "format_datetime_canonical",
    "loads_canonical",
    # Errors
    "AirdropError",
    "AirdropException",
    "CanonicalizationException",
    "ErrorCodes",
    "IntegrityMismatchException",
    "MalformedInputException",
    "MerkleVerificationException",
    "RemoteFetchException",
    "StructuralViolationException",
    "TreeDataFormatException",
    "Violation",
    # Tree data
    "LeafEntry",
    "SerializedTree",
    "TreeMetadata",
    # Claims
    "CampaignVariant",
    "ClaimParams",
    "EligibilityStatus",
    # Verification
    "CheckResult",
    "CheckSeverity",
    "VerificationResult",
]
