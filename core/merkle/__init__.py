"""
Merkle Engine
Airdrop Merkle tree construction, proof generation/verification and
eligibility queries.

This package provides:
- AllocationRecord: one (index, recipient, amount) leaf source
- LeafEncoding / hash_leaf: leaf byte layout of the target verifier
- MerkleTree: immutable tree with lookup and proof generation
- verify_proof: stateless proof check returning a diagnostic reason
- MerkleVerification: eligibility, statistics and integrity scan

Commitment Rules:
1. Leaves sorted by index before hashing
2. Pair hashing: keccak256(min(a, b) + max(a, b))
3. Odd node paired with itself; its proof carries it as sibling
4. Single leaf: root = leaf hash

Usage:
    from core.merkle import AllocationRecord, MerkleTree, verify_proof

    tree = MerkleTree.build(records)
    proof = tree.get_proof("0x...")
    assert verify_proof(proof.leaf, proof.siblings, tree.root).valid
"""
from .records import (
    UINT128_MAX,
    UINT256_MAX,
    AllocationRecord,
    parse_uint,
)

from .leaf import (
    DEFAULT_LEAF_ENCODING,
    LeafEncoding,
    encode_leaf,
    encode_record,
    hash_leaf,
    hash_record,
)

from .merkle_tree import (
    MerkleProof,
    MerkleTree,
    TreeNode,
    build_levels,
    build_merkle_root,
    collect_violations,
    compute_tree_depth,
    hash_pair,
    process_proof,
    validate_records,
)

from .merkle_proofs import (
    MerkleProver,
    MerkleVerifier,
    ProofCheck,
    batch_verify_proofs,
    is_valid_proof,
    validate_proof_payload,
    verify_proof,
)

from .eligibility import (
    BatchEligibilityResult,
    EligibilityResult,
    MerkleVerification,
    TreeStatistics,
)


__all__ = [
    # Records
    "AllocationRecord",
    "UINT128_MAX",
    "UINT256_MAX",
    "parse_uint",
    # Leaf encoding
    "LeafEncoding",
    "DEFAULT_LEAF_ENCODING",
    "encode_leaf",
    "encode_record",
    "hash_leaf",
    "hash_record",
    # Tree
    "MerkleTree",
    "MerkleProof",
    "TreeNode",
    "hash_pair",
    "process_proof",
    "build_levels",
    "build_merkle_root",
    "compute_tree_depth",
    "collect_violations",
    "validate_records",
    # Verification
    "ProofCheck",
    "verify_proof",
    "is_valid_proof",
    "batch_verify_proofs",
    "validate_proof_payload",
    "MerkleProver",
    "MerkleVerifier",
    # Eligibility
    "MerkleVerification",
    "EligibilityResult",
    "BatchEligibilityResult",
    "TreeStatistics",
]
