"""
Merkle Engine - Proof Verifier
Stateless inclusion checks that mirror the on-chain verifier.

This module provides:
- verify_proof: fold a leaf with its siblings and compare to a root,
  returning a ProofCheck with a diagnostic reason instead of raising
- is_valid_proof / batch_verify_proofs: shortcuts over verify_proof
- validate_proof_payload: structural checks on a claim payload before
  it is handed to a wallet or contract
- MerkleProver / MerkleVerifier: class-based wrappers

Verification never raises. A False result with reason set is an
ordinary outcome; callers decide whether it is a defect.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from core.crypto.addresses import is_valid_address
from core.crypto.hashing import HASH_LENGTH, is_hash_hex, parse_hash, to_hex
from core.merkle.leaf import DEFAULT_LEAF_ENCODING, LeafEncoding, hash_record
from core.merkle.merkle_tree import MerkleProof, MerkleTree, process_proof
from core.merkle.records import AMOUNT_BITS, INDEX_BITS, AllocationRecord, parse_uint
from core.schemas.errors import AirdropException, ErrorCodes, MalformedInputException

logger = logging.getLogger(__name__)

LeafInput = Union[AllocationRecord, Mapping[str, Any], bytes]
HashInput = Union[bytes, str]


@dataclass(frozen=True)
class ProofCheck:
    """
    Outcome of a proof verification.

    Attributes:
        valid: Whether the recomputed root matches
        reason: Why verification failed (None when valid)
        computed_root: Root recomputed from leaf and siblings, when the
            inputs were well-formed enough to compute one
    """
    valid: bool
    reason: Optional[str] = None
    computed_root: Optional[bytes] = None

    def __bool__(self) -> bool:
        return self.valid

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "reason": self.reason,
            "computed_root": to_hex(self.computed_root) if self.computed_root else None,
        }


def _leaf_hash(leaf: LeafInput, encoding: LeafEncoding) -> bytes:
    if isinstance(leaf, AllocationRecord):
        return hash_record(leaf, encoding)
    if isinstance(leaf, (bytes, bytearray)):
        return parse_hash(leaf, "leaf")
    if isinstance(leaf, Mapping):
        recipient = leaf.get("recipient", leaf.get("address"))
        record = AllocationRecord.create(leaf.get("index"), recipient, leaf.get("amount"))
        return hash_record(record, encoding)
    raise TypeError(f"Unsupported leaf type: {type(leaf).__name__}")


def verify_proof(
    leaf: LeafInput,
    siblings: Sequence[HashInput],
    root: HashInput,
    encoding: LeafEncoding | str = DEFAULT_LEAF_ENCODING,
) -> ProofCheck:
    """
    Verify that a leaf belongs to the tree with the given root.

    Args:
        leaf: An AllocationRecord, a mapping with index/recipient/amount,
            or a precomputed 32-byte leaf hash
        siblings: Sibling hashes from bottom to top (bytes or 0x-hex)
        root: Claimed root (bytes or 0x-hex)
        encoding: Leaf scheme of the target verifier

    Returns:
        ProofCheck; valid is True only on an exact byte match
    """
    try:
        scheme = LeafEncoding.parse(encoding)
        leaf_hash = _leaf_hash(leaf, scheme)
    except (AirdropException, TypeError, ValueError) as e:
        return ProofCheck(valid=False, reason=f"malformed leaf: {e}")

    try:
        expected = parse_hash(root, "root")
    except AirdropException as e:
        return ProofCheck(valid=False, reason=f"malformed root: {e}")

    if isinstance(siblings, (str, bytes, bytearray)) or not isinstance(siblings, Sequence):
        return ProofCheck(valid=False, reason="malformed proof: siblings must be a list of hashes")

    parsed: list[bytes] = []
    for i, sibling in enumerate(siblings):
        try:
            parsed.append(parse_hash(sibling, f"siblings[{i}]"))
        except AirdropException as e:
            return ProofCheck(valid=False, reason=f"malformed sibling: {e}")

    computed = process_proof(leaf_hash, parsed)
    if computed != expected:
        return ProofCheck(
            valid=False,
            reason=f"root mismatch: computed {to_hex(computed)}, expected {to_hex(expected)}",
            computed_root=computed,
        )
    return ProofCheck(valid=True, computed_root=computed)


def is_valid_proof(
    leaf: LeafInput,
    siblings: Sequence[HashInput],
    root: HashInput,
    encoding: LeafEncoding | str = DEFAULT_LEAF_ENCODING,
) -> bool:
    """Boolean form of verify_proof."""
    return verify_proof(leaf, siblings, root, encoding).valid


def batch_verify_proofs(
    items: Iterable[tuple[LeafInput, Sequence[HashInput]]],
    root: HashInput,
    encoding: LeafEncoding | str = DEFAULT_LEAF_ENCODING,
) -> list[ProofCheck]:
    """
    Verify several (leaf, siblings) pairs against one root.

    Returns:
        One ProofCheck per item, in input order
    """
    return [verify_proof(leaf, siblings, root, encoding) for leaf, siblings in items]


def _payload_uint(
    value: Any,
    label: str,
    bits: int,
    code: str,
) -> tuple[Optional[int], Optional[str]]:
    """Parse a payload number with the same rules as AllocationRecord.create."""
    try:
        return parse_uint(value, label.lower(), (1 << bits) - 1, code), None
    except MalformedInputException:
        pass
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        return None, f"{label} must be an integer"
    if isinstance(value, int) and value < 0:
        return None, f"{label} must be non-negative"
    text = str(value).strip()
    if text.isascii() and text.isdigit():
        return None, f"{label} exceeds uint{bits}"
    return None, f"{label} must be an integer"


def validate_proof_payload(payload: Mapping[str, Any]) -> list[str]:
    """
    Structural checks on a claim payload.

    Checks address syntax, amount in (0, 2**128), index in [0, 2**256)
    and that root and every proof element are 0x-prefixed 32-byte hex
    strings. Numbers follow the AllocationRecord.create rules, so
    "1_000" or "1e3" are rejected. This does not verify membership; use
    verify_proof for that.

    Returns:
        List of error messages (empty when the payload is well-formed)
    """
    errors: list[str] = []

    recipient = payload.get("recipient", payload.get("address"))
    if not is_valid_address(recipient):
        errors.append("Invalid recipient address format")

    amount, error = _payload_uint(payload.get("amount"), "Amount", AMOUNT_BITS, ErrorCodes.INVALID_AMOUNT)
    if error:
        errors.append(error)
    elif amount == 0:
        errors.append("Amount must be greater than 0")

    _, error = _payload_uint(payload.get("index"), "Index", INDEX_BITS, ErrorCodes.INVALID_INDEX)
    if error:
        errors.append(error)

    root = payload.get("root")
    if root is not None and not is_hash_hex(root):
        errors.append("Invalid merkle root format")

    proof = payload.get("proof", payload.get("merkle_proof"))
    if not isinstance(proof, (list, tuple)):
        errors.append("Proof must be a list of hashes")
    else:
        for i, element in enumerate(proof):
            if not is_hash_hex(element):
                errors.append(f"Invalid proof element at position {i}")

    return errors


class MerkleProver:
    """
    Convenience class for generating proofs from a built tree.

    Example:
        >>> proof = MerkleProver.prove(tree, "0x" + "aa" * 20)
        >>> MerkleVerifier.verify(proof)
        True
    """

    @staticmethod
    def prove(tree: MerkleTree, key: Union[str, int]) -> Optional[MerkleProof]:
        """Proof for an address or claim index, None if absent."""
        return tree.proof_for(key)

    @staticmethod
    def compute_root(
        records: Iterable[AllocationRecord],
        encoding: LeafEncoding | str = DEFAULT_LEAF_ENCODING,
    ) -> bytes:
        """Root of a recipient set."""
        return MerkleTree(records, encoding).root


class MerkleVerifier:
    """Convenience class for verifying proofs."""

    @staticmethod
    def verify(proof: MerkleProof) -> bool:
        """Verify a proof against the root it carries."""
        return MerkleVerifier.check(proof).valid

    @staticmethod
    def check(proof: MerkleProof, root: Optional[HashInput] = None) -> ProofCheck:
        """
        Verify a proof, optionally against a different root.

        The leaf is re-hashed, so a proof whose leaf_hash does not match
        its record fails.
        """
        if len(proof.leaf_hash) != HASH_LENGTH:
            return ProofCheck(valid=False, reason="leaf hash must be 32 bytes")
        if hash_record(proof.leaf, proof.encoding) != proof.leaf_hash:
            return ProofCheck(valid=False, reason="leaf hash does not match the leaf record")
        return verify_proof(
            proof.leaf,
            proof.siblings,
            proof.root if root is None else root,
            proof.encoding,
        )


__all__ = [
    "ProofCheck",
    "verify_proof",
    "is_valid_proof",
    "batch_verify_proofs",
    "validate_proof_payload",
    "MerkleProver",
    "MerkleVerifier",
]
