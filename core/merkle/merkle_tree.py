"""
Merkle Engine - Tree Builder and Proof Generator
Deterministic airdrop tree construction over allocation records.

This module provides:
- Structural validation of a recipient set (every offender reported)
- Tree construction with canonical (sorted) pair hashing
- Recipient lookup by address or index
- Proof generation for any leaf

Commitment Rules:
1. Leaf order: records sorted by index ascending; input order is irrelevant
2. Leaf hashing: see core.merkle.leaf (packed or standard scheme)
3. Pair hashing: parent = keccak256(min(a, b) + max(a, b))
4. Odd node: the last node of an odd level is paired with itself,
   and its proof carries that node as the sibling
5. Single leaf: root = leaf hash, proof is empty

A built MerkleTree is immutable. To change the recipient set, build a
new tree.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Union

from core.crypto.addresses import address_key, normalize_address
from core.crypto.hashing import HASH_LENGTH, keccak256, to_hex
from core.merkle.leaf import DEFAULT_LEAF_ENCODING, LeafEncoding, hash_record
from core.merkle.records import UINT256_MAX, AllocationRecord, parse_uint
from core.schemas.errors import (
    ErrorCodes,
    StructuralViolationException,
    Violation,
)

if TYPE_CHECKING:
    from core.schemas.claims import ClaimParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreeNode:
    """
    A node of a built tree.

    Attributes:
        hash: Node hash
        level: 0 for leaves, depth for the root
        position: Offset within the level
        left: Position of the left child on level - 1 (None for leaves)
        right: Position of the right child on level - 1; None for leaves and
            for a node whose single child was paired with itself
    """
    hash: bytes
    level: int
    position: int
    left: Optional[int] = None
    right: Optional[int] = None

    @property
    def is_leaf(self) -> bool:
        return self.level == 0


@dataclass(frozen=True)
class MerkleProof:
    """
    Inclusion proof for one recipient.

    Attributes:
        leaf: The allocation being proven
        leaf_hash: Hash of the encoded leaf
        siblings: Sibling hashes ordered from the leaf level up to the root
        root: Root the proof was generated against
        encoding: Leaf scheme used to hash the leaf
    """
    leaf: AllocationRecord
    leaf_hash: bytes
    siblings: tuple[bytes, ...]
    root: bytes
    encoding: LeafEncoding = field(default=DEFAULT_LEAF_ENCODING)

    @property
    def proof_hex(self) -> list[str]:
        return [to_hex(s) for s in self.siblings]

    def to_claim_params(self) -> "ClaimParams":
        """Render the proof as the contract's claim call arguments."""
        from core.schemas.claims import ClaimParams

        return ClaimParams(
            index=str(self.leaf.index),
            recipient=self.leaf.recipient,
            amount=str(self.leaf.amount),
            merkle_proof=self.proof_hex,
        )

    def to_dict(self) -> dict:
        return {
            **self.leaf.to_dict(),
            "leaf_hash": to_hex(self.leaf_hash),
            "proof": self.proof_hex,
            "root": to_hex(self.root),
            "leaf_encoding": self.encoding.value,
        }


def hash_pair(a: bytes, b: bytes) -> bytes:
    """
    Hash two sibling nodes in canonical order.

    The smaller hash (byte-wise) goes first, so proofs need no
    left/right markers.
    """
    if a <= b:
        return keccak256(a + b)
    return keccak256(b + a)


def process_proof(leaf_hash: bytes, siblings: Sequence[bytes]) -> bytes:
    """
    Fold a leaf hash with its siblings up to a candidate root.

    Args:
        leaf_hash: Starting hash
        siblings: Sibling hashes from bottom to top

    Returns:
        The recomputed root
    """
    computed = leaf_hash
    for sibling in siblings:
        computed = hash_pair(computed, sibling)
    return computed


def build_levels(leaf_hashes: Sequence[bytes]) -> list[tuple[bytes, ...]]:
    """
    Build every level of the tree, leaves first and root last.

    Example: [a, b, c] -> [(a, b, c), (H(a,b), H(c,c)), (root,)]
    """
    if not leaf_hashes:
        raise ValueError("Cannot build a Merkle tree without leaves")

    current = tuple(leaf_hashes)
    levels = [current]
    while len(current) > 1:
        parents = []
        for i in range(0, len(current), 2):
            left = current[i]
            right = current[i + 1] if i + 1 < len(current) else left
            parents.append(hash_pair(left, right))
        current = tuple(parents)
        levels.append(current)
    return levels


def build_merkle_root(leaf_hashes: Sequence[bytes]) -> bytes:
    """Compute the root of an ordered, non-empty list of leaf hashes."""
    return build_levels(leaf_hashes)[-1][0]


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of hashing levels above the leaves.

    Example:
        >>> compute_tree_depth(1)
        0
        >>> compute_tree_depth(5)
        3
    """
    if num_leaves <= 1:
        return 0
    return (num_leaves - 1).bit_length()


def collect_violations(records: Sequence[AllocationRecord]) -> list[Violation]:
    """
    Scan a recipient set for structural problems.

    Reports every offending record, not only the first: duplicated
    indices, recipients listed more than once (case-insensitive) and
    zero amounts. An empty set yields a single violation.
    """
    if not records:
        return [Violation(
            code=ErrorCodes.EMPTY_RECIPIENT_SET,
            message="Recipient set is empty",
        )]

    by_index: dict[int, list[int]] = defaultdict(list)
    by_recipient: dict[str, list[int]] = defaultdict(list)
    for position, record in enumerate(records):
        by_index[record.index].append(position)
        by_recipient[record.key].append(position)

    violations: list[Violation] = []
    for index, positions in by_index.items():
        if len(positions) > 1:
            for position in positions:
                violations.append(Violation(
                    code=ErrorCodes.DUPLICATE_INDEX,
                    message=f"Index {index} appears {len(positions)} times",
                    index=index,
                    recipient=records[position].recipient,
                    position=position,
                ))

    for positions in by_recipient.values():
        if len(positions) > 1:
            for position in positions:
                violations.append(Violation(
                    code=ErrorCodes.DUPLICATE_RECIPIENT,
                    message=f"Recipient {records[position].recipient} appears "
                            f"{len(positions)} times",
                    index=records[position].index,
                    recipient=records[position].recipient,
                    position=position,
                ))

    for position, record in enumerate(records):
        if record.amount == 0:
            violations.append(Violation(
                code=ErrorCodes.ZERO_AMOUNT,
                message=f"Recipient {record.recipient} has a zero allocation",
                index=record.index,
                recipient=record.recipient,
                position=position,
            ))

    return violations


def validate_records(records: Iterable[AllocationRecord]) -> list[AllocationRecord]:
    """
    Validate a recipient set for tree construction.

    Returns:
        The records as a list

    Raises:
        StructuralViolationException: Listing every violation found
    """
    records = list(records)
    violations = collect_violations(records)
    if violations:
        summary = ", ".join(sorted({v.code for v in violations}))
        raise StructuralViolationException(
            f"Recipient set has {len(violations)} structural violation(s): {summary}",
            violations=violations,
        )
    return records


class MerkleTree:
    """
    Immutable airdrop Merkle tree.

    Build once from the full recipient set, then share freely; nothing
    mutates after construction.

    Example:
        >>> tree = MerkleTree.build([
        ...     AllocationRecord.create(0, "0x" + "aa" * 20, 1000),
        ...     AllocationRecord.create(1, "0x" + "bb" * 20, 2000),
        ... ])
        >>> proof = tree.get_proof("0x" + "aa" * 20)
        >>> len(proof.siblings)
        1
    """

    def __init__(
        self,
        records: Iterable[AllocationRecord],
        encoding: LeafEncoding | str = DEFAULT_LEAF_ENCODING,
        strict: bool = True,
    ) -> None:
        """
        Args:
            records: The full recipient set, in any order
            encoding: Leaf scheme of the target verifier
            strict: Reject structurally invalid sets. Non-strict trees
                exist only so legacy data can be audited with
                MerkleVerification.validate_integrity(); an empty set is
                rejected either way.

        Raises:
            StructuralViolationException: On an invalid recipient set
        """
        checked = list(records)
        if strict or not checked:
            validate_records(checked)
        self._encoding = LeafEncoding.parse(encoding)
        self._strict = strict
        self._records: tuple[AllocationRecord, ...] = tuple(
            sorted(checked, key=lambda r: r.index)
        )
        leaf_hashes = [hash_record(r, self._encoding) for r in self._records]
        self._levels = tuple(build_levels(leaf_hashes))
        # First occurrence wins when a non-strict tree holds duplicates
        self._by_key: dict[str, int] = {}
        self._by_index: dict[int, int] = {}
        for pos, record in enumerate(self._records):
            self._by_key.setdefault(record.key, pos)
            self._by_index.setdefault(record.index, pos)

        logger.info(
            "Built merkle tree: %d recipients, depth %d, encoding %s, root %s",
            len(self._records), self.depth, self._encoding.value, self.root_hex,
        )

    @classmethod
    def build(
        cls,
        records: Iterable[AllocationRecord],
        encoding: LeafEncoding | str = DEFAULT_LEAF_ENCODING,
    ) -> "MerkleTree":
        """Build a tree from validated records."""
        return cls(records, encoding)

    @property
    def strict(self) -> bool:
        return self._strict

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def encoding(self) -> LeafEncoding:
        return self._encoding

    @property
    def root(self) -> bytes:
        return self._levels[-1][0]

    @property
    def root_hex(self) -> str:
        return to_hex(self.root)

    @property
    def levels(self) -> tuple[tuple[bytes, ...], ...]:
        """All node hashes, leaves first."""
        return self._levels

    @property
    def depth(self) -> int:
        return len(self._levels) - 1

    @property
    def leaves(self) -> tuple[AllocationRecord, ...]:
        """Records in leaf order (ascending index)."""
        return self._records

    @property
    def leaf_hashes(self) -> tuple[bytes, ...]:
        return self._levels[0]

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"MerkleTree(recipients={len(self)}, root={self.root_hex})"

    def node(self, level: int, position: int) -> TreeNode:
        """
        Return the node at (level, position).

        Raises:
            IndexError: If the coordinates fall outside the tree
        """
        if not 0 <= level < len(self._levels):
            raise IndexError(f"Level {level} out of range (depth {self.depth})")
        nodes = self._levels[level]
        if not 0 <= position < len(nodes):
            raise IndexError(f"Position {position} out of range at level {level}")

        if level == 0:
            return TreeNode(hash=nodes[position], level=0, position=position)

        below = len(self._levels[level - 1])
        left = 2 * position
        right = left + 1 if left + 1 < below else None
        return TreeNode(
            hash=nodes[position], level=level, position=position,
            left=left, right=right,
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _position_of(self, address: str) -> Optional[int]:
        normalize_address(address)
        return self._by_key.get(address_key(address))

    def get_leaf(self, address: str) -> Optional[AllocationRecord]:
        """
        Find the allocation of an address (case-insensitive).

        Returns:
            The record, or None if the address is not a recipient

        Raises:
            MalformedInputException: If the address is syntactically invalid
        """
        position = self._position_of(address)
        return None if position is None else self._records[position]

    def get_leaf_by_index(self, index: int | str) -> Optional[AllocationRecord]:
        """Find the allocation with the given claim index."""
        idx = parse_uint(index, "index", UINT256_MAX, ErrorCodes.INVALID_INDEX)
        position = self._by_index.get(idx)
        return None if position is None else self._records[position]

    def is_eligible(self, address: str) -> bool:
        return self._position_of(address) is not None

    # ------------------------------------------------------------------
    # Proofs
    # ------------------------------------------------------------------

    def proof_at(self, position: int) -> MerkleProof:
        """Proof of the leaf at a position in leaf order."""
        siblings: list[bytes] = []
        current = position
        for nodes in self._levels[:-1]:
            sibling = current ^ 1
            siblings.append(nodes[sibling] if sibling < len(nodes) else nodes[current])
            current //= 2

        return MerkleProof(
            leaf=self._records[position],
            leaf_hash=self._levels[0][position],
            siblings=tuple(siblings),
            root=self.root,
            encoding=self._encoding,
        )

    def get_proof(self, address: str) -> Optional[MerkleProof]:
        """
        Generate the inclusion proof of an address.

        Returns:
            The proof, or None if the address is not a recipient
        """
        position = self._position_of(address)
        return None if position is None else self.proof_at(position)

    def get_proof_by_index(self, index: int | str) -> Optional[MerkleProof]:
        """Generate the inclusion proof of a claim index."""
        idx = parse_uint(index, "index", UINT256_MAX, ErrorCodes.INVALID_INDEX)
        position = self._by_index.get(idx)
        return None if position is None else self.proof_at(position)

    def proof_for(self, key: Union[str, int]) -> Optional[MerkleProof]:
        """Proof lookup by address (str) or claim index (int)."""
        if isinstance(key, int) and not isinstance(key, bool):
            return self.get_proof_by_index(key)
        return self.get_proof(key)

    def verify(self, proof: MerkleProof) -> bool:
        """Check a proof against this tree's root."""
        if len(proof.leaf_hash) != HASH_LENGTH:
            return False
        if hash_record(proof.leaf, self._encoding) != proof.leaf_hash:
            return False
        return process_proof(proof.leaf_hash, proof.siblings) == self.root
