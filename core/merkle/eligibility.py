"""
Merkle Engine - Eligibility & Integrity
Query surface over a built MerkleTree.

This module provides:
- Eligibility checks for one or many addresses (misses are results,
  never exceptions)
- Proof verification against the tree root
- Allocation statistics and large-allocation search
- A full integrity scan (duplicates, zero amounts, proof self-check)

All operations are read-only; one MerkleVerification can be shared
between concurrent readers.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from core.crypto.hashing import to_hex
from core.merkle.merkle_proofs import HashInput, LeafInput, ProofCheck, verify_proof
from core.merkle.merkle_tree import MerkleProof, MerkleTree, collect_violations
from core.merkle.records import AllocationRecord
from core.schemas.errors import ErrorCodes, MalformedInputException
from core.schemas.verification import CheckResult, VerificationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EligibilityResult:
    """Outcome of an eligibility check for one address."""
    address: str
    is_eligible: bool
    leaf: Optional[AllocationRecord] = None
    proof: Optional[MerkleProof] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"address": self.address, "eligible": self.is_eligible}
        if self.leaf is not None:
            data.update(self.leaf.to_dict())
        if self.proof is not None:
            data["proof"] = self.proof.proof_hex
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class BatchEligibilityResult:
    """
    Eligibility of several addresses, partitioned.

    Syntactically invalid addresses land in errors, not in ineligible.
    """
    eligible: list[EligibilityResult] = field(default_factory=list)
    ineligible: list[str] = field(default_factory=list)
    errors: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "eligible": [r.to_dict() for r in self.eligible],
            "ineligible": list(self.ineligible),
            "errors": list(self.errors),
        }


@dataclass(frozen=True)
class TreeStatistics:
    total_leaves: int
    total_allocation: int
    average_allocation: int
    max_allocation: int
    min_allocation: int
    depth: int
    root: str

    def to_dict(self) -> dict[str, Any]:
        # Amounts as decimal strings
        return {
            "total_leaves": self.total_leaves,
            "total_allocation": str(self.total_allocation),
            "average_allocation": str(self.average_allocation),
            "max_allocation": str(self.max_allocation),
            "min_allocation": str(self.min_allocation),
            "depth": self.depth,
            "root": self.root,
        }


class MerkleVerification:
    """
    Eligibility and integrity queries over one tree.

    Example:
        >>> verification = MerkleVerification(tree)
        >>> verification.check_eligibility("0x" + "cc" * 20).is_eligible
        False
    """

    def __init__(self, tree: MerkleTree) -> None:
        self._tree = tree

    @property
    def tree(self) -> MerkleTree:
        return self._tree

    @property
    def root(self) -> bytes:
        return self._tree.root

    # ------------------------------------------------------------------
    # Eligibility
    # ------------------------------------------------------------------

    def check_eligibility(self, address: str) -> EligibilityResult:
        """
        Check whether an address is a recipient.

        A malformed address is reported through error rather than raised.
        """
        try:
            proof = self._tree.get_proof(address)
        except MalformedInputException as e:
            return EligibilityResult(address=str(address), is_eligible=False, error=e.message)

        if proof is None:
            return EligibilityResult(
                address=address,
                is_eligible=False,
                error="Address not found in merkle tree",
            )
        return EligibilityResult(
            address=address, is_eligible=True, leaf=proof.leaf, proof=proof,
        )

    def batch_check_eligibility(self, addresses: Sequence[str]) -> BatchEligibilityResult:
        """Check several addresses, preserving input order within each bucket."""
        result = BatchEligibilityResult()
        for address in addresses:
            try:
                proof = self._tree.get_proof(address)
            except MalformedInputException as e:
                result.errors.append({"address": str(address), "error": e.message})
                continue
            if proof is None:
                result.ineligible.append(address)
            else:
                result.eligible.append(EligibilityResult(
                    address=address, is_eligible=True, leaf=proof.leaf, proof=proof,
                ))
        return result

    def verify_proof(self, leaf: LeafInput, siblings: Sequence[HashInput]) -> ProofCheck:
        """Verify a proof against this tree's root and leaf scheme."""
        return verify_proof(leaf, siblings, self._tree.root, self._tree.encoding)

    def get_proof_by_index(self, index: int | str) -> Optional[MerkleProof]:
        return self._tree.get_proof_by_index(index)

    def get_allocation(self, address: str) -> int:
        """Allocation of an address, 0 when it is not a recipient."""
        leaf = self._tree.get_leaf(address)
        return leaf.amount if leaf else 0

    def all_eligible_addresses(self) -> list[str]:
        return [leaf.recipient for leaf in self._tree.leaves]

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def total_allocation(self) -> int:
        return sum(leaf.amount for leaf in self._tree.leaves)

    def average_allocation(self) -> int:
        """Mean allocation, rounded down."""
        return self.total_allocation() // len(self._tree)

    def max_allocation(self) -> int:
        return max(leaf.amount for leaf in self._tree.leaves)

    def min_allocation(self) -> int:
        return min(leaf.amount for leaf in self._tree.leaves)

    def statistics(self) -> TreeStatistics:
        amounts = [leaf.amount for leaf in self._tree.leaves]
        total = sum(amounts)
        return TreeStatistics(
            total_leaves=len(amounts),
            total_allocation=total,
            average_allocation=total // len(amounts),
            max_allocation=max(amounts),
            min_allocation=min(amounts),
            depth=self._tree.depth,
            root=self._tree.root_hex,
        )

    def find_large_allocations(self, threshold: int) -> list[AllocationRecord]:
        """
        Recipients whose allocation is at least threshold.

        Returns:
            Matching records, largest amount first (ties by index)
        """
        matches = [leaf for leaf in self._tree.leaves if leaf.amount >= threshold]
        return sorted(matches, key=lambda leaf: (-leaf.amount, leaf.index))

    # ------------------------------------------------------------------
    # Integrity
    # ------------------------------------------------------------------

    def validate_integrity(self) -> VerificationResult:
        """
        Scan the whole tree for defects.

        Runs the duplicate-index, duplicate-recipient and zero-amount
        scans, then regenerates and re-verifies every leaf's proof.
        A failing self-generated proof means an engine defect and is
        logged at ERROR.
        """
        violations = collect_violations(list(self._tree.leaves))
        checks: list[CheckResult] = []

        for check_id, code, label, clean in (
            ("duplicate_index", ErrorCodes.DUPLICATE_INDEX, "Duplicate index found", "No duplicate indices"),
            ("duplicate_recipient", ErrorCodes.DUPLICATE_RECIPIENT, "Duplicate recipient found",
             "No duplicate recipients"),
        ):
            offenders = [v for v in violations if v.code == code]
            if offenders:
                values = sorted({
                    str(v.index) if code == ErrorCodes.DUPLICATE_INDEX else v.recipient
                    for v in offenders
                })
                checks.append(CheckResult.failed(
                    check_id,
                    f"{label}: {', '.join(values)}",
                    details={"violations": [v.model_dump(exclude_none=True) for v in offenders]},
                ))
            else:
                checks.append(CheckResult.passed(check_id, clean))

        zero = [v for v in violations if v.code == ErrorCodes.ZERO_AMOUNT]
        if zero:
            checks.append(CheckResult.failed(
                "zero_amount",
                f"Found {len(zero)} leaves with zero amounts",
                details={"indices": [str(v.index) for v in zero]},
            ))
        else:
            checks.append(CheckResult.passed("zero_amount", "No zero amounts"))

        invalid: list[str] = []
        for position in range(len(self._tree)):
            proof = self._tree.proof_at(position)
            if not self._tree.verify(proof):
                invalid.append(str(proof.leaf.index))
        if invalid:
            logger.error(
                "Generated proofs failed to verify for %d leaves of tree %s",
                len(invalid), self._tree.root_hex,
            )
            checks.append(CheckResult.failed(
                "proof_self_check",
                f"Found {len(invalid)} invalid proofs",
                details={"indices": invalid},
            ))
        else:
            checks.append(CheckResult.passed(
                "proof_self_check", f"All {len(self._tree)} proofs verify",
            ))

        result = VerificationResult.from_checks(checks, root=to_hex(self._tree.root))
        if not result.ok:
            logger.error(
                "Integrity scan failed for tree %s: %s",
                self._tree.root_hex, "; ".join(result.get_error_messages()),
            )
        return result


__all__ = [
    "EligibilityResult",
    "BatchEligibilityResult",
    "TreeStatistics",
    "MerkleVerification",
]
