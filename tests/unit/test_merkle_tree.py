"""
Merkle Tree Unit Tests
Tests for core/merkle/merkle_tree.py

Tests:
1. Golden root - two-recipient tree recomputed from first principles
2. Root determinism - input order does not matter
3. Odd leaf count - last node paired with itself, proofs still verify
4. Structural validation - every offender reported
5. Lookup and proof generation by address and index
"""
import random

import pytest
from eth_utils import keccak

from core.crypto.hashing import to_hex
from core.merkle.leaf import LeafEncoding, hash_leaf
from core.merkle.merkle_proofs import MerkleVerifier
from core.merkle.merkle_tree import (
    MerkleTree,
    build_levels,
    build_merkle_root,
    collect_violations,
    compute_tree_depth,
    hash_pair,
    process_proof,
    validate_records,
)
from core.merkle.records import AllocationRecord
from core.schemas.errors import (
    ErrorCodes,
    MalformedInputException,
    StructuralViolationException,
)

from fixtures.allocations import ADDR_A, ADDR_B, ADDR_C, make_records


def packed_leaf(index: int, address: str, amount: int) -> bytes:
    return keccak(index.to_bytes(32, "big") + bytes.fromhex(address[2:]) + amount.to_bytes(16, "big"))


def sorted_pair(a: bytes, b: bytes) -> bytes:
    return keccak(min(a, b) + max(a, b))


class TestHashPair:
    """Tests for hash_pair() and process_proof()."""

    def test_commutative(self):
        a, b = keccak(b"a"), keccak(b"b")
        assert hash_pair(a, b) == hash_pair(b, a)

    def test_sorted_concatenation(self):
        a, b = keccak(b"a"), keccak(b"b")
        assert hash_pair(a, b) == sorted_pair(a, b)

    def test_process_proof_empty(self):
        leaf = keccak(b"leaf")
        assert process_proof(leaf, []) == leaf


class TestGoldenRoot:
    """Two-recipient tree pinned against an independent computation."""

    PACKED_ROOT = "0x962a399551695cc1de42b47c158abc1dd6dc3930b26775a9246fbd6fa188986b"

    def test_root_literal(self, two_recipient_tree):
        assert two_recipient_tree.encoding is LeafEncoding.PACKED
        assert two_recipient_tree.root_hex == self.PACKED_ROOT

    def test_root_matches_manual_computation(self, two_recipient_tree):
        leaf_a = packed_leaf(0, ADDR_A, 1000)
        leaf_b = packed_leaf(1, ADDR_B, 2000)
        assert two_recipient_tree.root == sorted_pair(leaf_a, leaf_b)
        assert two_recipient_tree.root_hex == to_hex(sorted_pair(leaf_a, leaf_b))

    def test_proofs_are_single_sibling(self, two_recipient_tree):
        proof_a = two_recipient_tree.get_proof(ADDR_A)
        proof_b = two_recipient_tree.get_proof(ADDR_B)
        assert proof_a.siblings == (packed_leaf(1, ADDR_B, 2000),)
        assert proof_b.siblings == (packed_leaf(0, ADDR_A, 1000),)

    def test_third_address_not_eligible(self, two_recipient_tree):
        assert two_recipient_tree.get_proof(ADDR_C) is None
        assert not two_recipient_tree.is_eligible(ADDR_C)

    def test_standard_encoding_root(self, two_recipient_records):
        tree = MerkleTree(two_recipient_records, LeafEncoding.STANDARD)
        leaf_a = hash_leaf(0, ADDR_A, 1000, "standard")
        leaf_b = hash_leaf(1, ADDR_B, 2000, "standard")
        assert tree.root == sorted_pair(leaf_a, leaf_b)
        assert tree.root != MerkleTree(two_recipient_records).root


class TestSingleRecipient:
    """A one-leaf tree has the leaf as its root."""

    def test_root_equals_leaf(self):
        tree = MerkleTree([AllocationRecord.create(0, ADDR_A, 500)])
        assert tree.root == packed_leaf(0, ADDR_A, 500)
        assert tree.depth == 0

    def test_empty_proof_verifies(self):
        tree = MerkleTree([AllocationRecord.create(0, ADDR_A, 500)])
        proof = tree.get_proof(ADDR_A)
        assert proof.siblings == ()
        assert MerkleVerifier.verify(proof)


class TestRootDeterminism:
    """Root depends on the set, not on input order."""

    def test_shuffled_input_same_root(self):
        records = make_records(17)
        expected = MerkleTree(records).root
        rng = random.Random(1234)
        for _ in range(5):
            shuffled = list(records)
            rng.shuffle(shuffled)
            assert MerkleTree(shuffled).root == expected

    def test_leaves_sorted_by_index(self):
        records = list(reversed(make_records(4)))
        tree = MerkleTree(records)
        assert [leaf.index for leaf in tree.leaves] == [0, 1, 2, 3]

    def test_amount_change_changes_root(self):
        records = make_records(4)
        altered = records[:3] + [AllocationRecord.create(3, records[3].recipient, records[3].amount + 1)]
        assert MerkleTree(records).root != MerkleTree(altered).root


class TestOddLeafCount:
    """Odd nodes are paired with themselves."""

    def test_three_leaf_root(self):
        records = make_records(3)
        leaves = [packed_leaf(r.index, r.recipient, r.amount) for r in records]
        expected = sorted_pair(sorted_pair(leaves[0], leaves[1]), sorted_pair(leaves[2], leaves[2]))
        assert MerkleTree(records).root == expected

    def test_last_leaf_proof_contains_itself(self):
        records = make_records(3)
        tree = MerkleTree(records)
        proof = tree.get_proof_by_index(2)
        assert proof.siblings[0] == proof.leaf_hash
        assert MerkleVerifier.verify(proof)

    @pytest.mark.parametrize("count", [1, 2, 3, 5, 6, 7, 9, 16, 33])
    def test_every_proof_verifies(self, count):
        tree = MerkleTree(make_records(count))
        for record in tree.leaves:
            proof = tree.get_proof(record.recipient)
            assert tree.verify(proof), f"proof for index {record.index} of {count} failed"
            assert len(proof.siblings) == tree.depth


class TestLevelsAndNodes:
    """Tests for build_levels() and MerkleTree.node()."""

    def test_levels_shape(self):
        levels = build_levels([keccak(bytes([i])) for i in range(5)])
        assert [len(level) for level in levels] == [5, 3, 2, 1]

    def test_build_levels_empty(self):
        with pytest.raises(ValueError, match="without leaves"):
            build_levels([])

    def test_build_merkle_root_matches_tree(self, five_recipient_tree):
        assert build_merkle_root(five_recipient_tree.leaf_hashes) == five_recipient_tree.root

    @pytest.mark.parametrize("leaves,depth", [(1, 0), (2, 1), (3, 2), (4, 2), (5, 3), (8, 3), (9, 4)])
    def test_compute_tree_depth(self, leaves, depth):
        assert compute_tree_depth(leaves) == depth

    def test_node_children(self, five_recipient_tree):
        node = five_recipient_tree.node(1, 2)
        assert (node.left, node.right) == (4, None)
        assert five_recipient_tree.node(0, 3).is_leaf
        root = five_recipient_tree.node(five_recipient_tree.depth, 0)
        assert root.hash == five_recipient_tree.root

    def test_node_out_of_range(self, five_recipient_tree):
        with pytest.raises(IndexError):
            five_recipient_tree.node(0, 5)
        with pytest.raises(IndexError):
            five_recipient_tree.node(9, 0)


class TestStructuralValidation:
    """Tests for collect_violations() / validate_records()."""

    def test_empty_set(self):
        with pytest.raises(StructuralViolationException) as exc_info:
            MerkleTree([])
        assert exc_info.value.code == ErrorCodes.EMPTY_RECIPIENT_SET

    def test_empty_set_rejected_even_when_not_strict(self):
        with pytest.raises(StructuralViolationException):
            MerkleTree([], strict=False)

    def test_every_duplicate_index_reported(self):
        records = [
            AllocationRecord.create(0, ADDR_A, 1),
            AllocationRecord.create(0, ADDR_B, 2),
            AllocationRecord.create(0, ADDR_C, 3),
        ]
        violations = collect_violations(records)
        dupes = [v for v in violations if v.code == ErrorCodes.DUPLICATE_INDEX]
        assert [v.position for v in dupes] == [0, 1, 2]

    def test_duplicate_recipient_case_insensitive(self):
        records = [
            AllocationRecord.create(0, ADDR_A, 1),
            AllocationRecord.create(1, "0x" + "AA" * 20, 2),
        ]
        with pytest.raises(StructuralViolationException) as exc_info:
            validate_records(records)
        assert {v.code for v in exc_info.value.violations} == {ErrorCodes.DUPLICATE_RECIPIENT}
        assert [v.position for v in exc_info.value.violations] == [0, 1]

    def test_mixed_violations_all_listed(self):
        records = [
            AllocationRecord.create(0, ADDR_A, 0),
            AllocationRecord.create(0, ADDR_B, 5),
            AllocationRecord.create(2, ADDR_B, 0),
        ]
        with pytest.raises(StructuralViolationException) as exc_info:
            MerkleTree(records)
        codes = {v.code for v in exc_info.value.violations}
        assert codes == {ErrorCodes.DUPLICATE_INDEX, ErrorCodes.DUPLICATE_RECIPIENT, ErrorCodes.ZERO_AMOUNT}
        assert exc_info.value.code == ErrorCodes.STRUCTURAL_VIOLATION
        assert len(exc_info.value.details["violations"]) == len(exc_info.value.violations)

    def test_valid_set_passes(self):
        records = make_records(3)
        assert validate_records(iter(records)) == records

    def test_non_strict_tree_keeps_first_occurrence(self):
        records = [
            AllocationRecord.create(0, ADDR_A, 10),
            AllocationRecord.create(1, ADDR_A, 20),
        ]
        tree = MerkleTree(records, strict=False)
        assert not tree.strict
        assert len(tree) == 2
        assert tree.get_leaf(ADDR_A).amount == 10


class TestLookup:
    """Address and index lookups."""

    def test_get_leaf_case_insensitive(self, two_recipient_tree):
        assert two_recipient_tree.get_leaf("0x" + "AA" * 20).amount == 1000

    def test_get_leaf_missing(self, two_recipient_tree):
        assert two_recipient_tree.get_leaf(ADDR_C) is None

    def test_malformed_address_raises(self, two_recipient_tree):
        with pytest.raises(MalformedInputException):
            two_recipient_tree.get_leaf("0xabc")

    def test_get_leaf_by_index(self, two_recipient_tree):
        assert two_recipient_tree.get_leaf_by_index(1).amount == 2000
        assert two_recipient_tree.get_leaf_by_index("1").amount == 2000
        assert two_recipient_tree.get_leaf_by_index(7) is None

    def test_proof_for_dispatches_on_type(self, two_recipient_tree):
        by_index = two_recipient_tree.proof_for(1)
        by_address = two_recipient_tree.proof_for(ADDR_B)
        assert by_index == by_address

    def test_len_and_repr(self, two_recipient_tree):
        assert len(two_recipient_tree) == 2
        assert two_recipient_tree.root_hex in repr(two_recipient_tree)


class TestMerkleProof:
    """MerkleProof serialization."""

    def test_to_dict(self, two_recipient_tree):
        data = two_recipient_tree.get_proof(ADDR_A).to_dict()
        assert data["index"] == "0"
        assert data["amount"] == "1000"
        assert data["root"] == two_recipient_tree.root_hex
        assert data["leaf_encoding"] == "packed"
        assert len(data["proof"]) == 1

    def test_to_claim_params(self, two_recipient_tree):
        claim = two_recipient_tree.get_proof(ADDR_B).to_claim_params()
        assert claim.index == "1"
        assert claim.amount == "2000"
        assert claim.merkle_proof == [to_hex(packed_leaf(0, ADDR_A, 1000))]
        index, recipient, amount, proof = claim.as_call_args()
        assert (index, amount) == (1, 2000)
        assert recipient.lower() == ADDR_B

    def test_tampered_proof_rejected_by_tree(self, two_recipient_tree):
        from dataclasses import replace

        proof = two_recipient_tree.get_proof(ADDR_A)
        forged = replace(proof, leaf=AllocationRecord.create(0, ADDR_A, 999999))
        assert not two_recipient_tree.verify(forged)
