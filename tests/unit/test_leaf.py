"""
Leaf Encoder Unit Tests
Tests for core/merkle/leaf.py

Tests:
- packed layout: 32-byte index, 20-byte address, 16-byte amount
- standard layout: three 32-byte ABI words, hashed twice
- the two schemes never collide
- malformed inputs raise before hashing
"""
import pytest
from eth_utils import keccak

from core.merkle.leaf import (
    DEFAULT_LEAF_ENCODING,
    LeafEncoding,
    encode_leaf,
    hash_leaf,
    hash_record,
)
from core.merkle.records import AllocationRecord
from core.schemas.errors import ErrorCodes, MalformedInputException

from fixtures.allocations import ADDR_A, ADDR_B


def packed_bytes(index: int, address: str, amount: int) -> bytes:
    return index.to_bytes(32, "big") + bytes.fromhex(address[2:]) + amount.to_bytes(16, "big")


def abi_bytes(index: int, address: str, amount: int) -> bytes:
    return (
        index.to_bytes(32, "big")
        + b"\x00" * 12 + bytes.fromhex(address[2:])
        + amount.to_bytes(32, "big")
    )


class TestLeafEncodingParse:
    """Tests for LeafEncoding.parse()."""

    def test_default_is_packed(self):
        assert DEFAULT_LEAF_ENCODING is LeafEncoding.PACKED

    @pytest.mark.parametrize("raw,expected", [
        ("packed", LeafEncoding.PACKED),
        (" STANDARD ", LeafEncoding.STANDARD),
        (LeafEncoding.STANDARD, LeafEncoding.STANDARD),
    ])
    def test_parse(self, raw, expected):
        assert LeafEncoding.parse(raw) is expected

    def test_unknown_scheme(self):
        with pytest.raises(MalformedInputException) as exc_info:
            LeafEncoding.parse("sorted-pairs")
        assert exc_info.value.code == ErrorCodes.INVALID_LEAF_ENCODING


class TestPackedEncoding:
    """Tests for the packed scheme."""

    def test_layout(self):
        encoded = encode_leaf(0, ADDR_A, 1000)
        assert len(encoded) == 68
        assert encoded == packed_bytes(0, ADDR_A, 1000)

    def test_hash_is_single_keccak(self):
        assert hash_leaf(5, ADDR_B, 2000) == keccak(packed_bytes(5, ADDR_B, 2000))

    def test_large_amount_uses_full_width(self):
        amount = 2**128 - 1
        encoded = encode_leaf(1, ADDR_A, amount)
        assert encoded[-16:] == b"\xff" * 16

    def test_address_case_does_not_matter(self):
        assert hash_leaf(0, ADDR_A, 1) == hash_leaf(0, "0x" + "AA" * 20, 1)


class TestStandardEncoding:
    """Tests for the standard (double-hashed ABI) scheme."""

    def test_layout(self):
        encoded = encode_leaf(0, ADDR_A, 1000, LeafEncoding.STANDARD)
        assert len(encoded) == 96
        assert encoded == abi_bytes(0, ADDR_A, 1000)

    def test_hash_is_double_keccak(self):
        expected = keccak(keccak(abi_bytes(3, ADDR_B, 77)))
        assert hash_leaf(3, ADDR_B, 77, "standard") == expected

    def test_amount_still_limited_to_uint128(self):
        with pytest.raises(MalformedInputException):
            encode_leaf(0, ADDR_A, 2**128, LeafEncoding.STANDARD)


class TestSchemes:
    """Cross-scheme behavior."""

    def test_schemes_differ(self):
        assert hash_leaf(0, ADDR_A, 1000, "packed") != hash_leaf(0, ADDR_A, 1000, "standard")

    def test_field_changes_change_hash(self):
        base = hash_leaf(0, ADDR_A, 1000)
        assert hash_leaf(1, ADDR_A, 1000) != base
        assert hash_leaf(0, ADDR_B, 1000) != base
        assert hash_leaf(0, ADDR_A, 1001) != base

    def test_hash_record_matches_hash_leaf(self):
        record = AllocationRecord.create(9, ADDR_A, 123)
        for scheme in LeafEncoding:
            assert hash_record(record, scheme) == hash_leaf(9, ADDR_A, 123, scheme)


class TestMalformedInput:
    """Bad inputs raise before hashing."""

    def test_bad_address(self):
        with pytest.raises(MalformedInputException) as exc_info:
            hash_leaf(0, "0x123", 1)
        assert exc_info.value.code == ErrorCodes.INVALID_ADDRESS

    def test_negative_amount(self):
        with pytest.raises(MalformedInputException) as exc_info:
            hash_leaf(0, ADDR_A, -1)
        assert exc_info.value.code == ErrorCodes.INVALID_AMOUNT

    def test_float_amount(self):
        with pytest.raises(MalformedInputException):
            hash_leaf(0, ADDR_A, 1.5)

    def test_negative_index(self):
        with pytest.raises(MalformedInputException) as exc_info:
            hash_leaf(-1, ADDR_A, 1)
        assert exc_info.value.code == ErrorCodes.INVALID_INDEX
