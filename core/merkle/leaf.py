"""
Merkle Engine - Leaf Encoder
Serializes one allocation record into the exact byte layout the on-chain
verifier expects, then hashes it.

Two schemes are supported. Which one applies is a property of the deployed
distribution contract, so it is fixed per campaign through configuration
and never inferred from data:

    packed    keccak256(abi.encodePacked(uint256 index, address recipient, uint128 amount))
              32 + 20 + 16 = 68 bytes, one hash pass

    standard  keccak256(keccak256(abi.encode(uint256 index, address recipient, uint256 amount)))
              96 bytes, hash-of-hash (OpenZeppelin StandardMerkleTree leaves)

Both encodings are injective because every field has a fixed width.
"""
from __future__ import annotations

from enum import Enum
from typing import Any

from eth_abi import encode as abi_encode

from core.crypto.addresses import address_bytes
from core.crypto.hashing import keccak256
from core.merkle.records import AllocationRecord
from core.schemas.errors import ErrorCodes, MalformedInputException


class LeafEncoding(str, Enum):
    """Leaf hashing scheme of the target verifier contract."""
    PACKED = "packed"
    STANDARD = "standard"

    @classmethod
    def parse(cls, value: "LeafEncoding | str") -> "LeafEncoding":
        """Parse a configuration value into a LeafEncoding."""
        if isinstance(value, LeafEncoding):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise MalformedInputException(
                f"Unknown leaf encoding {value!r}; expected one of "
                f"{[e.value for e in cls]}",
                code=ErrorCodes.INVALID_LEAF_ENCODING,
                field_name="leaf_encoding",
                value=value,
            ) from None

    @property
    def abi_types(self) -> tuple[str, str, str]:
        """Solidity types of (index, recipient, amount) in this scheme."""
        if self is LeafEncoding.PACKED:
            return ("uint256", "address", "uint128")
        return ("uint256", "address", "uint256")


DEFAULT_LEAF_ENCODING = LeafEncoding.PACKED


def encode_leaf(
    index: Any,
    recipient: Any,
    amount: Any,
    encoding: LeafEncoding | str = DEFAULT_LEAF_ENCODING,
) -> bytes:
    """
    Encode (index, recipient, amount) into the verifier's byte layout.

    Inputs are validated before encoding; malformed values raise and
    are never coerced.

    Raises:
        MalformedInputException: On bad address syntax or an out-of-range
            index/amount
    """
    record = AllocationRecord.create(index, recipient, amount)
    return encode_record(record, encoding)


def encode_record(
    record: AllocationRecord,
    encoding: LeafEncoding | str = DEFAULT_LEAF_ENCODING,
) -> bytes:
    """Encode an already-validated record."""
    scheme = LeafEncoding.parse(encoding)
    if scheme is LeafEncoding.PACKED:
        return (
            record.index.to_bytes(32, "big")
            + address_bytes(record.recipient)
            + record.amount.to_bytes(16, "big")
        )
    return abi_encode(
        list(scheme.abi_types),
        [record.index, record.recipient, record.amount],
    )


def hash_record(
    record: AllocationRecord,
    encoding: LeafEncoding | str = DEFAULT_LEAF_ENCODING,
) -> bytes:
    """Compute the 32-byte leaf hash of a validated record."""
    scheme = LeafEncoding.parse(encoding)
    digest = keccak256(encode_record(record, scheme))
    if scheme is LeafEncoding.STANDARD:
        digest = keccak256(digest)
    return digest


def hash_leaf(
    index: Any,
    recipient: Any,
    amount: Any,
    encoding: LeafEncoding | str = DEFAULT_LEAF_ENCODING,
) -> bytes:
    """
    Compute the 32-byte leaf hash of (index, recipient, amount).

    Example:
        >>> leaf = hash_leaf(0, "0x" + "aa" * 20, 1000)
        >>> len(leaf)
        32
    """
    return hash_record(AllocationRecord.create(index, recipient, amount), encoding)
