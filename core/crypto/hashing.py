"""
Crypto - Hashing Utilities
Keccak-256 hashing and hex helpers for Merkle commitments.

This module provides:
- Keccak-256 hashing for raw bytes (the EVM hash, NOT NIST SHA3-256)
- Hex encoding/decoding with 0x prefix
- Strict 32-byte hash parsing for roots and proof elements

Security/Determinism Notes:
- Always hash raw bytes exactly as specified
- Hex parsing never pads or truncates; a 31-byte hash is an error
"""
from __future__ import annotations

import re

from eth_utils import keccak

from core.schemas.errors import ErrorCodes, MalformedInputException


HASH_LENGTH = 32

_HASH_HEX_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte Keccak-256 digest

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(data)


def hash_concat(left: bytes, right: bytes) -> bytes:
    """
    Hash the concatenation of two byte sequences.

    No ordering is applied here; see core.merkle.merkle_tree.hash_pair
    for the canonical (sorted) parent rule.
    """
    return keccak256(left + right)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def is_hash_hex(value: object) -> bool:
    """Check whether a value is a 0x-prefixed, 64-hex-char string."""
    return isinstance(value, str) and bool(_HASH_HEX_PATTERN.match(value))


def parse_hash(value: str | bytes, field_name: str = "hash") -> bytes:
    """
    Parse a 32-byte hash from raw bytes or a 0x-prefixed hex string.

    Args:
        value: 32 raw bytes or "0x" + 64 hex characters
        field_name: Name used in the error message

    Returns:
        The 32-byte hash

    Raises:
        MalformedInputException: If the value is not exactly 32 bytes
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != HASH_LENGTH:
            raise MalformedInputException(
                f"{field_name} must be {HASH_LENGTH} bytes, got {len(value)}",
                code=ErrorCodes.INVALID_HASH,
                field_name=field_name,
            )
        return bytes(value)

    if not is_hash_hex(value):
        raise MalformedInputException(
            f"{field_name} must be a 0x-prefixed 64-character hex string",
            code=ErrorCodes.INVALID_HASH,
            field_name=field_name,
            value=value,
        )
    return bytes.fromhex(value[2:])
