"""
Crypto - Address Utilities
EVM address validation, checksumming and lookup keys.

Recipients are compared case-insensitively everywhere: lookups use
address_key(), storage and display use the EIP-55 checksum form.
"""
from __future__ import annotations

import re

from eth_utils import to_checksum_address

from core.schemas.errors import ErrorCodes, MalformedInputException


ADDRESS_LENGTH = 20

_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_valid_address(value: object) -> bool:
    """Check whether a value is a syntactically valid 0x-prefixed 20-byte address."""
    return isinstance(value, str) and bool(_ADDRESS_PATTERN.match(value.strip()))


def normalize_address(value: object) -> str:
    """
    Validate an address and return its EIP-55 checksum form.

    Mixed-case input is accepted regardless of its checksum; the
    engine treats addresses case-insensitively.

    Raises:
        MalformedInputException: If the value is not a valid address
    """
    if not is_valid_address(value):
        raise MalformedInputException(
            f"Invalid EVM address: {value!r}",
            code=ErrorCodes.INVALID_ADDRESS,
            field_name="recipient",
            value=value,
        )
    return to_checksum_address(value.strip().lower())


def address_key(value: str) -> str:
    """Lookup key for an address (lowercase, stripped)."""
    return value.strip().lower()


def address_bytes(value: str) -> bytes:
    """Return the raw 20 bytes of a validated address."""
    return bytes.fromhex(normalize_address(value)[2:])


def shorten_address(address: str, chars: int = 4) -> str:
    """
    Shorten an address for display.

    Example:
        >>> shorten_address("0x1234567890abcdef1234567890abcdef12345678")
        '0x1234...5678'
    """
    return f"{address[:chars + 2]}...{address[-chars:]}"
