"""
Core cryptographic utilities.

Keccak-256 hashing, hex helpers and EVM address handling.
"""
from .hashing import (
    HASH_LENGTH,
    keccak256,
    hash_concat,
    to_hex,
    from_hex,
    is_hash_hex,
    parse_hash,
)
from .addresses import (
    ADDRESS_LENGTH,
    is_valid_address,
    normalize_address,
    address_key,
    address_bytes,
    shorten_address,
)

__all__ = [
    "HASH_LENGTH",
    "keccak256",
    "hash_concat",
    "to_hex",
    "from_hex",
    "is_hash_hex",
    "parse_hash",
    "ADDRESS_LENGTH",
    "is_valid_address",
    "normalize_address",
    "address_key",
    "address_bytes",
    "shorten_address",
]
