"""
Merkle Engine - Allocation Records
The leaf source data of an airdrop tree.

An AllocationRecord is (index, recipient, amount). Records are immutable;
the full recipient set is the ground truth and the tree is derived from it.

Numeric parsing rules (never coerced, never through floats):
- Python ints are accepted as-is (bool is rejected)
- Strings must be plain decimal digits, surrounding whitespace allowed
- Everything else (float, Decimal, hex string, negative) is rejected
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.crypto.addresses import address_key, normalize_address
from core.schemas.errors import ErrorCodes, MalformedInputException


UINT256_MAX: int = 2**256 - 1
UINT128_MAX: int = 2**128 - 1

# Field widths the verifier expects
INDEX_BITS = 256
AMOUNT_BITS = 128


def parse_uint(value: Any, field_name: str, max_value: int, code: str) -> int:
    """
    Parse an unsigned integer from an int or a decimal string.

    Args:
        value: The raw value
        field_name: Field name for error reporting
        max_value: Inclusive upper bound
        code: Error code used on failure

    Returns:
        The parsed integer

    Raises:
        MalformedInputException: On any non-integer, negative or
            out-of-range input
    """
    if isinstance(value, bool):
        raise MalformedInputException(
            f"{field_name} must be an integer, got bool",
            code=code, field_name=field_name, value=value,
        )

    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text.isdigit() or not text.isascii():
            raise MalformedInputException(
                f"{field_name} must be a non-negative decimal integer string, got {value!r}",
                code=code, field_name=field_name, value=value,
            )
        parsed = int(text)
    else:
        raise MalformedInputException(
            f"{field_name} must be an int or decimal string, got {type(value).__name__}",
            code=code, field_name=field_name, value=value,
        )

    if parsed < 0:
        raise MalformedInputException(
            f"{field_name} must be non-negative, got {parsed}",
            code=code, field_name=field_name, value=value,
        )
    if parsed > max_value:
        raise MalformedInputException(
            f"{field_name} {parsed} exceeds maximum {max_value}",
            code=code, field_name=field_name, value=value,
        )
    return parsed


@dataclass(frozen=True)
class AllocationRecord:
    """
    One recipient's allocation.

    Attributes:
        index: Tree position / claim index (uint256)
        recipient: EIP-55 checksummed recipient address
        amount: Token amount in base units (uint128)

    Use AllocationRecord.create() for untrusted input; the constructor
    validates but does not parse strings.
    """
    index: int
    recipient: str
    amount: int

    def __post_init__(self) -> None:
        """Validate field types and ranges."""
        for name, max_value, code in (
            ("index", UINT256_MAX, ErrorCodes.INVALID_INDEX),
            ("amount", UINT128_MAX, ErrorCodes.INVALID_AMOUNT),
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise MalformedInputException(
                    f"{name} must be an int, got {type(value).__name__}; "
                    "use AllocationRecord.create() to parse strings",
                    code=code, field_name=name, value=value,
                )
            parse_uint(value, name, max_value, code)
        checksummed = normalize_address(self.recipient)
        if checksummed != self.recipient:
            object.__setattr__(self, "recipient", checksummed)

    @classmethod
    def create(cls, index: Any, recipient: Any, amount: Any) -> "AllocationRecord":
        """
        Build a record from untrusted values (ints or decimal strings).

        Raises:
            MalformedInputException: If any field is malformed
        """
        return cls(
            index=parse_uint(index, "index", UINT256_MAX, ErrorCodes.INVALID_INDEX),
            recipient=normalize_address(recipient),
            amount=parse_uint(amount, "amount", UINT128_MAX, ErrorCodes.INVALID_AMOUNT),
        )

    @property
    def key(self) -> str:
        """Case-insensitive lookup key of the recipient."""
        return address_key(self.recipient)

    def to_dict(self) -> dict[str, str]:
        """Serialize with numbers as decimal strings."""
        return {
            "index": str(self.index),
            "recipient": self.recipient,
            "amount": str(self.amount),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AllocationRecord":
        """Parse a record from a mapping with index/recipient/amount keys."""
        return cls.create(data.get("index"), data.get("recipient"), data.get("amount"))
