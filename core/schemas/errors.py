"""
Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for the allocation engine.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Propagation rules:
- Malformed input and structural violations are raised immediately.
- Integrity mismatches are terminal: a tree whose root does not match
  the published root must never be handed to a caller.
- Eligibility misses and proof verification failures are ordinary
  return values and never use these exceptions.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the engine."""

    # Schema & Serialization Errors
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"
    UNSUPPORTED_VERSION = "UNSUPPORTED_VERSION"
    TREE_DATA_INVALID = "TREE_DATA_INVALID"

    # Malformed Input Errors
    INVALID_ADDRESS = "INVALID_ADDRESS"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_INDEX = "INVALID_INDEX"
    INVALID_HASH = "INVALID_HASH"
    INVALID_LEAF_ENCODING = "INVALID_LEAF_ENCODING"

    # Structural Errors
    STRUCTURAL_VIOLATION = "STRUCTURAL_VIOLATION"
    EMPTY_RECIPIENT_SET = "EMPTY_RECIPIENT_SET"
    DUPLICATE_INDEX = "DUPLICATE_INDEX"
    DUPLICATE_RECIPIENT = "DUPLICATE_RECIPIENT"
    ZERO_AMOUNT = "ZERO_AMOUNT"

    # Merkle & Commitment Errors
    MERKLE_PROOF_INVALID = "MERKLE_PROOF_INVALID"
    ROOT_MISMATCH = "ROOT_MISMATCH"

    # Remote Storage Errors
    REMOTE_FETCH_FAILED = "REMOTE_FETCH_FAILED"

    # Claim Flow
    NOT_ELIGIBLE = "NOT_ELIGIBLE"
    ALREADY_CLAIMED = "ALREADY_CLAIMED"
    TREE_NOT_LOADED = "TREE_NOT_LOADED"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class AirdropError(BaseModel):
    """
    Base error model for structured error communication.

    Used for passing errors between layers without exceptions,
    e.g. per-address failures in a batch eligibility check.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.INVALID_ADDRESS],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "AirdropException":
        """Convert this error model to a raised exception."""
        return AirdropException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


class Violation(BaseModel):
    """A single offending record found during structural validation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    code: str = Field(..., description="Violation code (DUPLICATE_INDEX, ...)")
    message: str = Field(..., description="Human-readable description")
    index: int | None = Field(default=None, description="Record index, if known")
    recipient: str | None = Field(default=None, description="Recipient address, if known")
    position: int | None = Field(
        default=None,
        description="Position of the record in the caller's input sequence",
    )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class AirdropException(Exception):
    """
    Base exception for all allocation engine errors.

    This exception carries structured error information and can be
    converted to/from AirdropError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "AIRDROP_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> AirdropError:
        """Convert this exception to an AirdropError model."""
        return AirdropError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class CanonicalizationException(AirdropException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
            retryable=False,
        )


class MalformedInputException(AirdropException):
    """
    Exception raised when a single input value is malformed.

    Raised synchronously before any hashing takes place. Values are
    never coerced: a negative amount or a 19-byte address is an error.
    """

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.SCHEMA_VALIDATION_ERROR,
        field_name: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_name:
            full_details["field"] = field_name
        if value is not None:
            full_details["value"] = str(value)
        super().__init__(
            message=message,
            code=code,
            details=full_details,
            retryable=False,
        )
        self.field_name = field_name


class StructuralViolationException(AirdropException):
    """
    Exception raised when a recipient set is structurally invalid.

    Carries every offending record, not only the first one found.
    """

    def __init__(
        self,
        message: str,
        violations: list[Violation],
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        full_details["violations"] = [v.model_dump(exclude_none=True) for v in violations]
        code = violations[0].code if len(violations) == 1 else ErrorCodes.STRUCTURAL_VIOLATION
        super().__init__(
            message=message,
            code=code,
            details=full_details,
            retryable=False,
        )
        self.violations = violations


class IntegrityMismatchException(AirdropException):
    """
    Exception raised when a recomputed root differs from a published root.

    This indicates tampering or corruption and is always terminal.
    """

    def __init__(
        self,
        expected_root: str,
        actual_root: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        full_details["expected_root"] = expected_root
        full_details["actual_root"] = actual_root
        super().__init__(
            message=message or (
                f"Recomputed root {actual_root} does not match published root {expected_root}"
            ),
            code=ErrorCodes.ROOT_MISMATCH,
            details=full_details,
            retryable=False,
        )
        self.expected_root = expected_root
        self.actual_root = actual_root


class TreeDataFormatException(AirdropException):
    """Exception raised when a serialized tree payload cannot be parsed."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
        code: str = ErrorCodes.TREE_DATA_INVALID,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=code,
            details=full_details,
            retryable=False,
        )


class RemoteFetchException(AirdropException):
    """Exception raised when tree data cannot be fetched from remote storage."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = True,
    ) -> None:
        full_details = details or {}
        if url:
            full_details["url"] = url
        if status_code is not None:
            full_details["status_code"] = status_code
        super().__init__(
            message=message,
            code=ErrorCodes.REMOTE_FETCH_FAILED,
            details=full_details,
            retryable=retryable,
        )
        self.url = url
        self.status_code = status_code


class MerkleVerificationException(AirdropException):
    """
    Exception raised when a proof generated by the engine fails to verify
    against the engine's own tree.
    """

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        super().__init__(
            message=message,
            code=ErrorCodes.MERKLE_PROOF_INVALID,
            details=full_details,
            retryable=False,
        )
