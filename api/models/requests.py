"""
API Request Models

Pydantic models for API request validation.
"""

from typing import Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field


class BatchEligibilityRequest(BaseModel):
    """Request body for POST /eligibility/batch."""

    addresses: list[str] = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="Addresses to check (malformed ones are reported, not rejected)",
    )


class VerifyProofRequest(BaseModel):
    """
    Request body for POST /verify.

    Numbers may be sent as JSON integers or decimal strings; amounts
    above 2**53 should be strings.
    """

    index: Union[int, str] = Field(..., description="Claim index")
    recipient: str = Field(
        ...,
        validation_alias=AliasChoices("recipient", "address"),
        description="Recipient address",
    )
    amount: Union[int, str] = Field(..., description="Allocation in base units")
    proof: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("proof", "merkle_proof"),
        description="Sibling hashes, bottom to top",
    )
    root: Optional[str] = Field(
        default=None,
        description="Root to verify against (default: the served tree's root)",
    )
    leaf_encoding: Optional[Literal["packed", "standard"]] = Field(
        default=None,
        description="Leaf scheme (default: the served tree's scheme)",
    )
