"""
API Response Models

Pydantic models for API response serialization.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "airdrop-merkle-api"
    version: str = "v1"
    root: Optional[str] = Field(default=None, description="Root of the served tree, if loaded")


class ClaimData(BaseModel):
    """Claim arguments for one recipient (numbers as decimal strings)."""

    index: str = Field(..., description="Claim index")
    recipient: str = Field(..., description="Checksummed recipient address")
    amount: str = Field(..., description="Allocation in base units")
    proof: list[str] = Field(default_factory=list, description="Sibling hashes, bottom to top")
    root: str = Field(..., description="Root the proof verifies against")
    status: str = Field(..., description="eligible or already_claimed")
    variant: str = Field(..., description="Campaign variant")


class ProofResponse(BaseModel):
    """Response for GET /proof."""

    ok: bool = True
    data: ClaimData


class BatchEligibilityResponse(BaseModel):
    """Response for POST /eligibility/batch."""

    ok: bool = True
    root: str
    eligible: list[dict[str, Any]] = Field(default_factory=list)
    ineligible: list[str] = Field(default_factory=list)
    errors: list[dict[str, str]] = Field(default_factory=list)


class StatsResponse(BaseModel):
    """Response for GET /stats."""

    ok: bool = True
    data: dict[str, Any] = Field(..., description="Allocation statistics")
    large_allocations: list[dict[str, str]] = Field(default_factory=list)


class VerifyProofResponse(BaseModel):
    """Response for POST /verify."""

    ok: bool = True
    valid: bool = Field(..., description="Whether the proof reproduces the root")
    root: str = Field(..., description="Root verified against")
    leaf_encoding: str
    reason: Optional[str] = Field(default=None, description="Why verification failed")
    computed_root: Optional[str] = None


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail = Field(..., description="Error details")
