"""API request and response models."""

from api.models.requests import BatchEligibilityRequest, VerifyProofRequest
from api.models.responses import (
    HealthResponse,
    ClaimData,
    ProofResponse,
    BatchEligibilityResponse,
    StatsResponse,
    VerifyProofResponse,
    ErrorDetail,
    ErrorResponse,
)

__all__ = [
    "BatchEligibilityRequest",
    "VerifyProofRequest",
    "HealthResponse",
    "ClaimData",
    "ProofResponse",
    "BatchEligibilityResponse",
    "StatsResponse",
    "VerifyProofResponse",
    "ErrorDetail",
    "ErrorResponse",
]
