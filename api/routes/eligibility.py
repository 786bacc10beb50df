"""
Eligibility Route

Batch eligibility check against the served tree.
"""

from fastapi import APIRouter, Depends

from api.deps import get_claim_session
from api.models.requests import BatchEligibilityRequest
from api.models.responses import BatchEligibilityResponse
from orchestrator.claim_session import ClaimSession


router = APIRouter(tags=["claims"])


@router.post("/eligibility/batch", response_model=BatchEligibilityResponse)
def batch_eligibility(
    request: BatchEligibilityRequest,
    session: ClaimSession = Depends(get_claim_session),
) -> BatchEligibilityResponse:
    """
    Partition addresses into eligible, ineligible and malformed.

    Malformed addresses never fail the request.
    """
    result = session.verification.batch_check_eligibility(request.addresses)
    data = result.to_dict()
    return BatchEligibilityResponse(
        ok=True,
        root=session.root_hex,
        eligible=data["eligible"],
        ineligible=data["ineligible"],
        errors=data["errors"],
    )
