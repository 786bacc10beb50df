"""
Stats Route

Allocation statistics of the served tree.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.deps import get_claim_session
from api.models.responses import StatsResponse
from orchestrator.claim_session import ClaimSession


router = APIRouter(tags=["stats"])


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    threshold: Optional[int] = Query(
        default=None,
        ge=0,
        description="Also list allocations at or above this amount",
    ),
    session: ClaimSession = Depends(get_claim_session),
) -> StatsResponse:
    verification = session.verification
    data = verification.statistics().to_dict()
    data["leaf_encoding"] = session.tree.encoding.value
    data["variant"] = session.variant.value

    large: list[dict[str, str]] = []
    if threshold is not None:
        large = [leaf.to_dict() for leaf in verification.find_large_allocations(threshold)]

    return StatsResponse(ok=True, data=data, large_allocations=large)
