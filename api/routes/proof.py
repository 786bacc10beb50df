"""
Proof Route

Claim arguments for one recipient.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from api.deps import get_claim_session
from api.errors import AlreadyClaimedError, InvalidAddressError, NotEligibleError
from api.models.responses import ClaimData, ProofResponse

from core.crypto.addresses import is_valid_address
from core.schemas.claims import EligibilityStatus
from orchestrator.claim_session import ClaimSession


logger = logging.getLogger(__name__)

router = APIRouter(tags=["claims"])


@router.get("/proof", response_model=ProofResponse)
def get_proof(
    address: str = Query(..., description="Recipient address (0x + 40 hex)"),
    session: ClaimSession = Depends(get_claim_session),
) -> ProofResponse:
    """
    Look up the claim arguments of an address.

    Returns 400 for a malformed address, 404 when the address is not a
    recipient and 409 when it has already claimed.
    """
    if not is_valid_address(address):
        raise InvalidAddressError(address)

    result = session.lookup(address)
    if result.status is EligibilityStatus.NOT_ELIGIBLE:
        raise NotEligibleError(result.address)
    if result.status is EligibilityStatus.ALREADY_CLAIMED:
        raise AlreadyClaimedError(result.address, result.leaf.index)

    claim = result.claim
    logger.debug("Served proof for %s (index %s)", result.address, claim.index)
    return ProofResponse(
        ok=True,
        data=ClaimData(
            index=claim.index,
            recipient=claim.recipient,
            amount=claim.amount,
            proof=list(claim.merkle_proof),
            root=result.root,
            status=result.status.value,
            variant=result.variant.value,
        ),
    )
