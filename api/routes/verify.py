"""
Verify Route

Verify a leaf and its proof against a root.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.deps import get_optional_session
from api.errors import InvalidRequestError, TreeNotLoadedError
from api.models.requests import VerifyProofRequest
from api.models.responses import VerifyProofResponse

from core.merkle.leaf import DEFAULT_LEAF_ENCODING
from core.merkle.merkle_proofs import validate_proof_payload, verify_proof
from orchestrator.claim_session import ClaimSession


logger = logging.getLogger(__name__)

router = APIRouter(tags=["verification"])


@router.post("/verify", response_model=VerifyProofResponse)
def verify_claim(
    request: VerifyProofRequest,
    session: Optional[ClaimSession] = Depends(get_optional_session),
) -> VerifyProofResponse:
    """
    Verify a claim payload.

    The payload is checked structurally first (400 on failure). A
    well-formed proof that does not reproduce the root is a normal
    response with valid=false.
    """
    payload = request.model_dump()
    errors = validate_proof_payload(payload)
    if errors:
        raise InvalidRequestError("Malformed claim payload", details={"errors": errors})

    if request.root is not None:
        root = request.root
    elif session is not None:
        root = session.root_hex
    else:
        raise TreeNotLoadedError("No root given and no merkle tree loaded")

    if request.leaf_encoding is not None:
        encoding = request.leaf_encoding
    elif session is not None:
        encoding = session.tree.encoding.value
    else:
        encoding = DEFAULT_LEAF_ENCODING.value

    check = verify_proof(
        {"index": request.index, "recipient": request.recipient, "amount": request.amount},
        request.proof,
        root,
        encoding,
    )
    if not check.valid:
        logger.info("Proof rejected for index %s: %s", request.index, check.reason)

    result = check.to_dict()
    return VerifyProofResponse(
        ok=True,
        valid=check.valid,
        root=root.lower(),
        leaf_encoding=encoding,
        reason=result["reason"],
        computed_root=result["computed_root"],
    )
