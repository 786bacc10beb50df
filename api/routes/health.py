"""
Health Check Route

Simple health check endpoint for liveness probes.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from api import __version__
from api.deps import get_optional_session
from api.models.responses import HealthResponse
from orchestrator.claim_session import ClaimSession


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    session: Optional[ClaimSession] = Depends(get_optional_session),
) -> HealthResponse:
    """
    Health check endpoint.

    Returns service status and the served root, if any.
    """
    return HealthResponse(
        ok=True,
        service="airdrop-merkle-api",
        version=__version__,
        root=session.root_hex if session is not None else None,
    )


@router.get("/", response_model=HealthResponse)
async def root(
    session: Optional[ClaimSession] = Depends(get_optional_session),
) -> HealthResponse:
    """
    Root endpoint - same as health check.
    """
    return await health_check(session)
