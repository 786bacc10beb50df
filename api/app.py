"""
FastAPI Application

Main application setup and configuration.

Usage:
    uvicorn api.app:app --reload

    # Or run directly
    python -m api.app
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config.runtime import RuntimeConfig
from core.schemas.errors import AirdropException
from orchestrator.claim_session import ClaimSession, ClaimStatusReader

from api import __version__
from api.deps import load_runtime_config
from api.errors import APIError, airdrop_error_handler, api_error_handler, generic_error_handler
from api.routes import eligibility, health, proof, stats, verify


logging.basicConfig(
    level=getattr(logging, os.getenv("AIRDROP_LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


def create_app(
    session: Optional[ClaimSession] = None,
    config: Optional[RuntimeConfig] = None,
    status_reader: Optional[ClaimStatusReader] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        session: Claim session to serve. When omitted, one is built from
            configuration at startup.
        config: Runtime configuration (default: airdrop.json + env)
        status_reader: Chain read for already-claimed status
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.session is None:
            runtime = config or load_runtime_config()
            if runtime.merkle.has_source:
                try:
                    app.state.session = ClaimSession.from_config(
                        runtime, status_reader=status_reader,
                    )
                except (AirdropException, FileNotFoundError) as e:
                    logger.error("Failed to load merkle tree: %s", e)
            else:
                logger.warning("No tree source configured; claim endpoints will return 503")
        yield

    app = FastAPI(
        title="Airdrop Merkle API",
        description="""
HTTP API for airdrop allocation trees.

## Endpoints

- **GET /proof?address=0x..** - Claim arguments for a recipient
- **POST /eligibility/batch** - Eligibility of many addresses
- **GET /stats** - Allocation statistics of the served tree
- **POST /verify** - Verify a leaf and its proof
- **GET /health** - Health check

Amounts and indices are decimal strings.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.session = session

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(AirdropException, airdrop_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(proof.router)
    app.include_router(eligibility.router)
    app.include_router(stats.router)
    app.include_router(verify.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
