"""
Airdrop Merkle API (FastAPI)

HTTP API over a loaded claim session:
- GET /proof?address=0x.. - Claim arguments for a recipient
- POST /eligibility/batch - Eligibility of many addresses
- GET /stats - Allocation statistics
- POST /verify - Verify a leaf and proof against the root
- GET /health - Health check

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"
