"""API route handlers."""

from api.routes import health, proof, eligibility, stats, verify

__all__ = ["health", "proof", "eligibility", "stats", "verify"]
