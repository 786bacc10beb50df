"""
CLI command modules.
"""

from airdrop_cli.commands import generate, verify, proof, check, stats

__all__ = ["generate", "verify", "proof", "check", "stats"]
