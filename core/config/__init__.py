"""
Runtime Configuration Module

Provides configuration loading and management for airdrop campaigns.
"""

from .runtime import (
    DEFAULT_IPFS_GATEWAY,
    CampaignConfig,
    HttpConfig,
    MerkleConfig,
    RuntimeConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "DEFAULT_IPFS_GATEWAY",
    "CampaignConfig",
    "HttpConfig",
    "MerkleConfig",
    "RuntimeConfig",
    "get_default_config",
    "set_default_config",
]
