"""
API Dependencies

Dependency injection for the API.
Provides the runtime configuration and the served claim session.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from fastapi import Request

from core.config.runtime import RuntimeConfig
from orchestrator.claim_session import ClaimSession

from api.errors import TreeNotLoadedError

logger = logging.getLogger(__name__)


def load_runtime_config() -> RuntimeConfig:
    """Load RuntimeConfig from config file, then overlay environment variables.

    Search order for config file:
      1. ./airdrop.json
      2. ./.airdrop.json
      3. ~/.config/airdrop/config.json

    Environment variables always override config file values.
    The .env file is loaded automatically by core.config.runtime on import.
    """
    search_paths = [
        Path.cwd() / "airdrop.json",
        Path.cwd() / ".airdrop.json",
        Path.home() / ".config" / "airdrop" / "config.json",
    ]

    config: RuntimeConfig | None = None

    for path in search_paths:
        if path.exists():
            try:
                with open(path) as f:
                    data = json.load(f)
                logger.info(f"Loaded config from {path}")
                config = RuntimeConfig.from_dict(data)
                break
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to parse {path}: {e}")

    if config is None:
        config = RuntimeConfig()

    return config.with_env_overrides()


def get_optional_session(request: Request) -> Optional[ClaimSession]:
    """The served claim session, or None when no tree is loaded."""
    return getattr(request.app.state, "session", None)


def get_claim_session(request: Request) -> ClaimSession:
    """The served claim session; 503 when no tree is loaded."""
    session = get_optional_session(request)
    if session is None:
        raise TreeNotLoadedError()
    return session
