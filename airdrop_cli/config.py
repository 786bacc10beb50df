"""
CLI Configuration

Configuration management for the airdrop CLI.
Supports a JSON config file plus environment variables.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from core.config.runtime import RuntimeConfig


# Environment variable prefix
ENV_PREFIX = "AIRDROP_"

DEFAULT_CONFIG_FILE = "airdrop.json"


@dataclass
class CLIConfig:
    """Main CLI configuration."""

    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    # Output
    default_output_format: str = "human"  # "human" or "json"

    @property
    def merkle(self):
        return self.runtime.merkle

    @property
    def campaign(self):
        return self.runtime.campaign


def load_config_from_file(path: Path) -> CLIConfig:
    """Load configuration from a JSON file."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    return CLIConfig(
        runtime=RuntimeConfig.from_dict(data),
        log_level=data.get("log_level", "INFO"),
        log_file=data.get("log_file"),
        default_output_format=data.get("default_output_format", "human"),
    )


def load_config(config_path: Path | None = None) -> CLIConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to config file

    Returns:
        Merged configuration
    """
    config = CLIConfig()

    if config_path is not None:
        config = load_config_from_file(config_path)
    else:
        default_paths = [
            Path.cwd() / DEFAULT_CONFIG_FILE,
            Path.cwd() / f".{DEFAULT_CONFIG_FILE}",
            Path.home() / ".config" / "airdrop" / "config.json",
        ]
        for default_path in default_paths:
            if default_path.exists():
                config = load_config_from_file(default_path)
                break

    config.runtime = config.runtime.with_env_overrides()
    if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config.log_level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO")
    if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config.log_file = os.getenv(f"{ENV_PREFIX}LOG_FILE")

    return config


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return """{
  "merkle": {
    "leaf_encoding": "packed",
    "expected_root": null,
    "tree_path": "tree.json",
    "tree_url": null,
    "ipfs_cid": null,
    "ipfs_gateway": "https://ipfs.io/ipfs/"
  },
  "campaign": {
    "name": "airdrop",
    "variant": "instant",
    "contract_address": null,
    "chain_id": 1
  },
  "http": {
    "timeout": 30.0,
    "max_retries": 3,
    "retry_delay": 1.0
  },
  "log_level": "INFO",
  "log_file": null,
  "default_output_format": "human"
}
"""
