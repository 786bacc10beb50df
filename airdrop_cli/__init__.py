"""
Airdrop CLI

Command-line interface for building and checking airdrop Merkle trees.

Usage:
    python -m airdrop_cli generate recipients.csv --out tree.json
    python -m airdrop_cli verify tree.json --expected-root 0x...
    python -m airdrop_cli proof tree.json 0xRecipient
    python -m airdrop_cli check tree.json 0xA... 0xB...
    python -m airdrop_cli stats tree.json
"""

__version__ = "0.1.0"
