"""
Schemas & Canonicalization
File: claims.py

Purpose: Payloads exchanged with the claim collaborators.

- ClaimParams: the exact argument tuple handed to the distribution
  contract's claim function (index, recipient, amount, merkleProof)
- CampaignVariant: which distribution contract family is deployed,
  decided once at campaign setup
- EligibilityStatus: what the lookup interface reports for an address
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CampaignVariant(str, Enum):
    """Distribution contract family. Supplied by configuration, never probed."""
    INSTANT = "instant"
    LOCKUP_LINEAR = "lockup-linear"
    LOCKUP_TRANCHED = "lockup-tranched"

    @property
    def creates_stream(self) -> bool:
        """Whether a successful claim opens a vesting stream instead of a transfer."""
        return self is not CampaignVariant.INSTANT


class EligibilityStatus(str, Enum):
    """Eligibility of a connected address."""
    ELIGIBLE = "eligible"
    NOT_ELIGIBLE = "not_eligible"
    ALREADY_CLAIMED = "already_claimed"


class ClaimParams(BaseModel):
    """
    Arguments for the distribution contract's claim call.

    Numbers are carried as decimal strings so they survive JSON transit
    without precision loss; use the *_int properties for arithmetic.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    index: str = Field(..., description="Leaf index (uint256, decimal string)")
    recipient: str = Field(..., description="Checksummed recipient address")
    amount: str = Field(..., description="Allocation (uint128, decimal string)")
    merkle_proof: list[str] = Field(
        default_factory=list,
        description="Sibling hashes from leaf to root, 0x-prefixed hex",
    )

    @field_validator("index", "amount")
    @classmethod
    def _decimal_string(cls, value: str) -> str:
        if not value.isdigit():
            raise ValueError("must be a non-negative decimal integer string")
        return value

    @property
    def index_int(self) -> int:
        return int(self.index)

    @property
    def amount_int(self) -> int:
        return int(self.amount)

    def as_call_args(self) -> tuple[int, str, int, list[str]]:
        """Positional arguments in contract order: (index, recipient, amount, proof)."""
        return (self.index_int, self.recipient, self.amount_int, list(self.merkle_proof))
