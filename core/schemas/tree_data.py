"""
Schemas & Canonicalization
File: tree_data.py

Purpose: Serialized tree document (the persisted/transmitted form).

Every number is a decimal string so allocations larger than 2**53
survive JSON round-trips. Native JSON integers are accepted on input
and converted; floats are rejected.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .versioning import FORMAT_VERSION, TREE_FORMAT, TreeFormat


ROOT_PATTERN = r"^0x[0-9a-fA-F]{64}$"


def _int_to_decimal_string(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("must be a decimal integer, got bool")
    if isinstance(value, float):
        raise ValueError("must be a decimal integer string, floats lose precision")
    if isinstance(value, int):
        return str(value)
    return value


class LeafEntry(BaseModel):
    """One serialized allocation record."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    index: str = Field(..., description="Claim index (decimal string)")
    recipient: str = Field(..., description="Recipient address")
    amount: str = Field(..., description="Allocation in base units (decimal string)")

    @field_validator("index", "amount", mode="before")
    @classmethod
    def _numbers_as_strings(cls, value: Any) -> Any:
        return _int_to_decimal_string(value)


class TreeMetadata(BaseModel):
    """Descriptive metadata; not covered by the root."""

    model_config = ConfigDict(extra="allow")

    total_recipients: int = Field(..., ge=0)
    total_allocation: str = Field(..., description="Sum of all amounts (decimal string)")
    created_at: Optional[str] = Field(default=None, description="ISO-8601 UTC timestamp")
    version: str = Field(default=FORMAT_VERSION)
    campaign: Optional[str] = Field(default=None, description="Campaign name")

    @field_validator("total_allocation", mode="before")
    @classmethod
    def _total_as_string(cls, value: Any) -> Any:
        return _int_to_decimal_string(value)


class SerializedTree(BaseModel):
    """
    Serialized airdrop tree.

    The root is the published value; loading rebuilds the tree from
    leaves and refuses any document whose recomputed root differs.
    """

    model_config = ConfigDict(extra="forbid")

    format: TreeFormat = Field(default=TREE_FORMAT)
    leaf_encoding: str = Field(default="packed", description="packed | standard")
    root: str = Field(..., pattern=ROOT_PATTERN)
    leaves: list[LeafEntry] = Field(default_factory=list)
    metadata: Optional[TreeMetadata] = None

    @property
    def total_leaves(self) -> int:
        return len(self.leaves)
