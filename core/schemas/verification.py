"""
Schemas & Canonicalization
File: verification.py

Purpose: Result format of the integrity scan.
Each defect class (duplicate index, duplicate recipient, zero amount,
proof self-check) is one CheckResult; the scan reports them all
instead of raising on the first.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


CheckSeverity = Literal["info", "error"]


class CheckResult(BaseModel):
    """Outcome of one integrity check over a tree."""

    model_config = ConfigDict(extra="forbid")

    check_id: str = Field(..., description="Identifier of the check", min_length=1)
    ok: bool = Field(..., description="Whether the check passed")
    severity: CheckSeverity = Field(..., description="error for a failed check")
    message: str = Field(..., description="Human-readable outcome")
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return not self.ok and self.severity == "error"

    @classmethod
    def passed(
        cls,
        check_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        return cls(check_id=check_id, ok=True, severity="info",
                   message=message, details=details or {})

    @classmethod
    def failed(
        cls,
        check_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        return cls(check_id=check_id, ok=False, severity="error",
                   message=message, details=details or {})


class VerificationResult(BaseModel):
    """
    Integrity scan of one tree.

    ok is False as soon as one check fails.
    """

    model_config = ConfigDict(extra="forbid")

    ok: bool = Field(..., description="Whether every check passed")
    root: str | None = Field(default=None, description="Root of the scanned tree")
    checks: list[CheckResult] = Field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for check in self.checks if check.is_error)

    def get_error_messages(self) -> list[str]:
        """Messages of every failed check, in check order."""
        return [check.message for check in self.checks if check.is_error]

    @classmethod
    def from_checks(
        cls,
        checks: list[CheckResult],
        root: str | None = None,
    ) -> "VerificationResult":
        return cls(
            ok=not any(c.is_error for c in checks),
            root=root,
            checks=checks,
        )
