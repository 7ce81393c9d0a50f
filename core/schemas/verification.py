"""
Schemas & Canonicalization
File: verification.py

Purpose: Standard result format for record-level verification.
Used by batch integrity checks and by the anchoring adapter to report
outcomes to auditing callers without raising.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .errors import ImpactLedgerError


# Severity levels for checks
CheckSeverity = Literal["info", "warn", "error"]

# Types of challengeable artifacts
ChallengeKind = Literal["pod_leaf", "merkle_proof", "merkle_root", "pod_batch"]


class CheckResult(BaseModel):
    """
    Result of a single verification check.

    Checks are atomic verification steps that can pass or fail.
    """

    model_config = ConfigDict(extra="forbid")

    check_id: str = Field(
        ...,
        description="Unique identifier for this check",
        min_length=1,
    )
    ok: bool = Field(
        ...,
        description="Whether the check passed",
    )
    severity: CheckSeverity = Field(
        ...,
        description="Severity level of this check",
    )
    message: str = Field(
        ...,
        description="Human-readable message describing the result",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional details about the check",
    )

    @property
    def is_error(self) -> bool:
        """Check if this is an error-level failure."""
        return not self.ok and self.severity == "error"

    @classmethod
    def passed(
        cls,
        check_id: str,
        message: str = "Check passed",
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a passed check result."""
        return cls(
            check_id=check_id,
            ok=True,
            severity="info",
            message=message,
            details=details or {},
        )

    @classmethod
    def failed(
        cls,
        check_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a failed check result."""
        return cls(
            check_id=check_id,
            ok=False,
            severity="error",
            message=message,
            details=details or {},
        )


class ChallengeRef(BaseModel):
    """
    Reference to a challengeable artifact.

    Used when verification fails to identify what can be disputed.
    """

    model_config = ConfigDict(extra="forbid")

    kind: ChallengeKind = Field(
        ...,
        description="Type of artifact being challenged",
    )
    leaf_index: int | None = Field(
        default=None,
        description="Index of the leaf in the Merkle tree (if applicable)",
    )
    batch_id: str | None = Field(
        default=None,
        description="Batch / milestone the leaf belongs to (if known)",
    )
    reason: str | None = Field(
        default=None,
        description="Reason for the challenge",
    )


class VerificationResult(BaseModel):
    """
    Complete result of a verification process.

    ok=False is a verification mismatch: the proof is invalid. It is never
    a pending or retryable state.
    """

    model_config = ConfigDict(extra="forbid")

    ok: bool = Field(
        ...,
        description="Overall verification success",
    )
    checks: list[CheckResult] = Field(
        default_factory=list,
        description="Individual check results",
    )
    challenge: ChallengeRef | None = Field(
        default=None,
        description="Reference to challengeable artifact if verification failed",
    )
    error: ImpactLedgerError | None = Field(
        default=None,
        description="Error details if verification encountered an exception",
    )

    @property
    def error_count(self) -> int:
        """Count of error-level failures."""
        return sum(1 for check in self.checks if check.is_error)

    def get_failed_checks(self) -> list[CheckResult]:
        """Get all failed checks."""
        return [check for check in self.checks if not check.ok]

    def get_check(self, check_id: str) -> CheckResult | None:
        """Look up a check by id."""
        for check in self.checks:
            if check.check_id == check_id:
                return check
        return None

    @classmethod
    def from_checks(
        cls,
        checks: list[CheckResult],
        challenge: ChallengeRef | None = None,
    ) -> "VerificationResult":
        """Build a result whose ok flag is the conjunction of its checks."""
        ok = all(check.ok for check in checks)
        return cls(ok=ok, checks=checks, challenge=None if ok else challenge)
