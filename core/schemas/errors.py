"""
Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for the ImpactLedger integrity core.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

A failed proof verification is NOT an exception: verifiers return False
(or a VerificationResult with ok=False). Anchoring transport failures are
the only retryable errors in this package.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the core."""

    # Schema & Validation Errors
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"

    # Record & Batch Errors
    MALFORMED_RECORD = "MALFORMED_RECORD"
    EMPTY_BATCH = "EMPTY_BATCH"
    INVALID_HASH = "INVALID_HASH"

    # Merkle & Commitment Errors
    MERKLE_PROOF_INVALID = "MERKLE_PROOF_INVALID"
    ROOT_MISMATCH = "ROOT_MISMATCH"
    LEAF_HASH_MISMATCH = "LEAF_HASH_MISMATCH"

    # Anchoring Errors
    ANCHORING_FAILED = "ANCHORING_FAILED"
    ANCHOR_CONFLICT = "ANCHOR_CONFLICT"
    ANCHOR_NOT_FOUND = "ANCHOR_NOT_FOUND"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class ImpactLedgerError(BaseModel):
    """
    Base error model for structured error communication.

    Used for passing errors between components without exceptions,
    enabling structured error handling and serialization.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.MALFORMED_RECORD],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "ImpactLedgerException":
        """Convert this error model to a raised exception."""
        return ImpactLedgerException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class ImpactLedgerException(Exception):
    """
    Base exception for all ImpactLedger core errors.

    Carries structured error information and can be converted
    to/from ImpactLedgerError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "IMPACTLEDGER_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> ImpactLedgerError:
        """Convert this exception to an ImpactLedgerError model."""
        return ImpactLedgerError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class CanonicalizationException(ImpactLedgerException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
            retryable=False,
        )


class SchemaValidationException(ImpactLedgerException):
    """Exception raised when schema validation fails."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=ErrorCodes.SCHEMA_VALIDATION_ERROR,
            details=full_details,
            retryable=False,
        )


class MalformedRecordException(ImpactLedgerException):
    """Raised when a PoD record lacks required fields or has invalid values."""

    def __init__(
        self,
        message: str,
        missing_fields: list[str] | None = None,
        record_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if missing_fields:
            full_details["missing_fields"] = list(missing_fields)
        if record_index is not None:
            full_details["record_index"] = record_index
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_RECORD,
            details=full_details,
            retryable=False,
        )


class EmptyBatchException(ImpactLedgerException):
    """Raised when a Merkle tree or batch is requested over zero leaves."""

    def __init__(
        self,
        message: str = "Cannot build a Merkle tree from an empty batch",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.EMPTY_BATCH,
            details=details,
            retryable=False,
        )


class InvalidHashException(ImpactLedgerException):
    """Raised when a value cannot be decoded as a 32-byte hash."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_HASH,
            details=details,
            retryable=False,
        )


class AnchoringException(ImpactLedgerException):
    """
    Raised when the external ledger could not be reached or answered with
    an error. Always retryable: the root being anchored is unaffected.
    """

    def __init__(
        self,
        message: str,
        batch_id: str | None = None,
        merkle_root: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if batch_id:
            full_details["batch_id"] = batch_id
        if merkle_root:
            full_details["merkle_root"] = merkle_root
        super().__init__(
            message=message,
            code=ErrorCodes.ANCHORING_FAILED,
            details=full_details,
            retryable=True,
        )


class AnchorConflictException(ImpactLedgerException):
    """Raised when the ledger refuses a root already anchored under another batch or signer."""

    def __init__(
        self,
        message: str,
        batch_id: str | None = None,
        merkle_root: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if batch_id:
            full_details["batch_id"] = batch_id
        if merkle_root:
            full_details["merkle_root"] = merkle_root
        super().__init__(
            message=message,
            code=ErrorCodes.ANCHOR_CONFLICT,
            details=full_details,
            retryable=False,
        )
