"""
Schemas & Canonicalization

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    ensure_utc,
    format_datetime_canonical,
    format_number_js,
    to_epoch_millis,
)

# Error models and exceptions
from .errors import (
    AnchorConflictException,
    AnchoringException,
    CanonicalizationException,
    EmptyBatchException,
    ErrorCodes,
    ImpactLedgerError,
    ImpactLedgerException,
    InvalidHashException,
    MalformedRecordException,
    SchemaValidationException,
)

# PoD record
from .pod import REQUIRED_POD_FIELDS, PodRecord

# Verification results
from .verification import (
    ChallengeKind,
    ChallengeRef,
    CheckResult,
    CheckSeverity,
    VerificationResult,
)

__all__ = [
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonical_equals",
    "canonicalize_value",
    "dumps_canonical",
    "ensure_utc",
    "format_datetime_canonical",
    "format_number_js",
    "to_epoch_millis",
    # Errors
    "AnchorConflictException",
    "AnchoringException",
    "CanonicalizationException",
    "EmptyBatchException",
    "ErrorCodes",
    "ImpactLedgerError",
    "ImpactLedgerException",
    "InvalidHashException",
    "MalformedRecordException",
    "SchemaValidationException",
    # PoD
    "REQUIRED_POD_FIELDS",
    "PodRecord",
    # Verification
    "ChallengeKind",
    "ChallengeRef",
    "CheckResult",
    "CheckSeverity",
    "VerificationResult",
]
