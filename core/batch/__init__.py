"""
PoD Batch Commitments

Turns an ordered list of PoD records into an anchorable commitment
(PodBatch) and portable per-record inclusion proofs, and verifies a record
against its proof.

Usage:
    from core.batch import build_pod_batch, verify_pod_inclusion

    batch = build_pod_batch("milestone-7", records)
    proof = batch.inclusion_proof(3)
    result = verify_pod_inclusion(records[3], proof, anchored_root=batch.merkle_root)
    assert result.ok
"""

from .pod_batch import (
    SCHEMA_VERSION,
    InclusionProof,
    PodBatch,
    build_pod_batch,
    validate_hex_hash,
)
from .inclusion import verify_pod_inclusion

__all__ = [
    "SCHEMA_VERSION",
    "InclusionProof",
    "PodBatch",
    "build_pod_batch",
    "validate_hex_hash",
    "verify_pod_inclusion",
]
