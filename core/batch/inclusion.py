"""
Record-Level Inclusion Verification

Answers the auditor's question: "was THIS delivery record committed under
THAT anchored root?" by recomputing the record's leaf hash and replaying
its inclusion proof.

A failed check is a verification mismatch: the proof is invalid. It is
never reported as pending or retryable.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from core.crypto.hashing import HashLike, hash_pod_record, hashes_equal, normalize_hash, to_hex
from core.merkle.merkle_tree import verify_merkle_proof
from core.schemas.errors import ErrorCodes, InvalidHashException
from core.schemas.pod import PodRecord
from core.schemas.verification import ChallengeRef, CheckResult, VerificationResult

from .pod_batch import InclusionProof


logger = logging.getLogger(__name__)


def _display_hash(value: HashLike) -> str:
    try:
        return to_hex(normalize_hash(value))
    except InvalidHashException:
        return str(value)


def verify_pod_inclusion(
    record: PodRecord | Mapping[str, Any],
    inclusion: InclusionProof,
    anchored_root: Optional[HashLike] = None,
) -> VerificationResult:
    """
    Verify that a PoD record is included under a Merkle root.

    Checks:
        leaf_hash_match: the record hashes to inclusion.leaf_hash
        proof_replay: the record's hash replays through the proof to inclusion.root
        anchored_root_match: inclusion.root equals the anchored root (if given)

    Args:
        record: The PoD record as presented to the auditor
        inclusion: The inclusion proof handed out at batch time
        anchored_root: Root read back from the ledger, if available

    Returns:
        VerificationResult; ok is False on any mismatch

    Raises:
        MalformedRecordException: If the record lacks required fields
    """
    checks: list[CheckResult] = []
    challenge: Optional[ChallengeRef] = None

    computed_leaf = hash_pod_record(record)

    if computed_leaf == inclusion.leaf_hash:
        checks.append(CheckResult.passed(
            "leaf_hash_match", "Record hash matches proof leaf",
            {"leaf_hash": computed_leaf},
        ))
    else:
        checks.append(CheckResult.failed(
            "leaf_hash_match", "Record hash does not match proof leaf",
            {"expected": inclusion.leaf_hash, "computed": computed_leaf,
             "code": ErrorCodes.LEAF_HASH_MISMATCH},
        ))
        challenge = ChallengeRef(
            kind="pod_leaf", leaf_index=inclusion.index, batch_id=inclusion.batch_id,
            reason="record hash differs from committed leaf",
        )

    if verify_merkle_proof(computed_leaf, inclusion.proof, inclusion.root):
        checks.append(CheckResult.passed(
            "proof_replay", "Proof replays to root",
            {"root": inclusion.root, "proof_length": len(inclusion.proof)},
        ))
    else:
        checks.append(CheckResult.failed(
            "proof_replay", "Proof does not replay to root",
            {"root": inclusion.root, "leaf_index": inclusion.index,
             "code": ErrorCodes.MERKLE_PROOF_INVALID},
        ))
        if challenge is None:
            challenge = ChallengeRef(
                kind="merkle_proof", leaf_index=inclusion.index,
                batch_id=inclusion.batch_id,
                reason="proof path does not reconstruct root",
            )

    if anchored_root is not None:
        if hashes_equal(inclusion.root, anchored_root):
            checks.append(CheckResult.passed(
                "anchored_root_match", "Proof root matches anchored root",
            ))
        else:
            checks.append(CheckResult.failed(
                "anchored_root_match", "Proof root differs from anchored root",
                {"expected": _display_hash(anchored_root), "actual": inclusion.root,
                 "code": ErrorCodes.ROOT_MISMATCH},
            ))
            if challenge is None:
                challenge = ChallengeRef(
                    kind="merkle_root", leaf_index=inclusion.index,
                    batch_id=inclusion.batch_id,
                    reason="root is not the anchored root",
                )

    result = VerificationResult.from_checks(checks, challenge)
    if not result.ok:
        logger.warning(
            "PoD inclusion verification failed for leaf %d of batch %s: %s",
            inclusion.index, inclusion.batch_id,
            ", ".join(c.check_id for c in result.get_failed_checks()),
        )
    return result
