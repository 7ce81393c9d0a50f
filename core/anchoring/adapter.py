"""
Batch Anchoring Adapter

Boundary between the pure integrity core and the external ledger.

Failure classes are kept apart:
- AnchoringException (retryable): the ledger could not be reached or
  errored. The computed root is untouched; retry with the same value.
- AnchorConflictException (not retryable): the ledger refused the triple
  because the root is already anchored under another batch or signer.
- Verification mismatches are never raised; confirm_inclusion returns a
  VerificationResult.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from core.batch.inclusion import verify_pod_inclusion
from core.batch.pod_batch import InclusionProof, PodBatch
from core.crypto.hashing import HashLike, normalize_hash, to_hex
from core.crypto.signatures import Signer
from core.schemas.errors import (
    AnchorConflictException,
    AnchoringException,
    ErrorCodes,
    ImpactLedgerException,
    SchemaValidationException,
)
from core.schemas.pod import PodRecord
from core.schemas.verification import ChallengeRef, CheckResult, VerificationResult

from .ledger import AnchoredBatch, LedgerClient


logger = logging.getLogger(__name__)


class BatchAnchoringAdapter:
    """
    Submits finalized roots to a ledger and reads them back.

    The signer is injected per call; the adapter holds no key material and
    no global state beyond its ledger client.
    """

    def __init__(self, ledger: LedgerClient) -> None:
        self._ledger = ledger

    @property
    def ledger(self) -> LedgerClient:
        return self._ledger

    def anchor_batch(self, batch_id: str, merkle_root: HashLike, signer: Signer) -> bool:
        """
        Anchor (batch_id, merkle_root, signer.key_id) on the ledger.

        Idempotent: anchoring the same triple again succeeds.

        Returns:
            True once the ledger has recorded the triple

        Raises:
            SchemaValidationException: If batch_id or the signer key id is empty
            InvalidHashException: If merkle_root is not a 32-byte hash
            AnchorConflictException: If the ledger refuses the triple
            AnchoringException: If the ledger call fails (retryable)
        """
        if not batch_id or not batch_id.strip():
            raise SchemaValidationException("batch_id must be non-empty", field_path="batch_id")
        key_id = signer.key_id
        if not key_id or not key_id.strip():
            raise SchemaValidationException("signer key id must be non-empty", field_path="signer_key_id")
        root_hex = to_hex(normalize_hash(merkle_root))

        logger.info("Anchoring batch %s root %s (signer %s)", batch_id, root_hex, key_id)
        try:
            accepted = self._ledger.anchor_batch(batch_id, root_hex, key_id)
        except ImpactLedgerException:
            raise
        except Exception as e:
            logger.error("Ledger submission failed for batch %s: %s", batch_id, e)
            raise AnchoringException(
                f"Ledger submission failed: {e}",
                batch_id=batch_id,
                merkle_root=root_hex,
                details={"signer_key_id": key_id},
            ) from e

        if not accepted:
            logger.warning("Ledger refused batch %s root %s", batch_id, root_hex)
            raise AnchorConflictException(
                f"Root {root_hex} is already anchored under a different batch or signer",
                batch_id=batch_id,
                merkle_root=root_hex,
                details={"signer_key_id": key_id},
            )
        return True

    def anchor_pod_batch(self, batch: PodBatch, signer: Signer) -> AnchoredBatch:
        """
        Anchor a PodBatch and return the triple as recorded by the ledger.

        Raises:
            AnchoringException: If the ledger fails or does not return the batch
            AnchorConflictException: If the ledger refuses the triple
        """
        self.anchor_batch(batch.batch_id, batch.merkle_root, signer)
        anchored = self.get_batch_by_root(batch.merkle_root)
        if anchored is None:
            raise AnchoringException(
                "Ledger accepted the batch but does not return it by root",
                batch_id=batch.batch_id,
                merkle_root=batch.merkle_root,
            )
        return anchored

    def get_batch_by_root(self, root: HashLike) -> Optional[AnchoredBatch]:
        """
        Retrieve the anchored triple for a root.

        Raises:
            InvalidHashException: If root is not a 32-byte hash
            AnchoringException: If the ledger query fails (retryable)
        """
        root_hex = to_hex(normalize_hash(root))
        try:
            return self._ledger.get_batch_by_root(root_hex)
        except ImpactLedgerException:
            raise
        except Exception as e:
            logger.error("Ledger query failed for root %s: %s", root_hex, e)
            raise AnchoringException(
                f"Ledger query failed: {e}",
                merkle_root=root_hex,
            ) from e

    def confirm_inclusion(
        self,
        record: PodRecord | Mapping[str, Any],
        inclusion: InclusionProof,
    ) -> VerificationResult:
        """
        Verify a record against its inclusion proof AND the ledger.

        Adds anchored_root_found (and batch_id_match when the proof names a
        batch) to the checks of verify_pod_inclusion.

        Raises:
            AnchoringException: If the ledger query fails. A transport
                failure is never reported as a verification mismatch.
        """
        anchored = self.get_batch_by_root(inclusion.root)
        if anchored is None:
            result = verify_pod_inclusion(record, inclusion)
            checks = list(result.checks) + [CheckResult.failed(
                "anchored_root_found", "Root has not been anchored",
                {"root": inclusion.root, "code": ErrorCodes.ANCHOR_NOT_FOUND},
            )]
            challenge = result.challenge or ChallengeRef(
                kind="merkle_root", leaf_index=inclusion.index,
                batch_id=inclusion.batch_id, reason="root not found on ledger",
            )
            logger.warning("Root %s not found on ledger", inclusion.root)
            return VerificationResult.from_checks(checks, challenge)

        result = verify_pod_inclusion(record, inclusion, anchored_root=anchored.merkle_root)
        checks = list(result.checks)
        checks.append(CheckResult.passed(
            "anchored_root_found", "Root is anchored",
            {"batch_id": anchored.batch_id, "signer_key_id": anchored.signer_key_id,
             "timestamp": anchored.timestamp},
        ))
        challenge = result.challenge
        if inclusion.batch_id is not None:
            if inclusion.batch_id == anchored.batch_id:
                checks.append(CheckResult.passed("batch_id_match", "Batch id matches ledger"))
            else:
                checks.append(CheckResult.failed(
                    "batch_id_match", "Batch id differs from ledger",
                    {"expected": anchored.batch_id, "actual": inclusion.batch_id},
                ))
                challenge = challenge or ChallengeRef(
                    kind="merkle_root", leaf_index=inclusion.index,
                    batch_id=inclusion.batch_id,
                    reason="root anchored under a different batch",
                )
        return VerificationResult.from_checks(checks, challenge)
