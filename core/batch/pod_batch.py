"""
PoD Batch Model

Defines the batch commitment produced for one milestone: the ordered PoD
leaf hashes, their Merkle root and a proof path per leaf. The root is what
gets anchored; inclusion proofs are what get handed to donors and auditors.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from core.crypto.hashing import hash_pod_record, normalize_hash, to_hex
from core.merkle.merkle_tree import build_merkle_tree, verify_merkle_proof
from core.schemas.errors import (
    EmptyBatchException,
    ErrorCodes,
    InvalidHashException,
    MalformedRecordException,
)
from core.schemas.pod import PodRecord
from core.schemas.verification import ChallengeRef, CheckResult, VerificationResult


logger = logging.getLogger(__name__)

SCHEMA_VERSION = "v1"


def validate_hex_hash(value: str, field_name: str) -> str:
    """Validate a 32-byte hash and normalize it to 0x-prefixed lowercase hex."""
    try:
        return to_hex(normalize_hash(value))
    except InvalidHashException as e:
        raise ValueError(f"{field_name}: {e.message}") from e


class InclusionProof(BaseModel):
    """
    Portable proof that one PoD leaf is included under a Merkle root.

    Serialized with camelCase keys (leafHash, index, proof, root, batchId).
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    leaf_hash: str = Field(..., alias="leafHash")
    index: int = Field(..., ge=0, description="Leaf index within the batch")
    proof: list[str] = Field(
        default_factory=list,
        description="Sibling hashes, bottom-up (0x-prefixed, 32 bytes each)",
    )
    root: str = Field(..., description="Merkle root the proof replays to")
    batch_id: Optional[str] = Field(default=None, alias="batchId")

    @field_validator("leaf_hash", "root")
    @classmethod
    def _check_hash(cls, v: str, info: ValidationInfo) -> str:
        return validate_hex_hash(v, info.field_name)

    @field_validator("proof")
    @classmethod
    def _check_proof(cls, v: list[str]) -> list[str]:
        return [validate_hex_hash(h, f"proof[{i}]") for i, h in enumerate(v)]

    def verify(self) -> bool:
        """Replay the proof from leaf_hash and compare against root."""
        return verify_merkle_proof(self.leaf_hash, self.proof, self.root)


class PodBatch(BaseModel):
    """
    Commitment to an ordered batch of PoD records for one milestone.

    leaf_hashes[i] and proofs[i] describe the i-th record in submission order.
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(default=SCHEMA_VERSION)
    batch_id: str = Field(
        ...,
        description="Batch / milestone identifier",
        min_length=1,
    )
    merkle_root: str = Field(
        ...,
        description="Merkle root of the leaf hashes (0x-prefixed, 32 bytes)",
    )
    leaf_hashes: list[str] = Field(..., min_length=1)
    proofs: list[list[str]] = Field(...)
    signer_key_id: Optional[str] = Field(
        default=None,
        description="Key id of the signer expected to anchor this batch",
    )
    created_at: Optional[datetime] = Field(default=None)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("merkle_root")
    @classmethod
    def _check_root(cls, v: str) -> str:
        return validate_hex_hash(v, "merkle_root")

    @field_validator("leaf_hashes")
    @classmethod
    def _check_leaves(cls, v: list[str]) -> list[str]:
        return [validate_hex_hash(h, f"leaf_hashes[{i}]") for i, h in enumerate(v)]

    @field_validator("proofs")
    @classmethod
    def _check_proofs(cls, v: list[list[str]]) -> list[list[str]]:
        return [
            [validate_hex_hash(h, f"proofs[{i}][{j}]") for j, h in enumerate(path)]
            for i, path in enumerate(v)
        ]

    @model_validator(mode="after")
    def _proofs_aligned(self) -> "PodBatch":
        if len(self.proofs) != len(self.leaf_hashes):
            raise ValueError(
                f"proofs has {len(self.proofs)} entries for "
                f"{len(self.leaf_hashes)} leaf hashes"
            )
        return self

    @property
    def leaf_count(self) -> int:
        return len(self.leaf_hashes)

    def inclusion_proof(self, index: int) -> InclusionProof:
        """Extract the portable inclusion proof for the leaf at index."""
        if index < 0 or index >= len(self.leaf_hashes):
            raise IndexError(
                f"Leaf index {index} out of range for {len(self.leaf_hashes)} leaves"
            )
        return InclusionProof(
            leaf_hash=self.leaf_hashes[index],
            index=index,
            proof=list(self.proofs[index]),
            root=self.merkle_root,
            batch_id=self.batch_id,
        )

    def index_of(self, leaf_hash: str) -> int:
        """Return the index of a leaf hash. Raises ValueError if absent."""
        target = validate_hex_hash(leaf_hash, "leaf_hash")
        return self.leaf_hashes.index(target)

    def verify_integrity(self) -> VerificationResult:
        """
        Recompute the root from leaf_hashes and replay every stored proof.
        """
        checks: list[CheckResult] = []
        challenge: Optional[ChallengeRef] = None

        recomputed = build_merkle_tree(self.leaf_hashes).root_hex
        if recomputed == self.merkle_root:
            checks.append(CheckResult.passed(
                "root_recomputed", "merkle_root matches recomputed root",
                {"merkle_root": self.merkle_root},
            ))
        else:
            checks.append(CheckResult.failed(
                "root_recomputed", "merkle_root mismatch",
                {"expected": self.merkle_root, "computed": recomputed,
                 "code": ErrorCodes.ROOT_MISMATCH},
            ))
            challenge = ChallengeRef(
                kind="merkle_root", batch_id=self.batch_id,
                reason="merkle_root does not match leaf_hashes",
            )

        bad = [
            i for i, (leaf, path) in enumerate(zip(self.leaf_hashes, self.proofs))
            if not verify_merkle_proof(leaf, path, self.merkle_root)
        ]
        if not bad:
            checks.append(CheckResult.passed(
                "proofs_valid", f"All {self.leaf_count} proofs verify",
            ))
        else:
            checks.append(CheckResult.failed(
                "proofs_valid", f"{len(bad)} of {self.leaf_count} proofs fail",
                {"failed_indices": bad, "code": ErrorCodes.MERKLE_PROOF_INVALID},
            ))
            if challenge is None:
                challenge = ChallengeRef(
                    kind="merkle_proof", leaf_index=bad[0], batch_id=self.batch_id,
                    reason="stored proof does not replay to merkle_root",
                )

        return VerificationResult.from_checks(checks, challenge)


def build_pod_batch(
    batch_id: str,
    records: Sequence[PodRecord | Mapping[str, Any]],
    signer_key_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
    metadata: Optional[dict[str, Any]] = None,
) -> PodBatch:
    """
    Hash PoD records in order and commit to them in a Merkle tree.

    Args:
        batch_id: Batch / milestone identifier
        records: Ordered PoD records; order defines leaf indices
        signer_key_id: Optional key id of the expected anchoring signer
        created_at: Optional creation time (left None for reproducible output)
        metadata: Free-form metadata, not part of any commitment

    Raises:
        EmptyBatchException: If records is empty
        MalformedRecordException: If any record lacks required fields;
            details["record_index"] names the offending record
    """
    if len(records) == 0:
        raise EmptyBatchException(
            f"Batch {batch_id!r} has no PoD records",
            details={"batch_id": batch_id},
        )

    leaves: list[str] = []
    for i, record in enumerate(records):
        try:
            if not isinstance(record, PodRecord):
                record = PodRecord.from_mapping(record, record_index=i)
            leaves.append(hash_pod_record(record))
        except MalformedRecordException as e:
            e.details.setdefault("record_index", i)
            e.details["batch_id"] = batch_id
            raise

    tree = build_merkle_tree(leaves)
    logger.info(
        "Built PoD batch %s: %d records, root %s",
        batch_id, tree.leaf_count, tree.root_hex,
    )

    return PodBatch(
        batch_id=batch_id,
        merkle_root=tree.root_hex,
        leaf_hashes=leaves,
        proofs=[tree.proof_hex(i) for i in range(tree.leaf_count)],
        signer_key_id=signer_key_id,
        created_at=created_at,
        metadata=metadata or {},
    )
