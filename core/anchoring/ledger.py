"""
Ledger Client Interface

The request/response shapes of the external immutable ledger that records
anchored batches:

    anchorBatch(batchId, merkleRoot, signerKeyId) -> bool
    getBatchByRoot(root) -> {batchId, merkleRoot, signerKeyId, timestamp}

Real transports (contract calls, fee handling, submission retries) are
supplied by the host application as LedgerClient implementations.
InMemoryLedger is the reference implementation used in tests and tooling.
"""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.crypto.hashing import normalize_hash, to_hex
from core.schemas.errors import InvalidHashException


class AnchoredBatch(BaseModel):
    """
    A batch as recorded by the ledger: the durable source of truth.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    batch_id: str = Field(..., alias="batchId", min_length=1)
    merkle_root: str = Field(..., alias="merkleRoot")
    signer_key_id: str = Field(..., alias="signerKeyId", min_length=1)
    timestamp: int = Field(
        ...,
        ge=0,
        description="Ledger time of anchoring, integer epoch seconds",
    )

    @field_validator("merkle_root")
    @classmethod
    def _normalize_root(cls, v: str) -> str:
        try:
            return to_hex(normalize_hash(v))
        except InvalidHashException as e:
            raise ValueError(e.message) from e


class LedgerClient(ABC):
    """Interface to an append-only ledger of anchored batch roots."""

    @abstractmethod
    def anchor_batch(self, batch_id: str, merkle_root: str, signer_key_id: str) -> bool:
        """
        Record (batch_id, merkle_root, signer_key_id) and timestamp it.

        Returns:
            True if the triple is recorded (including when it already was),
            False if the ledger refuses it (root held by another batch/signer)

        Raises:
            Any transport error; the adapter wraps these as retryable.
        """

    @abstractmethod
    def get_batch_by_root(self, root: str) -> Optional[AnchoredBatch]:
        """Return the anchored triple for a root, or None if never anchored."""


class InMemoryLedger(LedgerClient):
    """
    Thread-safe in-process ledger.

    Anchoring the same triple twice is idempotent and keeps the first
    timestamp, matching an append-only store.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.time
        self._batches: dict[str, AnchoredBatch] = {}
        self._lock = threading.Lock()

    def anchor_batch(self, batch_id: str, merkle_root: str, signer_key_id: str) -> bool:
        root = to_hex(normalize_hash(merkle_root))
        with self._lock:
            existing = self._batches.get(root)
            if existing is not None:
                return (
                    existing.batch_id == batch_id
                    and existing.signer_key_id == signer_key_id
                )
            self._batches[root] = AnchoredBatch(
                batch_id=batch_id,
                merkle_root=root,
                signer_key_id=signer_key_id,
                timestamp=int(self._clock()),
            )
            return True

    def get_batch_by_root(self, root: str) -> Optional[AnchoredBatch]:
        key = to_hex(normalize_hash(root))
        with self._lock:
            return self._batches.get(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._batches)
