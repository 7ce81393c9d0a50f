"""
Batch Anchoring

Outbound: anchor (batch id, Merkle root, signer key id) on an external
immutable ledger. Inbound: read the anchored triple back by root for
independent confirmation.
"""

from .ledger import AnchoredBatch, InMemoryLedger, LedgerClient
from .adapter import BatchAnchoringAdapter

__all__ = [
    "AnchoredBatch",
    "BatchAnchoringAdapter",
    "InMemoryLedger",
    "LedgerClient",
]
