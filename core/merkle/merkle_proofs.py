"""
Merkle Proofs Convenience Wrappers
Thin wrappers around core Merkle tree functions for cleaner API.

This module provides class-based interfaces:
- MerkleProver: Build trees and proofs from leaf hashes or PoD records
- MerkleVerifier: Verify proofs

These are convenience wrappers around the functions in merkle_tree.py.
"""
from __future__ import annotations

from typing import Any, Mapping, Sequence

from core.crypto.hashing import HashLike, hash_pod_record
from core.merkle.merkle_tree import (
    MerkleProof,
    MerkleTree,
    build_merkle_proof,
    build_merkle_tree,
    verify_merkle_proof,
)
from core.schemas.pod import PodRecord


class MerkleProver:
    """
    Convenience class for generating Merkle proofs.

    Provides static methods for proof generation from:
    - Pre-hashed leaves
    - PoD records (will be canonically hashed)

    Example:
        >>> tree = MerkleProver.build_from_records(records)
        >>> proof = tree.proof(1)
    """

    @staticmethod
    def prove(leaves: Sequence[HashLike], index: int) -> MerkleProof:
        """
        Generate a Merkle proof for the leaf at the given index.

        Raises:
            IndexError: If index is out of range
            EmptyBatchException: If leaves is empty
        """
        return build_merkle_proof(leaves, index)

    @staticmethod
    def build_from_records(
        records: Sequence[PodRecord | Mapping[str, Any]],
    ) -> MerkleTree:
        """
        Hash PoD records and build the tree over the resulting leaves.

        Raises:
            MalformedRecordException: If any record lacks required fields
            EmptyBatchException: If records is empty
        """
        return build_merkle_tree([hash_pod_record(r) for r in records])


class MerkleVerifier:
    """
    Convenience class for verifying Merkle proofs.

    Verification is stateless; instances are not needed.
    """

    @staticmethod
    def verify(proof: MerkleProof) -> bool:
        """Verify a MerkleProof against the root it carries."""
        return verify_merkle_proof(proof.leaf, proof.siblings, proof.root)

    @staticmethod
    def verify_leaf_in_root(
        leaf: HashLike,
        siblings: Sequence[HashLike],
        root: HashLike,
    ) -> bool:
        """Verify a leaf is included in a Merkle root using raw components."""
        return verify_merkle_proof(leaf, siblings, root)

    @staticmethod
    def verify_record_in_root(
        record: PodRecord | Mapping[str, Any],
        siblings: Sequence[HashLike],
        root: HashLike,
    ) -> bool:
        """
        Verify a PoD record is included in a Merkle root.

        The record is canonically hashed to produce the leaf hash.

        Raises:
            MalformedRecordException: If the record lacks required fields
        """
        return verify_merkle_proof(hash_pod_record(record), siblings, root)


__all__ = [
    "MerkleProver",
    "MerkleVerifier",
]
