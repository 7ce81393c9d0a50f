"""
Merkle Tree and Commitments
Sorted-pair Merkle tree construction + proof generation/verification.

This module provides:
- MerkleTree: Root plus a proof path for every leaf index
- MerkleProof: Dataclass representing a Merkle inclusion proof
- build_merkle_tree: Build root and all proofs from leaf hashes
- verify_merkle_proof: Replay a proof path against an expected root

Canonical Commitment Rules:
1. Leaf hashing: keccak256(dumps_canonical(record).encode("utf-8"))
2. Parent hashing: keccak256(sorted(left, right) concatenated)
3. Padding: Pair the last node with itself if odd at any level
4. Empty tree: EmptyBatchException
5. Single leaf: root = leaf, proof = []

Usage:
    from core.crypto import hash_pod_record
    from core.merkle import build_merkle_tree, verify_merkle_proof

    leaves = [hash_pod_record(r) for r in records]
    tree = build_merkle_tree(leaves)

    assert verify_merkle_proof(leaves[2], tree.proofs[2], tree.root)
"""
from .merkle_tree import (
    MerkleNode,
    MerkleProof,
    MerkleTree,
    merkle_parent,
    build_merkle_tree,
    build_merkle_root,
    build_merkle_proof,
    verify_merkle_proof,
    compute_tree_depth,
)

from .merkle_proofs import (
    MerkleProver,
    MerkleVerifier,
)


__all__ = [
    # Core types
    "MerkleNode",
    "MerkleProof",
    "MerkleTree",
    # Core functions
    "merkle_parent",
    "build_merkle_tree",
    "build_merkle_root",
    "build_merkle_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
]
