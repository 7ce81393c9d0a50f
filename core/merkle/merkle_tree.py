"""
Merkle Tree Implementation
Deterministic Merkle tree construction, proof generation, and verification.

This module provides:
- Sorted-pair Merkle tree construction with a proof path for every leaf
- Single-proof helpers
- Proof verification that never raises for string/bytes input

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing: leaf = keccak256(dumps_canonical(record).encode("utf-8"))
   - Implemented via core.crypto.hashing.hash_pod_record()
2. Parent hashing: parent = keccak256(min(a, b) + max(a, b))
   - Pairs are SORTED by raw bytes before concatenation. This is not a
     positional Merkle tree: proofs carry no left/right flags and
     verification sorts at every step.
3. Padding rule: an odd level pairs its last node WITH ITSELF.
   The duplicated node's proof records its own hash as the sibling.
   Changing this rule changes every root and breaks previously anchored
   batches.
4. Empty leaves: rejected with EmptyBatchException (an empty batch is
   never anchored)
5. Single leaf: root = leaf, proof = []

Determinism Notes:
- Leaf ordering is defined by the caller and defines each leaf's index
- This module never sorts leaves - only the two members of each pair
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from core.crypto.hashing import (
    HashLike,
    hash_sorted_pair,
    normalize_hash,
    to_hex,
)
from core.schemas.errors import EmptyBatchException, InvalidHashException


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MerkleNode:
    """
    A node of one tree level.

    Attributes:
        hash: The node hash (32 bytes)
        leaf_indices: Indices of every leaf that descends from this node
    """
    hash: bytes
    leaf_indices: tuple[int, ...]


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle proof for a single leaf in a Merkle tree.

    Attributes:
        leaf: The leaf hash being proven (32 bytes)
        index: The 0-based index of the leaf in the original leaf list
        siblings: List of sibling hashes from bottom to top of tree
        root: The Merkle root this proof is against
    """
    leaf: bytes
    index: int
    siblings: list[bytes]
    root: bytes

    def __post_init__(self) -> None:
        """Validate proof structure."""
        if self.index < 0:
            raise ValueError(f"Leaf index must be non-negative, got {self.index}")

    def to_hex_dict(self) -> dict[str, object]:
        """Serializable form with 0x-prefixed hex hashes."""
        return {
            "leafHash": to_hex(self.leaf),
            "index": self.index,
            "proof": [to_hex(s) for s in self.siblings],
            "root": to_hex(self.root),
        }


@dataclass
class MerkleTree:
    """
    Result of a build: the root plus one proof path per leaf.

    The tree is handed to the caller; the builder keeps no reference to it.
    """
    root: bytes
    leaves: list[bytes]
    proofs: dict[int, list[bytes]] = field(default_factory=dict)

    @property
    def leaf_count(self) -> int:
        return len(self.leaves)

    @property
    def depth(self) -> int:
        return compute_tree_depth(len(self.leaves))

    @property
    def root_hex(self) -> str:
        return to_hex(self.root)

    def proof(self, index: int) -> MerkleProof:
        """Return the MerkleProof for the leaf at the given index."""
        if index < 0 or index >= len(self.leaves):
            raise IndexError(
                f"Leaf index {index} out of range for {len(self.leaves)} leaves"
            )
        return MerkleProof(
            leaf=self.leaves[index],
            index=index,
            siblings=list(self.proofs[index]),
            root=self.root,
        )

    def proof_hex(self, index: int) -> list[str]:
        """Proof path for a leaf as 0x-prefixed hex strings."""
        return [to_hex(s) for s in self.proof(index).siblings]


def merkle_parent(left: bytes, right: bytes) -> bytes:
    """
    Compute the parent hash of two child nodes.

    Parent hash is order-independent: keccak256(min + max)
    """
    return hash_sorted_pair(left, right)


def _pair_level(
    level: list[MerkleNode],
    proofs: dict[int, list[bytes]],
) -> list[MerkleNode]:
    next_level: list[MerkleNode] = []
    for i in range(0, len(level), 2):
        left = level[i]
        if i + 1 < len(level):
            right = level[i + 1]
            for leaf_index in left.leaf_indices:
                proofs[leaf_index].append(right.hash)
            for leaf_index in right.leaf_indices:
                proofs[leaf_index].append(left.hash)
            indices = left.leaf_indices + right.leaf_indices
        else:
            # Odd level: last node is paired with itself
            right = left
            for leaf_index in left.leaf_indices:
                proofs[leaf_index].append(left.hash)
            indices = left.leaf_indices
        next_level.append(MerkleNode(merkle_parent(left.hash, right.hash), indices))
    return next_level


def build_merkle_tree(leaves: Sequence[HashLike]) -> MerkleTree:
    """
    Build a sorted-pair Merkle tree and every leaf's proof path.

    Algorithm:
    1. If single leaf: root = leaf, proof = []
    2. Otherwise, process each level pairwise left-to-right:
       - If odd number of nodes, the last node is paired with itself
       - parent = keccak256(sorted(left, right) concatenated)
       - Each child's sibling is appended to the proof of every leaf
         below that child
    3. Repeat until a single node (the root) remains

    Example: [a, b, c] -> [parent(a,b), parent(c,c)] -> root
             proofs: 0 -> [b, p(c,c)], 1 -> [a, p(c,c)], 2 -> [c, p(a,b)]

    Args:
        leaves: Ordered leaf hashes (hex strings or 32-byte values).
                Order matters and is preserved.

    Returns:
        MerkleTree with root and proofs for every leaf index

    Raises:
        EmptyBatchException: If leaves is empty
        InvalidHashException: If any leaf is not a 32-byte hash
    """
    if len(leaves) == 0:
        raise EmptyBatchException()

    leaf_bytes: list[bytes] = []
    for i, leaf in enumerate(leaves):
        try:
            leaf_bytes.append(normalize_hash(leaf))
        except InvalidHashException as e:
            e.details["leaf_index"] = i
            raise

    proofs: dict[int, list[bytes]] = {i: [] for i in range(len(leaf_bytes))}

    if len(leaf_bytes) == 1:
        return MerkleTree(root=leaf_bytes[0], leaves=leaf_bytes, proofs=proofs)

    level = [MerkleNode(h, (i,)) for i, h in enumerate(leaf_bytes)]
    while len(level) > 1:
        level = _pair_level(level, proofs)

    tree = MerkleTree(root=level[0].hash, leaves=leaf_bytes, proofs=proofs)
    logger.debug(
        "Built Merkle tree: %d leaves, depth %d, root %s",
        tree.leaf_count, tree.depth, tree.root_hex,
    )
    return tree


def build_merkle_root(leaves: Sequence[HashLike]) -> bytes:
    """
    Build a Merkle root from a sequence of leaf hashes.

    Raises:
        EmptyBatchException: If leaves is empty
    """
    return build_merkle_tree(leaves).root


def build_merkle_proof(leaves: Sequence[HashLike], index: int) -> MerkleProof:
    """
    Generate a Merkle proof for the leaf at the given index.

    Raises:
        IndexError: If index is out of range
        EmptyBatchException: If leaves is empty
    """
    if len(leaves) == 0:
        raise EmptyBatchException("Cannot generate proof for empty leaf list")
    if index < 0 or index >= len(leaves):
        raise IndexError(
            f"Leaf index {index} out of range for {len(leaves)} leaves"
        )
    return build_merkle_tree(leaves).proof(index)


def verify_merkle_proof(
    leaf_hash: HashLike,
    proof: Sequence[HashLike],
    root: HashLike,
) -> bool:
    """
    Verify that a leaf is included under a root.

    Algorithm:
    1. Start with the leaf hash as the running hash
    2. For each sibling (bottom-up):
       running = keccak256(sorted(running, sibling) concatenated)
    3. Check running hash equals the expected root

    A sibling equal to the running hash (the self-paired odd node) is a
    valid step.

    Args:
        leaf_hash: The leaf hash to verify
        proof: Sibling hashes, bottom-up
        root: The expected (anchored) Merkle root

    Returns:
        True if the proof reconstructs root, False otherwise. Malformed
        hashes yield False rather than an exception.
    """
    try:
        current = normalize_hash(leaf_hash)
        siblings = [normalize_hash(s) for s in proof]
        expected = normalize_hash(root)
    except InvalidHashException as e:
        logger.debug("Proof rejected, malformed hash: %s", e.message)
        return False

    for sibling in siblings:
        current = merkle_parent(current, sibling)

    if current != expected:
        logger.debug(
            "Proof mismatch: recomputed %s, expected %s",
            to_hex(current), to_hex(expected),
        )
        return False
    return True


def compute_tree_depth(num_leaves: int) -> int:
    """
    Compute the depth of a Merkle tree with given number of leaves.

    Depth is the number of levels from leaves to root (inclusive).
    A single leaf has depth 1, two leaves have depth 2, etc.
    Proof length for any leaf is depth - 1.

    Returns:
        Tree depth (0 for empty tree)
    """
    if num_leaves == 0:
        return 0
    if num_leaves == 1:
        return 1

    depth = 1
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        depth += 1

    return depth


__all__ = [
    "MerkleNode",
    "MerkleProof",
    "MerkleTree",
    "merkle_parent",
    "build_merkle_tree",
    "build_merkle_root",
    "build_merkle_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
]
