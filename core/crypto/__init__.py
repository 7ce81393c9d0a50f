"""
Core cryptographic utilities.

Keccak-256 hashing, canonical PoD leaf hashing, hex codecs and the
signer capability used when anchoring.
"""
from .hashing import (
    HASH_LENGTH,
    HashLike,
    keccak256,
    hash_canonical,
    hash_pod_record,
    to_hex,
    from_hex,
    normalize_hash,
    hashes_equal,
    hash_sorted_pair,
)
from .signatures import Signer, StaticSigner

__all__ = [
    "HASH_LENGTH",
    "HashLike",
    "keccak256",
    "hash_canonical",
    "hash_pod_record",
    "to_hex",
    "from_hex",
    "normalize_hash",
    "hashes_equal",
    "hash_sorted_pair",
    "Signer",
    "StaticSigner",
]
