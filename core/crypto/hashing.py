"""
Hashing Utilities
Keccak-256 hashing, canonical leaf hashing and hex codecs for Merkle commitments.

This module provides:
- Keccak-256 hashing for raw bytes (the 256-bit hash used everywhere:
  leaves, inner nodes, anchored roots)
- Canonical hashing for objects (via dumps_canonical)
- PoD leaf hashing
- Hex encoding/decoding with 0x prefix, and lenient hash normalization

Security/Determinism Notes:
- Always hash raw bytes exactly as specified
- Hex comparison is done on decoded bytes, never on strings, so prefix
  and case never cause spurious mismatches
"""
from __future__ import annotations

from typing import Any, Mapping, Union

from eth_utils import keccak

from core.schemas.canonical import dumps_canonical
from core.schemas.errors import InvalidHashException
from core.schemas.pod import PodRecord


# Digest size of Keccak-256 in bytes
HASH_LENGTH: int = 32

HashLike = Union[str, bytes]


def keccak256(data: bytes) -> bytes:
    """
    Compute the Keccak-256 hash of raw bytes.

    Note this is the original Keccak padding used by Ethereum, not NIST SHA3-256.

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(data)


def hash_canonical(obj: Any) -> bytes:
    """
    Hash an object using canonical JSON serialization.

    Rule: leaf = keccak256(dumps_canonical(obj).encode("utf-8"))

    Raises:
        CanonicalizationException: If object cannot be canonically serialized
    """
    canonical_json = dumps_canonical(obj)
    return keccak256(canonical_json.encode("utf-8"))


def hash_pod_record(record: PodRecord | Mapping[str, Any]) -> str:
    """
    Compute the leaf hash of a PoD record.

    Mappings are validated into a PodRecord first, so a record missing its
    disbursement id, beneficiary id or timestamp never reaches the hasher.

    Returns:
        0x-prefixed lowercase hex Keccak-256 digest (66 chars)

    Raises:
        MalformedRecordException: If required fields are missing or empty
    """
    if not isinstance(record, PodRecord):
        record = PodRecord.from_mapping(record)
    return to_hex(hash_canonical(record.to_hash_payload()))


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def normalize_hash(value: HashLike) -> bytes:
    """
    Decode a hash given as bytes or as hex text into 32 raw bytes.

    Accepts an optional 0x/0X prefix, any letter case and surrounding
    whitespace.

    Raises:
        InvalidHashException: If the value is not exactly a 32-byte hash
    """
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        text = value.strip()
        if text[:2] in ("0x", "0X"):
            text = text[2:]
        if len(text) != HASH_LENGTH * 2:
            raise InvalidHashException(
                f"Hash must be {HASH_LENGTH * 2} hex chars, got {len(text)}",
                details={"value": value[:80]},
            )
        try:
            raw = bytes.fromhex(text)
        except ValueError as e:
            raise InvalidHashException(
                f"Invalid hex characters in hash: {e}",
                details={"value": value[:80]},
            ) from e
    else:
        raise InvalidHashException(
            f"Hash must be str or bytes, got {type(value).__name__}",
        )

    if len(raw) != HASH_LENGTH:
        raise InvalidHashException(
            f"Hash must be {HASH_LENGTH} bytes, got {len(raw)}",
            details={"length": len(raw)},
        )
    return raw


def hashes_equal(left: HashLike, right: HashLike) -> bool:
    """Compare two hashes after normalization. Malformed input compares unequal."""
    try:
        return normalize_hash(left) == normalize_hash(right)
    except InvalidHashException:
        return False


def hash_sorted_pair(left: bytes, right: bytes) -> bytes:
    """
    Hash two nodes into their parent, order-independently.

    The pair is sorted by raw byte value before concatenation:
    parent = keccak256(min(left, right) + max(left, right))
    """
    if right < left:
        left, right = right, left
    return keccak256(left + right)


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
]
