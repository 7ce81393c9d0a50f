"""
Schemas & Canonicalization
File: canonical.py

Purpose: Deterministic serialization utilities for leaf hashing and
Merkle commitments.

CRITICAL: All outputs from this module MUST be deterministic across runs,
processes and implementations. A PoD hash computed by a capture client at
delivery time must equal the hash recomputed here at audit time.

Canonical rules:
    - Keys sorted lexicographically at every nesting level
    - No whitespace (separators "," and ":")
    - None values omitted (absent and None are the same record)
    - Numbers formatted as JSON.stringify does: integral floats as integers
      (12.0 -> 12), others per Number::toString (5e-05 -> 0.00005, 1e-07 -> 1e-7)
    - NaN / Infinity rejected
    - Non-ASCII characters emitted as-is, UTF-8 encoded by the hasher
"""

import json
import math
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import CanonicalizationException

# Canonical JSON separators - no whitespace
CANONICAL_JSON_SEPARATORS: tuple[str, str] = (",", ":")


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure a datetime is timezone-aware and in UTC.

    Rules:
        - If naive (no tzinfo): treat as UTC
        - If aware: convert to UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_epoch_millis(dt: datetime) -> int:
    """
    Convert a datetime to integer epoch milliseconds (UTC).

    Example:
        >>> to_epoch_millis(datetime(2026, 1, 27, 21, 35, 0, tzinfo=timezone.utc))
        1769549700000
    """
    utc_dt = ensure_utc(dt)
    delta = utc_dt - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def format_datetime_canonical(dt: datetime) -> str:
    """
    Format a datetime as ISO-8601 with Z suffix for UTC.

    Returns:
        ISO-8601 formatted string with Z suffix (e.g., "2026-01-27T21:35:00Z").
    """
    utc_dt = ensure_utc(dt)
    if utc_dt.microsecond == 0:
        return utc_dt.strftime("%Y-%m-%dT%H:%M:%SZ")
    return utc_dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _canonicalize_float(value: float, path: str = "") -> float | int:
    if not math.isfinite(value):
        raise CanonicalizationException(
            message=f"Non-finite float value encountered: {value}",
            details={"path": path, "value": str(value)},
        )
    if value.is_integer() and abs(value) < 2**53:
        return int(value)
    return value


def format_number_js(value: float) -> str:
    """
    Render a finite float the way ECMAScript Number::toString does.

    Positional notation for 1e-7 <= |x| < 1e21, otherwise exponent form
    with an explicit sign and no zero padding (1e-7, 1.5e+21). The digits
    are the shortest round-trip digits, which repr() already produces.

    Example:
        >>> format_number_js(0.00005)
        '0.00005'
    """
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = exponent + k

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * (-n) + digits

    e = n - 1
    exp = ("+" if e >= 0 else "-") + str(abs(e))
    if k == 1:
        return f"{sign}{digits}e{exp}"
    return f"{sign}{digits[0]}.{digits[1:]}e{exp}"


def canonicalize_value(value: Any, path: str = "") -> Any:
    """
    Recursively canonicalize a value for deterministic JSON serialization.

    Args:
        value: Any Python value to canonicalize.
        path: Current path for error reporting.

    Returns:
        A JSON-serializable canonical representation.

    Raises:
        CanonicalizationException: If the value cannot be canonicalized
            (e.g., contains NaN/Infinity floats).
    """
    if value is None:
        return None

    if isinstance(value, bool):
        # Must check bool before int since bool is subclass of int
        return value

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        return _canonicalize_float(value, path)

    if isinstance(value, str):
        return value

    if isinstance(value, datetime):
        return format_datetime_canonical(value)

    if isinstance(value, Enum):
        return value.value

    if isinstance(value, BaseModel):
        dumped = value.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
        )
        return canonicalize_value(dumped, path)

    if isinstance(value, dict):
        # Keys will be sorted during JSON serialization
        return {
            str(k): canonicalize_value(v, f"{path}.{k}" if path else str(k))
            for k, v in value.items()
            if v is not None
        }

    if isinstance(value, (list, tuple)):
        return [
            canonicalize_value(item, f"{path}[{i}]")
            for i, item in enumerate(value)
        ]

    if isinstance(value, bytes):
        return "0x" + value.hex()

    raise CanonicalizationException(
        message=f"Cannot canonicalize value of type {type(value).__name__}",
        details={"path": path, "type": type(value).__name__},
    )


def _encode(value: Any) -> str:
    item_sep, key_sep = CANONICAL_JSON_SEPARATORS
    if value is None or isinstance(value, (bool, str)):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_number_js(value)
    if isinstance(value, dict):
        return "{" + item_sep.join(
            json.dumps(k, ensure_ascii=False) + key_sep + _encode(value[k])
            for k in sorted(value)
        ) + "}"
    if isinstance(value, list):
        return "[" + item_sep.join(_encode(item) for item in value) + "]"
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to canonical JSON string.

    Args:
        obj: A Pydantic model, dict, or other serializable object.

    Returns:
        A canonical JSON string.

    Raises:
        CanonicalizationException: If serialization fails.

    Example:
        >>> dumps_canonical({"beneficiaryId": "b-1", "disbursementId": "d-1", "gpsLat": None})
        '{"beneficiaryId":"b-1","disbursementId":"d-1"}'
    """
    try:
        return _encode(canonicalize_value(obj))
    except CanonicalizationException:
        raise
    except (TypeError, ValueError) as e:
        raise CanonicalizationException(
            message=f"Failed to serialize to canonical JSON: {e}",
            details={"type": type(obj).__name__, "error": str(e)},
        ) from e


def canonical_equals(obj1: Any, obj2: Any) -> bool:
    """Check if two objects have identical canonical JSON representations."""
    try:
        return dumps_canonical(obj1) == dumps_canonical(obj2)
    except CanonicalizationException:
        return False
