"""
Schemas & Canonicalization
File: pod.py

Purpose: Proof-of-Delivery record model - the exact shape the canonical
hasher consumes.

Serialized keys use the camelCase names emitted by field-capture clients
(disbursementId, beneficiaryId, gpsLat, gpsLng, photoUri, timestamp) so a
hash computed at capture time can be recomputed here bit-for-bit.

Timestamp precision is fixed: integer epoch MILLISECONDS.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .canonical import to_epoch_millis
from .errors import MalformedRecordException


REQUIRED_POD_FIELDS: tuple[str, ...] = ("disbursementId", "beneficiaryId", "timestamp")


class PodRecord(BaseModel):
    """
    A field-capture record asserting that aid reached a beneficiary.

    Immutable once built. Extra fields are kept and hashed with the rest.
    """

    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        populate_by_name=True,
    )

    disbursement_id: str = Field(
        ...,
        alias="disbursementId",
        min_length=1,
        description="Disbursement this delivery belongs to",
    )
    beneficiary_id: str = Field(
        ...,
        alias="beneficiaryId",
        min_length=1,
        description="Beneficiary who received the aid",
    )
    gps_lat: float | None = Field(
        default=None,
        alias="gpsLat",
        ge=-90.0,
        le=90.0,
    )
    gps_lng: float | None = Field(
        default=None,
        alias="gpsLng",
        ge=-180.0,
        le=180.0,
    )
    photo_uri: str | None = Field(
        default=None,
        alias="photoUri",
        description="Reference to the delivery photo (never the photo itself)",
    )
    timestamp: int = Field(
        ...,
        ge=0,
        strict=True,
        description="Capture time as integer epoch milliseconds",
    )

    @field_validator("disbursement_id", "beneficiary_id")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return to_epoch_millis(value)
        return value

    def to_hash_payload(self) -> dict[str, Any]:
        """Return the dict that is canonically serialized for hashing."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        record_index: int | None = None,
    ) -> "PodRecord":
        """
        Validate a raw mapping into a PodRecord.

        Raises:
            MalformedRecordException: If required fields are missing or empty,
                or any field has an invalid value.
        """
        if not isinstance(data, Mapping):
            raise MalformedRecordException(
                f"PoD record must be a mapping, got {type(data).__name__}",
                record_index=record_index,
            )

        missing = [
            name for name in REQUIRED_POD_FIELDS
            if _lookup(data, name) in (None, "")
        ]

        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise MalformedRecordException(
                f"Malformed PoD record: {'; '.join(errors)}",
                missing_fields=missing,
                record_index=record_index,
                details={"errors": errors},
            ) from e


_SNAKE_NAMES = {
    "disbursementId": "disbursement_id",
    "beneficiaryId": "beneficiary_id",
    "timestamp": "timestamp",
}


def _lookup(data: Mapping[str, Any], alias: str) -> Any:
    if alias in data:
        return data[alias]
    return data.get(_SNAKE_NAMES[alias])
