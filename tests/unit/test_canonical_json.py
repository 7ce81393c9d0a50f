"""
Schemas & Canonicalization
File: tests/unit/test_canonical_json.py

Purpose: Unit tests for canonical JSON serialization.
These tests ensure the bytes fed to the leaf hasher are identical across
runs, key orders and producers.
"""

import json
import math
from datetime import datetime, timedelta, timezone
from enum import Enum

import pytest
from pydantic import BaseModel, ConfigDict

from core.schemas import (
    CanonicalizationException,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    ensure_utc,
    format_datetime_canonical,
    format_number_js,
    to_epoch_millis,
)


# =============================================================================
# Test Fixtures
# =============================================================================


class SampleEnum(str, Enum):
    """Sample enum for testing."""
    OPTION_A = "option_a"
    OPTION_B = "option_b"


class SampleModel(BaseModel):
    """Sample Pydantic model for testing."""
    model_config = ConfigDict(extra="forbid")

    name: str
    value: int
    optional_field: str | None = None


@pytest.fixture
def sample_datetime_naive() -> datetime:
    """A naive datetime (no timezone info)."""
    return datetime(2026, 1, 27, 21, 35, 0)


@pytest.fixture
def sample_datetime_utc() -> datetime:
    """A UTC-aware datetime."""
    return datetime(2026, 1, 27, 21, 35, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_datetime_offset() -> datetime:
    """A datetime with non-UTC offset."""
    tz = timezone(timedelta(hours=-5))
    return datetime(2026, 1, 27, 16, 35, 0, tzinfo=tz)


# =============================================================================
# Deterministic Ordering
# =============================================================================


class TestDeterministicOrdering:
    """Tests for deterministic JSON key ordering."""

    def test_dict_keys_sorted(self):
        data = {"zebra": 1, "apple": 2, "mango": 3}
        assert dumps_canonical(data) == '{"apple":2,"mango":3,"zebra":1}'

    def test_nested_dict_keys_sorted(self):
        data = {"outer": {"z": 1, "a": 2}, "inner": {"y": 3, "b": 4}}
        parsed = json.loads(dumps_canonical(data))
        assert list(parsed.keys()) == ["inner", "outer"]
        assert list(parsed["inner"].keys()) == ["b", "y"]
        assert list(parsed["outer"].keys()) == ["a", "z"]

    def test_no_whitespace(self):
        result = dumps_canonical({"a": [1, 2], "b": {"c": "d"}})
        assert result == '{"a":[1,2],"b":{"c":"d"}}'

    def test_list_order_preserved(self):
        assert dumps_canonical([3, 1, 2]) == "[3,1,2]"

    def test_pod_shape(self):
        record = {
            "timestamp": 1769549700000,
            "photoUri": "ipfs://x",
            "gpsLng": 7.4951,
            "gpsLat": 9.0579,
            "beneficiaryId": "ben-1",
            "disbursementId": "disb-1",
        }
        assert dumps_canonical(record) == (
            '{"beneficiaryId":"ben-1","disbursementId":"disb-1",'
            '"gpsLat":9.0579,"gpsLng":7.4951,"photoUri":"ipfs://x",'
            '"timestamp":1769549700000}'
        )

    def test_random_insertion_order_deterministic(self):
        import random

        keys = list("abcdefghij")
        rng = random.Random(0)
        outputs = set()
        for _ in range(10):
            rng.shuffle(keys)
            outputs.add(dumps_canonical({k: ord(k) for k in keys}))
        assert len(outputs) == 1

    def test_model_serialized_by_alias_without_none(self):
        model = SampleModel(name="test", value=42)
        assert dumps_canonical(model) == '{"name":"test","value":42}'


# =============================================================================
# None Handling
# =============================================================================


class TestExcludeNone:
    """Tests for None omission."""

    def test_none_excluded_from_dict(self):
        assert dumps_canonical({"a": 1, "b": None}) == '{"a":1}'

    def test_nested_none_excluded(self):
        assert dumps_canonical({"a": {"b": None, "c": 1}}) == '{"a":{"c":1}}'

    def test_empty_string_not_excluded(self):
        assert dumps_canonical({"a": ""}) == '{"a":""}'

    def test_zero_and_false_not_excluded(self):
        assert dumps_canonical({"a": 0, "b": False}) == '{"a":0,"b":false}'


# =============================================================================
# Numbers
# =============================================================================


class TestFloatSafety:
    """Tests for float handling."""

    def test_nan_raises_exception(self):
        with pytest.raises(CanonicalizationException) as exc_info:
            dumps_canonical({"v": math.nan})
        assert exc_info.value.details["path"] == "v"

    def test_positive_infinity_raises(self):
        with pytest.raises(CanonicalizationException):
            dumps_canonical({"v": math.inf})

    def test_negative_infinity_raises(self):
        with pytest.raises(CanonicalizationException):
            dumps_canonical([-math.inf])

    def test_integral_float_emitted_as_int(self):
        assert dumps_canonical({"gpsLat": 12.0}) == '{"gpsLat":12}'

    def test_integral_float_equals_int(self):
        assert canonical_equals({"a": 1.0}, {"a": 1})

    def test_fractional_float_unchanged(self):
        assert dumps_canonical({"gpsLat": -33.8688}) == '{"gpsLat":-33.8688}'

    def test_bool_is_not_int(self):
        assert dumps_canonical({"a": True}) == '{"a":true}'


class TestEcmaScriptNumbers:
    """Floats render exactly as JSON.stringify renders them."""

    @pytest.mark.parametrize("value,expected", [
        (0.00005, "0.00005"),
        (-0.00001, "-0.00001"),
        (0.000001, "0.000001"),
        (1e-7, "1e-7"),
        (-2.5e-8, "-2.5e-8"),
        (123.456, "123.456"),
        (9.0579, "9.0579"),
        (0.1, "0.1"),
        (1e21, "1e+21"),
        (1.5e21, "1.5e+21"),
        (1e20, "100000000000000000000"),
        (1.2345678901234568e20, "123456789012345680000"),
    ])
    def test_format_number_js(self, value, expected):
        assert format_number_js(value) == expected

    def test_small_coordinate_in_record(self):
        record = {"beneficiaryId": "b", "disbursementId": "d", "gpsLat": 0.00005, "timestamp": 1}
        assert dumps_canonical(record) == (
            '{"beneficiaryId":"b","disbursementId":"d","gpsLat":0.00005,"timestamp":1}'
        )

    def test_exponent_form_in_list(self):
        assert dumps_canonical([1e-7, -0.00001]) == "[1e-7,-0.00001]"

    def test_large_integral_float_not_expanded_to_binary_value(self):
        assert dumps_canonical({"n": 1.2345678901234568e20}) == '{"n":123456789012345680000}'

    def test_null_in_list(self):
        assert dumps_canonical([None, 1]) == "[null,1]"

    def test_control_characters_escaped(self):
        assert dumps_canonical({"s": "a\nb\u0001"}) == '{"s":"a\\nb\\u0001"}'


# =============================================================================
# Strings & Other Types
# =============================================================================


class TestValueTypes:
    """Tests for non-numeric value canonicalization."""

    def test_unicode_not_escaped(self):
        assert dumps_canonical({"name": "Amina Baïdou"}) == '{"name":"Amina Baïdou"}'

    def test_enum_value(self):
        assert canonicalize_value(SampleEnum.OPTION_A) == "option_a"

    def test_bytes_as_hex(self):
        assert canonicalize_value(b"\xde\xad") == "0xdead"

    def test_tuple_as_list(self):
        assert dumps_canonical((1, 2)) == "[1,2]"

    def test_unsupported_type_raises(self):
        with pytest.raises(CanonicalizationException) as exc_info:
            dumps_canonical({"s": {1, 2}})
        assert exc_info.value.details["type"] == "set"


# =============================================================================
# Datetime Normalization
# =============================================================================


class TestDatetimeNormalization:
    """Tests for datetime handling and UTC normalization."""

    def test_ensure_utc_naive(self, sample_datetime_naive):
        assert ensure_utc(sample_datetime_naive).tzinfo == timezone.utc

    def test_ensure_utc_converts_offset(self, sample_datetime_offset):
        assert ensure_utc(sample_datetime_offset).hour == 21

    def test_datetime_format_with_z_suffix(self, sample_datetime_utc):
        assert format_datetime_canonical(sample_datetime_utc) == "2026-01-27T21:35:00Z"

    def test_datetime_with_microseconds(self):
        dt = datetime(2026, 1, 27, 21, 35, 0, 123456, tzinfo=timezone.utc)
        assert format_datetime_canonical(dt) == "2026-01-27T21:35:00.123456Z"

    def test_naive_and_offset_serialize_same(self, sample_datetime_naive, sample_datetime_offset):
        assert dumps_canonical({"t": sample_datetime_naive}) == dumps_canonical({"t": sample_datetime_offset})

    def test_to_epoch_millis(self, sample_datetime_utc):
        assert to_epoch_millis(sample_datetime_utc) == 1769549700000

    def test_to_epoch_millis_truncates_micros(self):
        dt = datetime(2026, 1, 27, 21, 35, 0, 999999, tzinfo=timezone.utc)
        assert to_epoch_millis(dt) == 1769549700999

    def test_to_epoch_millis_offset(self, sample_datetime_offset):
        assert to_epoch_millis(sample_datetime_offset) == 1769549700000


class TestCanonicalEquals:
    """Tests for canonical_equals()."""

    def test_equal_despite_key_order(self):
        assert canonical_equals({"a": 1, "b": 2}, {"b": 2, "a": 1})

    def test_unequal_values(self):
        assert not canonical_equals({"a": 1}, {"a": 2})

    def test_uncanonicalizable_is_unequal(self):
        assert not canonical_equals({"a": math.nan}, {"a": math.nan})
