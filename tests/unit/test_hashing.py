"""
Hashing Unit Tests
Tests for core/crypto/hashing.py

Tests:
- keccak256 known vectors
- PoD leaf hash stability under key reordering and None fields
- hex codecs and lenient hash normalization
- sorted-pair parent hashing
"""
import pytest

from core.crypto.hashing import (
    HASH_LENGTH,
    from_hex,
    hash_canonical,
    hash_pod_record,
    hash_sorted_pair,
    hashes_equal,
    keccak256,
    normalize_hash,
    to_hex,
)
from core.schemas.canonical import dumps_canonical
from core.schemas.errors import InvalidHashException, MalformedRecordException
from core.schemas.pod import PodRecord

from fixtures import make_pod_payload


KECCAK_EMPTY = "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
KECCAK_ABC = "4e03657aea45a94fc7d47ba826c8d667c0d1e6e33a64a036ec44f58fa12d6c45"


class TestKeccak256:
    """Tests for keccak256() function."""

    def test_empty_input_known_value(self):
        assert keccak256(b"").hex() == KECCAK_EMPTY

    def test_abc_known_value(self):
        assert keccak256(b"abc").hex() == KECCAK_ABC

    def test_digest_length(self):
        assert len(keccak256(b"anything")) == HASH_LENGTH

    def test_not_sha3(self):
        """Keccak-256 padding differs from NIST SHA3-256."""
        import hashlib
        assert keccak256(b"") != hashlib.sha3_256(b"").digest()


class TestHashCanonical:
    """Tests for hash_canonical() function."""

    def test_hashes_canonical_utf8_bytes(self):
        obj = {"b": 1, "a": "x"}
        assert hash_canonical(obj) == keccak256(dumps_canonical(obj).encode("utf-8"))

    def test_key_order_independent(self):
        assert hash_canonical({"a": 1, "b": 2}) == hash_canonical({"b": 2, "a": 1})

    def test_value_change_changes_hash(self):
        assert hash_canonical({"a": 1}) != hash_canonical({"a": 2})


class TestHashPodRecord:
    """Tests for hash_pod_record() leaf hashing."""

    def test_output_format(self, pod_payload):
        leaf = hash_pod_record(pod_payload)
        assert leaf.startswith("0x")
        assert len(leaf) == 66
        assert leaf == leaf.lower()

    def test_deterministic(self, pod_payload):
        assert hash_pod_record(pod_payload) == hash_pod_record(dict(pod_payload))

    def test_key_order_independent(self, pod_payload):
        reordered = dict(reversed(list(pod_payload.items())))
        assert list(reordered) != list(pod_payload)
        assert hash_pod_record(reordered) == hash_pod_record(pod_payload)

    def test_model_and_mapping_agree(self, pod_payload):
        record = PodRecord.from_mapping(pod_payload)
        assert hash_pod_record(record) == hash_pod_record(pod_payload)

    def test_matches_canonical_rule(self, pod_payload):
        expected = "0x" + keccak256(dumps_canonical(pod_payload).encode("utf-8")).hex()
        assert hash_pod_record(pod_payload) == expected

    def test_none_field_same_as_absent(self):
        absent = make_pod_payload(photo_uri=None)
        explicit = dict(absent, photoUri=None)
        assert hash_pod_record(explicit) == hash_pod_record(absent)

    def test_snake_case_input_hashes_as_camel_case(self, pod_payload):
        snake = {
            "disbursement_id": pod_payload["disbursementId"],
            "beneficiary_id": pod_payload["beneficiaryId"],
            "timestamp": pod_payload["timestamp"],
            "gps_lat": pod_payload["gpsLat"],
            "gps_lng": pod_payload["gpsLng"],
            "photo_uri": pod_payload["photoUri"],
        }
        assert hash_pod_record(snake) == hash_pod_record(pod_payload)

    def test_extra_fields_are_committed(self, pod_payload):
        with_extra = dict(pod_payload, fieldAgentId="agent-9")
        assert hash_pod_record(with_extra) != hash_pod_record(pod_payload)

    @pytest.mark.parametrize("field", ["disbursementId", "beneficiaryId", "timestamp", "gpsLat", "photoUri"])
    def test_every_field_change_changes_hash(self, pod_payload, field):
        changed = dict(pod_payload)
        if field == "timestamp":
            changed[field] += 1
        elif field == "gpsLat":
            changed[field] += 0.0001
        else:
            changed[field] += "x"
        assert hash_pod_record(changed) != hash_pod_record(pod_payload)

    def test_missing_required_field_raises(self, pod_payload):
        del pod_payload["beneficiaryId"]
        with pytest.raises(MalformedRecordException) as exc_info:
            hash_pod_record(pod_payload)
        assert "beneficiaryId" in exc_info.value.details["missing_fields"]


class TestHexConversion:
    """Tests for to_hex() and from_hex()."""

    def test_to_hex_prefix(self):
        assert to_hex(bytes.fromhex("deadbeef")) == "0xdeadbeef"

    def test_from_hex_round_trip(self):
        data = keccak256(b"x")
        assert from_hex(to_hex(data)) == data

    def test_from_hex_requires_prefix(self):
        with pytest.raises(ValueError, match="0x"):
            from_hex("deadbeef")

    def test_from_hex_odd_length(self):
        with pytest.raises(ValueError, match="even length"):
            from_hex("0xabc")

    def test_from_hex_invalid_chars(self):
        with pytest.raises(ValueError, match="Invalid hex"):
            from_hex("0xzz")


class TestNormalizeHash:
    """Tests for normalize_hash() and hashes_equal()."""

    def test_accepts_bytes(self):
        raw = keccak256(b"a")
        assert normalize_hash(raw) == raw

    def test_prefix_case_whitespace_insensitive(self):
        raw = keccak256(b"a")
        variants = [
            "0x" + raw.hex(),
            raw.hex(),
            "0X" + raw.hex().upper(),
            "  0x" + raw.hex() + "\n",
        ]
        for v in variants:
            assert normalize_hash(v) == raw

    def test_wrong_length_raises(self):
        with pytest.raises(InvalidHashException):
            normalize_hash("0x1234")

    def test_wrong_byte_length_raises(self):
        with pytest.raises(InvalidHashException):
            normalize_hash(b"\x00" * 31)

    def test_non_hex_raises(self):
        with pytest.raises(InvalidHashException):
            normalize_hash("0x" + "g" * 64)

    def test_wrong_type_raises(self):
        with pytest.raises(InvalidHashException):
            normalize_hash(12345)

    def test_hashes_equal_across_encodings(self):
        raw = keccak256(b"a")
        assert hashes_equal(raw, "0X" + raw.hex().upper())

    def test_hashes_equal_malformed_is_false(self):
        assert not hashes_equal("0x12", "0x12")


class TestHashSortedPair:
    """Tests for hash_sorted_pair()."""

    def test_order_independent(self):
        a, b = keccak256(b"a"), keccak256(b"b")
        assert hash_sorted_pair(a, b) == hash_sorted_pair(b, a)

    def test_concatenates_smaller_first(self):
        a, b = keccak256(b"a"), keccak256(b"b")
        lo, hi = sorted([a, b])
        assert hash_sorted_pair(a, b) == keccak256(lo + hi)

    def test_self_pair(self):
        a = keccak256(b"a")
        assert hash_sorted_pair(a, a) == keccak256(a + a)


class TestCaptureClientCompatibility:
    """Leaf hashes equal Keccak of the capture client's JSON.stringify output."""

    @pytest.mark.parametrize("lat,rendered", [
        (0.00005, "0.00005"),
        (-0.00001, "-0.00001"),
        (1e-7, "1e-7"),
        (45.123456, "45.123456"),
    ])
    def test_small_coordinates(self, lat, rendered):
        record = {"disbursementId": "d", "beneficiaryId": "b", "gpsLat": lat, "timestamp": 1}
        client_json = (
            '{"beneficiaryId":"b","disbursementId":"d","gpsLat":' + rendered + ',"timestamp":1}'
        )
        assert hash_pod_record(record) == "0x" + keccak256(client_json.encode("utf-8")).hex()
