"""
Test fixtures package for ImpactLedger tests.

This package provides factory functions for creating test objects:
- pod_fixtures.py: PoD records and ordered record batches

Usage:
    from fixtures import make_pod_record, make_records

    def test_something():
        record = make_pod_record(beneficiary_id="ben-042")
        records = make_records(10)
"""

from .pod_fixtures import (
    BASE_TIMESTAMP_MS,
    make_pod_payload,
    make_pod_record,
    make_records,
)

__all__ = [
    "BASE_TIMESTAMP_MS",
    "make_pod_payload",
    "make_pod_record",
    "make_records",
]
