"""
Pytest configuration and shared fixtures for ImpactLedger tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_pod = importlib.import_module("fixtures.pod_fixtures")

make_pod_payload = _pod.make_pod_payload
make_pod_record = _pod.make_pod_record
make_records = _pod.make_records

from core.anchoring import InMemoryLedger
from core.crypto.hashing import hash_pod_record
from core.crypto.signatures import StaticSigner


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def pod_payload():
    """Provide a default raw PoD record dict."""
    return make_pod_payload()


@pytest.fixture
def pod_record():
    """Provide a default validated PodRecord."""
    return make_pod_record()


@pytest.fixture
def records():
    """Provide an ordered batch of 5 raw PoD records."""
    return make_records(5)


@pytest.fixture
def leaves(records):
    """Provide the leaf hashes of the default records, in order."""
    return [hash_pod_record(r) for r in records]


@pytest.fixture
def ledger():
    """Provide an empty in-memory ledger with a fixed clock."""
    return InMemoryLedger(clock=lambda: 1769549700.0)


@pytest.fixture
def signer():
    """Provide a signer with a fixed key id."""
    return StaticSigner("kms-key-01")


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_check_passed():
    """Helper to assert a specific check passed in VerificationResult."""
    def _assert(result, check_id: str):
        checks = [c for c in result.checks if c.check_id == check_id]
        assert len(checks) == 1, f"Expected check '{check_id}' not found in {[c.check_id for c in result.checks]}"
        assert checks[0].ok, f"Check '{check_id}' failed: {checks[0].message}"
    return _assert


@pytest.fixture
def assert_check_failed():
    """Helper to assert a specific check failed in VerificationResult."""
    def _assert(result, check_id: str):
        checks = [c for c in result.checks if c.check_id == check_id]
        assert len(checks) == 1, f"Expected check '{check_id}' not found in {[c.check_id for c in result.checks]}"
        assert not checks[0].ok, f"Check '{check_id}' unexpectedly passed"
    return _assert
