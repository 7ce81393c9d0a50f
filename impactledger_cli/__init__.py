"""
ImpactLedger CLI

Command-line interface for the PoD integrity core.

Usage:
    python -m impactledger_cli hash record.json
    python -m impactledger_cli build records.json --batch-id M-7 --out batch.json
    python -m impactledger_cli proof batch.json --index 3 --out proof.json
    python -m impactledger_cli verify proof.json --record record.json
"""

__version__ = "0.1.0"
