"""
CLI Hash Command

Compute the canonical leaf hash of one or more PoD records.

Usage:
    impactledger hash record.json [--json]
"""

from __future__ import annotations

import logging
import sys
from argparse import Namespace

from core.crypto.hashing import hash_pod_record
from core.schemas.errors import ImpactLedgerException
from core.schemas.pod import PodRecord

from impactledger_cli.io import CLIInputError, dump_json, format_hash, load_records


logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def hash_cmd(args: Namespace) -> int:
    """Handle the hash command."""
    config = args.cli_config

    try:
        records = load_records(args.record_path)
        hashes = [
            hash_pod_record(PodRecord.from_mapping(r, record_index=i))
            for i, r in enumerate(records)
        ]
    except CLIInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ImpactLedgerException as e:
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    logger.debug("Hashed %d record(s) from %s", len(hashes), args.record_path)
    rendered = [format_hash(h, config.output.hex_prefix) for h in hashes]

    if args.json:
        payload = [{"index": i, "leafHash": h} for i, h in enumerate(rendered)]
        print(dump_json(payload, config.output.indent))
    else:
        for h in rendered:
            print(h)
    return EXIT_SUCCESS
