"""
CLI Build Command

Commit an ordered list of PoD records to a Merkle batch.

Usage:
    impactledger build records.json --batch-id M-7 [--signer-kid KID] [--out batch.json] [--json]
"""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass

from core.batch import build_pod_batch
from core.schemas.errors import ImpactLedgerException

from impactledger_cli.io import CLIInputError, dump_json, format_hash, load_records, write_json


logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


@dataclass
class BuildSummary:
    """Summary of a batch build for CLI output."""
    batch_id: str = ""
    merkle_root: str = ""
    leaf_count: int = 0
    signer_key_id: str | None = None
    out_path: str | None = None


def build_cmd(args: Namespace) -> int:
    """Handle the build command."""
    config = args.cli_config
    signer_key_id = args.signer_kid or config.anchoring.signer_key_id

    try:
        records = load_records(args.records_path)
        batch = build_pod_batch(args.batch_id, records, signer_key_id=signer_key_id)
    except CLIInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ImpactLedgerException as e:
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        if e.details:
            print(f"  details: {e.details}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if not args.out:
        print(dump_json(batch, config.output.indent))
        return EXIT_SUCCESS

    out_path = write_json(batch, args.out, config.output.indent)
    logger.info("Wrote batch %s to %s", batch.batch_id, out_path)

    summary = BuildSummary(
        batch_id=batch.batch_id,
        merkle_root=format_hash(batch.merkle_root, config.output.hex_prefix),
        leaf_count=batch.leaf_count,
        signer_key_id=batch.signer_key_id,
        out_path=str(out_path),
    )
    if args.json:
        print(dump_json(asdict(summary), config.output.indent))
    else:
        print(f"Batch:   {summary.batch_id}")
        print(f"Records: {summary.leaf_count}")
        print(f"Root:    {summary.merkle_root}")
        if summary.signer_key_id:
            print(f"Signer:  {summary.signer_key_id}")
        print(f"Written: {summary.out_path}")
    return EXIT_SUCCESS
