"""
CLI Proof Command

Extract the portable inclusion proof for one leaf of a batch file.

Usage:
    impactledger proof batch.json --index 3 [--out proof.json]
    impactledger proof batch.json --leaf 0xabc... [--out proof.json]
"""

from __future__ import annotations

import logging
import sys
from argparse import Namespace

from pydantic import ValidationError

from core.batch import PodBatch

from impactledger_cli.io import CLIInputError, dump_json, load_json, write_json


logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def proof_cmd(args: Namespace) -> int:
    """Handle the proof command."""
    config = args.cli_config

    try:
        batch = PodBatch.model_validate(load_json(args.batch_path))
    except CLIInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ValidationError as e:
        print(f"Error: invalid batch file {args.batch_path}: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        index = args.index if args.leaf is None else batch.index_of(args.leaf)
        inclusion = batch.inclusion_proof(index)
    except (IndexError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if args.out:
        out_path = write_json(inclusion, args.out, config.output.indent)
        logger.info("Wrote proof for leaf %d of batch %s to %s", index, batch.batch_id, out_path)
        print(f"Wrote proof for leaf {index} to {out_path}")
    else:
        print(dump_json(inclusion, config.output.indent))
    return EXIT_SUCCESS
