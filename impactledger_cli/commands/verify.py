"""
CLI Verify Command

Verify an inclusion proof offline, from the PoD record itself or from a
bare leaf hash, optionally against a separately obtained anchored root.

Usage:
    impactledger verify proof.json --record record.json [--root 0x...] [--json]
    impactledger verify proof.json --leaf 0x... [--root 0x...] [--json]

Exit codes: 0 valid, 1 runtime error, 2 proof invalid.
"""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from typing import Any

from pydantic import ValidationError

from core.batch import InclusionProof, verify_pod_inclusion
from core.merkle import verify_merkle_proof
from core.schemas.errors import ImpactLedgerException

from impactledger_cli.io import CLIInputError, dump_json, load_json, load_records


logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of proof verification for CLI output."""
    proof_path: str = ""
    leaf_index: int = 0
    batch_id: str | None = None
    root: str = ""
    ok: bool = False
    checks: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if not d["checks"]:
            del d["checks"]
        return d


def verify_cmd(args: Namespace) -> int:
    """Handle the verify command."""
    config = args.cli_config

    try:
        inclusion = InclusionProof.model_validate(load_json(args.proof_path))
    except CLIInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ValidationError as e:
        print(f"Error: invalid proof file {args.proof_path}: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    summary = VerifySummary(
        proof_path=args.proof_path,
        leaf_index=inclusion.index,
        batch_id=inclusion.batch_id,
        root=args.root or inclusion.root,
    )

    if args.record:
        try:
            records = load_records(args.record)
            if len(records) != 1:
                raise CLIInputError(f"Expected exactly one record in {args.record}, got {len(records)}")
            result = verify_pod_inclusion(records[0], inclusion, anchored_root=args.root)
        except CLIInputError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR
        except ImpactLedgerException as e:
            print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR
        summary.ok = result.ok
        summary.checks = [
            {"check_id": c.check_id, "ok": c.ok, "message": c.message}
            for c in result.checks
        ]
    else:
        leaf = args.leaf or inclusion.leaf_hash
        summary.ok = verify_merkle_proof(leaf, inclusion.proof, summary.root)

    if not summary.ok:
        logger.warning("Proof %s is INVALID for root %s", args.proof_path, summary.root)

    if args.json:
        print(dump_json(summary.to_dict(), config.output.indent))
    else:
        status = "VALID" if summary.ok else "INVALID"
        print(f"Proof:  {summary.proof_path}")
        print(f"Leaf:   #{summary.leaf_index}" + (f" of batch {summary.batch_id}" if summary.batch_id else ""))
        print(f"Root:   {summary.root}")
        for check in summary.checks:
            mark = "ok " if check["ok"] else "FAIL"
            print(f"  [{mark}] {check['check_id']}: {check['message']}")
        print(f"Result: {status}")

    return EXIT_SUCCESS if summary.ok else EXIT_VERIFICATION_FAILED
