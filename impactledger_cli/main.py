"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m impactledger_cli hash record.json [--json]
    python -m impactledger_cli build records.json --batch-id ID [--signer-kid KID] [--out PATH] [--json]
    python -m impactledger_cli proof batch.json (--index N | --leaf HASH) [--out PATH]
    python -m impactledger_cli verify proof.json [--record PATH | --leaf HASH] [--root HASH] [--json]
    python -m impactledger_cli config --init | --show

Environment Variables:
    IMPACTLEDGER_LOG_LEVEL      Log level (default: INFO)
    IMPACTLEDGER_LOG_FILE       Also write logs to this file
    IMPACTLEDGER_SIGNER_KID     Default signer key id recorded in batches
    IMPACTLEDGER_HEX_PREFIX     Print hashes with 0x prefix (default: true)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from core.config import RuntimeConfig, load_config

from impactledger_cli import __version__
from impactledger_cli.commands import build, hashing, proof, verify


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="impactledger",
        description="ImpactLedger - hash PoD records, build Merkle batches and verify inclusion proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: ./impactledger.yaml or ~/.config/impactledger/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- hash command ---
    hash_parser = subparsers.add_parser(
        "hash",
        help="Compute the leaf hash of PoD records",
        description="Canonically serialize each PoD record and print its Keccak-256 leaf hash.",
    )
    hash_parser.add_argument(
        "record_path",
        type=str,
        help="JSON object, JSON array of objects, or .jsonl file",
    )
    hash_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    hash_parser.set_defaults(func=hashing.hash_cmd)

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build a Merkle batch from PoD records",
        description="Hash records in file order and commit to them in a sorted-pair Merkle tree.",
    )
    build_parser.add_argument(
        "records_path",
        type=str,
        help="JSON array of records or .jsonl file (order defines leaf indices)",
    )
    build_parser.add_argument(
        "--batch-id", "-b",
        type=str,
        required=True,
        help="Batch / milestone identifier",
    )
    build_parser.add_argument(
        "--signer-kid",
        type=str,
        default=None,
        help="Signer key id to record with the batch (default: from config)",
    )
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Output path for the batch file (default: print to stdout)",
    )
    build_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    build_parser.set_defaults(func=build.build_cmd)

    # --- proof command ---
    proof_parser = subparsers.add_parser(
        "proof",
        help="Extract an inclusion proof from a batch file",
        description="Write the portable inclusion proof (leafHash, index, proof, root) for one leaf.",
    )
    proof_parser.add_argument(
        "batch_path",
        type=str,
        help="Batch file produced by 'build'",
    )
    selector = proof_parser.add_mutually_exclusive_group(required=True)
    selector.add_argument(
        "--index", "-i",
        type=int,
        default=None,
        help="Leaf index",
    )
    selector.add_argument(
        "--leaf",
        type=str,
        default=None,
        help="Leaf hash to look up",
    )
    proof_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Output path for the proof file (default: print to stdout)",
    )
    proof_parser.set_defaults(func=proof.proof_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify an inclusion proof offline",
        description="Replay a proof path and compare against the (anchored) root.",
    )
    verify_parser.add_argument(
        "proof_path",
        type=str,
        help="Proof file produced by 'proof'",
    )
    source = verify_parser.add_mutually_exclusive_group()
    source.add_argument(
        "--record",
        type=str,
        default=None,
        help="PoD record JSON to hash and verify",
    )
    source.add_argument(
        "--leaf",
        type=str,
        default=None,
        help="Leaf hash to verify (default: the proof's own leafHash)",
    )
    verify_parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Anchored root to verify against (default: the proof's root)",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="impactledger.yaml",
        help="Path for config file (default: impactledger.yaml)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(RuntimeConfig().to_yaml())
        print(f"Created configuration file: {config_path}")
        print("You can also use environment variables (IMPACTLEDGER_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: impactledger config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    log_level = args.log_level or config.logging.level
    setup_logging(level=log_level, log_file=config.logging.file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if args.log_level == "DEBUG":
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
