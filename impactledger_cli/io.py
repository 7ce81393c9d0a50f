"""
CLI File IO

Load PoD records, batches and proofs from disk and write JSON artifacts.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel


class CLIInputError(Exception):
    """Input file is missing or not in the expected shape."""
    pass


def load_json(path: str | Path) -> Any:
    """Read and parse a JSON file."""
    path = Path(path)
    if not path.exists():
        raise CLIInputError(f"File not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise CLIInputError(f"Invalid JSON in {path}: {e}") from e


def load_records(path: str | Path) -> list[dict[str, Any]]:
    """
    Load PoD records from a file.

    Accepts a JSON array of objects, a single JSON object, or JSON Lines
    (one object per line) when the file ends in .jsonl.
    """
    path = Path(path)
    if path.suffix == ".jsonl":
        if not path.exists():
            raise CLIInputError(f"File not found: {path}")
        records = []
        with open(path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    records.append(json.loads(line))
                except json.JSONDecodeError as e:
                    raise CLIInputError(f"Invalid JSON on line {line_no} of {path}: {e}") from e
    else:
        data = load_json(path)
        records = data if isinstance(data, list) else [data]

    for i, record in enumerate(records):
        if not isinstance(record, dict):
            raise CLIInputError(f"Record {i} in {path} is not a JSON object")
    return records


def dump_json(obj: Any, indent: int = 2) -> str:
    """Serialize a model or plain data to pretty JSON."""
    if isinstance(obj, BaseModel):
        obj = obj.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(obj, indent=indent, ensure_ascii=False)


def write_json(obj: Any, path: str | Path, indent: int = 2) -> Path:
    """Write a model or plain data as JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_json(obj, indent) + "\n", encoding="utf-8")
    return path


def format_hash(value: str, hex_prefix: bool = True) -> str:
    """Render a 0x-prefixed hash according to the output settings."""
    if hex_prefix or not value.startswith("0x"):
        return value
    return value[2:]
