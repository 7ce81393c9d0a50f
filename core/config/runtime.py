"""
Runtime Configuration

Central configuration for logging, anchoring identity and output format.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

load_dotenv()


ENV_PREFIX = "IMPACTLEDGER_"


@dataclass
class LoggingConfig:
    """Configuration for log output."""
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class AnchoringConfig:
    """Configuration for batch anchoring."""
    signer_key_id: Optional[str] = None


@dataclass
class OutputConfig:
    """Configuration for emitted hashes and reports."""
    hex_prefix: bool = True
    indent: int = 2


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (and a .env file)
    - YAML file
    - Programmatic construction
    """
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    anchoring: AnchoringConfig = field(default_factory=AnchoringConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - IMPACTLEDGER_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR)
        - IMPACTLEDGER_LOG_FILE: Also log to this file
        - IMPACTLEDGER_SIGNER_KID: Default signer key id for batches
        - IMPACTLEDGER_HEX_PREFIX: Emit 0x-prefixed hashes (true/false)
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        if os.getenv(f"{ENV_PREFIX}SIGNER_KID"):
            overrides.setdefault("anchoring", {})["signer_key_id"] = os.getenv(f"{ENV_PREFIX}SIGNER_KID")

        if os.getenv(f"{ENV_PREFIX}HEX_PREFIX"):
            overrides.setdefault("output", {})["hex_prefix"] = (
                os.getenv(f"{ENV_PREFIX}HEX_PREFIX", "true").lower() == "true"
            )

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        logging_data = data.get("logging", {}) or {}
        anchoring_data = data.get("anchoring", {}) or {}
        output_data = data.get("output", {}) or {}

        return cls(
            logging=LoggingConfig(**logging_data),
            anchoring=AnchoringConfig(**anchoring_data),
            output=OutputConfig(**output_data),
            extra=data.get("extra", {}) or {},
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for section, values in overrides.items():
            target = getattr(new_config, section)
            for key, value in values.items():
                setattr(target, key, value)
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "anchoring": {
                "signer_key_id": self.anchoring.signer_key_id,
            },
            "output": {
                "hex_prefix": self.output.hex_prefix,
                "indent": self.output.indent,
            },
            "extra": self.extra,
        }

    def to_yaml(self) -> str:
        """Render configuration as YAML."""
        return yaml.safe_dump(self.to_dict(), sort_keys=False)


DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (
    Path("impactledger.yaml"),
    Path.home() / ".config" / "impactledger" / "config.yaml",
)


def load_config(config_path: Optional[Path] = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings. Without an explicit
    path, the first existing default location is used.
    """
    if config_path is not None:
        config = RuntimeConfig.from_yaml(config_path)
    else:
        config = RuntimeConfig()
        for default_path in DEFAULT_CONFIG_PATHS:
            if default_path.exists():
                config = RuntimeConfig.from_yaml(default_path)
                break
    return config.with_env_overrides()

