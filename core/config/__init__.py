"""
Runtime Configuration Module

Provides configuration loading and management for the ImpactLedger core.
"""

from .runtime import (
    AnchoringConfig,
    LoggingConfig,
    OutputConfig,
    RuntimeConfig,
    load_config,
)

__all__ = [
    "AnchoringConfig",
    "LoggingConfig",
    "OutputConfig",
    "RuntimeConfig",
    "load_config",
]
