"""Shared utilities for tagtree.

This module provides the configuration object, diagnostic types and logging
helpers used across all layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    TailTextPolicy,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "TailTextPolicy",
    "CorrelationLogger",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
]
