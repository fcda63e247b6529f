"""Shared utilities for GPX splitting.

This module provides configuration objects, result types, the exception
hierarchy and logging helpers used across all processing layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    FormattingConfig,
    OutputConfig,
    OverwritePolicy,
    SplitterConfig,
    validate_encoding,
)
from .errors import (
    BaseNameError,
    OutputWriteError,
    SourceOpenError,
    SplitError,
    TokenDecodeError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
    new_correlation_id,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
    RoutingStatistics,
    SplitResult,
    WrittenPayload,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "FormattingConfig",
    "OutputConfig",
    "OverwritePolicy",
    "SplitterConfig",
    "validate_encoding",
    "BaseNameError",
    "OutputWriteError",
    "SourceOpenError",
    "SplitError",
    "TokenDecodeError",
    "CorrelationLogger",
    "get_logger",
    "new_correlation_id",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
    "RoutingStatistics",
    "SplitResult",
    "WrittenPayload",
]
