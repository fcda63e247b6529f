"""Result objects and diagnostic types for GPX splitting.

This module defines the result of a split pass together with the routing
statistics and performance metrics gathered while producing it.
"""

import json
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, List, Optional

import psutil

BYTES_PER_MEGABYTE = 1024 * 1024
WRITTEN_EVENT = "written"


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")


def current_memory_bytes() -> int:
    """Resident set size of the current process in bytes."""
    return psutil.Process().memory_info().rss


@dataclass
class PerformanceMetrics:
    """Performance metrics for a split pass."""

    processing_time_ms: float = 0.0
    memory_used_bytes: int = 0
    bytes_read: int = 0
    tokens_generated: int = 0

    @property
    def tokens_per_second(self) -> float:
        """Calculate tokens generated per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.tokens_generated * 1000.0) / self.processing_time_ms

    @property
    def memory_used_mb(self) -> float:
        """Memory delta in megabytes."""
        return self.memory_used_bytes / BYTES_PER_MEGABYTE


@dataclass
class RoutingStatistics:
    """Counts of where the tokens of one pass ended up."""

    tokens_by_destination: Dict[str, int] = field(default_factory=dict)
    captures_by_category: Dict[str, int] = field(default_factory=dict)

    @property
    def tokens_routed(self) -> int:
        """Total number of tokens consumed by the router."""
        return sum(self.tokens_by_destination.values())

    def add_tokens(self, destination: str, count: int = 1) -> None:
        """Record tokens written to a destination."""
        self.tokens_by_destination[destination] = (
            self.tokens_by_destination.get(destination, 0) + count
        )

    def add_capture(self, category: str) -> None:
        """Record one captured category element."""
        self.captures_by_category[category] = (
            self.captures_by_category.get(category, 0) + 1
        )


@dataclass
class WrittenPayload:
    """Notification sent after the category files have been written.

    ``path`` is the output directory joined with the base name, without any
    suffix, identifying the family of files produced by the pass.
    """

    path: str
    event: str = WRITTEN_EVENT

    def to_json(self) -> str:
        """Serialize the payload for a front end."""
        return json.dumps({"path": self.path})


@dataclass
class SplitResult:
    """Result of one split pass."""

    source: Path
    base_name: str
    success: bool = False
    aborted: bool = False
    outputs: Dict[str, Path] = field(default_factory=dict)
    token_dump: Optional[Path] = None
    token_count: int = 0
    statistics: RoutingStatistics = field(default_factory=RoutingStatistics)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    correlation_id: Optional[str] = None

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Append a diagnostic tagged with this pass's correlation ID."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result to a JSON-serializable dictionary."""
        return {
            "file": str(self.source),
            "base_name": self.base_name,
            "success": self.success,
            "aborted": self.aborted,
            "outputs": {name: str(path) for name, path in self.outputs.items()},
            "token_dump": str(self.token_dump) if self.token_dump else None,
            "token_count": self.token_count,
            "tokens_by_destination": dict(self.statistics.tokens_by_destination),
            "captures_by_category": dict(self.statistics.captures_by_category),
            "processing_time_ms": self.performance.processing_time_ms,
            "diagnostics": [
                {
                    "severity": diag.severity.name,
                    "message": diag.message,
                    "component": diag.component,
                } for diag in self.diagnostics
            ],
        }
