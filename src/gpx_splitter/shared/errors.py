"""Exception hierarchy for GPX splitting.

Every failure that aborts a split pass derives from ``SplitError`` so the
boundary function can report a single success/failure flag.
"""

from pathlib import Path
from typing import Optional


class SplitError(Exception):
    """Base exception for failures that abort a split pass."""


class SourceOpenError(SplitError):
    """Raised when the source document cannot be opened or read."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class TokenDecodeError(SplitError):
    """Raised when a source fragment is not valid text in the configured encoding."""

    def __init__(self, message: str, offset: int, encoding: str):
        super().__init__(message)
        self.offset = offset
        self.encoding = encoding


class OutputWriteError(SplitError):
    """Raised when one of the output files cannot be created or written."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class BaseNameError(SplitError):
    """Raised when no output base name can be derived from the source path."""
