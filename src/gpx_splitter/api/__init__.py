"""Public API for GPX splitting.

Provides the ``GPXSplitter`` class for configured passes, ``split_text`` for
documents held in memory, and the ``convert`` / ``convert_in_background``
boundary functions that report a plain success flag.
"""

from .splitter import (
    GPXSplitter,
    OutputPaths,
    convert,
    convert_in_background,
    derive_base_name,
    split_text,
    write_token_dump,
)

__all__ = [
    "GPXSplitter",
    "OutputPaths",
    "convert",
    "convert_in_background",
    "derive_base_name",
    "split_text",
    "write_token_dump",
]
