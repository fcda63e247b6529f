"""Command-line interface module for GPX Splitter.

This module provides the ``gpx-split`` tool for splitting GPX files and
dumping their tokens.
"""

from .main import main

__all__ = ["main"]
