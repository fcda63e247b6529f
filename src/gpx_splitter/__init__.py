"""GPX Category Splitter.

Splits one GPX document into three documents holding its waypoints, routes
and tracks respectively, keeping the shared structure (root element, metadata,
closing tags) identical in each so every result stays a valid GPX file.

Progressive API Disclosure:
- Level 1: Simple functions - convert(), split_text()
- Level 2: Configured splitter - GPXSplitter class with SplitterConfig
- Level 3: Building blocks - GPXTokenizer, StreamRouter, PrettyPrinter
"""

__version__ = "0.1.0"
__author__ = "GPX Splitter Team"

# Level 1 and 2: splitting entry points
from .api import GPXSplitter, convert, convert_in_background, split_text

# Level 3: building blocks
from .routing import Destination, IndentState, PrettyPrinter, StreamRouter
from .tokenization import GPXTokenizer

# Configuration and results
from .shared.config import SplitterConfig
from .shared.errors import SplitError
from .shared.result import SplitResult, WrittenPayload

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "convert",
    "convert_in_background",
    "split_text",

    # Level 2: Configured splitter
    "GPXSplitter",

    # Level 3: Building blocks
    "Destination",
    "GPXTokenizer",
    "IndentState",
    "PrettyPrinter",
    "StreamRouter",

    # Configuration, results and errors
    "SplitterConfig",
    "SplitError",
    "SplitResult",
    "WrittenPayload",
]
