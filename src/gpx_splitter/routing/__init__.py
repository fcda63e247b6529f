"""Routing layer for GPX splitting.

Key Components:
    IndentState: Nesting depth shared by all three projections
    PrettyPrinter: Renders tokens with canonical indentation
    StreamRouter: Captures category elements and broadcasts shared markup
"""

from .indent import IndentState
from .printer import PrettyPrinter
from .router import (
    CATEGORIES,
    Destination,
    StreamRouter,
    category_for,
    ends_capture,
)

__all__ = [
    "CATEGORIES",
    "Destination",
    "IndentState",
    "PrettyPrinter",
    "StreamRouter",
    "category_for",
    "ends_capture",
]
