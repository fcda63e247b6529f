"""Tokenization layer for GPX splitting.

Key Components:
    GPXTokenizer: Splits raw bytes into tag fragments and text runs
    TokenKind: Enumeration of the four token kinds
    TagDescriptor: Structured tag name and kind extracted from a token
"""

from .classifier import (
    TagDescriptor,
    TokenKind,
    classify,
    describe_tag,
    indent_delta,
    is_closing_tag,
    is_opening_tag,
    is_self_closing_tag,
    is_tag,
)
from .tokenizer import (
    GPXTokenizer,
    TokenizationResult,
    split_inclusive,
    tokenize,
)

__all__ = [
    "GPXTokenizer",
    "TagDescriptor",
    "TokenKind",
    "TokenizationResult",
    "classify",
    "describe_tag",
    "indent_delta",
    "is_closing_tag",
    "is_opening_tag",
    "is_self_closing_tag",
    "is_tag",
    "split_inclusive",
    "tokenize",
]
