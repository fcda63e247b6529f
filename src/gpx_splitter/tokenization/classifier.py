"""Tag classification for GPX tokens.

Classification is a pure function of a token's text. Every token is exactly
one of opening tag, closing tag, self-closing tag (processing instructions
included) or text; comments and ``<!DOCTYPE>`` declarations count as text.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

TAG_OPEN = "<"
CLOSING_PREFIX = "</"
DECLARATION_PREFIX = "<!"
PI_PREFIX = "<?"
SELF_CLOSING_SUFFIX = "/>"
PI_SUFFIX = "?>"

TAG_NAME_PATTERN = re.compile(r"[^\s/>?]*")


class TokenKind(Enum):
    """Lexical kinds a token can be classified as."""

    OPENING_TAG = auto()
    CLOSING_TAG = auto()
    SELF_CLOSING_TAG = auto()   # <x/> and <?x?>
    TEXT = auto()


def is_closing_tag(token: str) -> bool:
    """Check whether the token is a closing tag such as ``</wpt>``."""
    return token.strip().startswith(CLOSING_PREFIX)


def is_self_closing_tag(token: str) -> bool:
    """Check whether the token is ``<x .../>`` or a processing instruction."""
    part = token.strip()
    return (
        part.startswith(TAG_OPEN)
        and part.endswith(SELF_CLOSING_SUFFIX)
        and not part.startswith(CLOSING_PREFIX)
        and not part.startswith(DECLARATION_PREFIX)
    ) or (part.startswith(PI_PREFIX) and part.endswith(PI_SUFFIX))


def is_opening_tag(token: str) -> bool:
    """Check whether the token opens an element."""
    part = token.strip()
    return (
        part.startswith(TAG_OPEN)
        and not part.startswith(CLOSING_PREFIX)
        and not part.startswith(DECLARATION_PREFIX)
        and not part.startswith(PI_PREFIX)
        and not is_self_closing_tag(part)
    )


def is_tag(token: str) -> bool:
    return is_opening_tag(token) or is_closing_tag(token) or is_self_closing_tag(token)


def classify(token: str) -> TokenKind:
    """Return the single kind that applies to the token."""
    if is_closing_tag(token):
        return TokenKind.CLOSING_TAG
    if is_self_closing_tag(token):
        return TokenKind.SELF_CLOSING_TAG
    if is_opening_tag(token):
        return TokenKind.OPENING_TAG
    return TokenKind.TEXT


def indent_delta(token: str) -> int:
    """Nesting depth change caused by the token: +1, -1 or 0."""
    kind = classify(token)
    if kind is TokenKind.OPENING_TAG:
        return 1
    if kind is TokenKind.CLOSING_TAG:
        return -1
    return 0


@dataclass(frozen=True)
class TagDescriptor:
    """Structured view of a tag token."""

    name: str
    kind: TokenKind
    processing_instruction: bool = False

    @property
    def is_opening(self) -> bool:
        return self.kind is TokenKind.OPENING_TAG

    @property
    def is_closing(self) -> bool:
        return self.kind is TokenKind.CLOSING_TAG

    @property
    def is_self_closing(self) -> bool:
        return self.kind is TokenKind.SELF_CLOSING_TAG

    def matches(self, name: str) -> bool:
        """Prefix match on the tag name with a name-boundary check.

        The character following ``name`` must not be alphabetic, so ``trk``
        matches ``trk`` but not ``trkseg`` or ``trkpt``.
        """
        if not self.name.startswith(name):
            return False
        rest = self.name[len(name):]
        return not rest or not rest[0].isalpha()


def describe_tag(token: str) -> Optional[TagDescriptor]:
    """Extract a tag descriptor, or ``None`` for text tokens."""
    kind = classify(token)
    if kind is TokenKind.TEXT:
        return None

    part = token.strip()
    processing_instruction = part.startswith(PI_PREFIX)
    start = 2 if kind is TokenKind.CLOSING_TAG or processing_instruction else 1
    match = TAG_NAME_PATTERN.match(part, start)
    name = match.group(0) if match else ""
    return TagDescriptor(
        name=name,
        kind=kind,
        processing_instruction=processing_instruction,
    )
