"""Shared nesting state for the three category projections.

There is exactly one nesting depth in the source document, so a single
``IndentState`` is shared by every output stream of a pass.
"""

from dataclasses import dataclass


@dataclass
class IndentState:
    """Nesting depth in effect for the next token to be written.

    Attributes:
        level: Depth at which the next token is written
        last_level: Value of ``level`` before its most recent change
        last_was_text: Whether the previously rendered token was text
    """

    level: int = 0
    last_level: int = 0
    last_was_text: bool = True

    def shift(self, delta: int) -> None:
        """Remember the current depth, then move it by ``delta``."""
        self.last_level = self.level
        self.level += delta

    @property
    def balanced(self) -> bool:
        return self.level == 0
