"""Pretty printer applying the shared indentation rules.

For every token, in order:

1. a closing tag decreases the shared depth before it is written;
2. a line break plus indentation precedes the token only when it is a tag,
   the previous token was not text, and the depth has changed or is zero;
3. the text flag is updated;
4. an opening tag increases the shared depth after it is written.

Broadcast tag tokens whose source text spans several lines are reflowed into
the canonical shape: attribute lines one level deeper, closing delimiter on
its own line at the tag's level. Captured tokens are written as they are.
"""

from typing import List, Optional

from gpx_splitter.routing.indent import IndentState
from gpx_splitter.tokenization.classifier import TokenKind, classify, indent_delta

# Longest first so "/>" and "?>" win over ">"
REFLOW_DELIMITERS = ("/>", "?>", ">")


class PrettyPrinter:
    """Renders tokens with canonical indentation."""

    def __init__(self, indent_width: int = 2, reflow_multiline_tags: bool = True):
        if indent_width < 0:
            raise ValueError("indent_width must be >= 0")
        self.indent_width = indent_width
        self.reflow_multiline_tags = reflow_multiline_tags

    def indent(self, level: int) -> str:
        return " " * (self.indent_width * max(level, 0))

    @staticmethod
    def needs_break(kind: TokenKind, state: IndentState) -> bool:
        """Whether a line break goes before a token of ``kind``.

        Never after text and never before text. At depth zero the depth does
        not have to change, so top-level siblings each start a new line.
        """
        if kind is TokenKind.TEXT or state.last_was_text:
            return False
        return state.level != state.last_level or state.level == 0

    def render(self, token: str, state: IndentState, reflow: bool = False) -> str:
        """Render one token and advance the shared state.

        Args:
            token: Token text exactly as tokenized
            state: Shared nesting state, mutated in place
            reflow: Reflow a tag spanning several lines; set for broadcast tokens only

        Returns:
            Text to append to every stream that receives the token
        """
        kind = classify(token)
        if kind is TokenKind.CLOSING_TAG:
            state.shift(indent_delta(token))

        pieces: List[str] = []
        if self.needs_break(kind, state):
            pieces.append("\n" + self.indent(state.level))
        state.last_was_text = kind is TokenKind.TEXT

        reflow = reflow and self.reflow_multiline_tags
        if reflow and kind is not TokenKind.TEXT and "\n" in token:
            pieces.append(self.reflow(token, state.level))
        else:
            pieces.append(token)

        if kind is TokenKind.OPENING_TAG:
            state.shift(indent_delta(token))
        return "".join(pieces)

    def reflow(self, token: str, level: int) -> str:
        """Re-derive line breaks for a tag written across several lines.

        The first line is kept, each further line is stripped and indented one
        level deeper than ``level``, and the closing delimiter is moved onto
        its own line at ``level``. Reflowing the result again is a no-op.
        """
        lines = [line.strip() for line in token.split("\n")]
        lines = [line for line in lines if line]

        delimiter: Optional[str] = None
        for candidate in REFLOW_DELIMITERS:
            if lines[-1].endswith(candidate):
                delimiter = candidate
                break
        if delimiter is not None:
            head = lines[-1][:-len(delimiter)].rstrip()
            if head or len(lines) == 1:
                lines[-1] = head
            else:
                lines.pop()

        attribute_indent = "\n" + self.indent(level + 1)
        text = attribute_indent.join(lines)
        if delimiter is not None:
            text += "\n" + self.indent(level) + delimiter
        return text
