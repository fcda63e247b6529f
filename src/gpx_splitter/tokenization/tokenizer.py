"""Lexical tokenizer for GPX documents.

The tokenizer splits raw bytes on ``<`` and each decoded segment inclusively
on ``>``, yielding alternating tag fragments and text runs. The whole input is
tokenized before any output is written.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from gpx_splitter.shared.config import validate_encoding
from gpx_splitter.shared.errors import SourceOpenError, TokenDecodeError
from gpx_splitter.shared.logging import get_logger

TAG_DELIMITER = b"<"
TAG_END = ">"
MS_PER_SECOND = 1000


@dataclass
class TokenizationResult:
    """Tokens produced from one source together with basic metadata."""

    tokens: List[str] = field(default_factory=list)
    source: Optional[Path] = None
    bytes_read: int = 0
    discarded_prefix: Optional[str] = None
    processing_time_ms: float = 0.0

    @property
    def token_count(self) -> int:
        return len(self.tokens)


def split_inclusive(text: str, delimiter: str = TAG_END) -> List[str]:
    """Split keeping the delimiter at the end of every piece but the last.

    ``"<tag>trailing"`` becomes ``["<tag>", "trailing"]``; no empty trailing
    piece is produced when the text ends with the delimiter.
    """
    pieces = text.split(delimiter)
    parts = [piece + delimiter for piece in pieces[:-1]]
    if pieces[-1]:
        parts.append(pieces[-1])
    return parts


class GPXTokenizer:
    """Tokenizer turning GPX bytes into an ordered list of tokens."""

    def __init__(self, encoding: str = "utf-8", correlation_id: Optional[str] = None):
        """Create a tokenizer for one encoding.

        Raises:
            ValueError: If the encoding is unknown or not ASCII-compatible
        """
        validate_encoding(encoding)
        self.encoding = encoding
        self.logger = get_logger(__name__, correlation_id, "tokenizer")

    def tokenize(self, data: bytes, source: Optional[Path] = None) -> TokenizationResult:
        """Tokenize raw bytes.

        Args:
            data: Complete document content
            source: Optional path the bytes were read from, for reporting

        Returns:
            TokenizationResult with the leading artifact already discarded

        Raises:
            TokenDecodeError: If any segment is not valid in the configured encoding
        """
        start_time = time.time()
        segments = data.split(TAG_DELIMITER)
        # A final "<" does not open another segment
        if len(segments) > 1 and not segments[-1]:
            segments.pop()

        parts: List[str] = []
        segment_start = 0
        for segment in segments:
            raw = TAG_DELIMITER + segment
            try:
                text = raw.decode(self.encoding)
            except UnicodeDecodeError as e:
                # raw[0] is the "<" just before segment_start in the source
                offset = segment_start - 1 + e.start
                raise TokenDecodeError(
                    f"Invalid {self.encoding} text at byte {offset}",
                    offset=offset,
                    encoding=self.encoding,
                ) from e
            segment_start += len(segment) + 1

            parts.extend(
                part for part in split_inclusive(text)
                if part and not part.isspace()
            )

        result = TokenizationResult(
            tokens=parts[1:],
            source=source,
            bytes_read=len(data),
            discarded_prefix=parts[0] if parts else None,
            processing_time_ms=(time.time() - start_time) * MS_PER_SECOND,
        )
        self.logger.debug(
            "Tokenized content",
            extra={"token_count": result.token_count, "bytes_read": result.bytes_read},
        )
        return result

    def tokenize_file(self, path: Path) -> TokenizationResult:
        """Read a file fully and tokenize it.

        Raises:
            SourceOpenError: If the file cannot be read
            TokenDecodeError: If the content cannot be decoded
        """
        self.logger.info("Tokenizing file", extra={"file": str(path)})
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise SourceOpenError(f"Could not read {path}: {e}", path=Path(path)) from e

        result = self.tokenize(data, source=Path(path))
        self.logger.info("Tokenized file", extra={"token_count": result.token_count})
        return result


def tokenize(data: bytes, encoding: str = "utf-8") -> List[str]:
    """Tokenize bytes and return only the token list."""
    return GPXTokenizer(encoding).tokenize(data).tokens
