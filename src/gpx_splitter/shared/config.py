"""Configuration classes for GPX splitting.

This module provides configuration objects for the formatting and output
layers, enabling control over indentation, file naming and overwrite behavior.
"""

import codecs
import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def validate_encoding(encoding: str) -> None:
    """Check that ``encoding`` is a known codec the byte tokenizer can split.

    Tokens are found by splitting raw bytes on ``<``, so the encoding must
    write ``<`` and ``>`` as their single ASCII bytes.

    Raises:
        ValueError: If the codec is unknown or not ASCII-compatible
    """
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise ValueError(f"Unknown encoding: {encoding}") from e

    try:
        delimiters = "<>".encode(encoding)
    except LookupError as e:
        # Codecs such as rot13 or base64 are not text encodings
        raise ValueError(f"{encoding} is not a text encoding") from e
    if delimiters != b"<>":
        raise ValueError(f"Encoding {encoding} is not ASCII-compatible")


class OverwritePolicy(Enum):
    """What to do when the category output files already exist."""

    ASK = "ask"         # Defer to the confirmation callback
    ALWAYS = "always"   # Overwrite without asking
    NEVER = "never"     # Abort the pass


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass
class FormattingConfig:
    """Configuration for the pretty printer."""

    indent_width: int = 2
    reflow_multiline_tags: bool = True

    def __post_init__(self) -> None:
        """Validate formatting configuration."""
        if self.indent_width < 0:
            raise ValueError("indent_width must be >= 0")


@dataclass
class OutputConfig:
    """Configuration for output file naming and overwrite handling."""

    waypoint_suffix: str = "_wpt"
    route_suffix: str = "_rte"
    track_suffix: str = "_trk"
    extension: str = ".gpx"
    token_dump_suffix: str = "_tokens.txt"
    overwrite: OverwritePolicy = OverwritePolicy.ASK

    def __post_init__(self) -> None:
        """Validate output configuration."""
        if isinstance(self.overwrite, str):
            self.overwrite = OverwritePolicy(self.overwrite)

        suffixes = [
            self.waypoint_suffix + self.extension,
            self.route_suffix + self.extension,
            self.track_suffix + self.extension,
            self.token_dump_suffix,
        ]
        if len(set(suffixes)) != len(suffixes):
            raise ValueError("output file suffixes must be distinct")
        if any("/" in suffix or "\\" in suffix for suffix in suffixes):
            raise ValueError("output file suffixes must not contain path separators")


@dataclass
class SplitterConfig:
    """Comprehensive configuration for a split pass."""

    encoding: str = "utf-8"
    formatting: FormattingConfig = field(default_factory=FormattingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    correlation_id: Optional[str] = None
    logging_level: str = "WARNING"

    def __post_init__(self) -> None:
        """Validate splitter configuration."""
        validate_encoding(self.encoding)

        if self.logging_level not in VALID_LOGGING_LEVELS:
            raise ValueError(f"logging_level must be one of {VALID_LOGGING_LEVELS}")

    @classmethod
    def interactive(cls) -> "SplitterConfig":
        """Create configuration that asks before overwriting outputs."""
        return cls()  # Default configuration asks

    @classmethod
    def batch(cls) -> "SplitterConfig":
        """Create configuration for unattended runs that overwrite outputs."""
        config = cls()
        config.output.overwrite = OverwritePolicy.ALWAYS
        return config

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SplitterConfig":
        """Build a configuration from a plain dictionary.

        Args:
            data: Mapping with optional ``formatting`` and ``output`` sections

        Returns:
            Validated SplitterConfig

        Raises:
            ConfigValidationError: If a section or value is invalid
        """
        known = {"encoding", "formatting", "output", "correlation_id", "logging_level"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                field_name=unknown[0],
                suggestions=sorted(known),
            )

        try:
            formatting = FormattingConfig(**data.get("formatting", {}))
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e), field_name="formatting") from e

        try:
            output = OutputConfig(**data.get("output", {}))
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e), field_name="output") from e

        try:
            return cls(
                encoding=data.get("encoding", "utf-8"),
                formatting=formatting,
                output=output,
                correlation_id=data.get("correlation_id"),
                logging_level=data.get("logging_level", "WARNING"),
            )
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    @classmethod
    def from_file(cls, config_path: Path) -> "SplitterConfig":
        """Load configuration from a JSON file.

        Raises:
            ConfigValidationError: If the file is unreadable or invalid
        """
        try:
            with config_path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigValidationError(
                f"Could not load config file {config_path}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration file must contain a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON-serializable dictionary."""
        data = asdict(self)
        data["output"]["overwrite"] = self.output.overwrite.value
        return data
