"""Main CLI entry point for the gpx-split command-line tool.

Provides the ``split`` command producing the waypoint, route and track
documents for each input file, and the ``tokens`` command printing the token
dump of a single file.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from gpx_splitter import __version__
from gpx_splitter.api import GPXSplitter
from gpx_splitter.shared.config import (
    ConfigValidationError,
    OverwritePolicy,
    SplitterConfig,
)
from gpx_splitter.shared.errors import SplitError
from gpx_splitter.shared.logging import get_logger
from gpx_splitter.shared.result import WrittenPayload
from gpx_splitter.tokenization import GPXTokenizer

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self):
        self.splitter_config = SplitterConfig.interactive()
        self.output_format = "text"
        self.force = False

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a splitter JSON config file.

        Raises:
            ConfigValidationError: If the file is unreadable or invalid
        """
        config = cls()
        config.splitter_config = SplitterConfig.from_file(config_path)
        return config


def prompt_overwrite(existing: List[Path]) -> bool:
    """Ask on the terminal whether existing outputs may be replaced."""
    names = ", ".join(path.name for path in existing)
    print(f"Files already exist: {names}", file=sys.stderr)
    try:
        answer = input("Overwrite? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def announce_written(payload: WrittenPayload) -> None:
    """Report a finished pass on stderr."""
    print(f"Written: {payload.path}", file=sys.stderr)


class SplitProcessor:
    """Core split logic for CLI operations."""

    def __init__(self, config: CLIConfig):
        self.config = config
        if config.force:
            config.splitter_config.output.overwrite = OverwritePolicy.ALWAYS
        self.splitter = GPXSplitter(
            config.splitter_config,
            confirm_overwrite=prompt_overwrite,
            on_written=announce_written,
        )
        self.logger = get_logger(__name__, None, "cli_processor")

    def process_single_file(
        self, file_path: Path, output_dir: Optional[Path] = None
    ) -> Dict[str, Any]:
        """Split a single file and return a summary."""
        try:
            return self.splitter.split(file_path, output_dir).to_dict()
        except SplitError as e:
            self.logger.exception("Failed to split file", extra={"file": str(file_path)})
            return {
                "file": str(file_path),
                "success": False,
                "aborted": False,
                "error": str(e),
            }

    def process(
        self, paths: List[Path], output_dir: Optional[Path] = None
    ) -> List[Dict[str, Any]]:
        """Split files one after another; passes never share output paths concurrently."""
        return [self.process_single_file(path, output_dir) for path in paths]


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="gpx-split",
        description="Split GPX files into separate waypoint, route and track files"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Split command
    split_parser = subparsers.add_parser("split", help="Split GPX files")
    split_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="GPX files to split"
    )
    split_parser.add_argument(
        "--output-dir", "-d",
        type=Path,
        help="Output directory (default: next to each source file)"
    )
    split_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite existing output files without asking"
    )
    split_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
    )
    split_parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Summary format (default: text)"
    )

    # Tokens command
    tokens_parser = subparsers.add_parser("tokens", help="Print the token dump of a GPX file")
    tokens_parser.add_argument(
        "path",
        type=Path,
        help="GPX file to tokenize"
    )
    tokens_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    tokens_parser.add_argument(
        "--encoding",
        default="utf-8",
        help="Source encoding (default: utf-8)"
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format split results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2)

    if not results:
        return "No results to display."

    lines = []
    successful = sum(1 for r in results if r.get("success", False))
    lines.append(f"Split {len(results)} files, {successful} successful")
    lines.append("-" * 60)

    for result in results:
        if result.get("success", False):
            status = "✓"
        elif result.get("aborted", False):
            status = "-"
        else:
            status = "✗"
        lines.append(f"{status} {result['file']}")

        if "error" in result:
            lines.append(f"   Error: {result['error']}")
        elif result.get("aborted", False):
            lines.append("   Skipped: existing files were not overwritten")
        else:
            counts = result.get("tokens_by_destination", {})
            lines.append(
                f"   Tokens: {result.get('token_count', 0)}, "
                f"shared: {counts.get('shared', 0)}, wpt: {counts.get('wpt', 0)}, "
                f"rte: {counts.get('rte', 0)}, trk: {counts.get('trk', 0)}"
            )
        lines.append("")

    return "\n".join(lines)


def cmd_split(args: argparse.Namespace) -> int:
    """Handle split command."""
    try:
        config = CLIConfig.from_file(args.config) if args.config else CLIConfig()
    except ConfigValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_USAGE

    config.force = args.force
    config.output_format = args.format
    if not (args.verbose or args.quiet):
        logging.getLogger("gpx_splitter").setLevel(config.splitter_config.logging_level)

    processor = SplitProcessor(config)
    results = processor.process(args.paths, args.output_dir)
    print(format_results(results, config.output_format))

    failed = [r for r in results if not r.get("success") and not r.get("aborted")]
    return EXIT_FAILURE if failed else EXIT_OK


def cmd_tokens(args: argparse.Namespace) -> int:
    """Handle tokens command."""
    try:
        result = GPXTokenizer(args.encoding).tokenize_file(args.path)
    except (SplitError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    dump = "".join(f"{token}\n" for token in result.tokens)
    if args.output:
        try:
            args.output.write_text(dump, encoding=args.encoding)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return EXIT_FAILURE
        print(f"Tokens written to {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(dump)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        if args.command == "split":
            return cmd_split(args)
        if args.command == "tokens":
            return cmd_tokens(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return EXIT_USAGE

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
