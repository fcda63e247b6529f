"""Orchestration of a complete split pass.

This module provides the public API: the ``GPXSplitter`` class owning one
pass, the in-memory ``split_text`` helper, and the ``convert`` boundary
function that reduces every failure to a boolean.
"""

import io
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from gpx_splitter.routing import (
    CATEGORIES,
    Destination,
    IndentState,
    PrettyPrinter,
    StreamRouter,
)
from gpx_splitter.shared import (
    BaseNameError,
    DiagnosticSeverity,
    OutputConfig,
    OutputWriteError,
    OverwritePolicy,
    RoutingStatistics,
    SplitError,
    SplitResult,
    SplitterConfig,
    WrittenPayload,
    get_logger,
    new_correlation_id,
)
from gpx_splitter.shared.result import current_memory_bytes
from gpx_splitter.tokenization import GPXTokenizer

PathLike = Union[str, Path]
ConfirmCallback = Callable[[List[Path]], bool]
NotifyCallback = Callable[[WrittenPayload], None]

MS_PER_SECOND = 1000


def derive_base_name(source: PathLike) -> str:
    """Return the file name text before the first ``.``.

    Raises:
        BaseNameError: If the path has no file name or the base is empty
    """
    name = Path(source).name
    if not name:
        raise BaseNameError(f"Could not get file name from {source}")
    base = name.split(".")[0]
    if not base:
        raise BaseNameError(f"Could not get file name base from {name}")
    return base


@dataclass
class OutputPaths:
    """The four files produced for one source."""

    waypoints: Path
    routes: Path
    tracks: Path
    token_dump: Path

    @classmethod
    def for_source(
        cls, base_name: str, output_dir: Path, config: OutputConfig
    ) -> "OutputPaths":
        return cls(
            waypoints=output_dir / f"{base_name}{config.waypoint_suffix}{config.extension}",
            routes=output_dir / f"{base_name}{config.route_suffix}{config.extension}",
            tracks=output_dir / f"{base_name}{config.track_suffix}{config.extension}",
            token_dump=output_dir / f"{base_name}{config.token_dump_suffix}",
        )

    def category_paths(self) -> Dict[Destination, Path]:
        return {
            Destination.WAYPOINTS: self.waypoints,
            Destination.ROUTES: self.routes,
            Destination.TRACKS: self.tracks,
        }

    def existing_outputs(self) -> List[Path]:
        """Category outputs that are already on disk."""
        return [path for path in self.category_paths().values() if path.exists()]


def write_token_dump(tokens: Iterable[str], path: Path, encoding: str = "utf-8") -> None:
    """Write each token verbatim followed by a newline.

    Raises:
        OutputWriteError: If the dump cannot be created or written
    """
    try:
        with path.open("w", encoding=encoding, newline="") as f:
            for token in tokens:
                f.write(token)
                f.write("\n")
    except OSError as e:
        raise OutputWriteError(f"Could not write token dump {path}: {e}", path=path) from e


def split_text(
    content: Union[str, bytes], config: Optional[SplitterConfig] = None
) -> Dict[Destination, str]:
    """Split a document held in memory.

    Args:
        content: Document as text or raw bytes
        config: Optional configuration; encoding and formatting are honoured

    Returns:
        Mapping of each category to the text of its projection
    """
    config = config or SplitterConfig()
    data = content.encode(config.encoding) if isinstance(content, str) else content
    tokens = GPXTokenizer(config.encoding, config.correlation_id).tokenize(data).tokens

    writers = {category: io.StringIO() for category in CATEGORIES}
    router = StreamRouter(
        tokens,
        writers,
        state=IndentState(),
        printer=PrettyPrinter(
            config.formatting.indent_width,
            config.formatting.reflow_multiline_tags,
        ),
        correlation_id=config.correlation_id,
    )
    router.run()
    return {category: writer.getvalue() for category, writer in writers.items()}


class GPXSplitter:
    """Splits GPX files into waypoint, route and track documents.

    Args:
        config: Splitter configuration, defaults to ``SplitterConfig()``
        confirm_overwrite: Called with the existing category outputs when the
            overwrite policy is ``ASK``; returning False aborts the pass
        on_written: Called with a ``WrittenPayload`` after a successful pass

    Examples:
        >>> splitter = GPXSplitter(SplitterConfig.batch())
        >>> result = splitter.split("walk.gpx", "out")
        >>> sorted(result.outputs)
        ['rte', 'trk', 'wpt']
    """

    def __init__(
        self,
        config: Optional[SplitterConfig] = None,
        confirm_overwrite: Optional[ConfirmCallback] = None,
        on_written: Optional[NotifyCallback] = None,
    ) -> None:
        self.config = config or SplitterConfig()
        self.confirm_overwrite = confirm_overwrite
        self.on_written = on_written

    def split(self, source: PathLike, output_dir: Optional[PathLike] = None) -> SplitResult:
        """Run one complete pass over ``source``.

        The token dump is written before the overwrite check and is left on
        disk even if the pass is aborted or fails later.

        Args:
            source: Path of the GPX document
            output_dir: Directory for the outputs, defaults to the source's directory

        Returns:
            SplitResult; ``aborted`` is set when overwriting was declined

        Raises:
            SplitError: On any read, decode, naming or write failure
        """
        correlation_id = self.config.correlation_id or new_correlation_id()
        logger = get_logger(__name__, correlation_id, "splitter")
        source = Path(source)
        start_time = time.time()
        memory_start = current_memory_bytes()

        tokenization = GPXTokenizer(self.config.encoding, correlation_id).tokenize_file(source)
        base_name = derive_base_name(source)
        directory = Path(output_dir) if output_dir is not None else source.parent
        paths = OutputPaths.for_source(base_name, directory, self.config.output)

        result = SplitResult(
            source=source,
            base_name=base_name,
            token_dump=paths.token_dump,
            token_count=tokenization.token_count,
            correlation_id=correlation_id,
        )
        result.performance.bytes_read = tokenization.bytes_read
        result.performance.tokens_generated = tokenization.token_count

        write_token_dump(tokenization.tokens, paths.token_dump, self.config.encoding)

        existing = paths.existing_outputs()
        if existing and not self._may_overwrite(existing):
            logger.warning(
                "Overwrite declined, category files left untouched",
                extra={"existing": [str(path) for path in existing]},
            )
            result.aborted = True
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                "Output files already exist and were not overwritten",
                "splitter",
                {"existing": [str(path) for path in existing]},
            )
            return result

        logger.info("Writing files", extra={"output_dir": str(directory)})
        result.statistics = self._write_categories(
            tokenization.tokens, paths, correlation_id
        )
        result.outputs = {
            category.value: path for category, path in paths.category_paths().items()
        }
        result.success = True
        result.performance.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        result.performance.memory_used_bytes = max(current_memory_bytes() - memory_start, 0)
        logger.info(
            "Files written successfully",
            extra={
                "token_count": result.token_count,
                "processing_time_ms": result.performance.processing_time_ms,
            },
        )

        if self.on_written is not None:
            self.on_written(WrittenPayload(path=str(directory / base_name)))
        return result

    def _may_overwrite(self, existing: List[Path]) -> bool:
        policy = self.config.output.overwrite
        if policy is OverwritePolicy.ALWAYS:
            return True
        if policy is OverwritePolicy.NEVER or self.confirm_overwrite is None:
            return False
        return bool(self.confirm_overwrite(existing))

    def _write_categories(
        self, tokens: List[str], paths: OutputPaths, correlation_id: str
    ) -> RoutingStatistics:
        encoding = self.config.encoding
        with ExitStack() as stack:
            writers = {}
            for category, path in paths.category_paths().items():
                try:
                    writers[category] = stack.enter_context(
                        path.open("w", encoding=encoding, newline="")
                    )
                except OSError as e:
                    raise OutputWriteError(f"Could not create {path}: {e}", path=path) from e

            router = StreamRouter(
                tokens,
                writers,
                state=IndentState(),
                printer=PrettyPrinter(
                    self.config.formatting.indent_width,
                    self.config.formatting.reflow_multiline_tags,
                ),
                correlation_id=correlation_id,
            )
            try:
                return router.run()
            except OSError as e:
                raise OutputWriteError(
                    f"Failed writing category files after {router.cursor} tokens: {e}"
                ) from e


def convert(
    source: PathLike,
    output_dir: Optional[PathLike] = None,
    config: Optional[SplitterConfig] = None,
    confirm_overwrite: Optional[ConfirmCallback] = None,
    on_written: Optional[NotifyCallback] = None,
) -> bool:
    """Split a file and report only whether an error occurred.

    A declined overwrite is not an error and returns True. Failures are
    logged with their traceback and return False.
    """
    logger = get_logger(__name__, config.correlation_id if config else None, "convert")
    logger.info("Converting file", extra={"file": str(source)})
    try:
        GPXSplitter(config, confirm_overwrite, on_written).split(source, output_dir)
    except SplitError as e:
        logger.exception(f"Error: {e}")
        return False
    return True


def convert_in_background(
    source: PathLike,
    output_dir: Optional[PathLike] = None,
    config: Optional[SplitterConfig] = None,
    confirm_overwrite: Optional[ConfirmCallback] = None,
    on_written: Optional[NotifyCallback] = None,
    executor: Optional[Executor] = None,
) -> "Future[bool]":
    """Run ``convert`` as one unit of work off the calling thread.

    When no executor is given a single-worker thread pool is created for the
    call and shut down once the work completes.
    """
    if executor is not None:
        return executor.submit(
            convert, source, output_dir, config, confirm_overwrite, on_written
        )

    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="gpx-split")
    future = pool.submit(convert, source, output_dir, config, confirm_overwrite, on_written)
    pool.shutdown(wait=False)
    return future
