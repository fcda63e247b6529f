"""Tests for the splitting API."""

from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import Mock

import pytest

from gpx_splitter import (
    GPXSplitter,
    SplitterConfig,
    WrittenPayload,
    convert,
    convert_in_background,
    split_text,
)
from gpx_splitter.api import OutputPaths, derive_base_name, write_token_dump
from gpx_splitter.routing import Destination
from gpx_splitter.shared import (
    BaseNameError,
    OutputConfig,
    OutputWriteError,
    OverwritePolicy,
    SourceOpenError,
    TokenDecodeError,
)
from gpx_splitter.tokenization import describe_tag, tokenize

SAMPLE_GPX = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test"
     xmlns="http://www.topografix.com/GPX/1/1">
  <metadata>
    <name>Sample</name>
  </metadata>
  <wpt lat="47.1" lon="8.5">
    <name>Summit</name>
  </wpt>
  <wpt lat="47.2" lon="8.6"/>
  <rte>
    <name>Route</name>
    <rtept lat="47.1" lon="8.5"/>
    <rtept lat="47.2" lon="8.6"/>
  </rte>
  <trk>
    <name>Track</name>
    <trkseg>
      <trkpt lat="47.1" lon="8.5"><ele>400</ele></trkpt>
      <trkpt lat="47.2" lon="8.6"><ele>410</ele></trkpt>
    </trkseg>
  </trk>
</gpx>
"""

HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<gpx version="1.1" creator="test"\n'
    '  xmlns="http://www.topografix.com/GPX/1/1"\n'
    ">\n"
    "  <metadata>\n"
    "    <name>Sample</name>\n"
    "  </metadata>"
)

EXPECTED_WAYPOINTS = HEADER + (
    '\n  <wpt lat="47.1" lon="8.5">\n'
    "    <name>Summit</name>\n"
    "  </wpt>\n"
    '  <wpt lat="47.2" lon="8.6"/>\n'
    "</gpx>"
)

EXPECTED_ROUTES = HEADER + (
    "\n  <rte>\n"
    "    <name>Route</name>\n"
    '    <rtept lat="47.1" lon="8.5"/>\n'
    '    <rtept lat="47.2" lon="8.6"/>\n'
    "  </rte>\n"
    "</gpx>"
)

EXPECTED_TRACKS = HEADER + (
    "\n  <trk>\n"
    "    <name>Track</name>\n"
    "    <trkseg>\n"
    '      <trkpt lat="47.1" lon="8.5">\n'
    "        <ele>400</ele>\n"
    "      </trkpt>\n"
    '      <trkpt lat="47.2" lon="8.6">\n'
    "        <ele>410</ele>\n"
    "      </trkpt>\n"
    "    </trkseg>\n"
    "  </trk>\n"
    "</gpx>"
)

COMPACT_GPX = "<gpx><wpt><name>A</name></wpt><rte><name>B</name></rte></gpx>"


def tag_balance(text):
    """Count opening minus closing tags per name in rendered output."""
    balance = Counter()
    for token in tokenize(text.encode("utf-8")):
        descriptor = describe_tag(token)
        if descriptor is None:
            continue
        if descriptor.is_opening:
            balance[descriptor.name] += 1
        elif descriptor.is_closing:
            balance[descriptor.name] -= 1
    return {name: count for name, count in balance.items() if count}


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "walk.gpx"
    path.write_text(SAMPLE_GPX, encoding="utf-8")
    return path


class TestSplitText:
    """Tests for splitting documents held in memory."""

    def test_compact_document(self):
        """Test the three projections of a compact document."""
        result = split_text(COMPACT_GPX)

        assert result[Destination.WAYPOINTS] == (
            "<gpx>\n  <wpt>\n    <name>A</name>\n  </wpt>\n</gpx>"
        )
        assert result[Destination.ROUTES] == (
            "<gpx>\n  <rte>\n    <name>B</name>\n  </rte>\n</gpx>"
        )
        assert result[Destination.TRACKS] == "<gpx>\n</gpx>"

    def test_sample_document(self):
        """Test exact output for an indented document with a wrapped root tag."""
        result = split_text(SAMPLE_GPX)

        assert result[Destination.WAYPOINTS] == EXPECTED_WAYPOINTS
        assert result[Destination.ROUTES] == EXPECTED_ROUTES
        assert result[Destination.TRACKS] == EXPECTED_TRACKS

    def test_outputs_are_balanced(self):
        """Test that every output opens and closes each tag name equally often."""
        for text in split_text(SAMPLE_GPX).values():
            assert tag_balance(text) == {}

    def test_outputs_keep_only_their_category(self):
        """Test that no category leaks into another output."""
        result = split_text(SAMPLE_GPX)

        assert "<rte>" not in result[Destination.WAYPOINTS]
        assert "<trk>" not in result[Destination.WAYPOINTS]
        assert "<wpt" not in result[Destination.ROUTES]
        assert "<wpt" not in result[Destination.TRACKS]

    def test_splitting_output_again_is_stable(self):
        """Test that a split output splits into itself."""
        waypoints = split_text(SAMPLE_GPX)[Destination.WAYPOINTS]
        assert split_text(waypoints)[Destination.WAYPOINTS] == waypoints

    def test_bytes_input(self):
        """Test that raw bytes are accepted."""
        result = split_text(COMPACT_GPX.encode("utf-8"))
        assert result[Destination.TRACKS] == "<gpx>\n</gpx>"

    def test_formatting_config(self):
        """Test that the configured indent width is used."""
        config = SplitterConfig()
        config.formatting.indent_width = 4
        result = split_text(COMPACT_GPX, config)
        assert result[Destination.TRACKS] == "<gpx>\n</gpx>"
        assert "\n    <wpt>" in result[Destination.WAYPOINTS]


class TestHelpers:
    """Tests for naming and dump helpers."""

    @pytest.mark.parametrize("path,expected", [
        ("walk.gpx", "walk"),
        ("walk.2024.gpx", "walk"),
        ("/data/tracks/walk", "walk"),
    ])
    def test_derive_base_name(self, path, expected):
        """Test that the base name is the text before the first dot."""
        assert derive_base_name(path) == expected

    @pytest.mark.parametrize("path", ["", "/", ".gpx"])
    def test_derive_base_name_failure(self, path):
        """Test paths without a usable file name."""
        with pytest.raises(BaseNameError):
            derive_base_name(path)

    def test_output_paths(self, tmp_path):
        """Test the four output file names."""
        paths = OutputPaths.for_source("walk", tmp_path, OutputConfig())

        assert paths.waypoints == tmp_path / "walk_wpt.gpx"
        assert paths.routes == tmp_path / "walk_rte.gpx"
        assert paths.tracks == tmp_path / "walk_trk.gpx"
        assert paths.token_dump == tmp_path / "walk_tokens.txt"
        assert paths.existing_outputs() == []

    def test_write_token_dump(self, tmp_path):
        """Test one token per line in order."""
        path = tmp_path / "dump.txt"
        write_token_dump(["<gpx>", "A", "</gpx>"], path)
        assert path.read_text(encoding="utf-8") == "<gpx>\nA\n</gpx>\n"

    def test_write_token_dump_failure(self, tmp_path):
        """Test that dump write errors are wrapped."""
        with pytest.raises(OutputWriteError):
            write_token_dump(["<gpx>"], tmp_path / "missing" / "dump.txt")


class TestGPXSplitter:
    """Tests for complete passes over files."""

    def test_split_writes_four_files(self, source, tmp_path):
        """Test that the category files and the token dump are written."""
        result = GPXSplitter().split(source)

        assert result.success
        assert not result.aborted
        assert result.base_name == "walk"
        assert (tmp_path / "walk_wpt.gpx").read_text(encoding="utf-8") == EXPECTED_WAYPOINTS
        assert (tmp_path / "walk_rte.gpx").read_text(encoding="utf-8") == EXPECTED_ROUTES
        assert (tmp_path / "walk_trk.gpx").read_text(encoding="utf-8") == EXPECTED_TRACKS
        assert result.outputs == {
            "wpt": tmp_path / "walk_wpt.gpx",
            "rte": tmp_path / "walk_rte.gpx",
            "trk": tmp_path / "walk_trk.gpx",
        }

    def test_token_dump_has_one_line_per_token(self, tmp_path):
        """Test the diagnostic dump for a document without wrapped tags."""
        path = tmp_path / "compact.gpx"
        path.write_text(COMPACT_GPX, encoding="utf-8")

        result = GPXSplitter().split(path)

        lines = (tmp_path / "compact_tokens.txt").read_text(encoding="utf-8").splitlines()
        assert lines == tokenize(COMPACT_GPX.encode("utf-8"))
        assert len(lines) == result.token_count == 12

    def test_output_dir(self, source, tmp_path):
        """Test writing into a separate directory."""
        out = tmp_path / "out"
        out.mkdir()

        GPXSplitter().split(source, out)

        assert sorted(p.name for p in out.iterdir()) == [
            "walk_rte.gpx", "walk_tokens.txt", "walk_trk.gpx", "walk_wpt.gpx",
        ]

    def test_statistics_and_metrics(self, source):
        """Test routing statistics and performance metrics."""
        result = GPXSplitter().split(source)

        assert result.statistics.captures_by_category == {"wpt": 2, "rte": 1, "trk": 1}
        assert result.statistics.tokens_routed == result.token_count
        assert result.performance.bytes_read == len(SAMPLE_GPX.encode("utf-8"))
        assert result.performance.tokens_generated == result.token_count
        assert result.performance.processing_time_ms >= 0
        assert result.performance.memory_used_bytes >= 0

    def test_notification(self, source, tmp_path):
        """Test that the notification receives the output base path."""
        on_written = Mock()

        GPXSplitter(on_written=on_written).split(source)

        on_written.assert_called_once_with(WrittenPayload(path=str(tmp_path / "walk")))

    def test_declined_overwrite_keeps_files(self, source, tmp_path):
        """Test that declining leaves category files but rewrites the dump."""
        existing = tmp_path / "walk_wpt.gpx"
        existing.write_text("old", encoding="utf-8")
        confirm = Mock(return_value=False)
        on_written = Mock()

        result = GPXSplitter(confirm_overwrite=confirm, on_written=on_written).split(source)

        assert result.aborted
        assert not result.success
        confirm.assert_called_once_with([existing])
        on_written.assert_not_called()
        assert existing.read_text(encoding="utf-8") == "old"
        assert not (tmp_path / "walk_rte.gpx").exists()
        assert (tmp_path / "walk_tokens.txt").exists()
        assert result.diagnostics[0].message.startswith("Output files already exist")

    def test_confirmed_overwrite(self, source, tmp_path):
        """Test that confirming replaces the existing files."""
        (tmp_path / "walk_trk.gpx").write_text("old", encoding="utf-8")

        result = GPXSplitter(confirm_overwrite=lambda existing: True).split(source)

        assert result.success
        assert (tmp_path / "walk_trk.gpx").read_text(encoding="utf-8") == EXPECTED_TRACKS

    def test_ask_without_callback_aborts(self, source, tmp_path):
        """Test that nobody to ask means no overwrite."""
        (tmp_path / "walk_rte.gpx").write_text("old", encoding="utf-8")
        assert GPXSplitter().split(source).aborted

    def test_never_policy(self, source, tmp_path):
        """Test that NEVER aborts without asking."""
        (tmp_path / "walk_rte.gpx").write_text("old", encoding="utf-8")
        config = SplitterConfig()
        config.output.overwrite = OverwritePolicy.NEVER
        confirm = Mock(return_value=True)

        result = GPXSplitter(config, confirm_overwrite=confirm).split(source)

        assert result.aborted
        confirm.assert_not_called()

    def test_always_policy(self, source, tmp_path):
        """Test that the batch preset overwrites without asking."""
        (tmp_path / "walk_rte.gpx").write_text("old", encoding="utf-8")
        confirm = Mock(return_value=False)

        result = GPXSplitter(SplitterConfig.batch(), confirm_overwrite=confirm).split(source)

        assert result.success
        confirm.assert_not_called()
        assert (tmp_path / "walk_rte.gpx").read_text(encoding="utf-8") == EXPECTED_ROUTES

    def test_missing_source(self, tmp_path):
        """Test that a missing source raises SourceOpenError."""
        with pytest.raises(SourceOpenError):
            GPXSplitter().split(tmp_path / "missing.gpx")

    def test_decode_failure_writes_nothing(self, tmp_path):
        """Test that an undecodable source aborts before any output."""
        path = tmp_path / "bad.gpx"
        path.write_bytes(b"<gpx>\xff</gpx>")

        with pytest.raises(TokenDecodeError):
            GPXSplitter().split(path)
        assert sorted(p.name for p in tmp_path.iterdir()) == ["bad.gpx"]

    def test_missing_output_dir(self, source, tmp_path):
        """Test that an unwritable destination raises OutputWriteError."""
        with pytest.raises(OutputWriteError):
            GPXSplitter().split(source, tmp_path / "nowhere")

    def test_category_file_cannot_be_created(self, source, tmp_path):
        """Test that a category path taken by a directory fails the pass."""
        (tmp_path / "walk_wpt.gpx").mkdir()

        with pytest.raises(OutputWriteError) as excinfo:
            GPXSplitter(SplitterConfig.batch()).split(source)
        assert excinfo.value.path == tmp_path / "walk_wpt.gpx"
        assert (tmp_path / "walk_tokens.txt").exists()

    def test_correlation_id_from_config(self, source):
        """Test that a configured correlation ID is used for the pass."""
        config = SplitterConfig(correlation_id="abc123")
        assert GPXSplitter(config).split(source).correlation_id == "abc123"


class TestConvert:
    """Tests for the boolean boundary functions."""

    def test_success(self, source, tmp_path):
        """Test that a successful pass returns True."""
        assert convert(source) is True
        assert (tmp_path / "walk_wpt.gpx").exists()

    def test_failure_returns_false(self, tmp_path):
        """Test that errors are reported as False."""
        assert convert(tmp_path / "missing.gpx") is False

    def test_declined_overwrite_is_not_failure(self, source, tmp_path):
        """Test that a normal abort returns True."""
        (tmp_path / "walk_wpt.gpx").write_text("old", encoding="utf-8")
        assert convert(source, confirm_overwrite=lambda existing: False) is True

    def test_background(self, source, tmp_path):
        """Test running the pass off the calling thread."""
        future = convert_in_background(source)
        assert future.result(timeout=10) is True
        assert (tmp_path / "walk_trk.gpx").exists()

    def test_background_with_executor(self, tmp_path):
        """Test submitting to a caller-provided executor."""
        with ThreadPoolExecutor(max_workers=1) as executor:
            future = convert_in_background(tmp_path / "missing.gpx", executor=executor)
            assert future.result(timeout=10) is False
