"""Stream router deciding which outputs receive each token.

The router walks a fully materialized token list with an explicit cursor.
A waypoint, route or track element is captured into its own stream; every
other token is broadcast to all three streams so each output keeps the shared
document structure.
"""

from enum import Enum
from typing import Mapping, Optional, Sequence, TextIO, Tuple

from gpx_splitter.routing.indent import IndentState
from gpx_splitter.routing.printer import PrettyPrinter
from gpx_splitter.shared.logging import get_logger
from gpx_splitter.shared.result import RoutingStatistics
from gpx_splitter.tokenization.classifier import describe_tag


class Destination(Enum):
    """Where a token is written."""

    WAYPOINTS = "wpt"
    ROUTES = "rte"
    TRACKS = "trk"
    SHARED = "shared"

    @property
    def tag_name(self) -> str:
        if self is Destination.SHARED:
            raise ValueError("Shared destination has no tag name")
        return self.value


# Checked in this order when a tag could start a capture
CATEGORIES: Tuple[Destination, ...] = (
    Destination.WAYPOINTS,
    Destination.ROUTES,
    Destination.TRACKS,
)


def category_for(token: str) -> Optional[Destination]:
    """Return the category an opening or self-closing tag starts, if any."""
    descriptor = describe_tag(token)
    if descriptor is None or descriptor.is_closing or descriptor.processing_instruction:
        return None
    for category in CATEGORIES:
        if descriptor.matches(category.tag_name):
            return category
    return None


def ends_capture(token: str, category: Destination) -> bool:
    """Check whether the token terminates a capture of ``category``.

    A capture ends at the first closing tag carrying the category name, or at
    a self-closing tag of the category. Nesting of same-named elements is not
    tracked.
    """
    descriptor = describe_tag(token)
    if descriptor is None:
        return False
    if descriptor.is_closing:
        return descriptor.name == category.tag_name
    return descriptor.is_self_closing and descriptor.matches(category.tag_name)


class StreamRouter:
    """Single-pass router over one token list.

    Args:
        tokens: Token list produced by the tokenizer
        writers: Text streams for the three categories
        state: Shared nesting state; a fresh one is created when omitted
        printer: Printer used for both capture and broadcast paths
        correlation_id: Optional correlation ID for logging
    """

    def __init__(
        self,
        tokens: Sequence[str],
        writers: Mapping[Destination, TextIO],
        state: Optional[IndentState] = None,
        printer: Optional[PrettyPrinter] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        missing = [category.name for category in CATEGORIES if category not in writers]
        if missing:
            raise ValueError(f"Missing writers for: {', '.join(missing)}")

        self.tokens: Tuple[str, ...] = tuple(tokens)
        self.writers = writers
        self.state = state if state is not None else IndentState()
        self.printer = printer if printer is not None else PrettyPrinter()
        self.cursor = 0
        self.statistics = RoutingStatistics()
        self.logger = get_logger(__name__, correlation_id, "router")

    @property
    def done(self) -> bool:
        return self.cursor >= len(self.tokens)

    def run(self) -> RoutingStatistics:
        """Route every remaining token.

        Raises:
            OSError: If a writer rejects data; the pass stops immediately
        """
        while not self.done:
            self.route_next()
        return self.statistics

    def route_next(self) -> Destination:
        """Route the token under the cursor, consuming a whole capture if it starts one."""
        token = self.tokens[self.cursor]
        category = category_for(token)
        if category is not None:
            self.capture(category)
            return category

        self.cursor += 1
        self.broadcast(token)
        return Destination.SHARED

    def capture(self, category: Destination) -> None:
        """Write tokens to the category stream until its element ends."""
        writer = self.writers[category]
        self.statistics.add_capture(category.value)
        self.logger.debug(
            "Capturing element",
            extra={"category": category.value, "cursor": self.cursor},
        )

        while not self.done:
            token = self.tokens[self.cursor]
            self.cursor += 1
            writer.write(self.printer.render(token, self.state))
            self.statistics.add_tokens(category.value)
            if ends_capture(token, category):
                self.logger.debug("Found closing tag", extra={"token": token})
                return

    def broadcast(self, token: str) -> None:
        """Write one token to all three category streams."""
        text = self.printer.render(token, self.state, reflow=True)
        for category in CATEGORIES:
            self.writers[category].write(text)
        self.statistics.add_tokens(Destination.SHARED.value)
