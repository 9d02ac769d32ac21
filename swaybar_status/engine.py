"""Streaming engine for the i3bar protocol.

Writes the header and opens the infinite block array, then appends one
snapshot per tick. Between ticks it drains click events from the host.

Output stream layout::

    {"version":1}
    [[{"full_text":"12:00:00  2024.01.01","separator":true}],
    [{"full_text":"12:00:01  2024.01.01","separator":true}],

The array is never closed: the host reads bracket-delimited fragments and
does not expect a terminating ``]``, also not on shutdown.
"""

import logging
import time
from typing import Callable, List, Optional

from .errors import InputClosed, MalformedEvent, OutputFailure
from .framing import EventReader
from .models import Block, ClientEvent, Header, encode_snapshot
from .sources import ContentSource

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 1.0


class StatusStream:
    """Owns the output/input streams of one status feed."""

    def __init__(
        self,
        output,
        source: ContentSource,
        *,
        header: Optional[Header] = None,
        input=None,
        interval: float = DEFAULT_INTERVAL,
        separator: Optional[bool] = None,
        on_event: Optional[Callable[[ClientEvent], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize status stream.

        Args:
            output: Text stream the bar host reads (stdout)
            source: Content source called once per tick
            header: Protocol header (default: version 1, nothing else)
            input: Stream the host writes click events to (stdin), or None to ignore clicks
            interval: Seconds between snapshots
            separator: Separator flag applied to blocks built from plain text (None leaves it unset)
            on_event: Called with every decoded click event
            clock: Monotonic time source
            sleep: Sleep function
        """
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")

        self.output = output
        self.source = source
        self.header = header if header is not None else Header.new()
        self.events = EventReader(input, clock=clock) if input is not None else None
        self.interval = interval
        self.separator = separator
        self.on_event = on_event
        self._clock = clock
        self._sleep = sleep
        self.started = False
        self.ticks = 0

    def _write(self, text: str) -> None:
        """Write and flush one complete unit; any failure is fatal."""
        try:
            self.output.write(text)
            self.output.flush()
        except (OSError, ValueError) as e:
            raise OutputFailure(f"Status output failed: {e}") from e

    def start(self) -> None:
        """Write the header and open the block array (once)."""
        if self.started:
            return
        self._write(self.header.encode() + "\n[")
        self.started = True
        logger.info(f"Status stream started: {self.header.encode()}")

    def snapshot(self) -> List[Block]:
        """Build the current status line from the content source."""
        content = self.source()

        if isinstance(content, Block):
            return [content]
        if isinstance(content, str):
            block = Block.new(content)
            if self.separator is not None:
                block.with_separator(self.separator)
            return [block]
        return list(content)

    def emit_snapshot(self) -> str:
        """Write one snapshot followed by the array separator.

        Returns:
            The encoded snapshot (without the trailing comma)
        """
        if not self.started:
            self.start()

        body = encode_snapshot(self.snapshot())
        self._write(body + ",\n")
        self.ticks += 1
        return body

    def wait(self, deadline: float) -> None:
        """Wait until deadline, handling click events that arrive meanwhile."""
        while True:
            remaining = deadline - self._clock()
            if remaining <= 0:
                return

            if self.events is None:
                self._sleep(remaining)
                return

            try:
                event = self.events.read_event(timeout=remaining)
            except MalformedEvent as e:
                logger.warning(f"Dropped malformed click event: {e.message} ({e.payload[:200]!r})")
                continue
            except InputClosed:
                logger.info("Click event input closed, continuing without click events")
                self.events = None
                continue
            except OSError as e:
                logger.error(f"Failed to read click events, ignoring further input: {e}")
                self.events = None
                continue

            if event is None:
                # The reader waited out the remaining time
                return
            self._dispatch(event)

    def _dispatch(self, event: ClientEvent) -> None:
        logger.debug(f"Click event: {event.name}/{event.instance} button={event.button}")
        if self.on_event is None:
            return
        try:
            self.on_event(event)
        except Exception as e:
            logger.error(f"Click handler failed for {event.name}: {e}", exc_info=True)

    def run(self, ticks: Optional[int] = None) -> None:
        """Stream snapshots forever (or for ``ticks`` snapshots).

        Raises:
            OutputFailure: If the host stops reading our output
        """
        self.start()

        emitted = 0
        while ticks is None or emitted < ticks:
            deadline = self._clock() + self.interval
            self.emit_snapshot()
            emitted += 1
            self.wait(deadline)
