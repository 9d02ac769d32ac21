"""Framing of click events read from the bar host's stdin.

The host writes its own never-closed JSON array of click event objects::

    [
    {"name":"clock","instance":"0","button":1,...}
    ,{"name":"clock","instance":"0","button":3,...}

Events are framed on real JSON object boundaries (string contents and nested
braces are honoured) rather than on the first ``}`` byte, so a ``}`` inside a
string value or two events arriving in one read are handled correctly.
"""

import codecs
import io
import logging
import os
import select
import time
from typing import Callable, Optional

from .errors import InputClosed, MalformedEvent
from .models import ClientEvent, decode_event

logger = logging.getLogger(__name__)

# Characters the host puts between events: array opener/closer, separators, whitespace
_FILLER = frozenset(" \t\r\n[],")

# Longest click event accepted; real events are a few hundred characters
MAX_EVENT_SIZE = 64 * 1024


class ObjectFramer:
    """Split a character stream into top-level JSON object texts.

    Scan state is kept between calls, so each character is looked at once
    even when an object arrives in many small chunks.
    """

    def __init__(self, max_size: int = MAX_EVENT_SIZE):
        self.max_size = max_size
        self._buffer = ""
        self._reset_scan()

    def _reset_scan(self) -> None:
        self._scanned = 0   # Characters of the current object already scanned
        self._depth = 0
        self._in_string = False
        self._escaped = False

    @property
    def pending(self) -> str:
        """Buffered text not yet returned as an object."""
        return self._buffer

    def feed(self, text: str) -> None:
        self._buffer += text

    def next_object(self) -> Optional[str]:
        """Return the next complete ``{...}`` text, or None if none is buffered yet.

        Raises:
            MalformedEvent: If non-object text precedes the next object (it is
                discarded), or the object grows beyond ``max_size`` characters
        """
        buf = self._buffer

        if self._scanned == 0:
            start = 0
            while start < len(buf) and buf[start] in _FILLER:
                start += 1

            if start == len(buf):
                self._buffer = ""
                return None

            if buf[start] != "{":
                brace = buf.find("{", start)
                garbage = buf[start:] if brace == -1 else buf[start:brace]
                self._buffer = "" if brace == -1 else buf[brace:]
                raise MalformedEvent("Unexpected input between click events", payload=garbage)

            buf = self._buffer = buf[start:]

        for i in range(self._scanned, len(buf)):
            ch = buf[i]
            if self._in_string:
                if self._escaped:
                    self._escaped = False
                elif ch == "\\":
                    self._escaped = True
                elif ch == '"':
                    self._in_string = False
                continue

            if ch == '"':
                self._in_string = True
            elif ch in "{[":
                self._depth += 1
            elif ch in "}]":
                self._depth -= 1
                if self._depth == 0:
                    self._buffer = buf[i + 1:]
                    self._reset_scan()
                    return buf[:i + 1]

        # Incomplete object, wait for more input
        self._scanned = len(buf)
        if len(buf) > self.max_size:
            self._buffer = ""
            self._reset_scan()
            raise MalformedEvent(
                f"Click event exceeds {self.max_size} characters", payload=buf[:200]
            )
        return None

    def flush(self) -> str:
        """Drop and return whatever is left (a truncated object at end of input)."""
        rest = self._buffer.strip()
        self._buffer = ""
        self._reset_scan()
        return "" if all(ch in _FILLER for ch in rest) else rest


def _fileno(stream) -> Optional[int]:
    try:
        return stream.fileno()
    except (AttributeError, OSError, io.UnsupportedOperation):
        return None


class EventReader:
    """Read click events from the host's input stream.

    Streams backed by a real file descriptor are polled with ``select`` so a
    read can be bounded by a timeout. Anything else (``io.StringIO``,
    ``io.BytesIO``) is read with ``read(chunk_size)``.
    """

    def __init__(
        self,
        stream,
        chunk_size: int = 4096,
        max_event_size: int = MAX_EVENT_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize event reader.

        Args:
            stream: Text or binary input stream from the bar host
            chunk_size: Maximum number of bytes/characters per read
            max_event_size: Longest click event accepted, in characters
            clock: Monotonic time source the timeout is measured on
        """
        self._stream = stream
        self._chunk_size = chunk_size
        self._clock = clock
        self._fd = _fileno(stream)
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._framer = ObjectFramer(max_event_size)
        self.closed = False

    def read_event(self, timeout: Optional[float] = None) -> Optional[ClientEvent]:
        """Return the next click event.

        Args:
            timeout: Seconds to wait for input; None blocks until an event or EOF

        Returns:
            The decoded event, or None if the timeout expired first

        Raises:
            MalformedEvent: If the next object is not a valid click event
            InputClosed: If the stream has ended and nothing is left to decode
            OSError: If reading the underlying stream fails
        """
        deadline = None if timeout is None else self._clock() + timeout

        while True:
            text = self._framer.next_object()
            if text is not None:
                return decode_event(text)

            if self.closed:
                raise InputClosed()

            remaining = None if deadline is None else max(deadline - self._clock(), 0.0)
            if not self._fill(remaining):
                return None

    def _fill(self, timeout: Optional[float]) -> bool:
        """Read one chunk into the framer. Returns False if the timeout expired."""
        if self._fd is not None:
            if timeout is not None:
                readable, _, _ = select.select([self._fd], [], [], timeout)
                if not readable:
                    return False
            data = os.read(self._fd, self._chunk_size)
        else:
            data = self._stream.read(self._chunk_size)

        if isinstance(data, bytes):
            text = self._decoder.decode(data, final=not data)
        else:
            text = data

        if text:
            self._framer.feed(text)
        if not data:
            self._mark_closed()
        return True

    def _mark_closed(self) -> None:
        self.closed = True
        logger.info("Click event input reached end of stream")
        leftover = self._framer.flush()
        if leftover:
            raise MalformedEvent("Truncated click event at end of input", payload=leftover)
