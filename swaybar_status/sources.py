"""Content sources: what the status line shows.

A content source is any zero-argument callable returning the text to show,
a ready-made Block, or a list of Blocks for a multi-block status line. The
streaming engine calls it once per tick.
"""

from datetime import datetime
from typing import Callable, List, Union

from .models import Block

Content = Union[str, Block, List[Block]]
ContentSource = Callable[[], Content]

DEFAULT_CLOCK_FORMAT = "%H:%M:%S  %Y.%m.%d"


class ClockSource:
    """Current local date/time formatted with strftime."""

    def __init__(self, fmt: str = DEFAULT_CLOCK_FORMAT, now: Callable[[], datetime] = datetime.now):
        self.fmt = fmt
        self._now = now

    def __call__(self) -> str:
        return self._now().strftime(self.fmt)


class StaticSource:
    """Always the same text."""

    def __init__(self, text: str):
        self.text = text

    def __call__(self) -> str:
        return self.text
