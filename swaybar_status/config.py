"""Configuration dataclass for the swaybar status feed."""

from dataclasses import dataclass
from typing import Optional

from .engine import DEFAULT_INTERVAL
from .models import Header
from .sources import DEFAULT_CLOCK_FORMAT


@dataclass
class Config:
    """Complete status feed configuration.

    Defaults reproduce the plain clock feed: one block per second with a
    separator, no click events requested.
    """

    interval: float = DEFAULT_INTERVAL      # Seconds between snapshots
    clock_format: str = DEFAULT_CLOCK_FORMAT
    separator: Optional[bool] = True

    # Header options (advisory for the host, not enforced here)
    click_events: Optional[bool] = None
    const_signal: Optional[int] = None
    stop_signal: Optional[int] = None

    # Logging (never stdout: that is the protocol channel)
    log_file: str = "/tmp/swaybar-status.log"
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate values that the engine cannot recover from later."""
        if self.interval <= 0:
            raise ValueError(f"interval must be positive, got {self.interval}")
        self.log_level = self.log_level.upper()

    def header(self) -> Header:
        """Build the protocol header from the header options."""
        return Header(
            click_events=self.click_events,
            const_signal=self.const_signal,
            stop_signal=self.stop_signal,
        )
