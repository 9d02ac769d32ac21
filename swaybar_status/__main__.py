#!/usr/bin/env python3
"""swaybar status feed: a clock in i3bar protocol.

Usage (sway config):
    bar {
        status_command swaybar-status --interval 1
    }

Protocol: https://i3wm.org/docs/i3bar-protocol.html
"""

import logging
import sys
from typing import Optional

import click

from .config import Config
from .engine import DEFAULT_INTERVAL, StatusStream
from .errors import OutputFailure
from .sources import DEFAULT_CLOCK_FORMAT, ClockSource

logger = logging.getLogger(__name__)


def setup_logging(config: Config) -> None:
    """Log to a file; stdout belongs to the bar host."""
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.FileHandler(config.log_file)]
    )


@click.command()
@click.option('--interval', type=click.FloatRange(min=0, min_open=True), default=DEFAULT_INTERVAL,
              show_default=True, envvar='SWAYBAR_STATUS_INTERVAL', help='Seconds between updates')
@click.option('--format', 'clock_format', default=DEFAULT_CLOCK_FORMAT, show_default=True,
              envvar='SWAYBAR_STATUS_FORMAT', help='strftime format of the clock block')
@click.option('--click-events/--no-click-events', default=None,
              envvar='SWAYBAR_STATUS_CLICK_EVENTS', help='Ask the bar to send click events on stdin')
@click.option('--cont-signal', 'const_signal', type=click.IntRange(min=0), default=None,
              envvar='SWAYBAR_STATUS_CONT_SIGNAL', help='Signal the bar sends to resume updates')
@click.option('--stop-signal', type=click.IntRange(min=0), default=None,
              envvar='SWAYBAR_STATUS_STOP_SIGNAL', help='Signal the bar sends to pause updates')
@click.option('--separator/--no-separator', default=True, show_default=True,
              envvar='SWAYBAR_STATUS_SEPARATOR', help='Draw a separator after the block')
@click.option('--log-file', type=click.Path(dir_okay=False), default=Config.log_file, show_default=True,
              envvar='SWAYBAR_STATUS_LOG_FILE', help='Log file (never stdout)')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              default=Config.log_level, show_default=True, envvar='SWAYBAR_STATUS_LOG_LEVEL')
@click.option('--ticks', type=click.IntRange(min=1), default=None, hidden=True)
def cli(interval: float, clock_format: str, click_events: Optional[bool], const_signal: Optional[int],
        stop_signal: Optional[int], separator: bool, log_file: str, log_level: str, ticks: Optional[int]):
    """Stream a clock to swaybar/i3bar over stdout."""
    config = Config(
        interval=interval,
        clock_format=clock_format,
        separator=separator,
        click_events=click_events,
        const_signal=const_signal,
        stop_signal=stop_signal,
        log_file=log_file,
        log_level=log_level,
    )
    setup_logging(config)

    stream = StatusStream(
        sys.stdout,
        ClockSource(config.clock_format),
        header=config.header(),
        input=sys.stdin if config.click_events else None,
        interval=config.interval,
        separator=config.separator,
    )

    try:
        stream.run(ticks=ticks)
    except KeyboardInterrupt:
        logger.info("Shutting down status feed")
    except OutputFailure as e:
        logger.error(f"Bar host stopped reading: {e.message}")
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)


def main():
    """Entry point for the status feed."""
    cli()


if __name__ == "__main__":
    main()
