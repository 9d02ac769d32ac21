"""swaybar status feed producer.

Streams i3bar protocol (version 1) snapshots to a bar host over stdout and
drains click events from stdin.
"""

__version__ = "1.0.0"
