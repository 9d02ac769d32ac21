"""Pytest configuration and fixtures for swaybar status feed tests."""

import io
import json

import pytest


class FakeClock:
    """Monotonic clock that only advances when sleep() is called."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class SequenceSource:
    """Content source returning the given texts in order, then repeating the last one."""

    def __init__(self, *texts):
        self.texts = list(texts)
        self.calls = 0

    def __call__(self) -> str:
        text = self.texts[min(self.calls, len(self.texts) - 1)]
        self.calls += 1
        return text


@pytest.fixture
def fake_clock():
    """Fake clock/sleep pair for the streaming engine."""
    return FakeClock()


@pytest.fixture
def output():
    """In-memory stand-in for stdout."""
    return io.StringIO()


@pytest.fixture
def click_event_data():
    """Click event as swaybar writes it to stdin (with keys we do not model)."""
    return {
        "name": "clock",
        "instance": "0",
        "x": 1820,
        "y": 1064,
        "button": 1,
        "event": 272,
        "relative_x": 42,
        "relative_y": 9,
        "width": 150,
        "height": 20,
        "modifiers": ["Mod4"],
        "scale": 1,
    }


@pytest.fixture
def click_event_json(click_event_data):
    """Click event encoded as one JSON line."""
    return json.dumps(click_event_data)


@pytest.fixture
def sequence_source():
    """Factory for SequenceSource content sources."""
    return SequenceSource
