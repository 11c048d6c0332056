"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from client import Course  # noqa: E402


class _ManualHandle:
    def __init__(self, when, seq, callback, args):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualClock:
    """
    Timer source driven by hand.

    Same call_later() shape as an asyncio loop. advance() fires due callbacks
    in (time, scheduling order) order, including ones scheduled while advancing.
    """

    def __init__(self):
        self.now = 0.0
        self._seq = 0
        self._pending = []

    def call_later(self, delay, callback, *args):
        handle = _ManualHandle(self.now + delay, self._seq, callback, args)
        self._seq += 1
        self._pending.append(handle)
        return handle

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [h for h in self._pending if not h.cancelled and h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.when, h.seq))
            self._pending.remove(handle)
            self.now = handle.when
            handle.callback(*handle.args)
        self.now = target
        self._pending = [h for h in self._pending if not h.cancelled]

    @property
    def active(self):
        return [h for h in self._pending if not h.cancelled]


@pytest.fixture
def manual_clock():
    return ManualClock()


@pytest.fixture
def three_courses():
    return [
        Course(CourseName="Ethics of AI", RationaleAbstract="Moral questions raised by learning systems."),
        Course(CourseName="Cognitive Psychology", RationaleAbstract="How people perceive, remember and decide."),
        Course(CourseName="Data Visualization", RationaleAbstract="Designing honest visual arguments.", CourseFormat="מקוון"),
    ]


class FakeResponse:
    def __init__(self, headers=None, text="", status_code=None):
        self.headers = headers or {}
        self.text = text
        self.status_code = status_code


class FakeProviderError(Exception):
    """Shaped like google-genai's APIError: code, details, response."""

    def __init__(self, message, code=None, headers=None, body="", details=None):
        super().__init__(message)
        self.code = code
        self.details = details
        self.response = FakeResponse(headers, body) if (headers or body) else None


@pytest.fixture
def provider_error():
    return FakeProviderError
