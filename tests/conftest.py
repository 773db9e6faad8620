from __future__ import annotations

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest


class FakeTimer:
    """Stand-in for ``threading.Timer`` that only fires when a test says so."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.fired = True
        self.callback()


class FakeTimerFactory:
    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[FakeTimer]:
        return [timer for timer in self.timers if not timer.cancelled and not timer.fired]

    def fire_all(self) -> int:
        """Expire every active settle window in creation order; returns how many fired."""
        active = self.active
        for timer in active:
            timer.fire()
        return len(active)


@pytest.fixture
def fake_timers() -> FakeTimerFactory:
    return FakeTimerFactory()


@pytest.fixture
def mock_observer() -> MagicMock:
    """Mock watchdog Observer."""
    observer = MagicMock()
    observer.start = MagicMock()
    observer.stop = MagicMock()
    observer.join = MagicMock()
    observer.schedule = MagicMock()
    return observer


@pytest.fixture
def observer_factory(mock_observer: MagicMock) -> Callable[[], MagicMock]:
    return lambda: mock_observer
