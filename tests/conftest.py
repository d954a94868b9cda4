"""Pytest hooks and fixtures."""

import json
import random
from typing import Any, Callable

import pytest

from notebridge.bridge.transport import SocketState, TransportEvents


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line("markers", "e2e: talks to a local websocket server")


class FakeSocket:
    """In-memory transport socket driven by the test."""

    def __init__(self, url: str, events: TransportEvents):
        self.url = url
        self.events = events
        self.state = SocketState.CONNECTING
        self.sent: list[str] = []
        self.closed_with: tuple[int, str] | None = None

    def send(self, data: str) -> bool:
        if self.state is not SocketState.OPEN:
            return False
        self.sent.append(data)
        return True

    def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed_with = (code, reason)
        self.state = SocketState.CLOSED

    # drivers

    def open(self) -> None:
        self.state = SocketState.OPEN
        self.events.on_open(self)

    def receive(self, frame: Any) -> None:
        data = frame if isinstance(frame, (str, bytes)) else json.dumps(frame)
        self.events.on_message(self, data)

    def drop(self, code: int = 1006, reason: str = "") -> None:
        self.state = SocketState.CLOSED
        self.events.on_close(self, code, reason)

    def fail(self, error: BaseException) -> None:
        self.events.on_error(self, error)

    def sent_json(self) -> list[Any]:
        return [json.loads(frame) for frame in self.sent]


class FakeTransport:
    """Transport factory recording every socket it builds."""

    def __init__(self) -> None:
        self.sockets: list[FakeSocket] = []
        self.errors: list[BaseException] = []

    def __call__(self, url: str, events: TransportEvents) -> FakeSocket:
        if self.errors:
            raise self.errors.pop(0)
        sock = FakeSocket(url, events)
        self.sockets.append(sock)
        return sock

    @property
    def latest(self) -> FakeSocket:
        return self.sockets[-1]


class FakeTimer:
    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        assert not self.cancelled, "cancelled timer fired"
        self.fired = True
        self.callback()


class FakeTimers:
    """Timer factory; timers only fire when the test says so."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def armed(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]


class FixedRandom(random.Random):
    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class LogRecorder:
    def __init__(self) -> None:
        self.entries: list[tuple[str, str]] = []

    def __call__(self, message: str, level: str = "info") -> None:
        self.entries.append((message, level))

    def messages(self, level: str | None = None) -> list[str]:
        return [m for m, lvl in self.entries if level is None or lvl == level]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def timers() -> FakeTimers:
    return FakeTimers()


@pytest.fixture
def log() -> LogRecorder:
    return LogRecorder()


@pytest.fixture
def fixed_rng() -> Callable[[float], FixedRandom]:
    return FixedRandom
