"""Test fixtures for zbuffsync tests."""

import asyncio
import os
from collections.abc import Awaitable, Callable

import pytest

from zbuffsync.api.client import PartyClient
from zbuffsync.api.transport import CloseHandler, ErrorHandler, MessageHandler

# Qt tests run headless
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


class FakeTransport:
    """In-memory transport recording every call.

    ``gate`` makes connect() wait until the event is set, which keeps a
    client in CONNECTING for as long as a test needs.
    """

    def __init__(self, fail_connect: bool = False, gate: asyncio.Event | None = None) -> None:
        self.fail_connect = fail_connect
        self.gate = gate
        self.connected_uris: list[str] = []
        self.sent: list[str] = []
        self.closed: list[tuple[int, str]] = []
        self._open = False
        self._on_message: MessageHandler | None = None
        self._on_close: CloseHandler | None = None
        self._on_error: ErrorHandler | None = None

    @property
    def is_open(self) -> bool:
        return self._open

    def set_event_handlers(
        self,
        on_message: MessageHandler | None = None,
        on_close: CloseHandler | None = None,
        on_error: ErrorHandler | None = None,
    ) -> None:
        self._on_message = on_message
        self._on_close = on_close
        self._on_error = on_error

    async def connect(self, uri: str) -> None:
        self.connected_uris.append(uri)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_connect:
            raise ConnectionError(f"Failed to connect to {uri}: refused")
        self._open = True

    async def send(self, text: str) -> None:
        if not self._open:
            raise ConnectionError("Not connected to server")
        self.sent.append(text)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed.append((code, reason))
        if self._open:
            self._open = False
            if self._on_close:
                self._on_close(code, reason)

    # Server-side actions

    def deliver(self, raw: str) -> None:
        """Deliver an inbound frame."""
        assert self._on_message is not None
        self._on_message(raw)

    def drop(self, code: int = 1006, reason: str = "") -> None:
        """Simulate the server or network ending the connection."""
        self._open = False
        if self._on_close:
            self._on_close(code, reason)

    def fail(self, error: Exception) -> None:
        """Simulate a transport error."""
        self._open = False
        if self._on_error:
            self._on_error(error)


class RecordingPlayback:
    """Playback service that records requested cue ids."""

    def __init__(self) -> None:
        self.played: list[str] = []

    def play(self, cue_id: str) -> None:
        self.played.append(cue_id)


@pytest.fixture
def make_transport() -> Callable[..., FakeTransport]:
    """Return a factory for fake transports (accepts FakeTransport arguments)."""
    return FakeTransport


@pytest.fixture
def transport() -> FakeTransport:
    """Return a fresh fake transport."""
    return FakeTransport()


@pytest.fixture
def playback() -> RecordingPlayback:
    """Return a recording playback service."""
    return RecordingPlayback()


@pytest.fixture
def notes() -> list[str]:
    """Return a list collecting status lines."""
    return []


@pytest.fixture
def client(transport: FakeTransport, playback: RecordingPlayback, notes: list[str]) -> PartyClient:
    """Return a PartyClient wired to fakes."""
    return PartyClient(transport=transport, notify=notes.append, playback=playback)


async def _wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll until ``predicate`` holds or fail after ``timeout`` seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            pytest.fail("Condition not met before timeout")
        await asyncio.sleep(0.01)


@pytest.fixture
def wait_for() -> Callable[..., Awaitable[None]]:
    """Return a coroutine function polling a predicate until it holds."""
    return _wait_for
