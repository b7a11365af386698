"""QThread worker running the PartyClient on its own asyncio loop.

Qt objects live in the main thread, but the PartyClient is driven by
asyncio. The worker owns the loop and the client; every intent from the
main thread is marshalled onto that loop, so the client's state is only
ever touched from one thread. Client events come back as Qt signals.
"""

import asyncio
import logging
import threading
from collections.abc import Callable

from PySide6.QtCore import QThread, Signal

from zbuffsync.api.client import PartyClient
from zbuffsync.api.transport import Transport, WebSocketTransport
from zbuffsync.models.session import ConnectionState

logger = logging.getLogger(__name__)


class PartyWorker(QThread):
    """Background thread owning one party session.

    Example:
        worker = PartyWorker(secure=True)
        worker.notification.connect(status.notify)
        worker.play_requested.connect(sound_bank.play)
        worker.start()
        worker.join("relay.example", 8765, "raid", "secret", "alice")
    """

    # Status line for the notification sink
    notification = Signal(str)

    # Session signals
    state_changed = Signal(object)  # ConnectionState
    roster_changed = Signal(object, bool)  # PartyRoster, is_leader
    play_requested = Signal(str)  # cue id

    # Error signal
    error_occurred = Signal(object)  # Exception

    def __init__(
        self,
        secure: bool = True,
        timeout: float = 10.0,
        transport_factory: Callable[[], Transport] | None = None,
    ) -> None:
        """Initialize the worker.

        Args:
            secure: Connect with wss:// (True) or ws:// (False).
            timeout: Connection timeout in seconds.
            transport_factory: Builds the transport (default WebSocketTransport).
        """
        super().__init__()
        self._secure = secure
        self._timeout = timeout
        self._transport_factory = transport_factory
        self._client: PartyClient | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._ready = threading.Event()

    @property
    def is_connected(self) -> bool:
        """Return True if the session is joined."""
        return self._client is not None and self._client.is_connected

    @property
    def is_leader(self) -> bool:
        """Return True if the local user leads the party."""
        return self._client is not None and self._client.is_leader

    def wait_ready(self, timeout: float | None = None) -> bool:
        """Block until the worker's loop accepts intents."""
        return self._ready.wait(timeout)

    def join(self, host: str, port: int | str, party: str, password: str, username: str) -> bool:
        """Join a party. Thread-safe call from main thread.

        Returns:
            True if the request was handed to the worker loop.
        """
        return self._call(lambda c: c.join(host, port, party, password, username))

    def disconnect_party(self) -> bool:
        """Leave the party. Thread-safe call from main thread."""
        return self._call(lambda c: c.disconnect())

    def request_start(self) -> bool:
        """Ask to start the countdown. Thread-safe call from main thread."""
        return self._call(lambda c: c.request_start())

    def stop(self) -> None:
        """Close the session and end the thread (called from main thread)."""
        if self._loop and self._loop.is_running():
            asyncio.run_coroutine_threadsafe(self._shutdown(), self._loop)

    def run(self) -> None:
        """Run the worker thread (entry point)."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        transport = (
            self._transport_factory()
            if self._transport_factory
            else WebSocketTransport(self._timeout)
        )
        self._client = PartyClient(
            transport=transport,
            notify=self.notification.emit,
            secure=self._secure,
        )
        self._client.set_event_handlers(
            on_state_change=self.state_changed.emit,
            on_roster_change=self.roster_changed.emit,
            on_play=self.play_requested.emit,
        )

        try:
            self._loop.call_soon(self._ready.set)
            self._loop.run_forever()
        except Exception as e:
            self.error_occurred.emit(e)
        finally:
            self._ready.clear()
            pending = asyncio.all_tasks(self._loop)
            for task in pending:
                task.cancel()
            if pending:
                self._loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            self._loop.close()
            self._loop = None
            self._client = None

    def _call(self, intent: Callable[[PartyClient], object]) -> bool:
        """Schedule an intent on the worker loop."""
        if not (self._loop and self._loop.is_running() and self._client):
            logger.debug("Worker not running, intent dropped")
            return False
        client = self._client
        self._loop.call_soon_threadsafe(self._invoke, intent, client)
        return True

    def _invoke(self, intent: Callable[[PartyClient], object], client: PartyClient) -> None:
        try:
            outcome = intent(client)
            logger.debug("Intent outcome: %s", outcome)
        except Exception as e:
            logger.exception("Party intent failed")
            self.error_occurred.emit(e)

    async def _shutdown(self) -> None:
        """Disconnect, wait for the close to finish, then stop the loop."""
        if self._client is not None and self._client.state is not ConnectionState.DISCONNECTED:
            self._client.disconnect()
            await self._client.flush()
        if self._loop is not None:
            self._loop.stop()
