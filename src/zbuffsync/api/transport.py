"""WebSocket transport for the party relay.

The transport only moves text frames. It knows nothing about the party
protocol; the party client registers handlers for inbound messages,
closure and errors.
"""

import asyncio
import logging
from collections.abc import Callable
from contextlib import suppress
from typing import Protocol

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

logger = logging.getLogger(__name__)

NORMAL_CLOSURE = 1000
ABNORMAL_CLOSURE = 1006
INTERNAL_ERROR = 1011

# Type aliases for event handlers
MessageHandler = Callable[[str], None]
CloseHandler = Callable[[int, str], None]
ErrorHandler = Callable[[Exception], None]


class Transport(Protocol):
    """Operations the party client needs from a transport."""

    @property
    def is_open(self) -> bool: ...

    def set_event_handlers(
        self,
        on_message: MessageHandler | None = None,
        on_close: CloseHandler | None = None,
        on_error: ErrorHandler | None = None,
    ) -> None: ...

    async def connect(self, uri: str) -> None: ...

    async def send(self, text: str) -> None: ...

    async def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None: ...


class WebSocketTransport:
    """Async WebSocket client delivering text frames to handlers.

    Example:
        transport = WebSocketTransport()
        transport.set_event_handlers(on_message=print)
        await transport.connect("wss://relay.example:8765")
        await transport.send("START")
    """

    _DEFAULT_TIMEOUT: float = 10.0

    def __init__(self, timeout: float = _DEFAULT_TIMEOUT) -> None:
        """Initialize the transport.

        Args:
            timeout: Opening handshake timeout in seconds.
        """
        self._timeout = timeout
        self._ws: ClientConnection | None = None
        self._receive_task: asyncio.Task[None] | None = None

        # Event handlers
        self._on_message: MessageHandler | None = None
        self._on_close: CloseHandler | None = None
        self._on_error: ErrorHandler | None = None

    @property
    def is_open(self) -> bool:
        """Return True while the socket is open."""
        return self._ws is not None

    def set_event_handlers(
        self,
        on_message: MessageHandler | None = None,
        on_close: CloseHandler | None = None,
        on_error: ErrorHandler | None = None,
    ) -> None:
        """Set event handlers for transport events.

        Args:
            on_message: Handler for inbound text frames.
            on_close: Handler for closure, called once with (code, reason).
            on_error: Handler for errors raised while receiving.
        """
        self._on_message = on_message
        self._on_close = on_close
        self._on_error = on_error

    async def connect(self, uri: str) -> None:
        """Open the WebSocket.

        Raises:
            ConnectionError: If the connection or handshake fails.
        """
        if self._ws is not None:
            return

        try:
            self._ws = await connect(uri, open_timeout=self._timeout)
        except (OSError, TimeoutError, ValueError, WebSocketException) as e:
            # ValueError covers URIs websockets rejects, such as an out-of-range port
            self._ws = None
            raise ConnectionError(f"Failed to connect to {uri}: {e}") from e

        self._receive_task = asyncio.create_task(self._receive_loop(self._ws))

    async def send(self, text: str) -> None:
        """Send one text frame.

        Raises:
            ConnectionError: If the socket is not open or closes mid-send.
        """
        if self._ws is None:
            raise ConnectionError("Not connected to server")
        try:
            await self._ws.send(text)
        except ConnectionClosed as e:
            raise ConnectionError(f"Connection closed while sending: {e}") from e
        logger.debug("Sent: %s", text)

    async def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None:
        """Close the socket; the close handler fires from the receive loop."""
        ws = self._ws
        if ws is None:
            return
        await ws.close(code, reason)
        if self._receive_task:
            with suppress(asyncio.CancelledError):
                await self._receive_task
            self._receive_task = None

    async def _receive_loop(self, ws: ClientConnection) -> None:
        """Background task delivering inbound frames until the socket ends."""
        try:
            async for message in ws:
                if isinstance(message, bytes):
                    message = message.decode("utf-8", errors="replace")
                logger.debug("Received: %s", message)
                if self._on_message:
                    self._on_message(message)
        except ConnectionClosed as e:
            logger.debug("Connection closed abnormally: %s", e)
        except Exception as e:
            logger.warning("Receive loop failed: %s", e)
            await ws.close(INTERNAL_ERROR, "Client error")
            if self._on_error:
                self._on_error(e)
        finally:
            self._ws = None
            code = ws.close_code if ws.close_code is not None else ABNORMAL_CLOSURE
            reason = ws.close_reason or ""
            if self._on_close:
                self._on_close(code, reason)
