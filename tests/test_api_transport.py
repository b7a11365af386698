"""Tests for WebSocketTransport and the client against a local relay."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field

import pytest
import pytest_asyncio
from websockets.asyncio.server import ServerConnection, serve

from zbuffsync.api.client import PartyClient
from zbuffsync.api.transport import INTERNAL_ERROR, WebSocketTransport
from zbuffsync.models.session import ConnectionState, JoinOutcome, StartOutcome


@dataclass
class Relay:
    """A running local relay and what it observed."""

    port: int
    received: list[str] = field(default_factory=list)
    close_codes: list[int | None] = field(default_factory=list)
    after_join: list[str] = field(default_factory=list)

    @property
    def uri(self) -> str:
        return f"ws://127.0.0.1:{self.port}"


@pytest_asyncio.fixture
async def relay() -> AsyncGenerator[Relay, None]:
    """Run a minimal relay answering JOIN, START, ECHO and KICK.

    Frames in ``after_join`` are sent right after the roster.
    ``close_codes`` records the code of every connection once it ends
    (None when the peer vanished without a close frame).
    """
    state = Relay(port=0)

    async def handler(ws: ServerConnection) -> None:
        try:
            async for message in ws:
                assert isinstance(message, str)
                state.received.append(message)
                if message.startswith("JOIN:"):
                    _, party, _password, username = message.split(":")
                    await ws.send("JOIN_OK")
                    await ws.send(f"PARTY_UPDATE:{party}:{username}:bob")
                    for extra in state.after_join:
                        await ws.send(extra)
                elif message == "START":
                    await ws.send("COUNTDOWN")
                    await ws.send("PLAY_SOUND")
                elif message.startswith("ECHO:"):
                    await ws.send(message.removeprefix("ECHO:"))
                elif message == "KICK":
                    await ws.close(4001, "kicked")
        finally:
            state.close_codes.append(ws.close_code)

    async with serve(handler, "127.0.0.1", 0) as server:
        state.port = server.sockets[0].getsockname()[1]
        yield state


class TestWebSocketTransport:
    """Tests for WebSocketTransport."""

    def test_initial_state(self) -> None:
        """Test that a new transport is closed."""
        assert WebSocketTransport().is_open is False

    @pytest.mark.asyncio
    async def test_send_when_closed_raises(self) -> None:
        """Test that send requires an open socket."""
        with pytest.raises(ConnectionError):
            await WebSocketTransport().send("START")

    @pytest.mark.asyncio
    async def test_close_when_closed_is_noop(self) -> None:
        """Test that closing an unopened transport does nothing."""
        await WebSocketTransport().close()

    @pytest.mark.asyncio
    async def test_connect_failure(self) -> None:
        """Test that a refused connection raises ConnectionError."""
        transport = WebSocketTransport(timeout=2.0)
        with pytest.raises(ConnectionError):
            await transport.connect("ws://127.0.0.1:1")
        assert transport.is_open is False

    @pytest.mark.asyncio
    async def test_port_out_of_range(self) -> None:
        """Test that an unusable URI raises ConnectionError."""
        transport = WebSocketTransport(timeout=2.0)
        with pytest.raises(ConnectionError):
            await transport.connect("ws://127.0.0.1:99999")
        assert transport.is_open is False

    @pytest.mark.asyncio
    async def test_message_and_server_close(self, relay: Relay, wait_for) -> None:
        """Test frame delivery and close code from the server."""
        messages: list[str] = []
        closes: list[tuple[int, str]] = []
        transport = WebSocketTransport()
        transport.set_event_handlers(
            on_message=messages.append,
            on_close=lambda code, reason: closes.append((code, reason)),
        )

        await transport.connect(relay.uri)
        assert transport.is_open
        await transport.send("JOIN:raid:pw:alice")
        await wait_for(lambda: len(messages) == 2)
        assert messages == ["JOIN_OK", "PARTY_UPDATE:raid:alice:bob"]

        await transport.send("KICK")
        await wait_for(lambda: bool(closes))
        assert closes == [(4001, "kicked")]
        assert transport.is_open is False
        assert relay.received == ["JOIN:raid:pw:alice", "KICK"]

    @pytest.mark.asyncio
    async def test_client_close_fires_close_once(self, relay: Relay) -> None:
        """Test that a local close reports closure exactly once."""
        closes: list[int] = []
        transport = WebSocketTransport()
        transport.set_event_handlers(on_close=lambda code, _reason: closes.append(code))

        await transport.connect(relay.uri)
        await transport.close(1000, "bye")
        assert closes == [1000]
        assert transport.is_open is False

    @pytest.mark.asyncio
    async def test_handler_failure_closes_socket(self, relay: Relay, wait_for) -> None:
        """Test that a failing message handler closes the socket and reports once."""
        errors: list[Exception] = []
        closes: list[int] = []

        def explode(_message: str) -> None:
            raise RuntimeError("handler failed")

        transport = WebSocketTransport()
        transport.set_event_handlers(
            on_message=explode,
            on_close=lambda code, _reason: closes.append(code),
            on_error=errors.append,
        )

        await transport.connect(relay.uri)
        await transport.send("ECHO:hello")
        await wait_for(lambda: bool(closes))
        assert [type(e) for e in errors] == [RuntimeError]
        assert closes == [INTERNAL_ERROR]
        assert transport.is_open is False
        await wait_for(lambda: relay.close_codes == [INTERNAL_ERROR])


class TestPartyClientOverWebSocket:
    """End-to-end session against the local relay."""

    @pytest.mark.asyncio
    async def test_full_session(self, relay: Relay, playback, wait_for) -> None:
        """Test join, leadership, start, playback and disconnect."""
        notes: list[str] = []
        client = PartyClient(notify=notes.append, playback=playback, secure=False)

        client.join("127.0.0.1", relay.port, "raid", "pw", "alice")
        await wait_for(lambda: client.is_leader)
        assert client.state is ConnectionState.JOINED
        assert client.roster.members == ("alice", "bob")
        assert relay.received == ["JOIN:raid:pw:alice"]

        assert client.request_start() is StartOutcome.SENT
        await wait_for(lambda: playback.played == ["zbuff"])
        assert "[INFO] Leader has started the countdown!" in notes

        client.disconnect()
        await wait_for(lambda: client.state is ConnectionState.DISCONNECTED)
        assert client.roster.is_empty
        assert not client.is_leader
        assert any(n.startswith("[INFO] Connection closed. Code: 1000") for n in notes)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["START", "JOIN:a:b:c"])
    async def test_outbound_command_from_relay_keeps_session(
        self, relay: Relay, wait_for, raw: str
    ) -> None:
        """Test that a client-to-server command sent by the relay is only logged."""
        notes: list[str] = []
        client = PartyClient(notify=notes.append, secure=False)
        relay.after_join = [raw, "COUNTDOWN"]
        client.join("127.0.0.1", relay.port, "raid", "pw", "alice")
        await wait_for(lambda: "[INFO] Leader has started the countdown!" in notes)

        assert f"[INFO] Server: {raw}" in notes
        assert client.state is ConnectionState.JOINED
        assert client.is_leader
        assert relay.close_codes == []

        client.disconnect()
        await client.flush()

    @pytest.mark.asyncio
    async def test_refused_connection_resets(self) -> None:
        """Test that a refused connection ends disconnected."""
        notes: list[str] = []
        client = PartyClient(notify=notes.append, secure=False)
        client.join("127.0.0.1", 1, "raid", "pw", "alice")
        await client.flush()
        assert client.state is ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_port_out_of_range_resets(self) -> None:
        """Test that an unusable port ends disconnected and allows a new join."""
        notes: list[str] = []
        client = PartyClient(notify=notes.append, secure=False)
        client.join("127.0.0.1", "99999", "raid", "pw", "alice")
        await client.flush()
        assert client.state is ConnectionState.DISCONNECTED
        assert notes[-1].startswith("[INFO] WebSocket connection error.")
        assert client.join("127.0.0.1", 1, "raid", "pw", "alice") is JoinOutcome.CONNECTING
        await client.flush()
