"""Party client: connection lifecycle, protocol dispatch and leadership.

All state changes happen on one asyncio event loop, in response to an
intent call (join, disconnect, request_start) or a transport callback.
Intent calls never wait for the network: they return an outcome at once
and schedule the I/O as a task.
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from zbuffsync.api.protocol import (
    Command,
    Frame,
    build_uri,
    encode_join,
    encode_start,
    parse_frame,
    parse_party_update,
)
from zbuffsync.api.transport import NORMAL_CLOSURE, Transport, WebSocketTransport
from zbuffsync.models.sequence import PlaybackService
from zbuffsync.models.session import (
    ConnectionState,
    DisconnectOutcome,
    JoinOutcome,
    PartyRoster,
    SessionIdentity,
    StartOutcome,
    ValidationError,
)

logger = logging.getLogger(__name__)

ALARM_CUE_ID = "zbuff"
DISCONNECT_REASON = "Client initiated disconnect"

# Type aliases for notification sink and observers
Notifier = Callable[[str], None]
StateHandler = Callable[[ConnectionState], None]
RosterHandler = Callable[[PartyRoster, bool], None]
PlayHandler = Callable[[str], None]


# Inbound commands that only produce a status line
_STATUS_TEXT: dict[Command, str] = {
    Command.JOIN_OK: "[INFO] Successfully joined party!",
    Command.COUNTDOWN: "[INFO] Leader has started the countdown!",
    Command.TIMER_ALREADY_ACTIVE: "[INFO] Timer is already active!",
    Command.NOT_LEADER: "[ERROR] You are not the party leader!",
    Command.INVALID_COMMAND: "[ERROR] Invalid command. Use JOIN:party:pass:user",
    Command.INVALID_JOIN_FORMAT: "[ERROR] Invalid JOIN format. Use JOIN:party:pass:user",
    Command.INVALID_PARTY_NAMING: "[ERROR] Invalid PARTY name.",
    Command.INCORRECT_PASSWORD: "[ERROR] Incorrect password.",
}


class PartyClient:
    """Client side of a synchronized party session.

    The roster's first member is the leader; only the leader may send
    START. Any loss of the transport resets the session to DISCONNECTED
    with an empty roster.

    Example:
        client = PartyClient(notify=print, playback=sound_bank)
        client.join("relay.example", 8765, "raid", "secret", "alice")
        ...
        if client.request_start() is StartOutcome.SENT:
            print("countdown requested")
    """

    def __init__(
        self,
        transport: Transport | None = None,
        notify: Notifier | None = None,
        playback: PlaybackService | None = None,
        alarm_cue: str = ALARM_CUE_ID,
        secure: bool = True,
    ) -> None:
        """Initialize the client.

        Args:
            transport: Transport to use (default WebSocketTransport).
            notify: Sink for user-visible status lines (default: log).
            playback: Service that plays the alarm on PLAY_SOUND.
            alarm_cue: Cue id played on PLAY_SOUND.
            secure: Connect with wss:// (True) or ws:// (False).
        """
        self._transport: Transport = transport or WebSocketTransport()
        self._transport.set_event_handlers(
            on_message=self.on_frame,
            on_close=self.handle_close,
            on_error=self.handle_error,
        )
        self._notify: Notifier = notify or logger.info
        self._playback = playback
        self._alarm_cue = alarm_cue
        self._secure = secure

        self._state = ConnectionState.DISCONNECTED
        self._roster = PartyRoster()
        self._is_leader = False
        self._identity: SessionIdentity | None = None
        self._connect_task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()

        # Observers
        self._on_state_change: StateHandler | None = None
        self._on_roster_change: RosterHandler | None = None
        self._on_play: PlayHandler | None = None

        self._handlers: dict[Command, Callable[[Frame], None]] = {
            Command.PARTY_UPDATE: self._handle_party_update,
            Command.PLAY_SOUND: self._handle_play_sound,
            Command.UNKNOWN: self._handle_unknown,
        }

    @property
    def state(self) -> ConnectionState:
        """Return the connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """Return True if the session is JOINED."""
        return self._state is ConnectionState.JOINED

    @property
    def roster(self) -> PartyRoster:
        """Return the last roster received."""
        return self._roster

    @property
    def is_leader(self) -> bool:
        """Return True if the local user leads the party."""
        return self._is_leader

    @property
    def identity(self) -> SessionIdentity | None:
        """Return the identity captured by the last join."""
        return self._identity

    def set_event_handlers(
        self,
        on_state_change: StateHandler | None = None,
        on_roster_change: RosterHandler | None = None,
        on_play: PlayHandler | None = None,
    ) -> None:
        """Set observers for client events.

        Args:
            on_state_change: Called with the new ConnectionState.
            on_roster_change: Called with (roster, is_leader).
            on_play: Called with the cue id when PLAY_SOUND arrives.
        """
        self._on_state_change = on_state_change
        self._on_roster_change = on_roster_change
        self._on_play = on_play

    # Intents

    def join(
        self,
        host: str,
        port: int | str,
        party: str,
        password: str,
        username: str,
    ) -> JoinOutcome:
        """Connect to the relay and join a party.

        Must be called from the event loop thread. Returns immediately;
        the JOIN frame is sent as soon as the transport opens.
        """
        if self._state is not ConnectionState.DISCONNECTED:
            self._notify("[INFO] Already connected or connecting.")
            return JoinOutcome.ALREADY_CONNECTED

        try:
            identity = SessionIdentity.from_fields(host, port, party, password, username)
        except ValidationError as e:
            logger.debug("Join rejected: %s", e)
            self._notify("[ERROR] All fields are required.")
            return JoinOutcome.INVALID

        self._identity = identity
        uri = build_uri(identity.host, identity.port, self._secure)
        self._set_state(ConnectionState.CONNECTING)
        self._notify(f"[INFO] Connecting to {uri}...")
        self._connect_task = asyncio.get_running_loop().create_task(self._open(uri, identity))
        return JoinOutcome.CONNECTING

    def disconnect(self) -> DisconnectOutcome:
        """Leave the party.

        An open session is closed with a normal closure; the reset then
        happens in the close callback. A pending connect is abandoned and
        the session reset at once.
        """
        if self._state is ConnectionState.JOINED:
            self._notify("[INFO] Disconnecting...")
            self._spawn(self._transport.close(NORMAL_CLOSURE, DISCONNECT_REASON))
            return DisconnectOutcome.CLOSING

        if self._state is ConnectionState.CONNECTING:
            if self._connect_task and not self._connect_task.done():
                self._connect_task.cancel()
            self._connect_task = None
            self._notify("[INFO] Connection attempt cancelled.")
            self._reset()
            return DisconnectOutcome.CANCELLED

        self._notify("[INFO] Not connected to disconnect.")
        return DisconnectOutcome.NOT_CONNECTED

    def request_start(self) -> StartOutcome:
        """Ask the relay to start the party countdown (leader only)."""
        party = self._identity.party if self._identity else ""
        if self._state is not ConnectionState.JOINED:
            self._notify(f"[{party}]: Not connected to a party.")
            return StartOutcome.NOT_CONNECTED
        if not self._is_leader:
            logger.warning("Attempted to send START but not leader")
            self._notify(f"[{party}]: You must be the party leader to start the timer.")
            return StartOutcome.NOT_LEADER

        self._spawn(self._send(encode_start()))
        self._notify(f"[{party}]: START initiated.")
        return StartOutcome.SENT

    async def flush(self) -> None:
        """Wait until the scheduled connect and send/close tasks have run."""
        while True:
            tasks = [t for t in (self._connect_task, *self._tasks) if t and not t.done()]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    # Transport callbacks

    def on_frame(self, raw: str) -> Frame:
        """Dispatch one inbound frame and return it decoded."""
        frame = parse_frame(raw)
        logger.debug("Received message: %s", frame.raw)

        text = _STATUS_TEXT.get(frame.command)
        if text is not None:
            self._notify(text)
        else:
            self._handlers.get(frame.command, self._handle_unknown)(frame)
        return frame

    def handle_close(self, code: int, reason: str) -> None:
        """Reset the session after the transport closed, whatever the cause."""
        self._notify(f"[INFO] Connection closed. Code: {code}, Reason: {reason or 'No reason'}")
        self._reset()

    def handle_error(self, error: Exception) -> None:
        """Reset the session after a transport error."""
        logger.warning("Transport error: %s", error)
        self._notify(
            "[INFO] WebSocket connection error. Check server address and port, "
            "or SSL configuration."
        )
        self._reset()

    # Internals

    async def _open(self, uri: str, identity: SessionIdentity) -> None:
        """Open the transport, then send JOIN without awaiting a reply."""
        try:
            await self._transport.connect(uri)
        except ConnectionError as e:
            self._connect_task = None
            self.handle_error(e)
            return

        self._connect_task = None
        self._set_state(ConnectionState.JOINED)
        self._notify("[INFO] Connected successfully.")
        await self._send(encode_join(identity))

    async def _send(self, text: str) -> None:
        """Send a frame; a failed send is handled as a transport error."""
        try:
            await self._transport.send(text)
        except ConnectionError as e:
            self.handle_error(e)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        """Run a coroutine as a task, holding a reference until it ends."""
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _handle_party_update(self, frame: Frame) -> None:
        roster = parse_party_update(frame.payload)
        username = self._identity.username if self._identity else ""
        self._roster = roster
        self._is_leader = roster.is_leader(username)
        self._notify(roster.describe())
        logger.debug(
            "[%s]: Party Update: isLeader=%s, Members: %s",
            roster.party,
            self._is_leader,
            list(roster.members),
        )
        if self._on_roster_change:
            self._on_roster_change(roster, self._is_leader)

    def _handle_play_sound(self, frame: Frame) -> None:
        self._notify("[INFO] Z-Buff now!")
        if self._playback is not None:
            self._playback.play(self._alarm_cue)
        if self._on_play:
            self._on_play(self._alarm_cue)

    def _handle_unknown(self, frame: Frame) -> None:
        self._notify(f"[INFO] Server: {frame.raw}")
        logger.warning("Unhandled server command: %s, Payload: %s", frame.name, frame.payload)

    def _reset(self) -> None:
        """Return to DISCONNECTED with no roster and no leadership."""
        roster_changed = self._roster != PartyRoster() or self._is_leader
        self._roster = PartyRoster()
        self._is_leader = False
        self._set_state(ConnectionState.DISCONNECTED)
        if roster_changed and self._on_roster_change:
            self._on_roster_change(self._roster, False)

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        logger.debug("Connection state: %s -> %s", self._state.value, state.value)
        self._state = state
        if self._on_state_change:
            self._on_state_change(state)
