"""Line-oriented party protocol: frame parsing and encoding.

Frames are plain text of the form ``COMMAND[:payload]``. Only the first
colon separates the command; the payload may contain further colons.
"""

from dataclasses import dataclass
from enum import Enum

from zbuffsync.models.session import PartyRoster, SessionIdentity

SEPARATOR = ":"


class Command(Enum):
    """Commands of the party protocol."""

    # Outbound
    JOIN = "JOIN"
    START = "START"

    # Inbound
    JOIN_OK = "JOIN_OK"
    PARTY_UPDATE = "PARTY_UPDATE"
    COUNTDOWN = "COUNTDOWN"
    PLAY_SOUND = "PLAY_SOUND"
    TIMER_ALREADY_ACTIVE = "TIMER_ALREADY_ACTIVE"
    NOT_LEADER = "NOT_LEADER"
    INVALID_COMMAND = "INVALID_COMMAND"
    INVALID_JOIN_FORMAT = "INVALID_JOIN_FORMAT"
    INVALID_PARTY_NAMING = "INVALID_PARTY_NAMING"
    INCORRECT_PASSWORD = "INCORRECT_PASSWORD"

    # Anything the client does not recognize
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_string(cls, value: str) -> "Command":
        """Map a command name to a Command, or UNKNOWN."""
        try:
            command = cls(value)
        except ValueError:
            return cls.UNKNOWN
        # UNKNOWN is never a wire value of its own
        return cls.UNKNOWN if command is cls.UNKNOWN else command


@dataclass(frozen=True)
class Frame:
    """A decoded protocol frame.

    Attributes:
        command: Recognized command, or Command.UNKNOWN.
        payload: Text after the first separator ("" if none).
        raw: The full frame text as received (trimmed).
        name: The command text as received.
    """

    command: Command
    payload: str = ""
    raw: str = ""
    name: str = ""

    @property
    def is_known(self) -> bool:
        """Return True if the command is part of the protocol."""
        return self.command is not Command.UNKNOWN


def parse_frame(raw: str) -> Frame:
    """Decode one frame. Never raises; unknown commands map to UNKNOWN."""
    text = raw.strip()
    name, _, payload = text.partition(SEPARATOR)
    return Frame(
        command=Command.from_string(name),
        payload=payload,
        raw=text,
        name=name,
    )


def parse_party_update(payload: str) -> PartyRoster:
    """Decode a PARTY_UPDATE payload (``<party>[:<member>]*``).

    Args:
        payload: Frame payload, i.e. the text after ``PARTY_UPDATE:``.

    Returns:
        The new roster. An empty member list is valid.
    """
    party, *members = payload.split(SEPARATOR)
    return PartyRoster(party=party, members=tuple(members))


def encode_join(identity: SessionIdentity) -> str:
    """Encode the JOIN frame sent right after the transport opens."""
    return SEPARATOR.join(
        (Command.JOIN.value, identity.party, identity.password, identity.username)
    )


def encode_start() -> str:
    """Encode the START frame (leader only)."""
    return Command.START.value


def build_uri(host: str, port: int | str, secure: bool = True) -> str:
    """Return the WebSocket URI for a relay server."""
    scheme = "wss" if secure else "ws"
    return f"{scheme}://{host}:{port}"
