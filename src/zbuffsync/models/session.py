"""Party session models: connection state, roster, identity and outcomes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Self


class ConnectionState(Enum):
    """Lifecycle of a party client session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    JOINED = "joined"


class JoinOutcome(Enum):
    """Immediate result of a join request."""

    CONNECTING = "connecting"
    ALREADY_CONNECTED = "already_connected"
    INVALID = "invalid"


class DisconnectOutcome(Enum):
    """Immediate result of a disconnect request."""

    CLOSING = "closing"
    CANCELLED = "cancelled"
    NOT_CONNECTED = "not_connected"


class StartOutcome(Enum):
    """Result of a start request."""

    SENT = "sent"
    NOT_LEADER = "not_leader"
    NOT_CONNECTED = "not_connected"


class ValidationError(ValueError):
    """Raised when required join fields are missing.

    Attributes:
        missing: Names of the fields that were empty after trimming.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required fields: {', '.join(missing)}")


@dataclass(frozen=True, slots=True)
class PartyRoster:
    """Membership of a party as last reported by the relay server.

    The first member is the party leader. A roster is never patched:
    every update replaces it, and leadership is derived from it on demand.

    Attributes:
        party: Party name.
        members: Ordered member names, leader first. Duplicates are kept.
    """

    party: str = ""
    members: tuple[str, ...] = field(default_factory=tuple)

    @property
    def leader(self) -> str | None:
        """Return the leader's name, or None if the party is empty."""
        return self.members[0] if self.members else None

    @property
    def is_empty(self) -> bool:
        """Return True if the party has no members."""
        return len(self.members) == 0

    @property
    def member_count(self) -> int:
        """Return the number of members."""
        return len(self.members)

    def is_leader(self, username: str) -> bool:
        """Return True if ``username`` is the first member of the roster."""
        return bool(self.members) and self.members[0] == username

    def describe(self) -> str:
        """Return the human-readable roster line used in status output."""
        if self.is_empty:
            return f"[{self.party}]: Party is now empty."
        names = ", ".join(
            f"{name} (Leader)" if i == 0 else name for i, name in enumerate(self.members)
        )
        return f"[{self.party}]({self.member_count}): {names}"


_JOIN_FIELDS = ("host", "port", "party", "password", "username")


@dataclass(frozen=True, slots=True)
class SessionIdentity:
    """Values supplied once at join time and held for the session.

    Attributes:
        host: Relay server host.
        port: Relay server port (kept as text, as entered).
        party: Target party name.
        password: Shared party password.
        username: Local member name.
    """

    host: str
    port: str
    party: str
    password: str
    username: str

    @classmethod
    def from_fields(
        cls,
        host: object,
        port: object,
        party: object,
        password: object,
        username: object,
    ) -> Self:
        """Build an identity from raw form values.

        Every value is converted to text and trimmed.

        Raises:
            ValidationError: If any field is empty after trimming.
        """
        raw = (host, port, party, password, username)
        values = [str(v).strip() if v is not None else "" for v in raw]
        missing = [name for name, value in zip(_JOIN_FIELDS, values, strict=True) if not value]
        if missing:
            raise ValidationError(missing)
        return cls(*values)
