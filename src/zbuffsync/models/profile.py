"""Persisted form values for party and solo modes."""

from dataclasses import dataclass, replace
from typing import Self

DEFAULT_PORT = 8765


@dataclass(frozen=True)
class PartyProfile:
    """Remembered party connection fields (the password is never stored).

    Attributes:
        username: Local member name.
        host: Relay server host.
        port: Relay server port.
        party: Party name.
    """

    username: str = ""
    host: str = ""
    port: int = DEFAULT_PORT
    party: str = ""

    def with_party(self, party: str) -> Self:
        """Return a copy with a different party name."""
        return replace(self, party=party)


@dataclass(frozen=True)
class SoloTimers:
    """Durations configured for the solo sequence, in seconds.

    ``zbuff`` is an absolute offset; the heart values are successive
    segments (each heart fires that many seconds after the previous one).

    Attributes:
        zbuff: Offset of the long Z-Buff timer.
        first_heart: Offset of the first heart.
        second_heart: Gap between the first and second heart.
        third_heart: Gap between the second and third heart.
    """

    zbuff: int = 275
    first_heart: int = 60
    second_heart: int = 60
    third_heart: int = 60
