"""Cue and countdown run models for the solo timer sequence."""

import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol


class PlaybackService(Protocol):
    """Fire-and-forget sound playback."""

    def play(self, cue_id: str) -> None: ...


@dataclass(frozen=True, slots=True)
class CueEvent:
    """A named cue fired once at a whole-second offset.

    Attributes:
        name: Display label (e.g., "First Heart").
        offset: Seconds from the start of the run (non-negative).
        sound_id: Identifier of the sound played when the cue fires.
    """

    name: str
    offset: int
    sound_id: str

    def __post_init__(self) -> None:
        if isinstance(self.offset, bool) or not isinstance(self.offset, int):
            raise ValueError(f"Cue offset must be an integer, got {self.offset!r}")
        if self.offset < 0:
            raise ValueError(f"Cue offset must be non-negative, got {self.offset}")


@dataclass(slots=True)
class SequenceRun:
    """State of one active countdown.

    Cues are grouped by offset so that several cues due in the same
    second all fire.

    Attributes:
        total_duration: Largest configured offset; the run ends there.
        elapsed: Whole seconds elapsed so far.
        pending: Unfired cues keyed by offset, in declaration order.
        started_at: Monotonic timestamp of the run start.
    """

    total_duration: int
    elapsed: int = 0
    pending: dict[int, list[CueEvent]] = field(default_factory=dict)
    started_at: float = field(default_factory=time.monotonic)

    @classmethod
    def from_cues(cls, cues: Sequence[CueEvent]) -> "SequenceRun":
        """Create a run from cue events.

        Raises:
            ValueError: If ``cues`` is empty.
        """
        if not cues:
            raise ValueError("A sequence needs at least one cue")
        pending: dict[int, list[CueEvent]] = {}
        for cue in cues:
            pending.setdefault(cue.offset, []).append(cue)
        return cls(total_duration=max(pending), pending=pending)

    @property
    def is_complete(self) -> bool:
        """Return True once elapsed has reached the total duration."""
        return self.elapsed >= self.total_duration

    @property
    def remaining(self) -> int:
        """Return seconds left until the run ends."""
        return max(0, self.total_duration - self.elapsed)

    def take_due(self) -> list[CueEvent]:
        """Remove and return the cues due at the current elapsed second."""
        return self.pending.pop(self.elapsed, [])
