"""Data models for party sessions and timer sequences."""

from zbuffsync.models.profile import PartyProfile, SoloTimers
from zbuffsync.models.sequence import CueEvent, PlaybackService, SequenceRun
from zbuffsync.models.session import (
    ConnectionState,
    DisconnectOutcome,
    JoinOutcome,
    PartyRoster,
    SessionIdentity,
    StartOutcome,
    ValidationError,
)

__all__ = [
    "ConnectionState",
    "CueEvent",
    "DisconnectOutcome",
    "JoinOutcome",
    "PartyProfile",
    "PartyRoster",
    "PlaybackService",
    "SequenceRun",
    "SessionIdentity",
    "SoloTimers",
    "StartOutcome",
    "ValidationError",
]
