"""Core layer bridging the party client and cue timing to Qt.

Classes:
    CueScheduler: One-second countdown firing cues at their offsets.
    SoundBank: QSoundEffect-backed cue playback.
    StatusLog: Sink for user-visible status lines.
    ConfigManager: QSettings wrapper for remembered values.
    PartyWorker: QThread owning the asyncio loop of a party session.
"""

from zbuffsync.core.config import ConfigManager
from zbuffsync.core.playback import SoundBank
from zbuffsync.core.scheduler import CueScheduler, format_clock
from zbuffsync.core.sequence import DEFAULT_SOUND_FILES, build_solo_cues
from zbuffsync.core.status import StatusLog
from zbuffsync.core.worker import PartyWorker

__all__ = [
    "DEFAULT_SOUND_FILES",
    "ConfigManager",
    "CueScheduler",
    "PartyWorker",
    "SoundBank",
    "StatusLog",
    "build_solo_cues",
    "format_clock",
]
