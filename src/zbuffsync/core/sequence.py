"""Composition of the solo cue sequence from configured durations."""

from zbuffsync.api.client import ALARM_CUE_ID
from zbuffsync.models.profile import SoloTimers
from zbuffsync.models.sequence import CueEvent

FIRST_HEART_ID = "first_heart"
SECOND_HEART_ID = "second_heart"
THIRD_HEART_ID = "third_heart"

# Sound file per cue id, relative to the sounds directory
DEFAULT_SOUND_FILES: dict[str, str] = {
    FIRST_HEART_ID: "firstHeart.wav",
    SECOND_HEART_ID: "secondHeart.wav",
    THIRD_HEART_ID: "thirdHeart.wav",
    ALARM_CUE_ID: "zbuff01.wav",
}


def build_solo_cues(timers: SoloTimers) -> list[CueEvent]:
    """Turn solo timer settings into cue events.

    Hearts are chained: each fires its configured gap after the previous
    heart. The long Z-Buff timer uses its value as an absolute offset.

    Args:
        timers: Configured durations in seconds.

    Returns:
        Cue events in declaration order. Cues may share an offset.
    """
    first = timers.first_heart
    second = first + timers.second_heart
    third = second + timers.third_heart
    return [
        CueEvent("First Heart", first, FIRST_HEART_ID),
        CueEvent("Second Heart", second, SECOND_HEART_ID),
        CueEvent(f"Long Timer ({timers.zbuff}s)", timers.zbuff, ALARM_CUE_ID),
        CueEvent("Third Heart", third, THIRD_HEART_ID),
    ]
