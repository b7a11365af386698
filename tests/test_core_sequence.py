"""Tests for solo cue composition."""

import pytest

from zbuffsync.core.sequence import DEFAULT_SOUND_FILES, build_solo_cues
from zbuffsync.models.profile import SoloTimers


class TestBuildSoloCues:
    """Tests for build_solo_cues."""

    def test_hearts_are_chained(self) -> None:
        """Test that heart offsets accumulate segment durations."""
        timers = SoloTimers(zbuff=275, first_heart=30, second_heart=45, third_heart=60)
        cues = build_solo_cues(timers)
        offsets = {cue.sound_id: cue.offset for cue in cues}
        assert offsets == {
            "first_heart": 30,
            "second_heart": 75,
            "zbuff": 275,
            "third_heart": 135,
        }

    def test_names(self) -> None:
        """Test the cue labels."""
        cues = build_solo_cues(SoloTimers(zbuff=120))
        assert [cue.name for cue in cues] == [
            "First Heart",
            "Second Heart",
            "Long Timer (120s)",
            "Third Heart",
        ]

    def test_colliding_offsets_are_all_kept(self) -> None:
        """Test that a Z-Buff sharing a heart's second is not dropped."""
        timers = SoloTimers(zbuff=60, first_heart=60, second_heart=10, third_heart=10)
        cues = build_solo_cues(timers)
        at_60 = [cue.sound_id for cue in cues if cue.offset == 60]
        assert at_60 == ["first_heart", "zbuff"]

    def test_negative_duration_rejected(self) -> None:
        """Test that a negative offset cannot be built."""
        with pytest.raises(ValueError):
            build_solo_cues(SoloTimers(zbuff=-5))

    def test_every_cue_has_a_sound_file(self) -> None:
        """Test that the default files cover all cue ids."""
        for cue in build_solo_cues(SoloTimers()):
            assert cue.sound_id in DEFAULT_SOUND_FILES
