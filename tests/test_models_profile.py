"""Tests for PartyProfile and SoloTimers."""

import pytest

from zbuffsync.models.profile import DEFAULT_PORT, PartyProfile, SoloTimers


class TestPartyProfile:
    """Test PartyProfile dataclass."""

    def test_defaults(self) -> None:
        """Test the empty profile."""
        profile = PartyProfile()
        assert profile.username == ""
        assert profile.port == DEFAULT_PORT == 8765

    def test_with_party(self) -> None:
        """Test copying with a new party name."""
        profile = PartyProfile(username="alice", host="relay", party="raid")
        other = profile.with_party("dungeon")
        assert other.party == "dungeon"
        assert other.username == "alice"
        assert profile.party == "raid"

    def test_immutable(self) -> None:
        """Test that the profile is frozen."""
        with pytest.raises(AttributeError):
            PartyProfile().host = "elsewhere"  # type: ignore[misc]


class TestSoloTimers:
    """Test SoloTimers defaults."""

    def test_defaults(self) -> None:
        """Test the default durations."""
        timers = SoloTimers()
        assert (timers.zbuff, timers.first_heart) == (275, 60)
        assert (timers.second_heart, timers.third_heart) == (60, 60)
