"""Configuration manager using QSettings for persistent storage."""

import logging

from PySide6.QtCore import QSettings

from zbuffsync.models.profile import DEFAULT_PORT, PartyProfile, SoloTimers

logger = logging.getLogger(__name__)

# Party form
_KEY_USERNAME = "party/username"
_KEY_HOST = "party/host"
_KEY_PORT = "party/port"
_KEY_PARTY = "party/name"

# Solo timers
_KEY_ZBUFF = "solo/zbuff"
_KEY_FIRST_HEART = "solo/first_heart"
_KEY_SECOND_HEART = "solo/second_heart"
_KEY_THIRD_HEART = "solo/third_heart"

# Connection / audio
_KEY_SECURE = "connection/secure"
_KEY_SOUNDS_DIR = "audio/sounds_dir"

MAX_TIMER_SECONDS = 3600
MAX_PORT = 65535


def _clamp_seconds(value: object, default: int) -> int:
    """Convert a stored value to seconds within 0..MAX_TIMER_SECONDS."""
    try:
        seconds = int(str(value))
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid timer value %r", value)
        return default
    return max(0, min(MAX_TIMER_SECONDS, seconds))


class ConfigManager:
    """Wrapper around QSettings for type-safe config access.

    QSettings stores config in platform-specific locations:
    - Windows: HKEY_CURRENT_USER\\Software\\ZBuffSync\\ZBuffSync
    - macOS: ~/Library/Preferences/com.ZBuffSync.ZBuffSync.plist
    - Linux: ~/.config/ZBuffSync/ZBuffSync.conf

    Example:
        config = ConfigManager()
        profile = config.get_party_profile()
        config.save_party_profile(profile.with_party("raid"))
    """

    def __init__(self, organization: str = "ZBuffSync", application: str = "ZBuffSync") -> None:
        """Initialize the config manager.

        Args:
            organization: Organization name for QSettings.
            application: Application name for QSettings.
        """
        self._settings = QSettings(organization, application)

    @property
    def settings(self) -> QSettings:
        """Return the underlying QSettings instance."""
        return self._settings

    # -- Party form ------------------------------------------------------------

    def get_party_profile(self) -> PartyProfile:
        """Load the remembered party fields.

        Returns:
            PartyProfile with stored values, or defaults.
        """
        port_val = self._settings.value(_KEY_PORT, DEFAULT_PORT)
        try:
            port = int(str(port_val))
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid stored port %r", port_val)
            port = DEFAULT_PORT
        if not 1 <= port <= MAX_PORT:
            port = DEFAULT_PORT

        return PartyProfile(
            username=str(self._settings.value(_KEY_USERNAME, "") or ""),
            host=str(self._settings.value(_KEY_HOST, "") or ""),
            port=port,
            party=str(self._settings.value(_KEY_PARTY, "") or ""),
        )

    def save_party_profile(self, profile: PartyProfile) -> None:
        """Persist the party fields (never the password).

        Args:
            profile: Values to remember; text is trimmed.
        """
        self._settings.setValue(_KEY_USERNAME, profile.username.strip())
        self._settings.setValue(_KEY_HOST, profile.host.strip())
        self._settings.setValue(_KEY_PORT, profile.port)
        self._settings.setValue(_KEY_PARTY, profile.party.strip())

    # -- Solo timers -----------------------------------------------------------

    def get_solo_timers(self) -> SoloTimers:
        """Load the solo timer durations, clamped to 0..3600 seconds."""
        defaults = SoloTimers()
        return SoloTimers(
            zbuff=_clamp_seconds(self._settings.value(_KEY_ZBUFF, defaults.zbuff), defaults.zbuff),
            first_heart=_clamp_seconds(
                self._settings.value(_KEY_FIRST_HEART, defaults.first_heart),
                defaults.first_heart,
            ),
            second_heart=_clamp_seconds(
                self._settings.value(_KEY_SECOND_HEART, defaults.second_heart),
                defaults.second_heart,
            ),
            third_heart=_clamp_seconds(
                self._settings.value(_KEY_THIRD_HEART, defaults.third_heart),
                defaults.third_heart,
            ),
        )

    def save_solo_timers(self, timers: SoloTimers) -> None:
        """Persist the solo timer durations.

        Args:
            timers: Durations in seconds (clamped to 0..3600).
        """
        self._settings.setValue(_KEY_ZBUFF, max(0, min(MAX_TIMER_SECONDS, timers.zbuff)))
        self._settings.setValue(
            _KEY_FIRST_HEART, max(0, min(MAX_TIMER_SECONDS, timers.first_heart))
        )
        self._settings.setValue(
            _KEY_SECOND_HEART, max(0, min(MAX_TIMER_SECONDS, timers.second_heart))
        )
        self._settings.setValue(
            _KEY_THIRD_HEART, max(0, min(MAX_TIMER_SECONDS, timers.third_heart))
        )

    # -- Connection / audio ----------------------------------------------------

    def get_secure(self) -> bool:
        """Return whether to connect with wss:// (default True)."""
        value = self._settings.value(_KEY_SECURE, True)
        if isinstance(value, str):
            return value.lower() not in ("false", "0", "no")
        return bool(value)

    def set_secure(self, secure: bool) -> None:
        """Set whether to connect with wss://.

        Args:
            secure: True for wss://, False for ws://.
        """
        self._settings.setValue(_KEY_SECURE, secure)

    def get_sounds_dir(self) -> str:
        """Return the configured sounds directory, or empty for the default."""
        value = self._settings.value(_KEY_SOUNDS_DIR, "")
        return str(value) if value else ""

    def set_sounds_dir(self, path: str) -> None:
        """Set the sounds directory.

        Args:
            path: Directory path, or empty string for the default.
        """
        self._settings.setValue(_KEY_SOUNDS_DIR, path)

    # -- General settings ------------------------------------------------------

    def clear(self) -> None:
        """Clear all settings (useful for testing or reset)."""
        self._settings.clear()

    def sync(self) -> None:
        """Force settings to be written to disk."""
        self._settings.sync()
