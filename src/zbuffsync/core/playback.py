"""Sound playback for cues using QSoundEffect.

Playback is fire-and-forget. A cue whose sound is missing or still
loading is reported as not ready and skipped.
"""

import logging
from collections.abc import Callable, Mapping
from pathlib import Path

from PySide6.QtCore import QObject, QUrl, Signal
from PySide6.QtMultimedia import QSoundEffect

from zbuffsync.core.sequence import DEFAULT_SOUND_FILES
from zbuffsync.models.sequence import PlaybackService

logger = logging.getLogger(__name__)

__all__ = ["PlaybackService", "SoundBank"]

NOT_READY_TEXT = "[WARN] Audio buffer not ready to play."


class SoundBank(QObject):
    """One QSoundEffect per cue id.

    Signals:
        sound_loaded: Emitted with the cue id once its sound is ready.
        load_failed: Emitted with (cue id, error text).
        not_ready: Emitted with the cue id when play() cannot play it.

    Example:
        bank = SoundBank(notify=status.notify)
        bank.load_directory(Path("assets"))
        bank.play("zbuff")
    """

    sound_loaded = Signal(str)
    load_failed = Signal(str, str)
    not_ready = Signal(str)

    def __init__(
        self,
        notify: Callable[[str], None] | None = None,
        volume: float = 1.0,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._notify = notify or logger.info
        self._volume = max(0.0, min(1.0, volume))
        self._effects: dict[str, QSoundEffect] = {}

    @property
    def cue_ids(self) -> list[str]:
        """Return the cue ids with a sound assigned."""
        return list(self._effects)

    def is_ready(self, cue_id: str) -> bool:
        """Return True if the cue's sound is loaded and playable."""
        effect = self._effects.get(cue_id)
        return effect is not None and effect.status() == QSoundEffect.Status.Ready

    def load(self, cue_id: str, path: Path) -> bool:
        """Assign a sound file to a cue id; loading completes asynchronously.

        Args:
            cue_id: Cue identifier.
            path: Path to a WAV file.

        Returns:
            False if the file does not exist, True if loading started.
        """
        if not path.is_file():
            message = f"{path} not found"
            self._notify(f"[ERROR] Error loading audio file: {message}")
            self.load_failed.emit(cue_id, message)
            return False

        effect = QSoundEffect(self)
        effect.setVolume(self._volume)
        effect.statusChanged.connect(lambda: self._on_status_changed(cue_id, effect))
        effect.setSource(QUrl.fromLocalFile(str(path.resolve())))
        old = self._effects.pop(cue_id, None)
        if old is not None:
            old.deleteLater()
        self._effects[cue_id] = effect
        return True

    def load_directory(
        self,
        directory: Path,
        files: Mapping[str, str] = DEFAULT_SOUND_FILES,
    ) -> int:
        """Load every sound of ``files`` from a directory.

        Returns:
            Number of sounds whose loading started.
        """
        return sum(self.load(cue_id, directory / name) for cue_id, name in files.items())

    def play(self, cue_id: str) -> None:
        """Play a cue's sound, or report that it is not ready."""
        effect = self._effects.get(cue_id)
        if effect is None or effect.status() != QSoundEffect.Status.Ready:
            logger.debug("Sound for cue %s not ready", cue_id)
            self._notify(NOT_READY_TEXT)
            self.not_ready.emit(cue_id)
            return
        effect.play()

    def _on_status_changed(self, cue_id: str, effect: QSoundEffect) -> None:
        status = effect.status()
        if status == QSoundEffect.Status.Ready:
            self._notify("[INFO] Audio file loaded successfully.")
            self.sound_loaded.emit(cue_id)
        elif status == QSoundEffect.Status.Error:
            message = f"cannot decode {effect.source().toLocalFile()}"
            self._notify(f"[ERROR] Error loading audio file: {message}")
            self.load_failed.emit(cue_id, message)
