"""Cue scheduler: one-second countdown firing cues at their offsets.

A single start/stop control drives the scheduler. Starting while a run
is active cancels it instead; at most one run exists per scheduler.
Ticks are plain periodic timer events and are not compensated for drift.
"""

import logging
from collections.abc import Callable, Sequence

from PySide6.QtCore import QObject, QTimer, Signal

from zbuffsync.models.sequence import CueEvent, PlaybackService, SequenceRun

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000


def format_clock(seconds: int) -> str:
    """Format whole seconds as MM:SS."""
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


class CueScheduler(QObject):
    """Runs a countdown and plays each cue once when it is due.

    Cues at offset 0 fire as the run starts; every other cue fires on the
    tick whose elapsed count equals its offset. The run ends on the tick
    that reaches the largest offset, after that tick's cues have fired.

    Signals:
        run_started: Emitted with the total duration in seconds.
        ticked: Emitted with the elapsed seconds after each tick.
        cue_fired: Emitted with each CueEvent as it fires.
        run_finished: Emitted when a run completes on its own.
        run_cancelled: Emitted when a run is stopped early.
        running_changed: Emitted with True/False as a run starts/ends.

    Example:
        scheduler = CueScheduler(playback=sound_bank, notify=status.notify)
        scheduler.toggle(build_solo_cues(config.get_solo_timers()))
    """

    run_started = Signal(int)
    ticked = Signal(int)
    cue_fired = Signal(object)  # CueEvent
    run_finished = Signal()
    run_cancelled = Signal()
    running_changed = Signal(bool)

    def __init__(
        self,
        playback: PlaybackService | None = None,
        notify: Callable[[str], None] | None = None,
        interval_ms: int = TICK_INTERVAL_MS,
        parent: QObject | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            playback: Service playing each fired cue's sound.
            notify: Sink for user-visible status lines (default: log).
            interval_ms: Tick interval; one tick counts as one second.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self._playback = playback
        self._notify = notify or logger.info
        self._run: SequenceRun | None = None
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.advance)

    @property
    def is_running(self) -> bool:
        """Return True while a run is active."""
        return self._run is not None

    @property
    def elapsed(self) -> int:
        """Return elapsed seconds of the active run (0 when idle)."""
        return self._run.elapsed if self._run else 0

    @property
    def total_duration(self) -> int:
        """Return the active run's total duration (0 when idle)."""
        return self._run.total_duration if self._run else 0

    @property
    def pending(self) -> list[CueEvent]:
        """Return the cues of the active run that have not fired yet."""
        if self._run is None:
            return []
        return [cue for offset in sorted(self._run.pending) for cue in self._run.pending[offset]]

    def toggle(self, cues: Sequence[CueEvent]) -> bool:
        """Start a run when idle, or cancel the active one.

        Returns:
            True if a run was started, False if one was cancelled or
            there was nothing to schedule.
        """
        if self._run is not None:
            self.cancel()
            return False
        return self.start(cues)

    def start(self, cues: Sequence[CueEvent]) -> bool:
        """Start a new run from elapsed = 0.

        Returns:
            True if the run started; False if a run is already active or
            ``cues`` is empty.
        """
        if self._run is not None:
            logger.debug("Run already active, start ignored")
            return False
        if not cues:
            self._notify("[WARN] No cues configured.")
            return False

        self._run = SequenceRun.from_cues(cues)
        self._notify(f"[INFO] Starting timer sequence - {self._run.total_duration}s")
        for cue in cues:
            logger.debug("[EVENT] '%s' scheduled at %ds.", cue.name, cue.offset)
        self.running_changed.emit(True)
        self.run_started.emit(self._run.total_duration)

        self._fire_due()
        if self._run is not None and self._run.is_complete:
            self._finish()
        elif self._run is not None:
            self._timer.start()
        return True

    def cancel(self) -> bool:
        """Stop the active run; its unfired cues are discarded.

        Returns:
            True if a run was cancelled, False if idle.
        """
        if self._run is None:
            return False
        self._timer.stop()
        self._run = None
        self._notify("[INFO] Sequence stopped by user.")
        self.running_changed.emit(False)
        self.run_cancelled.emit()
        return True

    def advance(self) -> None:
        """Count one elapsed second and fire the cues due at it."""
        run = self._run
        if run is None:
            return
        run.elapsed += 1
        self.ticked.emit(run.elapsed)
        self._fire_due()
        if self._run is run and run.is_complete:
            self._finish()

    def _fire_due(self) -> None:
        run = self._run
        if run is None:
            return
        for cue in run.take_due():
            self._notify(f"[EVENT] {cue.name} triggered! {run.elapsed}s")
            if self._playback is not None:
                self._playback.play(cue.sound_id)
            self.cue_fired.emit(cue)
            if self._run is not run:
                # A handler cancelled the run
                return

    def _finish(self) -> None:
        self._timer.stop()
        self._run = None
        self._notify("[INFO] Sequence complete.")
        self.running_changed.emit(False)
        self.run_finished.emit()
