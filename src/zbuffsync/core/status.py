"""Status log: the single sink for user-visible status lines."""

import logging
from collections import deque

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)

DEFAULT_HISTORY = 500


def level_for(text: str) -> int:
    """Return the logging level matching a status line's prefix."""
    if text.startswith("[ERROR]"):
        return logging.ERROR
    if text.startswith("[WARN]"):
        return logging.WARNING
    return logging.INFO


class StatusLog(QObject):
    """Collects status lines, mirrors them to logging and emits a signal.

    The log is a notifier: pass ``status_log.notify`` wherever a
    ``Callable[[str], None]`` sink is expected.

    Example:
        status = StatusLog()
        status.message_logged.connect(print)
        client = PartyClient(notify=status.notify)
    """

    message_logged = Signal(str)

    def __init__(self, max_lines: int = DEFAULT_HISTORY, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._lines: deque[str] = deque(maxlen=max_lines)

    @property
    def lines(self) -> list[str]:
        """Return the retained lines, oldest first."""
        return list(self._lines)

    @property
    def last(self) -> str | None:
        """Return the most recent line, or None."""
        return self._lines[-1] if self._lines else None

    def notify(self, text: str) -> None:
        """Record and publish one status line."""
        self._lines.append(text)
        logger.log(level_for(text), "%s", text)
        self.message_logged.emit(text)

    def clear(self) -> None:
        """Drop all retained lines."""
        self._lines.clear()
