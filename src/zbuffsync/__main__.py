"""Command-line entry point for Z-Buff party sync.

Two modes:
    zbuffsync party [host] [port] --party NAME --username NAME
    zbuffsync solo [--zbuff S] [--first S] [--second S] [--third S]

Commands are read from stdin while running: ``start`` (party leader),
``stop`` (solo), ``quit``.
"""

import argparse
import getpass
import logging
import signal
import sys
import threading
from pathlib import Path

from PySide6.QtCore import QCoreApplication, QObject, QTimer, Signal

from zbuffsync.core.config import ConfigManager
from zbuffsync.core.playback import SoundBank
from zbuffsync.core.scheduler import CueScheduler, format_clock
from zbuffsync.core.sequence import build_solo_cues
from zbuffsync.core.status import StatusLog
from zbuffsync.core.worker import PartyWorker
from zbuffsync.models.profile import PartyProfile, SoloTimers
from zbuffsync.models.session import ConnectionState, SessionIdentity, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SOUNDS_DIR = Path("assets")


class StdinReader(QObject):
    """Reads command lines from stdin in a daemon thread."""

    line_received = Signal(str)

    def start(self) -> None:
        """Start reading; ``quit`` is emitted at end of input."""
        threading.Thread(target=self._read, name="stdin-reader", daemon=True).start()

    def _read(self) -> None:
        for line in sys.stdin:
            command = line.strip().lower()
            if command:
                self.line_received.emit(command)
        self.line_received.emit("quit")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="zbuffsync",
        description="Z-Buff party sync and solo cue timers",
    )
    parser.add_argument("--sounds", type=Path, default=None, help="directory with cue WAV files")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    modes = parser.add_subparsers(dest="mode", required=True)

    party = modes.add_parser("party", help="join a party on a relay server")
    party.add_argument("host", nargs="?", default=None, help="relay hostname or IP")
    party.add_argument("port", nargs="?", type=int, default=None, help="relay port")
    party.add_argument("--party", dest="party_name", default=None, help="party name")
    party.add_argument("--username", default=None, help="your name in the party")
    party.add_argument("--password", default=None, help="party password (prompted if omitted)")
    party.add_argument("--insecure", action="store_true", help="use ws:// instead of wss://")

    solo = modes.add_parser("solo", help="run the local cue sequence")
    solo.add_argument("--zbuff", type=int, default=None, help="Z-Buff offset in seconds")
    solo.add_argument("--first", type=int, default=None, help="first heart offset in seconds")
    solo.add_argument("--second", type=int, default=None, help="gap to the second heart")
    solo.add_argument("--third", type=int, default=None, help="gap to the third heart")
    return parser


def _sounds_dir(parsed: argparse.Namespace, config: ConfigManager) -> Path:
    if parsed.sounds is not None:
        config.set_sounds_dir(str(parsed.sounds))
        return parsed.sounds
    stored = config.get_sounds_dir()
    return Path(stored) if stored else DEFAULT_SOUNDS_DIR


def run_party(
    app: QCoreApplication,
    parsed: argparse.Namespace,
    config: ConfigManager,
    status: StatusLog,
    sounds: SoundBank,
) -> int:
    """Join a party and relay stdin commands until quit."""
    saved = config.get_party_profile()
    profile = PartyProfile(
        username=parsed.username or saved.username,
        host=parsed.host or saved.host,
        port=parsed.port if parsed.port is not None else saved.port,
        party=parsed.party_name or saved.party,
    )
    config.save_party_profile(profile)
    password = parsed.password
    if password is None:
        password = getpass.getpass("Party password: ")
    try:
        SessionIdentity.from_fields(
            profile.host, profile.port, profile.party, password, profile.username
        )
    except ValidationError as e:
        status.notify(f"[ERROR] All fields are required. Missing: {', '.join(e.missing)}")
        return 2

    secure = not parsed.insecure and config.get_secure()
    worker = PartyWorker(secure=secure)
    worker.notification.connect(status.notify)
    worker.play_requested.connect(sounds.play)
    worker.error_occurred.connect(lambda e: logger.error("Worker error: %s", e))

    session_started = False

    def on_state_changed(state: object) -> None:
        nonlocal session_started
        if state is not ConnectionState.DISCONNECTED:
            session_started = True
        elif session_started:
            # The session ended; no automatic reconnect
            shutdown()

    def on_command(command: str) -> None:
        if command == "start":
            worker.request_start()
        elif command == "quit":
            shutdown()
        else:
            status.notify(f"[INFO] Unknown command: {command} (use start or quit)")

    def shutdown() -> None:
        worker.stop()
        worker.wait(5000)
        app.quit()

    worker.state_changed.connect(on_state_changed)

    reader = StdinReader()
    reader.line_received.connect(on_command)

    worker.start()
    if not worker.wait_ready(5.0):
        logger.error("Party worker did not start")
        return 1
    worker.join(profile.host, profile.port, profile.party, password, profile.username)
    reader.start()
    return app.exec()


def run_solo(
    app: QCoreApplication,
    parsed: argparse.Namespace,
    config: ConfigManager,
    status: StatusLog,
    sounds: SoundBank,
) -> int:
    """Run the solo cue sequence once."""
    saved = config.get_solo_timers()
    timers = SoloTimers(
        zbuff=parsed.zbuff if parsed.zbuff is not None else saved.zbuff,
        first_heart=parsed.first if parsed.first is not None else saved.first_heart,
        second_heart=parsed.second if parsed.second is not None else saved.second_heart,
        third_heart=parsed.third if parsed.third is not None else saved.third_heart,
    )
    config.save_solo_timers(timers)

    try:
        cues = build_solo_cues(timers)
    except ValueError as e:
        status.notify(f"[ERROR] {e}")
        return 2

    scheduler = CueScheduler(playback=sounds, notify=status.notify)
    scheduler.ticked.connect(lambda elapsed: print(format_clock(elapsed), end="\r", flush=True))
    scheduler.run_finished.connect(app.quit)
    scheduler.run_cancelled.connect(app.quit)

    def on_command(command: str) -> None:
        if command in ("stop", "quit"):
            if not scheduler.cancel():
                app.quit()
        else:
            status.notify(f"[INFO] Unknown command: {command} (use stop or quit)")

    reader = StdinReader()
    reader.line_received.connect(on_command)
    if not scheduler.start(cues):
        return 1
    if not scheduler.is_running:
        return 0
    reader.start()
    return app.exec()


def main() -> int:
    """Run the command line.

    Returns:
        Exit code (0 for success).
    """
    parsed = build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    QCoreApplication.setApplicationName("ZBuffSync")
    QCoreApplication.setOrganizationName("ZBuffSync")
    app = QCoreApplication(sys.argv)

    # Let Ctrl+C reach Python while the Qt loop runs
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    interrupt_timer = QTimer()
    interrupt_timer.timeout.connect(lambda: None)
    interrupt_timer.start(200)

    config = ConfigManager()
    status = StatusLog()
    status.message_logged.connect(lambda text: print(text, flush=True))

    sounds = SoundBank(notify=status.notify)
    sounds.load_directory(_sounds_dir(parsed, config))

    try:
        if parsed.mode == "party":
            return run_party(app, parsed, config, status, sounds)
        return run_solo(app, parsed, config, status, sounds)
    finally:
        config.sync()


if __name__ == "__main__":
    sys.exit(main())
