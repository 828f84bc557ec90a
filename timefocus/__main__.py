"""Run one TimeFocus session in the terminal: python -m timefocus."""

import logging
import sys

from PyQt6.QtCore import QCoreApplication, QTimer

from .app import TimeFocusApp, format_clock
from .audio.bell import BellPlayer
from .notifications.dispatcher import QtNotificationDispatcher
from .storage.db import init_db
from .storage.kv import SqlKeyValueStore
from .timer.engine import SETTLE_DELAY_MS
from .tracking.stats import format_focus_minutes


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()

    qt_app = QCoreApplication(sys.argv)
    qt_app.setApplicationName("TimeFocus")
    qt_app.setOrganizationName("TimeFocus")

    dispatcher = QtNotificationDispatcher(bell=BellPlayer())
    app = TimeFocusApp(SqlKeyValueStore(), dispatcher=dispatcher)
    engine = app.engine

    engine.time_changed.connect(
        lambda remaining: print(f"\r{engine.mode.label}: {format_clock(remaining)}",
                                end="", flush=True)
    )
    engine.session_finished.connect(
        lambda _data: QTimer.singleShot(SETTLE_DELAY_MS * 2, qt_app.quit)
    )
    app.motivation.connect(lambda message: print(f"\n{message}"))
    qt_app.aboutToQuit.connect(app.shutdown)

    print(f"{engine.mode.label}: {format_clock(engine.remaining)}", end="", flush=True)
    engine.toggle()

    exit_code = qt_app.exec()
    print()
    summary = app.summary()
    print(
        f"Today: {format_focus_minutes(summary.today_focus_minutes)} focused, "
        f"streak {summary.current_streak}"
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
