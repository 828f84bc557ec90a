"""Application wiring.

:class:`TimeFocusApp` is the one place a :class:`TimerEngine` gets built.
It owns the engine for the lifetime of the application and connects it
to persistence and notification delivery.  UI code receives the app (or
its ``engine``) explicitly; there is no module-level timer instance.
"""

from __future__ import annotations

import logging
import random
from datetime import date

from PyQt6.QtCore import QObject, pyqtSignal

from .modes import TimerMode
from .notifications.dispatcher import NotificationDispatcher
from .notifications.messages import NotificationRequest, motivational_message
from .profile import (
    Level,
    ensure_join_date,
    level_for_sessions,
    level_progress,
    load_username,
    motivation_enabled,
    save_username,
    set_motivation_enabled,
)
from .settings import (
    NotificationPreferences,
    Settings,
    load_notification_preferences,
    load_settings,
    save_notification_preferences,
    save_settings,
)
from .storage import keys
from .storage.kv import KeyValueStore, read_json
from .timer.engine import TimerEngine
from .tracking.ledger import SessionLedger
from .tracking.stats import (
    DaySummary,
    StatsSummary,
    build_summary,
    daily_breakdown,
)

logger = logging.getLogger(__name__)


# ── helper: format seconds as mm:ss ──────────────────────────────────────

def format_clock(seconds: int) -> str:
    m, s = divmod(max(0, seconds), 60)
    return f"{m:02d}:{s:02d}"


class TimeFocusApp(QObject):
    """Top-level scope: store, ledger, engine and dispatcher.

    Signals
    -------
    motivation(message: str)
        A completion quote, when motivational messages are enabled.
    """

    motivation = pyqtSignal(str)

    def __init__(
        self,
        store: KeyValueStore,
        *,
        dispatcher: NotificationDispatcher | None = None,
        parent: QObject | None = None,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._dispatcher = dispatcher
        self._rng = rng or random.Random()

        self.join_date = ensure_join_date(store)
        self._prefs = load_notification_preferences(store)
        self.ledger = SessionLedger(store, join_date=self.join_date)
        self.engine = TimerEngine(
            self,
            settings=load_settings(store),
            ledger=self.ledger,
            notification_preferences=self._prefs,
        )

        # ── wire signals ──────────────────────────────────────────────
        self.engine.settings_changed.connect(self._on_settings_changed)
        self.engine.notification_requested.connect(self._on_notification)
        self.engine.session_finished.connect(self._on_session_finished)

    # ── preferences ───────────────────────────────────────────────────

    @property
    def notification_preferences(self) -> NotificationPreferences:
        return self._prefs

    def update_notification_preferences(self, prefs: NotificationPreferences) -> None:
        self._prefs = prefs
        self.engine.notification_preferences = prefs
        save_notification_preferences(self._store, prefs)

    # ── profile ───────────────────────────────────────────────────────

    @property
    def username(self) -> str:
        return load_username(self._store)

    def rename(self, name: str) -> str:
        """Change the display name; raises ValueError for a blank one."""
        return save_username(self._store, name)

    @property
    def motivation_enabled(self) -> bool:
        return motivation_enabled(self._store)

    def set_motivation_enabled(self, enabled: bool) -> None:
        set_motivation_enabled(self._store, enabled)

    # ── stats ─────────────────────────────────────────────────────────

    def summary(self) -> StatsSummary:
        tasks = read_json(self._store, keys.TASKS, [])
        if not isinstance(tasks, list):
            tasks = []
        return build_summary(self.ledger.history, self.ledger.stats, tasks)

    def daily_breakdown(self, days: int = 7) -> list[DaySummary]:
        return daily_breakdown(self.ledger.history, date.today(), days)

    def level(self) -> Level:
        return level_for_sessions(self.ledger.stats.total_sessions)

    def level_progress(self) -> float:
        return level_progress(self.ledger.stats.total_sessions)

    # ── lifecycle ─────────────────────────────────────────────────────

    def shutdown(self) -> None:
        self.engine.shutdown()

    # ── slots ─────────────────────────────────────────────────────────

    def _on_settings_changed(self, settings: Settings) -> None:
        save_settings(self._store, settings)

    def _on_notification(self, request: NotificationRequest) -> None:
        if self._dispatcher is None:
            logger.info("%s %s", request.title, request.body)
            return
        self._dispatcher.dispatch(request)

    def _on_session_finished(self, data: dict) -> None:
        if not self._prefs.motivational_messages:
            return
        if not motivation_enabled(self._store):
            return
        mode: TimerMode = data["mode"]
        self.motivation.emit(motivational_message(mode, self._rng))
