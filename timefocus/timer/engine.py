"""Timer state machine for TimeFocus.

States
------
IDLE/PAUSED   Countdown frozen, ``is_running`` False.
RUNNING       The clock delivers one ``tick()`` per second.
COMPLETED     ``remaining`` hit 0; the session has been recorded and the
              next mode is waiting to be armed.

Every state exists for each mode (focus, short break, long break).

Transitions
-----------
IDLE → RUNNING                      start / toggle
RUNNING → PAUSED                    pause / toggle
RUNNING|PAUSED → COMPLETED          last tick, or skip
COMPLETED → IDLE|RUNNING (next)     after the settle delay (auto-start)
Any → IDLE                          reset / change_mode

Completion
----------
On completion the engine commits the session to the ledger, bumps the
focus counters, asks for a notification and schedules the next mode:
focus → short break (long break every ``long_break_interval`` focus
sessions), any break → focus.  The next mode is armed after
``SETTLE_DELAY_MS`` (or ``AUTO_START_DELAY_MS`` when it auto-starts).
``reset`` and ``change_mode`` cancel a pending arm.

A skipped session counts as completed and is credited its full
configured duration.
"""

from __future__ import annotations

import logging
from datetime import datetime

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..modes import TimerMode
from ..notifications.messages import build_notification
from ..settings import NotificationPreferences, Settings
from ..tracking.ledger import SessionLedger
from ..tracking.stats import AggregateStats

logger = logging.getLogger(__name__)


# ── constants ─────────────────────────────────────────────────────────────

TICK_INTERVAL_MS = 1000
SETTLE_DELAY_MS = 1000       # before arming the next mode
AUTO_START_DELAY_MS = 2000   # ... when the next mode starts by itself


def durations_from(settings: Settings) -> dict[TimerMode, int]:
    """Full length of every mode, in seconds."""
    return {
        TimerMode.FOCUS: settings.focus_minutes * 60,
        TimerMode.SHORT_BREAK: settings.short_break_minutes * 60,
        TimerMode.LONG_BREAK: settings.long_break_minutes * 60,
    }


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Qt-based focus/break timer with session accounting.

    Signals
    -------
    time_changed(remaining_seconds: int)
        Emitted on every tick and whenever ``remaining`` is reset.
    running_changed(is_running: bool)
    mode_changed(mode: TimerMode)
    session_finished(data: dict)
        Keys: ``mode``, ``duration_seconds``, ``start_time``,
        ``end_time``, ``next_mode``, ``session_number``.
    streak_updated(streak: int)
        After every focus completion that reached the ledger.
    notification_requested(request: NotificationRequest)
    settings_changed(settings: Settings)
    """

    time_changed = pyqtSignal(int)
    running_changed = pyqtSignal(bool)
    mode_changed = pyqtSignal(object)
    session_finished = pyqtSignal(object)
    streak_updated = pyqtSignal(int)
    notification_requested = pyqtSignal(object)
    settings_changed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        settings: Settings | None = None,
        ledger: SessionLedger | None = None,
        notification_preferences: NotificationPreferences | None = None,
    ) -> None:
        super().__init__(parent)

        # ── configuration ─────────────────────────────────────────────
        self._settings: Settings = settings or Settings()
        self._durations: dict[TimerMode, int] = durations_from(self._settings)
        self._prefs = notification_preferences or NotificationPreferences()
        self._ledger = ledger

        # ── countdown state ───────────────────────────────────────────
        self._mode: TimerMode = TimerMode.FOCUS
        self._remaining: int = self._durations[TimerMode.FOCUS]
        self._running: bool = False
        self._session_completed: bool = False
        self._start_time: datetime | None = None
        self._saved: dict[TimerMode, int] = dict(self._durations)

        # ── cycle counters ────────────────────────────────────────────
        self._completed_focus_count: int = 0
        self._session_number: int = 1

        # ── deferred arm after completion ─────────────────────────────
        self._pending_mode: TimerMode | None = None
        self._pending_auto_start: bool = False
        self._arm_timer = QTimer(self)
        self._arm_timer.setSingleShot(True)
        self._arm_timer.timeout.connect(self._arm_pending)

        # ── clock source ──────────────────────────────────────────────
        self._clock = QTimer(self)
        self._clock.setInterval(TICK_INTERVAL_MS)
        self._clock.timeout.connect(self.tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def mode(self) -> TimerMode:
        return self._mode

    @property
    def remaining(self) -> int:
        """Seconds left on the clock."""
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def session_completed(self) -> bool:
        """True from the moment the countdown hits 0 until the next mode
        is armed."""
        return self._session_completed

    @property
    def completed_focus_count(self) -> int:
        return self._completed_focus_count

    @property
    def current_session_number(self) -> int:
        return self._session_number

    @property
    def session_start_time(self) -> datetime | None:
        return self._start_time

    @property
    def pending_mode(self) -> TimerMode | None:
        """Mode waiting to be armed after a completion, if any."""
        return self._pending_mode

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def notification_preferences(self) -> NotificationPreferences:
        return self._prefs

    @notification_preferences.setter
    def notification_preferences(self, value: NotificationPreferences) -> None:
        self._prefs = value

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the current mode."""
        total = self._durations[self._mode]
        if total <= 0:
            return 0.0
        return max(0.0, min(1.0, (total - self._remaining) / total))

    def duration_for(self, mode: TimerMode) -> int:
        return self._durations[mode]

    def saved_remaining(self, mode: TimerMode) -> int:
        """Remaining time remembered for *mode* across mode switches."""
        return self._saved[mode]

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Start or resume the countdown.

        No-op when already running or when the session has completed.
        """
        if self._running or self._remaining <= 0 or self._session_completed:
            return
        if self._start_time is None:
            self._start_time = datetime.now()
        self._set_running(True)

    def pause(self) -> None:
        """Freeze the countdown, keeping the remaining time."""
        if not self._running:
            return
        self._set_running(False)

    def toggle(self) -> None:
        """Start if paused, pause if running.

        During the settle window after a completion this arms the next
        mode right away and starts it.
        """
        if self._pending_mode is not None:
            self._arm(self._pending_mode, auto_start=False)
            self.start()
            return
        if self._running:
            self.pause()
        else:
            self.start()

    def tick(self) -> None:
        """Advance the countdown by one second."""
        if not self._running or self._remaining <= 0:
            return
        self._remaining -= 1
        self._saved[self._mode] = self._remaining
        self.time_changed.emit(self._remaining)
        if self._remaining == 0:
            self._complete()

    def skip(self) -> None:
        """Finish the current session now.  Recorded like a natural
        completion, with the full configured duration."""
        if self._session_completed:
            return
        self._remaining = 0
        self.time_changed.emit(0)
        self._complete()

    def reset(self) -> None:
        """Stop and restore the full duration of the current mode."""
        self._cancel_pending_arm()
        self._set_running(False)
        full = self._durations[self._mode]
        self._remaining = full
        self._saved[self._mode] = full
        self._session_completed = False
        self._start_time = None
        self.time_changed.emit(self._remaining)

    def change_mode(self, mode: TimerMode) -> None:
        """Switch modes, remembering where the current one was left."""
        self._cancel_pending_arm()
        if not self._session_completed:
            self._saved[self._mode] = self._remaining
        self._set_running(False)
        self._mode = mode
        self._remaining = self._saved[mode]
        self._session_completed = False
        self._start_time = None
        self.mode_changed.emit(mode)
        self.time_changed.emit(self._remaining)

    def update_settings(self, settings: Settings) -> None:
        """Apply new settings.

        Every mode's remembered time goes back to its new full duration,
        including the active one: partial progress is abandoned.
        """
        if self._pending_mode is not None:
            self._arm(self._pending_mode, auto_start=False)
        self._settings = settings
        self._durations = durations_from(settings)
        self._saved = dict(self._durations)
        self._remaining = self._durations[self._mode]
        self.settings_changed.emit(settings)
        self.time_changed.emit(self._remaining)

    def complete_task(self) -> AggregateStats | None:
        """Count a finished task in the aggregate stats."""
        if self._ledger is None:
            return None
        return self._ledger.complete_task()

    def shutdown(self) -> None:
        """Disarm the clock and any pending arm.  Call on teardown."""
        self._cancel_pending_arm()
        self._set_running(False)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: transitions
    # ══════════════════════════════════════════════════════════════════

    def _set_running(self, running: bool) -> None:
        if running == self._running:
            return
        self._running = running
        if running:
            self._clock.start()
        else:
            self._clock.stop()
        self.running_changed.emit(running)

    def _complete(self) -> None:
        if self._session_completed:
            return
        self._session_completed = True
        self._set_running(False)

        completed = self._mode
        duration = self._durations[completed]
        end_time = datetime.now()
        start_time = self._start_time or end_time

        # ── record ────────────────────────────────────────────────────
        result = None
        if self._ledger is not None:
            result = self._ledger.commit(completed, duration, start_time, end_time)

        if completed is TimerMode.FOCUS:
            self._completed_focus_count += 1
            self._session_number += 1
            if result is not None:
                self.streak_updated.emit(result.stats.streak)

        next_mode = self._next_mode_after(completed)
        if completed is TimerMode.FOCUS:
            self._saved = dict(self._durations)
        else:
            self._saved[completed] = self._durations[completed]
            self._saved[next_mode] = self._durations[next_mode]

        self.session_finished.emit({
            "mode": completed,
            "duration_seconds": duration,
            "start_time": start_time,
            "end_time": end_time,
            "next_mode": next_mode,
            "session_number": self._session_number,
        })

        # ── notify ────────────────────────────────────────────────────
        request = build_notification(completed, self._settings, self._prefs)
        if request is not None:
            self.notification_requested.emit(request)

        # ── schedule the next mode ────────────────────────────────────
        auto_start = self._auto_starts(next_mode)
        self._pending_mode = next_mode
        self._pending_auto_start = auto_start
        self._arm_timer.start(AUTO_START_DELAY_MS if auto_start else SETTLE_DELAY_MS)
        logger.info(
            "%s complete, %s next%s",
            completed.label, next_mode.label, " (auto-start)" if auto_start else "",
        )

    def _next_mode_after(self, completed: TimerMode) -> TimerMode:
        if completed.is_break:
            return TimerMode.FOCUS
        if self._completed_focus_count % self._settings.long_break_interval == 0:
            return TimerMode.LONG_BREAK
        return TimerMode.SHORT_BREAK

    def _auto_starts(self, mode: TimerMode) -> bool:
        if mode.is_break:
            return self._settings.auto_start_breaks
        return self._settings.auto_start_focus

    def _arm_pending(self) -> None:
        if self._pending_mode is None:
            return
        self._arm(self._pending_mode, self._pending_auto_start)

    def _arm(self, mode: TimerMode, auto_start: bool) -> None:
        self._cancel_pending_arm()
        self._mode = mode
        self._remaining = self._durations[mode]
        self._saved[mode] = self._remaining
        self._session_completed = False
        self._start_time = None
        self.mode_changed.emit(mode)
        self.time_changed.emit(self._remaining)
        logger.debug("Armed %s", mode.label)
        if auto_start:
            self.start()

    def _cancel_pending_arm(self) -> None:
        self._arm_timer.stop()
        self._pending_mode = None
        self._pending_auto_start = False
