"""The single place where completed sessions are written down.

:class:`SessionLedger` owns the read-modify-write of the history and the
aggregate stats.  The timer engine calls :meth:`SessionLedger.commit`
once per completed session; nothing else touches those two keys.

If the store can't be read, the ledger keeps working from its in-memory
copy; if it can't be written, the write is logged and dropped.  The
countdown never sees a storage error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime

from ..modes import TimerMode
from ..storage import keys
from ..storage.kv import KeyValueStore, read_json, write_json
from .history import (
    SessionRecord,
    append_record,
    history_from_json,
    history_to_json,
    make_record,
)
from .stats import AggregateStats, compute_streak, record_focus, record_task

logger = logging.getLogger(__name__)

_UNAVAILABLE = object()


@dataclass(frozen=True)
class CommitResult:
    record: SessionRecord
    stats: AggregateStats
    streak_updated: bool    # True for focus sessions
    persisted: bool         # False if any write was dropped


class SessionLedger:
    """History + stats bookkeeping on top of a key-value store."""

    def __init__(
        self, store: KeyValueStore, *, join_date: datetime | None = None
    ) -> None:
        self._store = store
        self._history: list[SessionRecord] = []
        # used until a stats record exists in the store
        self._stats = AggregateStats(join_date=join_date or datetime.now())
        self._reload()

    # ── read access ───────────────────────────────────────────────────

    @property
    def history(self) -> list[SessionRecord]:
        return list(self._reload_history())

    @property
    def stats(self) -> AggregateStats:
        return replace(self._reload_stats())

    # ── writes ────────────────────────────────────────────────────────

    def commit(
        self,
        mode: TimerMode,
        duration_seconds: int,
        start_time: datetime | None,
        end_time: datetime | None = None,
    ) -> CommitResult:
        """Record one completed session.

        Appends to the history and, for focus sessions, updates totals,
        average and streak.  Each key is read once and written once.
        """
        end_time = end_time or datetime.now()
        self._reload()

        record = make_record(
            self._history, mode, duration_seconds, start_time, end_time
        )
        self._history = append_record(self._history, record)
        persisted = write_json(
            self._store, keys.SESSION_HISTORY, history_to_json(self._history)
        )

        streak_updated = False
        if mode is TimerMode.FOCUS:
            self._apply_focus(duration_seconds, end_time.date())
            persisted = self._write_stats() and persisted
            streak_updated = True

        logger.info(
            "Recorded %s session (%ds), %d in history",
            mode.value, duration_seconds, len(self._history),
        )
        return CommitResult(
            record=record,
            stats=replace(self._stats),
            streak_updated=streak_updated,
            persisted=persisted,
        )

    def complete_task(self) -> AggregateStats:
        """Count one finished task."""
        stats = self._reload_stats()
        record_task(stats)
        self._write_stats()
        return replace(stats)

    # ── internal ──────────────────────────────────────────────────────

    def _apply_focus(self, duration_seconds: int, today: date) -> None:
        stats = self._stats
        record_focus(stats, duration_seconds)
        # streak must see last_session_date from *before* this session
        stats.streak = compute_streak(self._history, stats, today)
        stats.last_session_date = today

    def _write_stats(self) -> bool:
        return write_json(self._store, keys.USER_STATS, self._stats.to_dict())

    def _reload(self) -> None:
        self._reload_history()
        self._reload_stats()

    def _reload_history(self) -> list[SessionRecord]:
        data = read_json(self._store, keys.SESSION_HISTORY, _UNAVAILABLE)
        if data is not _UNAVAILABLE:
            self._history = history_from_json(data)
        return self._history

    def _reload_stats(self) -> AggregateStats:
        data = read_json(self._store, keys.USER_STATS, _UNAVAILABLE)
        if data is not _UNAVAILABLE:
            self._stats = AggregateStats.from_dict(data)
        return self._stats
