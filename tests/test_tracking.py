"""Tests for session history, aggregate stats, streaks and the ledger.

Covers:
- SessionRecord JSON shape and tolerant parsing
- FIFO history cap
- AggregateStats round-trip and derived average
- Lazy streak evaluation across days
- SessionLedger commit / complete_task / degradation
- Dashboard summaries
"""

from __future__ import annotations

import json
from datetime import date, datetime, timedelta

import pytest

from timefocus.modes import TimerMode
from timefocus.storage import keys
from timefocus.storage.kv import MemoryKeyValueStore
from timefocus.tracking.history import (
    HISTORY_LIMIT,
    SessionRecord,
    append_record,
    history_from_json,
    make_record,
)
from timefocus.tracking.ledger import SessionLedger
from timefocus.tracking.stats import (
    AggregateStats,
    build_summary,
    compute_streak,
    daily_breakdown,
    format_focus_minutes,
    parse_session_date,
    productivity_level,
)


def _record(mode=TimerMode.FOCUS, when=None, duration=1500, record_id=1):
    when = when or datetime(2026, 10, 19, 9, 25)
    return SessionRecord(
        id=record_id,
        mode=mode,
        duration_seconds=duration,
        start_time=when - timedelta(seconds=duration),
        end_time=when,
        date=when,
    )


# ═══════════════════════════════════════════════════════════════════════
#  HISTORY
# ═══════════════════════════════════════════════════════════════════════


class TestSessionRecord:
    def test_json_shape(self):
        data = _record().to_dict()
        assert data == {
            "id": 1,
            "mode": "focus",
            "duration": 1500,
            "startTime": "2026-10-19T09:00:00",
            "endTime": "2026-10-19T09:25:00",
            "date": "2026-10-19T09:25:00",
        }

    def test_parses_utc_timestamps(self):
        record = SessionRecord.from_dict({
            "id": 1760866200000,
            "mode": "shortBreak",
            "duration": 300,
            "startTime": "2026-10-19T09:20:00.000Z",
            "endTime": "2026-10-19T09:25:00.000Z",
            "date": "2026-10-19T09:25:00.000Z",
        })
        assert record is not None
        assert record.mode == TimerMode.SHORT_BREAK
        assert record.date.tzinfo is None

    @pytest.mark.parametrize("bad", [
        None,
        "focus",
        {"id": 1, "mode": "nap", "duration": 60, "date": "2026-10-19T09:00:00"},
        {"id": 1, "mode": "focus", "duration": "long", "date": "2026-10-19T09:00:00"},
        {"id": 1, "mode": "focus", "duration": 60, "date": "yesterday"},
    ])
    def test_unparseable_entries(self, bad):
        assert SessionRecord.from_dict(bad) is None

    def test_history_from_json_drops_bad_entries(self):
        data = [_record().to_dict(), {"mode": "focus"}, "junk"]
        assert len(history_from_json(data)) == 1

    def test_history_from_json_non_list(self):
        assert history_from_json({"oops": True}) == []


class TestHistoryCap:
    def test_cap_evicts_oldest_first(self):
        history = []
        for i in range(HISTORY_LIMIT + 5):
            history = append_record(history, _record(record_id=i))
        assert len(history) == HISTORY_LIMIT
        assert history[0].id == 5
        assert history[-1].id == HISTORY_LIMIT + 4

    def test_append_does_not_mutate_input(self):
        history = [_record()]
        append_record(history, _record(record_id=2))
        assert len(history) == 1

    def test_make_record_ids_increase(self):
        end = datetime(2026, 10, 19, 9, 25)
        first = make_record([], TimerMode.FOCUS, 1500, None, end)
        second = make_record([first], TimerMode.SHORT_BREAK, 300, None, end)
        assert second.id == first.id + 1
        assert first.start_time == end


# ═══════════════════════════════════════════════════════════════════════
#  STATS
# ═══════════════════════════════════════════════════════════════════════


class TestAggregateStats:
    def test_json_shape(self):
        stats = AggregateStats(
            total_sessions=3,
            total_focus_seconds=4000,
            streak=2,
            tasks_completed=1,
            join_date=datetime(2026, 10, 1, 8, 0),
            last_session_date=date(2026, 10, 19),
        )
        stats.recompute_average()
        assert stats.to_dict() == {
            "totalSessions": 3,
            "totalFocusTime": 4000,
            "streak": 2,
            "tasksCompleted": 1,
            "averageSessionLength": 1333,
            "joinDate": "2026-10-01T08:00:00",
            "lastSessionDate": "2026-10-19",
        }

    def test_round_trip(self):
        stats = AggregateStats(
            total_sessions=2, total_focus_seconds=3000, streak=4,
            last_session_date=date(2026, 10, 18),
        )
        again = AggregateStats.from_dict(json.loads(json.dumps(stats.to_dict())))
        assert again.total_sessions == 2
        assert again.total_focus_seconds == 3000
        assert again.streak == 4
        assert again.last_session_date == date(2026, 10, 18)
        assert again.average_session_seconds == 1500

    def test_average_is_rederived_on_load(self):
        stats = AggregateStats.from_dict({
            "totalSessions": 4, "totalFocusTime": 6000,
            "averageSessionLength": 99,
        })
        assert stats.average_session_seconds == 1500

    def test_garbage_values_become_zero(self):
        stats = AggregateStats.from_dict({"totalSessions": "ten", "streak": -3})
        assert stats.total_sessions == 0
        assert stats.streak == 0
        assert stats.last_session_date is None

    def test_legacy_date_string(self):
        assert parse_session_date("Mon Oct 19 2026") == date(2026, 10, 19)
        assert parse_session_date("2026-10-19") == date(2026, 10, 19)
        assert parse_session_date("soon") is None
        assert parse_session_date(None) is None


# ═══════════════════════════════════════════════════════════════════════
#  STREAKS
# ═══════════════════════════════════════════════════════════════════════


class TestComputeStreak:
    today = date(2026, 10, 19)

    def _history_today(self):
        return [_record(when=datetime(2026, 10, 19, 10, 0))]

    def test_first_ever_session(self):
        stats = AggregateStats()
        assert compute_streak(self._history_today(), stats, self.today) == 1

    def test_consecutive_day(self):
        stats = AggregateStats(streak=5, last_session_date=self.today - timedelta(days=1))
        assert compute_streak(self._history_today(), stats, self.today) == 6

    def test_same_day_unchanged(self):
        stats = AggregateStats(streak=3, last_session_date=self.today)
        assert compute_streak(self._history_today(), stats, self.today) == 3

    def test_gap_resets(self):
        stats = AggregateStats(streak=9, last_session_date=self.today - timedelta(days=2))
        assert compute_streak(self._history_today(), stats, self.today) == 1

    def test_no_focus_today_leaves_streak(self):
        history = [_record(mode=TimerMode.SHORT_BREAK, when=datetime(2026, 10, 19, 10))]
        stats = AggregateStats(streak=4, last_session_date=self.today - timedelta(days=1))
        assert compute_streak(history, stats, self.today) == 4

    def test_pure(self):
        stats = AggregateStats(streak=1, last_session_date=self.today - timedelta(days=1))
        compute_streak(self._history_today(), stats, self.today)
        assert stats.streak == 1


# ═══════════════════════════════════════════════════════════════════════
#  LEDGER
# ═══════════════════════════════════════════════════════════════════════


class TestSessionLedger:
    def test_new_stats_use_given_join_date(self, store):
        joined = datetime(2026, 9, 1, 8, 0)
        ledger = SessionLedger(store, join_date=joined)
        ledger.commit(TimerMode.FOCUS, 1500, None, datetime(2026, 10, 19, 9, 0))
        stored = json.loads(store.data[keys.USER_STATS])
        assert stored["joinDate"] == joined.isoformat()

    def test_stored_join_date_wins(self, store):
        store.data[keys.USER_STATS] = json.dumps({"joinDate": "2026-01-02T03:04:05"})
        ledger = SessionLedger(store, join_date=datetime(2026, 9, 1))
        assert ledger.stats.join_date == datetime(2026, 1, 2, 3, 4, 5)

    def test_focus_commit_updates_everything(self, store):
        ledger = SessionLedger(store)
        end = datetime(2026, 10, 19, 9, 25)
        result = ledger.commit(TimerMode.FOCUS, 1500, end - timedelta(minutes=25), end)

        assert result.persisted is True
        assert result.streak_updated is True
        assert result.stats.total_sessions == 1
        assert result.stats.streak == 1
        assert result.stats.last_session_date == date(2026, 10, 19)

        stored = json.loads(store.data[keys.SESSION_HISTORY])
        assert stored[0]["duration"] == 1500
        assert json.loads(store.data[keys.USER_STATS])["totalFocusTime"] == 1500

    def test_break_commit_leaves_stats(self, store):
        ledger = SessionLedger(store)
        result = ledger.commit(TimerMode.LONG_BREAK, 900, None)
        assert result.streak_updated is False
        assert keys.USER_STATS not in store.data
        assert ledger.history[0].mode == TimerMode.LONG_BREAK

    def test_streak_across_days(self, store):
        ledger = SessionLedger(store)
        day = datetime(2026, 10, 1, 9, 0)

        def focus_on(when):
            return ledger.commit(TimerMode.FOCUS, 1500, None, when).stats.streak

        assert focus_on(day) == 1
        assert focus_on(day + timedelta(hours=3)) == 1
        assert focus_on(day + timedelta(days=1)) == 2
        assert focus_on(day + timedelta(days=3)) == 1

    def test_history_capped_in_store(self, store):
        ledger = SessionLedger(store)
        start = datetime(2026, 10, 19, 0, 0)
        for i in range(HISTORY_LIMIT + 3):
            ledger.commit(TimerMode.SHORT_BREAK, 300, None, start + timedelta(minutes=i))
        stored = json.loads(store.data[keys.SESSION_HISTORY])
        assert len(stored) == HISTORY_LIMIT
        assert stored[0]["endTime"] == (start + timedelta(minutes=3)).isoformat()

    def test_picks_up_existing_data(self, store):
        store.data[keys.USER_STATS] = json.dumps({
            "totalSessions": 10, "totalFocusTime": 15000, "streak": 2,
            "tasksCompleted": 0, "averageSessionLength": 1500,
            "joinDate": "2026-10-01T08:00:00", "lastSessionDate": "2026-10-18",
        })
        ledger = SessionLedger(store)
        result = ledger.commit(
            TimerMode.FOCUS, 600, None, datetime(2026, 10, 19, 12, 0)
        )
        assert result.stats.total_sessions == 11
        assert result.stats.streak == 3
        assert result.stats.average_session_seconds == pytest.approx(15600 / 11)

    def test_malformed_json_treated_as_absent(self):
        store = MemoryKeyValueStore({
            keys.SESSION_HISTORY: "{not json",
            keys.USER_STATS: "[]",
        })
        ledger = SessionLedger(store)
        assert ledger.history == []
        assert ledger.stats.total_sessions == 0

    def test_complete_task(self, store):
        ledger = SessionLedger(store)
        assert ledger.complete_task().tasks_completed == 1
        assert json.loads(store.data[keys.USER_STATS])["tasksCompleted"] == 1

    def test_broken_store_keeps_memory_copy(self):
        store = MemoryKeyValueStore(broken=True)
        ledger = SessionLedger(store)
        result = ledger.commit(TimerMode.FOCUS, 1500, None)
        assert result.persisted is False
        assert len(ledger.history) == 1
        assert ledger.stats.total_sessions == 1

    def test_store_recovers(self):
        store = MemoryKeyValueStore(broken=True)
        ledger = SessionLedger(store)
        ledger.commit(TimerMode.FOCUS, 1500, None)
        store.broken = False
        ledger.commit(TimerMode.FOCUS, 1500, None)
        assert json.loads(store.data[keys.USER_STATS])["totalSessions"] == 2


# ═══════════════════════════════════════════════════════════════════════
#  SUMMARIES
# ═══════════════════════════════════════════════════════════════════════


class TestSummaries:
    now = datetime(2026, 10, 19, 18, 0)

    def _history(self):
        return [
            _record(when=datetime(2026, 10, 19, 9, 0), record_id=1),
            _record(when=datetime(2026, 10, 19, 10, 0), record_id=2, duration=600),
            _record(mode=TimerMode.SHORT_BREAK, when=datetime(2026, 10, 19, 10, 5),
                    record_id=3, duration=300),
            _record(when=datetime(2026, 10, 16, 9, 0), record_id=4),
            _record(when=datetime(2026, 10, 1, 9, 0), record_id=5),
        ]

    def test_daily_breakdown(self):
        days = daily_breakdown(self._history(), self.now.date())
        assert len(days) == 7
        assert days[-1].day == date(2026, 10, 19)
        assert days[-1].focus_minutes == 35
        assert days[-1].sessions == 2
        assert days[-4].sessions == 1
        assert days[0].label == days[0].day.strftime("%a")

    def test_build_summary(self):
        stats = AggregateStats(total_sessions=25, total_focus_seconds=36000, streak=2)
        stats.recompute_average()
        tasks = [{"completed": True}, {"completed": False}, {"completed": True}, "x"]
        summary = build_summary(self._history(), stats, tasks, now=self.now)

        assert summary.today_focus_minutes == 35
        assert summary.weekly_focus_minutes == 60
        assert summary.week_sessions == 3
        assert summary.total_focus_minutes == 600
        assert summary.average_session_minutes == 24
        assert summary.completed_tasks == 2
        assert summary.total_tasks == 3
        assert summary.completion_rate == 67
        assert summary.productivity_level == "Focused"

    def test_summary_without_tasks(self):
        summary = build_summary([], AggregateStats(), None, now=self.now)
        assert summary.completion_rate == 0
        assert summary.productivity_level == "Getting Started"

    @pytest.mark.parametrize("sessions,level", [
        (0, "Getting Started"),
        (5, "Building Momentum"),
        (49, "Focused"),
        (99, "Productive"),
        (100, "Master"),
    ])
    def test_productivity_level(self, sessions, level):
        assert productivity_level(sessions) == level

    @pytest.mark.parametrize("minutes,text", [
        (0, "0m"), (-5, "0m"), (45, "45m"), (60, "1h 0m"), (125, "2h 5m"),
    ])
    def test_format_focus_minutes(self, minutes, text):
        assert format_focus_minutes(minutes) == text
