"""Aggregate statistics, streaks and dashboard summaries.

Stored under the ``user-stats`` key::

    {"totalSessions": 12, "totalFocusTime": 18000, "streak": 3,
     "tasksCompleted": 7, "averageSessionLength": 1500,
     "joinDate": "2026-10-01T08:00:00", "lastSessionDate": "2026-10-19"}

Only focus sessions count towards ``totalSessions``/``totalFocusTime``.
``averageSessionLength`` is derived: it is recomputed from the totals
whenever stats are loaded or a focus session is recorded, and rounded to
whole seconds only when written.

Streaks
-------
The streak is evaluated lazily, right after a focus session completes:

* last session yesterday   → streak + 1
* last session today       → unchanged
* anything else (gap/none) → 1

A missed day therefore only resets the streak the next time a focus
session completes, never in the background.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from .history import SessionRecord, parse_timestamp


@dataclass
class AggregateStats:
    total_sessions: int = 0
    total_focus_seconds: int = 0
    streak: int = 0
    tasks_completed: int = 0
    average_session_seconds: float = 0.0
    join_date: datetime = field(default_factory=datetime.now)
    last_session_date: date | None = None

    def to_dict(self) -> dict:
        return {
            "totalSessions": self.total_sessions,
            "totalFocusTime": self.total_focus_seconds,
            "streak": self.streak,
            "tasksCompleted": self.tasks_completed,
            "averageSessionLength": round(self.average_session_seconds),
            "joinDate": self.join_date.isoformat(),
            "lastSessionDate": (
                self.last_session_date.isoformat()
                if self.last_session_date else None
            ),
        }

    @classmethod
    def from_dict(cls, data) -> AggregateStats:
        if not isinstance(data, dict):
            return cls()

        def count(name: str) -> int:
            value = data.get(name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return 0
            return max(0, int(value))

        stats = cls(
            total_sessions=count("totalSessions"),
            total_focus_seconds=count("totalFocusTime"),
            streak=count("streak"),
            tasks_completed=count("tasksCompleted"),
            join_date=parse_timestamp(data.get("joinDate")) or datetime.now(),
            last_session_date=parse_session_date(data.get("lastSessionDate")),
        )
        stats.recompute_average()
        return stats

    def recompute_average(self) -> None:
        if self.total_sessions > 0:
            self.average_session_seconds = (
                self.total_focus_seconds / self.total_sessions
            )
        else:
            self.average_session_seconds = 0.0


def parse_session_date(value) -> date | None:
    """Accept ISO dates and the older ``"Mon Oct 19 2026"`` form."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.strptime(value, "%a %b %d %Y").date()
    except ValueError:
        return None


# ── mutations ──────────────────────────────────────────────────────────────


def record_focus(stats: AggregateStats, duration_seconds: int) -> None:
    """Count one completed focus session of *duration_seconds*."""
    stats.total_sessions += 1
    stats.total_focus_seconds += duration_seconds
    stats.recompute_average()


def record_task(stats: AggregateStats) -> None:
    stats.tasks_completed += 1


def compute_streak(
    history: list[SessionRecord], stats: AggregateStats, today: date
) -> int:
    """Return the streak after a focus completion on *today*.

    Pure: *stats* is read, not modified.  ``stats.last_session_date`` must
    still hold the value from before this completion.
    """
    focused_today = any(
        r.is_focus and r.date.date() == today for r in history
    )
    if not focused_today:
        return stats.streak

    last = stats.last_session_date
    if last == today - timedelta(days=1):
        return stats.streak + 1
    if last != today:
        return 1
    return stats.streak  # already counted today


# ── summaries ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DaySummary:
    day: date
    label: str           # "Mon", "Tue", ...
    focus_minutes: int
    sessions: int


@dataclass(frozen=True)
class StatsSummary:
    today_focus_minutes: int
    weekly_focus_minutes: int
    week_sessions: int
    total_sessions: int
    total_focus_minutes: int
    average_session_minutes: int
    current_streak: int
    tasks_completed: int
    completed_tasks: int
    total_tasks: int
    completion_rate: int  # percent
    productivity_level: str


def _focus_on(history: list[SessionRecord], day: date) -> list[SessionRecord]:
    return [r for r in history if r.is_focus and r.date.date() == day]


def today_focus_seconds(history: list[SessionRecord], today: date) -> int:
    return sum(r.duration_seconds for r in _focus_on(history, today))


def week_sessions(history: list[SessionRecord], now: datetime) -> list[SessionRecord]:
    """Focus sessions from the last seven days."""
    cutoff = now - timedelta(days=7)
    return [r for r in history if r.is_focus and r.date >= cutoff]


def daily_breakdown(
    history: list[SessionRecord], today: date, days: int = 7
) -> list[DaySummary]:
    """One entry per day, oldest first, ending with *today*."""
    result: list[DaySummary] = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        sessions = _focus_on(history, day)
        seconds = sum(r.duration_seconds for r in sessions)
        result.append(DaySummary(
            day=day,
            label=day.strftime("%a"),
            focus_minutes=round(seconds / 60),
            sessions=len(sessions),
        ))
    return result


# Ordered ascending; the first threshold the total is below wins.
PRODUCTIVITY_LEVELS: list[tuple[int, str]] = [
    (5, "Getting Started"),
    (20, "Building Momentum"),
    (50, "Focused"),
    (100, "Productive"),
]


def productivity_level(total_sessions: int) -> str:
    for threshold, name in PRODUCTIVITY_LEVELS:
        if total_sessions < threshold:
            return name
    return "Master"


def build_summary(
    history: list[SessionRecord],
    stats: AggregateStats,
    tasks: list | None = None,
    now: datetime | None = None,
) -> StatsSummary:
    """Everything the stats dialog shows, in minutes."""
    now = now or datetime.now()
    tasks = [t for t in (tasks or []) if isinstance(t, dict)]
    completed = sum(1 for t in tasks if t.get("completed") is True)
    week = week_sessions(history, now)
    rate = (completed / len(tasks)) * 100 if tasks else 0

    return StatsSummary(
        today_focus_minutes=round(today_focus_seconds(history, now.date()) / 60),
        weekly_focus_minutes=round(sum(r.duration_seconds for r in week) / 60),
        week_sessions=len(week),
        total_sessions=stats.total_sessions,
        total_focus_minutes=round(stats.total_focus_seconds / 60),
        average_session_minutes=round(stats.average_session_seconds / 60),
        current_streak=stats.streak,
        tasks_completed=stats.tasks_completed,
        completed_tasks=completed,
        total_tasks=len(tasks),
        completion_rate=round(rate),
        productivity_level=productivity_level(stats.total_sessions),
    )


def format_focus_minutes(minutes: int) -> str:
    """``125`` → ``"2h 5m"``; ``45`` → ``"45m"``."""
    if minutes <= 0:
        return "0m"
    hours, mins = divmod(minutes, 60)
    if hours:
        return f"{hours}h {mins}m"
    return f"{mins}m"
