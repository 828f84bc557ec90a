"""Completed-session history.

The history is an append-only list of :class:`SessionRecord` kept under
the ``session-history`` key, oldest first, trimmed to the most recent
:data:`HISTORY_LIMIT` entries.  Each entry serializes as::

    {"id": 1760880000000, "mode": "focus", "duration": 1500,
     "startTime": "2026-10-19T09:00:00", "endTime": "2026-10-19T09:25:00",
     "date": "2026-10-19T09:25:00"}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from ..modes import TimerMode

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


def parse_timestamp(value) -> datetime | None:
    """ISO-8601 string → naive local datetime (``None`` if unparseable)."""
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


@dataclass(frozen=True)
class SessionRecord:
    """One completed (or skipped-to-done) session."""

    id: int
    mode: TimerMode
    duration_seconds: int
    start_time: datetime
    end_time: datetime
    date: datetime

    @property
    def is_focus(self) -> bool:
        return self.mode is TimerMode.FOCUS

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "mode": self.mode.value,
            "duration": self.duration_seconds,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data) -> SessionRecord | None:
        if not isinstance(data, dict):
            return None
        try:
            mode = TimerMode(data.get("mode"))
        except ValueError:
            return None
        duration = data.get("duration")
        record_id = data.get("id")
        end_time = parse_timestamp(data.get("endTime"))
        when = parse_timestamp(data.get("date")) or end_time
        start_time = parse_timestamp(data.get("startTime")) or when
        if (
            when is None
            or not isinstance(duration, (int, float))
            or not isinstance(record_id, (int, float))
        ):
            return None
        return cls(
            id=int(record_id),
            mode=mode,
            duration_seconds=int(duration),
            start_time=start_time,
            end_time=end_time or when,
            date=when,
        )


def make_record(
    history: list[SessionRecord],
    mode: TimerMode,
    duration_seconds: int,
    start_time: datetime | None,
    end_time: datetime,
) -> SessionRecord:
    """Build the next record.  Ids are end-time epoch milliseconds, bumped
    past the newest existing id so they stay unique and increasing."""
    record_id = int(end_time.timestamp() * 1000)
    if history and record_id <= history[-1].id:
        record_id = history[-1].id + 1
    return SessionRecord(
        id=record_id,
        mode=mode,
        duration_seconds=duration_seconds,
        start_time=start_time or end_time,
        end_time=end_time,
        date=end_time,
    )


def append_record(
    history: list[SessionRecord], record: SessionRecord
) -> list[SessionRecord]:
    """Return a new history with *record* appended, oldest evicted first."""
    updated = [*history, record]
    if len(updated) > HISTORY_LIMIT:
        updated = updated[-HISTORY_LIMIT:]
    return updated


def history_from_json(data) -> list[SessionRecord]:
    """Decode the stored list, dropping entries that don't parse."""
    if not isinstance(data, list):
        return []
    records = [SessionRecord.from_dict(item) for item in data]
    valid = [r for r in records if r is not None]
    if len(valid) != len(records):
        logger.warning(
            "Skipped %d unreadable history entries", len(records) - len(valid)
        )
    return valid[-HISTORY_LIMIT:]


def history_to_json(history: list[SessionRecord]) -> list[dict]:
    return [r.to_dict() for r in history]
