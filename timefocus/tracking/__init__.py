"""Session history, aggregate stats and the ledger that writes them."""

from .history import SessionRecord, HISTORY_LIMIT, append_record, make_record
from .ledger import SessionLedger, CommitResult
from .stats import (
    AggregateStats,
    DaySummary,
    StatsSummary,
    build_summary,
    compute_streak,
    daily_breakdown,
    format_focus_minutes,
    productivity_level,
)

__all__ = [
    "SessionRecord",
    "HISTORY_LIMIT",
    "append_record",
    "make_record",
    "SessionLedger",
    "CommitResult",
    "AggregateStats",
    "DaySummary",
    "StatsSummary",
    "build_summary",
    "compute_streak",
    "daily_breakdown",
    "format_focus_minutes",
    "productivity_level",
]
