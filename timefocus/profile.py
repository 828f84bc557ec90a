"""User profile: display name, join date, motivation toggle, levels."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from .storage import keys
from .storage.kv import KeyValueStore, StorageError, read_json, write_json
from .tracking.history import parse_timestamp

logger = logging.getLogger(__name__)

DEFAULT_USERNAME = "Pomodoro Master"


def load_username(store: KeyValueStore) -> str:
    try:
        name = store.get(keys.USERNAME)
    except StorageError as exc:
        logger.warning("Reading username failed: %s", exc)
        return DEFAULT_USERNAME
    return name or DEFAULT_USERNAME


def save_username(store: KeyValueStore, name: str) -> str:
    """Store a trimmed display name.  Blank names are rejected."""
    name = name.strip()
    if not name:
        raise ValueError("username must not be blank")
    try:
        store.set(keys.USERNAME, name)
    except StorageError as exc:
        logger.warning("Dropping username write: %s", exc)
    return name


def ensure_join_date(store: KeyValueStore, now: datetime | None = None) -> datetime:
    """Return the join date, recording *now* the first time."""
    try:
        existing = parse_timestamp(store.get(keys.JOIN_DATE))
    except StorageError as exc:
        logger.warning("Reading join date failed: %s", exc)
        existing = None
    if existing is not None:
        return existing
    joined = now or datetime.now()
    try:
        store.set(keys.JOIN_DATE, joined.isoformat())
    except StorageError as exc:
        logger.warning("Dropping join date write: %s", exc)
    return joined


def motivation_enabled(store: KeyValueStore) -> bool:
    value = read_json(store, keys.MOTIVATION_ENABLED, True)
    return value if isinstance(value, bool) else True


def set_motivation_enabled(store: KeyValueStore, enabled: bool) -> bool:
    return write_json(store, keys.MOTIVATION_ENABLED, enabled)


# ── levels ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Level:
    level: int
    title: str
    next_threshold: int     # sessions needed for the next level

    @property
    def is_max(self) -> bool:
        return self.level == LEVELS[-1][0]


# (level, title, sessions needed to leave this level)
LEVELS: list[tuple[int, str, int]] = [
    (1, "Beginner", 10),
    (2, "Focused", 50),
    (3, "Productive", 100),
    (4, "Expert", 250),
    (5, "Master", 250),
]


def level_for_sessions(total_sessions: int) -> Level:
    for level, title, threshold in LEVELS[:-1]:
        if total_sessions < threshold:
            return Level(level, title, threshold)
    level, title, threshold = LEVELS[-1]
    return Level(level, title, threshold)


def level_progress(total_sessions: int) -> float:
    """0.0 → 1.0 towards the next level (1.0 at max level)."""
    current = level_for_sessions(total_sessions)
    if current.is_max:
        return 1.0
    return min(total_sessions / current.next_threshold, 1.0)
