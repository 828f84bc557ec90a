"""Key-value persistence boundary.

Everything TimeFocus remembers between launches goes through a
:class:`KeyValueStore`: one string value per key, usually a JSON
document.  Two implementations ship with the package:

* :class:`SqlKeyValueStore`: rows in the ``key_values`` SQLite table.
* :class:`MemoryKeyValueStore`: a plain dict, used by tests and as the
  fallback when no database is wanted.

Backend failures (database errors, an unusable data directory) surface
as :class:`StorageError`.  The JSON helpers below never raise: a missing
key, an unreadable store or a malformed document all come back as the
caller's default.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError

from .db import get_session
from .models import KeyValue

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """The backing store could not be read or written."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


# ── implementations ───────────────────────────────────────────────────────


class SqlKeyValueStore:
    """Key-value store backed by the SQLAlchemy session factory in
    :mod:`timefocus.storage.db`."""

    def get(self, key: str) -> str | None:
        try:
            with get_session() as db:
                row = db.get(KeyValue, key)
                return row.value if row is not None else None
        except (SQLAlchemyError, OSError) as exc:
            raise StorageError(f"could not read {key!r}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            with get_session() as db:
                row = db.get(KeyValue, key)
                if row is None:
                    db.add(KeyValue(key=key, value=value))
                else:
                    row.value = value
        except (SQLAlchemyError, OSError) as exc:
            raise StorageError(f"could not write {key!r}") from exc


class MemoryKeyValueStore:
    """Dict-backed store.  ``broken=True`` makes every call fail, which
    is how the degradation paths are exercised."""

    def __init__(self, data: dict[str, str] | None = None, *,
                 broken: bool = False) -> None:
        self.data: dict[str, str] = dict(data or {})
        self.broken = broken

    def get(self, key: str) -> str | None:
        if self.broken:
            raise StorageError(f"store unavailable reading {key!r}")
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.broken:
            raise StorageError(f"store unavailable writing {key!r}")
        self.data[key] = value


# ── JSON helpers ──────────────────────────────────────────────────────────


def read_json(store: KeyValueStore, key: str, default: Any = None) -> Any:
    """Decode the JSON document at *key*, or return *default*."""
    try:
        raw = store.get(key)
    except StorageError as exc:
        logger.warning("Reading %s failed, using defaults: %s", key, exc)
        return default
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed JSON stored under %s", key)
        return default


def write_json(store: KeyValueStore, key: str, value: Any) -> bool:
    """Encode *value* and store it.  Returns ``False`` if the write was
    dropped."""
    try:
        store.set(key, json.dumps(value))
    except StorageError as exc:
        logger.warning("Dropping write to %s: %s", key, exc)
        return False
    return True
