"""Storage package."""

from .db import configure_engine, get_session, init_db
from .kv import (
    KeyValueStore,
    MemoryKeyValueStore,
    SqlKeyValueStore,
    StorageError,
    read_json,
    write_json,
)
from .models import KeyValue

__all__ = [
    "configure_engine",
    "get_session",
    "init_db",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SqlKeyValueStore",
    "StorageError",
    "read_json",
    "write_json",
    "KeyValue",
]
