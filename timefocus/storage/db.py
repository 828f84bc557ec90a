"""SQLite connection for the key-value table.

The database lives in ``~/.local/share/TimeFocus/timefocus.db`` unless
``TIMEFOCUS_DB_URL`` names another SQLAlchemy URL.  The engine is only
built on first use, so importing this module never touches the disk.
"""

import os
from pathlib import Path
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from .models import Base

# ── paths ────────────────────────────────────────────────────────────────────

APP_DATA_DIR = Path.home() / ".local" / "share" / "TimeFocus"
DB_PATH = APP_DATA_DIR / "timefocus.db"
DB_URL_ENV = "TIMEFOCUS_DB_URL"

# ── engine & session factory (created lazily) ─────────────────────────────

_engine = None
_SessionFactory = None


def _default_url() -> str:
    url = os.environ.get(DB_URL_ENV)
    if url:
        return url
    # raises OSError when the data dir can't be created
    APP_DATA_DIR.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{DB_PATH}"


def _make_engine(url: str):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, echo=False)


def _get_engine():
    global _engine
    if _engine is None:
        _engine = _make_engine(_default_url())
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Point the key-value store at *url*, e.g. ``sqlite:///:memory:``
    in tests.  Call :func:`init_db` afterwards to create the table."""
    global _engine, _SessionFactory
    _SessionFactory = None
    _engine = _make_engine(url)


def init_db() -> None:
    """Create the ``key_values`` table if it doesn't exist yet."""
    Base.metadata.create_all(_get_engine())


@contextmanager
def get_session():
    """Yield a session for one read or upsert of ``KeyValue`` rows.

    Commits when the block exits cleanly and rolls back otherwise.
    """
    session: OrmSession = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
