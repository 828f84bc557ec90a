"""Shared pytest fixtures for TimeFocus tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from timefocus.settings import Settings
from timefocus.storage.db import configure_engine, init_db
from timefocus.storage.kv import MemoryKeyValueStore
from timefocus.timer.engine import TimerEngine
from timefocus.tracking.ledger import SessionLedger


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def ledger(store):
    return SessionLedger(store)


@pytest.fixture
def engine(qapp, ledger):
    """Fresh TimerEngine with default settings and a ledger."""
    eng = TimerEngine(parent=None, ledger=ledger)
    yield eng
    eng.shutdown()


@pytest.fixture
def engine_auto(qapp, ledger):
    """Fresh TimerEngine with both auto-start flags ON."""
    settings = Settings(auto_start_breaks=True, auto_start_focus=True)
    eng = TimerEngine(parent=None, settings=settings, ledger=ledger)
    yield eng
    eng.shutdown()


@pytest.fixture
def engine_no_ledger(qapp):
    """Fresh TimerEngine without persistence (pure state-machine tests)."""
    eng = TimerEngine(parent=None)
    yield eng
    eng.shutdown()
