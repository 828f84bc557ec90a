"""Timer package."""

from ..modes import TimerMode
from .engine import (
    TimerEngine,
    durations_from,
    TICK_INTERVAL_MS,
    SETTLE_DELAY_MS,
    AUTO_START_DELAY_MS,
)

__all__ = [
    "TimerEngine",
    "TimerMode",
    "durations_from",
    "TICK_INTERVAL_MS",
    "SETTLE_DELAY_MS",
    "AUTO_START_DELAY_MS",
]
