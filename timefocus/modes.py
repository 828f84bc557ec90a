"""Timer modes shared by the engine, history and notifications."""

from enum import Enum


class TimerMode(Enum):
    FOCUS = "focus"
    SHORT_BREAK = "shortBreak"
    LONG_BREAK = "longBreak"

    @property
    def is_break(self) -> bool:
        return self is not TimerMode.FOCUS

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    TimerMode.FOCUS: "Focus",
    TimerMode.SHORT_BREAK: "Short Break",
    TimerMode.LONG_BREAK: "Long Break",
}
