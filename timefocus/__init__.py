"""TimeFocus: focus/break timer with session history and streaks."""

__version__ = "0.1.0"
