"""What to say when a session ends.

The engine decides *whether* to ask for an alert and *what* it says;
how it is delivered is up to a :class:`~.dispatcher.NotificationDispatcher`.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from ..modes import TimerMode
from ..settings import NotificationPreferences, Settings


@dataclass(frozen=True)
class NotificationRequest:
    title: str
    body: str
    sound: bool = True
    vibration: bool = True
    desktop: bool = True


def build_notification(
    mode: TimerMode,
    settings: Settings,
    prefs: NotificationPreferences,
) -> NotificationRequest | None:
    """Alert for a completed *mode*, or ``None`` if alerts are off."""
    if not prefs.enabled:
        return None

    if mode is TimerMode.FOCUS:
        title = "\U0001F3AF Focus Session Complete!"
        body = (
            f"Great job! You focused for {settings.focus_minutes} minutes. "
            "Time for a break!"
        )
    elif mode is TimerMode.SHORT_BREAK:
        title = "☕ Short Break Over!"
        body = "Break time is over. Ready to get back to work?"
    else:
        title = "\U0001F31F Long Break Complete!"
        body = "You're fully recharged! Time for productive work!"

    return NotificationRequest(
        title=title,
        body=body,
        sound=settings.sound_enabled and prefs.sound,
        vibration=prefs.vibration,
        desktop=prefs.desktop,
    )


# ── motivational quotes ──────────────────────────────────────────────────

FOCUS_QUOTES = (
    "Excellent! You've completed an amazing focus session!",
    "Outstanding work! Your productivity is on fire!",
    "Well done! You're building incredible focus habits!",
    "Fantastic! One step closer to your goals!",
    "Perfect session! You're becoming a focus master!",
    "Brilliant! Every focused minute counts!",
    "Amazing! Building momentum with each session!",
    "Great focus! Developing superhuman concentration!",
    "Sharp mind! Exceptional performance today!",
    "Time well invested! Keep it up!",
)

SHORT_BREAK_QUOTES = (
    "Short break complete! Ready to focus again?",
    "Refreshed and ready! Time to tackle your next goal!",
    "Break time over! Let's get back to productive work!",
    "Recharged! Your mind is fresh for the next session!",
    "Rest complete! Time to shine in your next focus session!",
    "Break finished! Let's make the next session amazing!",
    "Quick refresh! Your mind is ready for creativity!",
    "Energy renewed! Get ready to blast off!",
)

LONG_BREAK_QUOTES = (
    "Great long break! You're ready for big challenges!",
    "Full recharge complete! Your mind is at its peak!",
    "Strategic rest! Ready for the next cycle!",
    "Battery at 100%! Time for peak performance!",
    "Perfect balance! Mind and body ready!",
    "Deep rest achieved! Ready to conquer!",
    "Full recovery! Let's create something amazing!",
    "Completely refreshed! Your best work awaits!",
)

_QUOTES = {
    TimerMode.FOCUS: FOCUS_QUOTES,
    TimerMode.SHORT_BREAK: SHORT_BREAK_QUOTES,
    TimerMode.LONG_BREAK: LONG_BREAK_QUOTES,
}


def motivational_message(mode: TimerMode, rng: random.Random | None = None) -> str:
    """A random encouragement for the session that just ended."""
    return (rng or random).choice(_QUOTES[mode])
