"""Timer settings and notification preferences.

Both records live in the key-value store as JSON, using the field names
the settings form has always written::

    {"focusTime": 25, "shortBreakTime": 5, "longBreakTime": 15,
     "longBreakInterval": 4, "autoStartBreaks": false,
     "autoStartPomodoros": false, "soundEnabled": true}

Usage::

    settings = load_settings(store)
    settings = replace(settings, focus_minutes=50)
    validate_settings(settings)
    save_settings(store, settings)
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, fields

from .storage import keys
from .storage.kv import KeyValueStore, read_json, write_json


# Inclusive (min, max) for every numeric field, as enforced by the form.
SETTING_BOUNDS: dict[str, tuple[int, int]] = {
    "focus_minutes": (1, 60),
    "short_break_minutes": (1, 30),
    "long_break_minutes": (1, 60),
    "long_break_interval": (2, 10),
}

# Python field name → persisted JSON name
_JSON_NAMES: dict[str, str] = {
    "focus_minutes": "focusTime",
    "short_break_minutes": "shortBreakTime",
    "long_break_minutes": "longBreakTime",
    "long_break_interval": "longBreakInterval",
    "auto_start_breaks": "autoStartBreaks",
    "auto_start_focus": "autoStartPomodoros",
    "sound_enabled": "soundEnabled",
}


@dataclass(frozen=True)
class Settings:
    """All user-configurable timer preferences."""

    # ── durations (minutes) ───────────────────────────────────────────
    focus_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    long_break_interval: int = 4    # every N focus sessions

    # ── auto-start ────────────────────────────────────────────────────
    auto_start_breaks: bool = False
    auto_start_focus: bool = False

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True

    def to_dict(self) -> dict:
        return {_JSON_NAMES[k]: v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: dict) -> Settings:
        """Build settings from stored JSON.

        Unknown keys are ignored, wrongly typed values fall back to the
        default and out-of-range numbers are clamped into bounds.
        """
        defaults = cls()
        values = {}
        for f in fields(cls):
            raw = data.get(_JSON_NAMES[f.name])
            default = getattr(defaults, f.name)
            if isinstance(default, bool):
                values[f.name] = raw if isinstance(raw, bool) else default
            elif isinstance(raw, int) and not isinstance(raw, bool):
                lo, hi = SETTING_BOUNDS[f.name]
                values[f.name] = max(lo, min(raw, hi))
            else:
                values[f.name] = default
        return cls(**values)


def validate_settings(settings: Settings) -> Settings:
    """Raise ``ValueError`` if any duration is outside the form bounds.

    Called at the UI boundary, before settings reach the engine.
    """
    for name, (lo, hi) in SETTING_BOUNDS.items():
        value = getattr(settings, name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name} must be an integer, got {value!r}")
        if not lo <= value <= hi:
            raise ValueError(f"{name} must be between {lo} and {hi}, got {value}")
    return settings


def load_settings(store: KeyValueStore) -> Settings:
    """Load settings from the store, falling back to defaults."""
    data = read_json(store, keys.SETTINGS)
    if not isinstance(data, dict):
        return Settings()
    return Settings.from_dict(data)


def save_settings(store: KeyValueStore, settings: Settings) -> bool:
    """Persist settings.  Returns ``False`` when the write was dropped."""
    return write_json(store, keys.SETTINGS, settings.to_dict())


# ── notification preferences ──────────────────────────────────────────────


@dataclass(frozen=True)
class NotificationPreferences:
    """Which completion alerts the user wants."""

    enabled: bool = True
    sound: bool = True
    vibration: bool = True
    desktop: bool = True
    motivational_messages: bool = True

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "sound": self.sound,
            "vibration": self.vibration,
            "desktop": self.desktop,
            "motivationalMessages": self.motivational_messages,
        }

    @classmethod
    def from_dict(cls, data: dict) -> NotificationPreferences:
        defaults = cls()

        def flag(name: str, attr: str) -> bool:
            value = data.get(name)
            return value if isinstance(value, bool) else getattr(defaults, attr)

        return cls(
            enabled=flag("enabled", "enabled"),
            sound=flag("sound", "sound"),
            vibration=flag("vibration", "vibration"),
            desktop=flag("desktop", "desktop"),
            motivational_messages=flag("motivationalMessages", "motivational_messages"),
        )


def load_notification_preferences(store: KeyValueStore) -> NotificationPreferences:
    data = read_json(store, keys.NOTIFICATIONS)
    if not isinstance(data, dict):
        return NotificationPreferences()
    return NotificationPreferences.from_dict(data)


def save_notification_preferences(
    store: KeyValueStore, prefs: NotificationPreferences
) -> bool:
    return write_json(store, keys.NOTIFICATIONS, prefs.to_dict())
