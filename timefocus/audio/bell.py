"""Completion bell, synthesised with numpy and played via QSoundEffect.

The WAV is generated once and cached in the app data directory, so
later launches just load the file.
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..storage.db import APP_DATA_DIR

logger = logging.getLogger(__name__)

SOUNDS_DIR = APP_DATA_DIR / "sounds"
BELL_FILENAME = "bell.wav"
SAMPLE_RATE = 44100
BELL_VOLUME = 0.6


# ── synthesis ─────────────────────────────────────────────────────────────


def _envelope(length: int, attack: int, release: int) -> np.ndarray:
    """Linear attack followed by an exponential ring-out."""
    env = np.ones(length, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    tail = length - a
    if tail > 0:
        env[a:] = np.exp(-np.linspace(0.0, 5.0, tail))
    r = min(release, length)
    if r > 0:
        env[-r:] *= np.linspace(1.0, 0.0, r)
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Float samples in -1..1 → 16-bit mono PCM WAV."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


def generate_bell(duration_s: float = 1.5) -> bytes:
    """A struck bell: A5 fundamental with two inharmonic partials."""
    partials = ((880.0, 0.45), (880.0 * 2.76, 0.15), (880.0 * 5.40, 0.06))
    tone = sum(_sine(freq, duration_s) * amp for freq, amp in partials)
    env = _envelope(len(tone), attack=int(SAMPLE_RATE * 0.005),
                    release=int(SAMPLE_RATE * 0.05))
    return _to_wav_bytes(tone * env)


# ── playback ──────────────────────────────────────────────────────────────


class BellPlayer(QObject):
    """Plays the cached bell.

    Usage::

        bell = BellPlayer(parent=self)
        bell.play()
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effect: QSoundEffect | None = None
        try:
            path = self._ensure_wav_file()
        except OSError as exc:
            logger.warning("Bell unavailable: %s", exc)
            return
        self._effect = QSoundEffect(self)
        self._effect.setSource(QUrl.fromLocalFile(str(path)))
        self._effect.setVolume(BELL_VOLUME)

    @property
    def available(self) -> bool:
        return self._effect is not None

    @property
    def path(self) -> Path:
        return self._sounds_dir / BELL_FILENAME

    def play(self) -> None:
        """Ring once.  No-op if the WAV couldn't be written."""
        if self._effect is None:
            logger.info("Timer completed! (sound not available)")
            return
        self._effect.play()

    def _ensure_wav_file(self) -> Path:
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        path = self.path
        if not path.exists():
            path.write_bytes(generate_bell())
        return path
