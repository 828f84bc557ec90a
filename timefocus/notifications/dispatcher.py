"""Delivering completion alerts on the desktop."""

from __future__ import annotations

import logging
from typing import Protocol

from PyQt6.QtCore import QObject
from PyQt6.QtWidgets import QSystemTrayIcon

from .messages import NotificationRequest

logger = logging.getLogger(__name__)

DESKTOP_TIMEOUT_MS = 5000


class NotificationDispatcher(Protocol):
    def dispatch(self, request: NotificationRequest) -> None: ...


class _Bell(Protocol):
    def play(self) -> None: ...


class QtNotificationDispatcher(QObject):
    """Tray-icon popup plus bell.

    Either collaborator may be ``None`` (no tray on this desktop, audio
    disabled); that channel is then skipped.  Desktops have no vibration
    API, so vibration requests are only logged.
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        tray_icon: QSystemTrayIcon | None = None,
        bell: _Bell | None = None,
    ) -> None:
        super().__init__(parent)
        self._tray_icon = tray_icon
        self._bell = bell

    def dispatch(self, request: NotificationRequest) -> None:
        if request.sound and self._bell is not None:
            self._bell.play()
        if request.vibration:
            logger.debug("Vibration requested; not supported on desktop")
        if request.desktop:
            self._show_desktop(request.title, request.body)

    def _show_desktop(self, title: str, body: str) -> None:
        if self._tray_icon is None:
            logger.info("%s %s", title, body)
            return
        self._tray_icon.showMessage(
            title,
            body,
            QSystemTrayIcon.MessageIcon.Information,
            DESKTOP_TIMEOUT_MS,
        )
