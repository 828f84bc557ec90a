"""Notifications package."""

from .dispatcher import NotificationDispatcher, QtNotificationDispatcher
from .messages import (
    NotificationRequest,
    build_notification,
    motivational_message,
)

__all__ = [
    "NotificationDispatcher",
    "QtNotificationDispatcher",
    "NotificationRequest",
    "build_notification",
    "motivational_message",
]
