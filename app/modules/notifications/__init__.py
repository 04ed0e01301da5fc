"""Notifications domain package exports."""

from .models import Notification, NotificationType
from .repository import NotificationRepository

__all__ = ["Notification", "NotificationType", "NotificationRepository"]
