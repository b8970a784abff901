"""Notification repositories package."""

from modules.notifications.repositories.django_repository import (
    NotificationDjangoRepository,
)
from modules.notifications.repositories.interfaces import INotificationRepository

__all__ = ["INotificationRepository", "NotificationDjangoRepository"]
