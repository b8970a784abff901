"""Django ORM implementation of the Notification repository."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.core.repositories.interfaces import Page
from modules.core.retry import retrying
from modules.notifications.models import Notification
from modules.notifications.repositories.interfaces import INotificationRepository

logger = structlog.get_logger(__name__)


class NotificationDjangoRepository(INotificationRepository):
    """Concrete Notification repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @retrying("notifications.create")
    def create(self, data: Dict[str, Any]) -> Notification:
        notification = Notification(**data)
        notification.save()
        return notification

    @retrying("notifications.create_many")
    @transaction.atomic
    def create_many(self, rows: Iterable[Dict[str, Any]]) -> List[Notification]:
        return Notification.objects.bulk_create([Notification(**row) for row in rows])

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @retrying("notifications.get")
    def get_by_id(self, id: str) -> Optional[Notification]:
        try:
            return Notification.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    @retrying("notifications.get_for_user")
    def get_for_user(self, id: str, user_id: str) -> Optional[Notification]:
        try:
            return Notification.objects.filter(id=id, user_id=user_id).first()
        except (ValueError, ValidationError):
            return None

    @retrying("notifications.list_for_user")
    def list_for_user(
        self, user_id: str, unread_only: bool = False, page: Optional[Page] = None
    ) -> List[Notification]:
        queryset = Notification.objects.filter(user_id=user_id).order_by(
            "-created_at", "-id"
        )
        if unread_only:
            queryset = queryset.filter(read=False)
        if page is not None:
            queryset = queryset[page.offset : page.stop]
        return list(queryset)

    @retrying("notifications.count_unread")
    def count_unread(self, user_id: str) -> int:
        return Notification.objects.filter(user_id=user_id, read=False).count()

    # ------------------------------------------------------------------
    # Save / Delete
    # ------------------------------------------------------------------

    @retrying("notifications.save")
    def save(self, entity: Notification) -> Notification:
        entity.save()
        return entity

    @retrying("notifications.delete_for_user")
    def delete_for_user(self, id: str, user_id: str) -> bool:
        notification = self.get_for_user(id, user_id)
        if notification is None:
            return False
        notification.delete()
        logger.info("notification.deleted", notification_id=str(id), user_id=str(user_id))
        return True
