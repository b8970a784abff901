"""Notification model.

Business rules implemented:
- Every notification belongs to exactly one user and is removed with it.
- The optional order reference is removed with the order (CASCADE).
- Only ``read`` changes after creation.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import CreatedOnlyModel
from modules.notifications.constants import NotificationType


class Notification(CreatedOnlyModel):
    """An entry in a user's inbox."""

    user: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    title: models.CharField = models.CharField(max_length=255)
    message: models.TextField = models.TextField()
    type: models.CharField = models.CharField(
        max_length=10,
        choices=NotificationType.choices,
        default=NotificationType.INFO,
    )
    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notifications",
    )
    read: models.BooleanField = models.BooleanField(default=False)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "read"], name="notifications_user_read_idx"),
            models.Index(fields=["created_at"], name="notifications_created_at_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.title} -> {self.user_id}"
