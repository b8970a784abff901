"""Order history model.

Append-only: records are created and read, never updated or deleted by
the application.  They disappear only with their order (CASCADE); the
acting user becomes ``NULL`` when that identity is removed.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import CreatedOnlyModel
from modules.history.constants import HistoryEventType
from modules.orders.constants import OrderStatus


class OrderHistory(CreatedOnlyModel):
    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="history",
    )
    user: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_history",
    )
    event_type: models.CharField = models.CharField(
        max_length=20, choices=HistoryEventType.choices
    )
    old_status: models.CharField = models.CharField(
        max_length=20, choices=OrderStatus.choices, null=True, blank=True
    )
    new_status: models.CharField = models.CharField(
        max_length=20, choices=OrderStatus.choices, null=True, blank=True
    )
    note: models.TextField = models.TextField(null=True, blank=True)

    class Meta:
        db_table = "order_history"
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "order history"
        indexes = [
            models.Index(fields=["order", "created_at"], name="order_history_order_idx"),
            models.Index(fields=["created_at"], name="order_history_created_at_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order_id}: {self.event_type}"
