"""Order model.

Business rules implemented:
- ``order_details`` is required; every other descriptive field is optional.
- ``status`` defaults to ``incoming``.
- ``completed_at`` is set if and only if ``status`` is ``completed``
  (derived by ``modules.orders.transitions``).
- ``created_by`` survives the removal of the identity as ``NULL``.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import OrderStatus


class Order(BaseModel):
    """A customer's cake order."""

    customer_name: models.CharField = models.CharField(max_length=255)
    order_details: models.TextField = models.TextField()
    location: models.CharField = models.CharField(max_length=255, null=True, blank=True)
    phone_number: models.CharField = models.CharField(
        max_length=32, null=True, blank=True
    )
    pickup_date: models.DateField = models.DateField(null=True, blank=True)
    meta_business_link: models.CharField = models.CharField(
        max_length=500, null=True, blank=True
    )
    image: models.CharField = models.CharField(max_length=500, null=True, blank=True)
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.INCOMING,
    )
    completed_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    created_by: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_orders",
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["created_at"], name="orders_created_at_idx"),
        ]

    @property
    def is_completed(self) -> bool:
        return self.status == OrderStatus.COMPLETED

    def __str__(self) -> str:
        return f"{self.customer_name} ({self.status})"
