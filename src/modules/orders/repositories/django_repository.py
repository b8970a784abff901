"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Reads
return ``None`` for non-existent or malformed ids.

Concurrency control on updates uses ``select_for_update()``; no
``version`` column exists on the model, so concurrent writers resolve
last-write-wins per field.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count

from modules.core.repositories.interfaces import Page
from modules.core.retry import retrying
from modules.core.validation import apply_filterset
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @retrying("orders.create")
    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        order = Order(**data)
        order.save()
        logger.info("order.created", order_id=str(order.id), status=order.status)
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @retrying("orders.get")
    def get_by_id(self, id: str) -> Optional[Order]:
        try:
            return Order.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    @retrying("orders.get_for_update")
    def get_for_update(self, id: str) -> Optional[Order]:
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    @retrying("orders.list")
    def list(
        self, filters: Optional[Dict[str, Any]] = None, page: Optional[Page] = None
    ) -> List[Order]:
        """List orders newest first.

        Supported filter keys (see ``OrderFilter``):
        - ``status``
        - ``created_by``
        - ``pickup_from`` / ``pickup_to``
        """
        queryset = Order.objects.order_by("-created_at", "-id")
        if filters:
            queryset = apply_filterset(OrderFilter, filters, queryset)
        if page is not None:
            queryset = queryset[page.offset : page.stop]
        return list(queryset)

    @retrying("orders.count_by_status")
    def count_by_status(self) -> Dict[str, int]:
        rows = Order.objects.order_by().values("status").annotate(total=Count("id"))
        return {row["status"]: row["total"] for row in rows}

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @retrying("orders.save")
    def save(self, entity: Order) -> Order:
        entity.save()
        logger.info("order.saved", order_id=str(entity.id), status=entity.status)
        return entity

    @retrying("orders.delete")
    @transaction.atomic
    def delete(self, id: str) -> bool:
        order = self.get_by_id(id)
        if not order:
            return False
        order.delete()
        logger.info("order.deleted", order_id=str(id))
        return True
