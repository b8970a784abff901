"""Django ORM implementation of the History repository.

Records are only ever inserted; ``save`` refuses to overwrite an
existing row.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError

from modules.core.repositories.interfaces import Page
from modules.core.retry import retrying
from modules.core.validation import apply_filterset
from modules.history.filters import OrderHistoryFilter
from modules.history.models import OrderHistory
from modules.history.repositories.interfaces import IHistoryRepository

logger = structlog.get_logger(__name__)


class HistoryDjangoRepository(IHistoryRepository):
    """Concrete History repository backed by Django ORM."""

    def create(self, data: Dict[str, Any]) -> OrderHistory:
        return self.save(OrderHistory(**data))

    @retrying("history.save")
    def save(self, entity: OrderHistory) -> OrderHistory:
        entity.save(force_insert=True)
        logger.info(
            "history.appended",
            history_id=str(entity.id),
            order_id=str(entity.order_id),
            event_type=entity.event_type,
        )
        return entity

    @retrying("history.get")
    def get_by_id(self, id: str) -> Optional[OrderHistory]:
        try:
            return OrderHistory.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    @retrying("history.list")
    def list(
        self, filters: Optional[Dict[str, Any]] = None, page: Optional[Page] = None
    ) -> List[OrderHistory]:
        queryset = OrderHistory.objects.order_by("-created_at", "-id")
        if filters:
            queryset = apply_filterset(OrderHistoryFilter, filters, queryset)
        if page is not None:
            queryset = queryset[page.offset : page.stop]
        return list(queryset)
