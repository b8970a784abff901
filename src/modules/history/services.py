"""History service layer (Use Cases).

Append-only audit trail of order events.  ``append`` is the internal
entry point (used by the order update use-case); ``record`` is the
admin-gated path for callers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Union

import structlog
from django.conf import settings

from modules.accounts.policies import require_admin
from modules.core.repositories.interfaces import Page
from modules.core.validation import clamp_page, parse_dto
from modules.history.dtos import AppendHistoryDTO, HistoryListFilter, HistoryOutputDTO
from modules.orders.exceptions import OrderNotFound

if TYPE_CHECKING:
    from modules.accounts.dtos import Principal
    from modules.history.repositories.interfaces import IHistoryRepository
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class HistoryService:
    """Application service for the order history log."""

    def __init__(
        self,
        history_repository: IHistoryRepository,
        order_repository: IOrderRepository,
    ) -> None:
        self._history_repo = history_repository
        self._order_repo = order_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def append(
        self,
        data: Union[AppendHistoryDTO, Mapping[str, Any]],
        actor_id: Optional[str] = None,
    ) -> HistoryOutputDTO:
        """Append a record to an order's history.

        Raises:
            ValidationError: ``order_id``/``event_type`` missing or invalid.
            OrderNotFound: the order does not exist.
        """
        dto = parse_dto(AppendHistoryDTO, data)
        if self._order_repo.get_by_id(str(dto.order_id)) is None:
            raise OrderNotFound(f"Order {dto.order_id} not found.")

        record = self._history_repo.create(
            {
                "order_id": dto.order_id,
                "user_id": actor_id,
                "event_type": dto.event_type.value,
                "old_status": dto.old_status.value if dto.old_status else None,
                "new_status": dto.new_status.value if dto.new_status else None,
                "note": dto.note,
            }
        )
        return HistoryOutputDTO.from_entity(record)

    def record(
        self, principal: Principal, data: Union[AppendHistoryDTO, Mapping[str, Any]]
    ) -> HistoryOutputDTO:
        require_admin(principal, "add history entries")
        return self.append(data, actor_id=principal.identity_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(
        self, filters: Union[HistoryListFilter, Mapping[str, Any], None] = None
    ) -> List[HistoryOutputDTO]:
        """Return history records newest first.

        ``date`` (YYYY-MM-DD) keeps the records created on that calendar day.
        """
        query = parse_dto(HistoryListFilter, filters or {})
        limit, offset = clamp_page(
            query.limit,
            query.offset,
            settings.HISTORY_DEFAULT_PAGE_SIZE,
            settings.MAX_PAGE_SIZE,
        )
        records = self._history_repo.list(
            query.filter_values(), Page(limit=limit, offset=offset)
        )
        return [HistoryOutputDTO.from_entity(r) for r in records]


def build_history_service() -> HistoryService:
    from modules.history.repositories import HistoryDjangoRepository
    from modules.orders.repositories import OrderDjangoRepository

    return HistoryService(
        history_repository=HistoryDjangoRepository(),
        order_repository=OrderDjangoRepository(),
    )
