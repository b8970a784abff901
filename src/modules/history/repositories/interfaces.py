"""History repository interface (append and read only)."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.core.repositories.interfaces import Page
    from modules.history.models import OrderHistory


class IHistoryRepository(IRepository["OrderHistory"]):
    @abstractmethod
    def create(self, data: Dict[str, Any]) -> OrderHistory:
        """Append a record."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None, page: Optional[Page] = None
    ) -> List[OrderHistory]:
        """List records newest first.

        Supported filter keys: ``order_id``, ``date`` (YYYY-MM-DD) and
        ``event_type``.
        """
