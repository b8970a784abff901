"""Order repository interface.

Extends ``IRepository[Order]`` with the row-locking read the update
use-case needs, filtered listing, deletion and per-status counts.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.core.repositories.interfaces import Page
    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for orders."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Insert a new order from already-validated column values."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order holding a row-level lock (SELECT FOR UPDATE).

        Must be called inside a transaction.
        """

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None, page: Optional[Page] = None) -> List[Order]:
        """List orders newest first, optionally filtered and paginated."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Remove an order; ``False`` when it did not exist."""

    @abstractmethod
    def count_by_status(self) -> Dict[str, int]:
        """Number of orders per status (statuses with no orders omitted)."""
