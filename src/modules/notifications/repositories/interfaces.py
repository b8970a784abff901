"""Notification repository interface.

Every caller-facing read or write is scoped to the owning user; a
notification belonging to someone else is indistinguishable from a
missing one.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.core.repositories.interfaces import Page
    from modules.notifications.models import Notification


class INotificationRepository(IRepository["Notification"]):
    """Repository contract for notifications."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Notification:
        """Insert a single notification."""

    @abstractmethod
    def create_many(self, rows: Iterable[Dict[str, Any]]) -> List[Notification]:
        """Insert several notifications in one statement."""

    @abstractmethod
    def get_for_user(self, id: str, user_id: str) -> Optional[Notification]:
        """Retrieve a notification only if it belongs to ``user_id``."""

    @abstractmethod
    def list_for_user(
        self, user_id: str, unread_only: bool = False, page: Optional[Page] = None
    ) -> List[Notification]:
        """List a user's notifications, newest first."""

    @abstractmethod
    def count_unread(self, user_id: str) -> int:
        """Number of unread notifications of ``user_id``."""

    @abstractmethod
    def delete_for_user(self, id: str, user_id: str) -> bool:
        """Remove a notification owned by ``user_id``; ``False`` otherwise."""
