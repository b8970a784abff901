"""Profile repository interfaces.

``IProfileRepository`` is the caller-facing store used by the account
use-cases.  ``IProfileLookup`` is the privileged read path the principal
resolver and the notification fan-out use; it must never depend on the
caller's own visibility.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import UserProfile
    from modules.core.repositories.interfaces import Page


class IProfileRepository(IRepository["UserProfile"]):
    """Contract for profile persistence."""

    @abstractmethod
    def list(self, page: Optional[Page] = None) -> List[UserProfile]:
        """Return profiles, oldest first."""

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[UserProfile]:
        """Retrieve a profile by its unique username."""

    @abstractmethod
    def username_taken(self, username: str, exclude_id: Optional[str] = None) -> bool:
        """``True`` when another profile already uses ``username``."""


class IProfileLookup(ABC):
    """Privileged, read-only access to profiles."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[UserProfile]:
        """Retrieve a profile by its identity id."""

    @abstractmethod
    def get_role(self, identity_id: str) -> Optional[str]:
        """Return the stored role, or ``None`` when no profile exists."""

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[UserProfile]:
        """Retrieve a profile by its unique username."""

    @abstractmethod
    def admin_ids(self) -> List[str]:
        """Identity ids of every profile whose role is ``admin``."""
