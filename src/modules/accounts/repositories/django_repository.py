"""Django ORM implementation of the profile repositories.

Reads return ``None`` for non-existent or malformed identity ids.  Every
query goes through the bounded retry, so a store that keeps failing
surfaces as ``ServiceUnavailable``.
"""

from __future__ import annotations

from typing import List, Optional

import structlog
from django.core.exceptions import ValidationError

from modules.accounts.constants import Role
from modules.accounts.models import UserProfile
from modules.accounts.repositories.interfaces import IProfileLookup, IProfileRepository
from modules.core.repositories.interfaces import Page
from modules.core.retry import retrying

logger = structlog.get_logger(__name__)


def _get_profile(id: str) -> Optional[UserProfile]:
    try:
        return UserProfile.objects.filter(user_id=id).first()
    except (ValueError, TypeError, ValidationError):
        return None


class ProfileDjangoRepository(IProfileRepository):
    """Concrete profile repository backed by Django ORM."""

    @retrying("profiles.get")
    def get_by_id(self, id: str) -> Optional[UserProfile]:
        return _get_profile(id)

    @retrying("profiles.get_by_username")
    def get_by_username(self, username: str) -> Optional[UserProfile]:
        return UserProfile.objects.filter(username=username).first()

    @retrying("profiles.username_taken")
    def username_taken(self, username: str, exclude_id: Optional[str] = None) -> bool:
        queryset = UserProfile.objects.filter(username=username)
        if exclude_id is not None:
            queryset = queryset.exclude(user_id=exclude_id)
        return queryset.exists()

    @retrying("profiles.list")
    def list(self, page: Optional[Page] = None) -> List[UserProfile]:
        queryset = UserProfile.objects.order_by("created_at", "user_id")
        if page is not None:
            queryset = queryset[page.offset : page.stop]
        return list(queryset)

    @retrying("profiles.save")
    def save(self, entity: UserProfile) -> UserProfile:
        entity.save()
        logger.info("profile.saved", identity_id=entity.identity_id, role=entity.role)
        return entity


class PrivilegedProfileLookup(IProfileLookup):
    """Profile reads performed with system privileges.

    Used to resolve a caller's role and to find fan-out recipients; never
    filtered by the caller's own visibility.
    """

    @retrying("profiles.lookup")
    def get_by_id(self, id: str) -> Optional[UserProfile]:
        return _get_profile(id)

    @retrying("profiles.lookup_by_username")
    def get_by_username(self, username: str) -> Optional[UserProfile]:
        return UserProfile.objects.filter(username=username).first()

    @retrying("profiles.lookup_role")
    def get_role(self, identity_id: str) -> Optional[str]:
        try:
            return (
                UserProfile.objects.filter(user_id=identity_id)
                .values_list("role", flat=True)
                .first()
            )
        except (ValueError, TypeError, ValidationError):
            return None

    @retrying("profiles.admin_ids")
    def admin_ids(self) -> List[str]:
        return [
            str(pk)
            for pk in UserProfile.objects.filter(role=Role.ADMIN)
            .order_by("created_at", "user_id")
            .values_list("user_id", flat=True)
        ]
