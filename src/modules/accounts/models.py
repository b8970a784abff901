"""User profile model.

Business rules implemented:
- One profile per identity; the profile shares the identity's primary key
  and is removed with it (CASCADE).
- ``username`` is unique across profiles.
- ``role`` is ``viewer`` unless provisioned or promoted as ``admin``.
- Profiles are created automatically when an identity is provisioned
  (see ``modules.accounts.signals``).
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.accounts.constants import Role


class UserProfile(models.Model):
    """Authoritative projection of an identity issued by the identity provider."""

    user: models.OneToOneField = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="profile",
    )
    username: models.CharField = models.CharField(max_length=150, unique=True)
    role: models.CharField = models.CharField(
        max_length=10,
        choices=Role.choices,
        default=Role.VIEWER,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "user_profiles"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["role"], name="user_profiles_role_idx"),
        ]

    @property
    def identity_id(self) -> str:
        return str(self.user_id)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"
