"""Signals provisioning a ``UserProfile`` for every new identity."""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, cast

import structlog
from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from modules.accounts.constants import Role
from modules.accounts.models import UserProfile

logger = structlog.get_logger(__name__)


class _ProvisionAware(Protocol):
    _profile_attributes: Dict[str, Any] | None


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def _create_profile(sender, instance, created: bool, **kwargs) -> None:
    if not created or kwargs.get("raw"):
        return

    attributes: Optional[Dict[str, Any]] = getattr(
        cast(_ProvisionAware, instance), "_profile_attributes", None
    )
    attributes = attributes or {}

    username = attributes.get("username") or instance.email or instance.get_username()
    role = attributes.get("role") or Role.VIEWER

    UserProfile.objects.create(user=instance, username=username, role=role)
    logger.info(
        "profile.provisioned",
        identity_id=str(instance.pk),
        role=role,
    )

    if hasattr(instance, "_profile_attributes"):
        delattr(instance, "_profile_attributes")
