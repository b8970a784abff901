"""Authorization rules for account operations.

Plain functions: each takes the resolved ``Principal`` and either returns
or raises ``Forbidden``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.conf import settings

from modules.core.exceptions import Forbidden

if TYPE_CHECKING:
    from modules.accounts.dtos import Principal

logger = structlog.get_logger(__name__)


def require_admin(principal: Principal, action: str = "perform this action") -> None:
    """Raise ``Forbidden`` unless ``principal`` is an admin."""
    if not principal.is_admin:
        logger.warning(
            "policy.denied",
            identity_id=principal.identity_id,
            role=principal.role,
            action=action,
        )
        raise Forbidden(f"Only admins can {action}.")


def check_role_change(principal: Principal, target_id: str) -> None:
    """Decide whether ``principal`` may change the role of ``target_id``.

    Viewers may never change a role, their own included.  Admins may change
    any role; changing their own is gated by
    ``ACCOUNTS_ALLOW_ADMIN_SELF_ROLE_CHANGE``.
    """
    is_self = principal.identity_id == str(target_id)

    if not principal.is_admin:
        logger.warning(
            "policy.role_change_denied",
            identity_id=principal.identity_id,
            target_id=str(target_id),
        )
        if is_self:
            raise Forbidden("Users cannot change their own role.")
        raise Forbidden("Only admins can change roles.")

    if is_self and not settings.ACCOUNTS_ALLOW_ADMIN_SELF_ROLE_CHANGE:
        logger.warning("policy.self_role_change_denied", identity_id=principal.identity_id)
        raise Forbidden("Admins cannot change their own role.")
