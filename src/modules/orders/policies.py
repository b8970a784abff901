"""Authorization rules for orders.

Every rule is an explicit function of the caller's role and, for
updates, the payload; nothing depends on store-side row visibility.

- Create and delete: admin only.
- Update: any caller may write ``SHARED_MUTABLE_FIELDS``; only admins may
  also write ``ADMIN_ONLY_FIELDS``.  Other keys are dropped silently.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping

import structlog

from modules.accounts.policies import require_admin
from modules.orders.constants import ADMIN_ONLY_FIELDS, SHARED_MUTABLE_FIELDS
from modules.orders.exceptions import NothingToUpdate

if TYPE_CHECKING:
    from modules.accounts.dtos import Principal

logger = structlog.get_logger(__name__)


def writable_fields(principal: Principal) -> frozenset[str]:
    if principal.is_admin:
        return SHARED_MUTABLE_FIELDS | ADMIN_ONLY_FIELDS
    return SHARED_MUTABLE_FIELDS


def check_can_create(principal: Principal) -> None:
    require_admin(principal, "create orders")


def check_can_delete(principal: Principal) -> None:
    require_admin(principal, "delete orders")


def filter_update(principal: Principal, changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Return the subset of ``changes`` the caller may write.

    Raises:
        NothingToUpdate: no field survives the filter.
    """
    allowed = writable_fields(principal)
    permitted = {k: v for k, v in changes.items() if k in allowed}

    dropped = sorted(set(changes) - set(permitted))
    if dropped:
        logger.info(
            "order.fields_dropped",
            identity_id=principal.identity_id,
            role=principal.role,
            fields=dropped,
        )

    if not permitted:
        raise NothingToUpdate()
    return permitted
