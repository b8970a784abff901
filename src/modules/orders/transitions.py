"""Status transition and side-effect engine.

Pure functions over an order's state before and after a merge-patch:

- :func:`derive_completed_at` keeps ``completed_at`` set exactly while the
  status is ``completed``.
- :func:`plan_notification` decides which notification, if any, fans out
  to the admins.

Every status may move to every other status.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Mapping, Optional

import structlog

from modules.notifications.constants import NotificationType
from modules.orders.constants import ORDER_UPDATED_TITLE, OrderStatus

if TYPE_CHECKING:
    from modules.accounts.dtos import Principal
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NotificationPlan:
    """A notification to deliver to every admin."""

    title: str
    message: str
    type: str
    order_id: str


def derive_completed_at(
    old_status: str,
    new_status: str,
    current: Optional[datetime],
    changes: Mapping[str, Any],
    now: datetime,
) -> Optional[datetime]:
    """Return the ``completed_at`` value for the post-update state.

    Entering ``completed`` stamps ``now`` unless the payload carries an
    explicit ``completed_at``.  Any other resulting status clears it, even
    when the payload asked for a value.
    """
    override = changes.get("completed_at")

    if new_status != OrderStatus.COMPLETED:
        if override is not None:
            logger.warning(
                "order.completed_at_discarded",
                status=new_status,
                requested=override.isoformat(),
            )
        return None

    if override is not None:
        return override
    if old_status != OrderStatus.COMPLETED or current is None:
        return now
    return current


def notification_type_for(status: str) -> str:
    if status == OrderStatus.COMPLETED:
        return NotificationType.SUCCESS
    if status == OrderStatus.DECLINED:
        return NotificationType.WARNING
    return NotificationType.ORDER


def plan_notification(
    order: Order,
    old_status: str,
    changes: Mapping[str, Any],
    actor: Principal,
) -> Optional[NotificationPlan]:
    """Decide the fan-out for an accepted update.

    - Status changed: ``Order <STATUS>`` typed by the new status.
    - Status unchanged but other fields written by an admin: a generic
      ``Order Updated`` of type ``info``.
    - Otherwise nothing.
    """
    subject = f"{order.customer_name}: {order.order_details}"

    if "status" in changes and changes["status"] != old_status:
        new_status = changes["status"]
        return NotificationPlan(
            title=f"Order {new_status.upper()}",
            message=f"Order for {subject} moved from {old_status} to {new_status}.",
            type=notification_type_for(new_status),
            order_id=str(order.id),
        )

    other_fields = set(changes) - {"status"}
    if actor.is_admin and other_fields:
        return NotificationPlan(
            title=ORDER_UPDATED_TITLE,
            message=f"Order for {subject} was updated ({', '.join(sorted(other_fields))}).",
            type=NotificationType.INFO,
            order_id=str(order.id),
        )

    return None
