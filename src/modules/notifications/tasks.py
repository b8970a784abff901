"""Celery tasks for the notifications module."""

from __future__ import annotations

from typing import Optional

import structlog
from celery import shared_task

from modules.core.exceptions import ServiceUnavailable

logger = structlog.get_logger(__name__)


@shared_task(
    name="notifications.fan_out_order_event",
    autoretry_for=(ServiceUnavailable,),
    retry_backoff=True,
    max_retries=3,
)
def fan_out_order_event(
    title: str, message: str, type: str, order_id: Optional[str] = None
) -> int:
    """Deliver an order notification to every admin outside the request."""
    from modules.notifications.services import build_notification_service

    delivered = build_notification_service().fan_out_to_admins(
        title=title, message=message, type=type, order_id=order_id
    )
    logger.info("notification.task_completed", order_id=order_id, recipients=delivered)
    return delivered
