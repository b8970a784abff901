"""Notification service layer (Use Cases).

Per-user inbox: owners list, count, mark read and delete their own
notifications; admins author notifications for any user; the order
transition engine fans notifications out to every admin.

Business rules enforced:
- A notification owned by someone else is reported as ``NotFound``.
- Only admins create notifications directly.
- Fan-out targets every admin profile, the acting admin included.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Union

import structlog
from django.conf import settings
from django.db import transaction

from modules.accounts.policies import require_admin
from modules.core.exceptions import NotFound
from modules.core.repositories.interfaces import Page
from modules.core.retry import call_with_retry
from modules.core.validation import clamp_page, parse_dto
from modules.notifications.constants import NotificationType
from modules.notifications.dtos import (
    CreateNotificationDTO,
    NotificationListFilter,
    NotificationOutputDTO,
)

if TYPE_CHECKING:
    from modules.accounts.dtos import Principal
    from modules.accounts.repositories.interfaces import IProfileLookup
    from modules.notifications.repositories.interfaces import INotificationRepository
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class NotificationService:
    """Application service for notification use-cases.

    Receives repositories via constructor injection (DIP).  The profile
    lookup is the privileged handle used to find admins and validate
    recipients.
    """

    def __init__(
        self,
        notification_repository: INotificationRepository,
        profile_lookup: IProfileLookup,
        order_repository: Optional[IOrderRepository] = None,
    ) -> None:
        self._notification_repo = notification_repository
        self._profiles = profile_lookup
        self._order_repo = order_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(
        self, principal: Principal, data: Union[CreateNotificationDTO, Mapping[str, Any]]
    ) -> NotificationOutputDTO:
        """Create a notification for a single user.

        Raises:
            Forbidden: caller is not an admin.
            ValidationError: ``user_id``, ``title`` or ``message`` missing.
            NotFound: recipient or referenced order does not exist.
        """
        require_admin(principal, "create notifications")
        dto = parse_dto(CreateNotificationDTO, data)

        if self._profiles.get_by_id(dto.user_id) is None:
            raise NotFound(f"User {dto.user_id} not found.")
        if dto.order_id is not None and self._order_repo is not None:
            if self._order_repo.get_by_id(str(dto.order_id)) is None:
                raise NotFound(f"Order {dto.order_id} not found.")

        notification = self._notification_repo.create(
            {
                "user_id": dto.user_id,
                "title": dto.title,
                "message": dto.message,
                "type": dto.type.value,
                "order_id": dto.order_id,
            }
        )
        logger.info(
            "notification.created",
            notification_id=str(notification.id),
            user_id=dto.user_id,
            created_by=principal.identity_id,
        )
        return NotificationOutputDTO.from_entity(notification)

    def mark_read(self, principal: Principal, notification_id: str) -> NotificationOutputDTO:
        """Mark one of the caller's notifications as read.

        Raises:
            NotFound: no such notification owned by the caller.
        """
        notification = self._notification_repo.get_for_user(
            notification_id, principal.identity_id
        )
        if notification is None:
            raise NotFound(f"Notification {notification_id} not found.")

        if not notification.read:
            notification.read = True
            self._notification_repo.save(notification)
            logger.info(
                "notification.read",
                notification_id=str(notification_id),
                user_id=principal.identity_id,
            )
        return NotificationOutputDTO.from_entity(notification)

    def delete(self, principal: Principal, notification_id: str) -> None:
        if not self._notification_repo.delete_for_user(
            notification_id, principal.identity_id
        ):
            raise NotFound(f"Notification {notification_id} not found.")

    def fan_out_to_admins(
        self,
        title: str,
        message: str,
        type: str = NotificationType.INFO,
        order_id: Optional[str] = None,
    ) -> int:
        """Deliver one notification to every admin; return how many were written.

        The recipient lookup and the inserts share one savepoint so a failure
        never disturbs the caller's transaction.  Outside a transaction the
        whole delivery is retried on transient failures.

        Raises:
            ServiceUnavailable: every delivery attempt failed.
        """
        return call_with_retry(
            self._deliver_to_admins,
            title,
            message,
            type,
            order_id,
            operation="notifications.fan_out",
        )

    @transaction.atomic
    def _deliver_to_admins(
        self, title: str, message: str, type: str, order_id: Optional[str]
    ) -> int:
        log = logger.bind(order_id=order_id, title=title)
        admin_ids = self._profiles.admin_ids()
        if not admin_ids:
            log.warning("notification.no_admins")
            return 0

        rows = [
            {
                "user_id": admin_id,
                "title": title,
                "message": message,
                "type": type,
                "order_id": order_id,
            }
            for admin_id in admin_ids
        ]
        self._notification_repo.create_many(rows)

        log.info("notification.fanned_out", recipients=len(rows))
        return len(rows)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(
        self,
        principal: Principal,
        filters: Union[NotificationListFilter, Mapping[str, Any], None] = None,
    ) -> List[NotificationOutputDTO]:
        """Return the caller's notifications, newest first."""
        query = parse_dto(NotificationListFilter, filters or {})
        limit, offset = clamp_page(
            query.limit,
            query.offset,
            settings.NOTIFICATIONS_DEFAULT_PAGE_SIZE,
            settings.MAX_PAGE_SIZE,
        )
        notifications = self._notification_repo.list_for_user(
            principal.identity_id,
            unread_only=query.unread_only,
            page=Page(limit=limit, offset=offset),
        )
        return [NotificationOutputDTO.from_entity(n) for n in notifications]

    def unread_count(self, principal: Principal) -> int:
        return self._notification_repo.count_unread(principal.identity_id)


def build_notification_service() -> NotificationService:
    from modules.accounts.repositories import PrivilegedProfileLookup
    from modules.notifications.repositories import NotificationDjangoRepository
    from modules.orders.repositories import OrderDjangoRepository

    return NotificationService(
        notification_repository=NotificationDjangoRepository(),
        profile_lookup=PrivilegedProfileLookup(),
        order_repository=OrderDjangoRepository(),
    )
