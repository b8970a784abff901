"""Order service layer (Use Cases).

Orchestrates order creation, merge-patch updates with status
transitions, deletion and queries.  Every update is one unit of work:
the row is locked, the permitted fields and the derived ``completed_at``
are written together, and the status change is recorded in the history
log.  The admin notification fan-out runs afterwards and never fails the
update.

Business rules enforced:
- Only admins create and delete orders.
- Viewers write only the shared fields; ``completed_at`` is admin-only.
- ``completed_at`` is set exactly while the status is ``completed``.
- A status change notifies every admin; re-saving the same status does not.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Tuple, Union

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from modules.core.repositories.interfaces import Page
from modules.core.retry import call_with_retry
from modules.core.validation import clamp_page, parse_dto
from modules.history.constants import HistoryEventType
from modules.orders.constants import OrderStatus
from modules.orders.dtos import (
    CreateOrderDTO,
    OrderListFilter,
    OrderOutputDTO,
    OrderStatsDTO,
    UpdateOrderDTO,
)
from modules.orders.exceptions import OrderNotFound
from modules.orders.policies import check_can_create, check_can_delete, filter_update
from modules.orders.transitions import (
    NotificationPlan,
    derive_completed_at,
    plan_notification,
)

if TYPE_CHECKING:
    from modules.accounts.dtos import Principal
    from modules.history.services import HistoryService
    from modules.notifications.services import NotificationService
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

Payload = Mapping[str, Any]


class OrderService:
    """Application service for Order use-cases.

    Receives its collaborators via constructor injection (DIP).  The
    history log is optional so the store can be exercised on its own.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        notification_service: NotificationService,
        history_service: Optional[HistoryService] = None,
    ) -> None:
        self._order_repo = order_repository
        self._notifications = notification_service
        self._history = history_service

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(
        self, principal: Principal, data: Union[CreateOrderDTO, Payload]
    ) -> OrderOutputDTO:
        """Create an order owned by the calling admin.

        Raises:
            Forbidden: caller is not an admin.
            ValidationError: ``customer_name``/``order_details`` blank or
                an unknown status.
        """
        check_can_create(principal)
        dto = parse_dto(CreateOrderDTO, data)

        values = dto.model_dump()
        values["status"] = dto.status.value
        values["completed_at"] = (
            timezone.now() if dto.status == OrderStatus.COMPLETED else None
        )
        values["created_by_id"] = principal.identity_id

        order = self._order_repo.create(values)
        logger.info(
            "order.created_by_admin",
            order_id=str(order.id),
            identity_id=principal.identity_id,
        )
        return OrderOutputDTO.from_entity(order)

    def update_order(
        self,
        principal: Principal,
        order_id: str,
        data: Union[UpdateOrderDTO, Payload],
    ) -> OrderOutputDTO:
        """Apply a merge-patch to an order.

        Steps:
        1. Validate the payload and drop the fields the caller may not write.
        2. Lock the order row (SELECT FOR UPDATE).
        3. Write the permitted fields and the derived ``completed_at``.
        4. Record a ``status_change`` history entry when the status moved.
        5. After the transaction, fan the resulting notification out.

        Steps 2-4 are one transaction, retried as a whole on transient
        database failures.

        Raises:
            ValidationError: malformed payload.
            NothingToUpdate: no permitted field in the payload.
            OrderNotFound: order does not exist.
        """
        dto = parse_dto(UpdateOrderDTO, data)
        changes = filter_update(principal, dto.changes())

        order, plan = call_with_retry(
            self._apply_update, principal, str(order_id), changes, operation="orders.update"
        )
        self._dispatch(plan)
        return OrderOutputDTO.from_entity(order)

    @transaction.atomic
    def _apply_update(
        self, principal: Principal, order_id: str, changes: Mapping[str, Any]
    ) -> Tuple[Order, Optional[NotificationPlan]]:
        order = self._order_repo.get_for_update(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")

        old_status = order.status
        new_status = changes.get("status", old_status)
        log = logger.bind(
            order_id=order_id,
            identity_id=principal.identity_id,
            old_status=old_status,
            new_status=new_status,
        )

        for field, value in changes.items():
            if field != "completed_at":
                setattr(order, field, value)
        order.completed_at = derive_completed_at(
            old_status, new_status, order.completed_at, changes, timezone.now()
        )
        self._order_repo.save(order)

        if new_status != old_status and self._history is not None:
            self._history.append(
                {
                    "order_id": order.id,
                    "event_type": HistoryEventType.STATUS_CHANGE,
                    "old_status": old_status,
                    "new_status": new_status,
                },
                actor_id=principal.identity_id,
            )

        log.info("order.updated", fields=sorted(changes))
        return order, plan_notification(order, old_status, changes, principal)

    def delete_order(self, principal: Principal, order_id: str) -> None:
        """Remove an order with its notifications and history.

        Raises:
            Forbidden: caller is not an admin.
            OrderNotFound: order does not exist.
        """
        check_can_delete(principal)
        if not self._order_repo.delete(str(order_id)):
            raise OrderNotFound(f"Order {order_id} not found.")
        logger.info(
            "order.deleted_by_admin",
            order_id=str(order_id),
            identity_id=principal.identity_id,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, principal: Principal, order_id: str) -> OrderOutputDTO:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return OrderOutputDTO.from_entity(order)

    def list_orders(
        self,
        principal: Principal,
        filters: Union[OrderListFilter, Payload, None] = None,
    ) -> List[OrderOutputDTO]:
        """Return orders newest first, optionally filtered."""
        query = parse_dto(OrderListFilter, filters or {})
        limit, offset = clamp_page(
            query.limit,
            query.offset,
            settings.ORDERS_DEFAULT_PAGE_SIZE,
            settings.MAX_PAGE_SIZE,
        )
        orders = self._order_repo.list(
            query.filter_values(), Page(limit=limit, offset=offset)
        )
        return [OrderOutputDTO.from_entity(o) for o in orders]

    def stats(self, principal: Principal) -> OrderStatsDTO:
        counts = self._order_repo.count_by_status()
        return OrderStatsDTO(total=sum(counts.values()), **counts)

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    def _dispatch(self, plan: Optional[NotificationPlan]) -> None:
        """Deliver ``plan`` to the admins without ever raising."""
        if plan is None:
            return

        if settings.NOTIFICATIONS_ASYNC:
            from modules.notifications.tasks import fan_out_order_event

            transaction.on_commit(
                lambda: fan_out_order_event.delay(**asdict(plan)), robust=True
            )
            logger.info("notification.fan_out_queued", order_id=plan.order_id)
            return

        try:
            self._notifications.fan_out_to_admins(
                title=plan.title,
                message=plan.message,
                type=plan.type,
                order_id=plan.order_id,
            )
        except Exception:
            logger.exception("notification.fan_out_failed", order_id=plan.order_id)


def build_order_service() -> OrderService:
    from modules.history.services import build_history_service
    from modules.notifications.services import build_notification_service
    from modules.orders.repositories import OrderDjangoRepository

    return OrderService(
        order_repository=OrderDjangoRepository(),
        notification_service=build_notification_service(),
        history_service=build_history_service(),
    )
